import csv
import io
import json
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence

from .config import OUTPUT_DIR

# coins/markets 导出时优先排在前面的列
MARKET_PREFERRED_FIELDS = (
    "id",
    "symbol",
    "name",
    "current_price",
    "market_cap",
    "market_cap_rank",
    "total_volume",
)
PRICE_SERIES_FIELDS = ("date", "price")

_PRIMITIVES = (str, int, float, bool, type(None))


def build_output_path(name: str, output_dir: Path = OUTPUT_DIR) -> Path:
    """构建不带扩展名的输出路径：data/{name}，.json / .csv 由 write_outputs 追加。"""
    return output_dir / name


def save_json(data: Any, output_path: Path) -> None:
    """整体覆盖写入 JSON（2 空格缩进，UTF-8）。"""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")


def save_csv(text: str, output_path: Path) -> None:
    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(text, encoding="utf-8", newline="")


def csv_header(records: Iterable[Dict[str, Any]], preferred_fields: Sequence[str] = ()) -> List[str]:
    """
    列集合 = 所有记录中取值为基本类型的键的并集。

    先按 preferred_fields 的顺序排出存在的列，其余列按字典序追加。
    """
    keys = set()
    for record in records:
        if not isinstance(record, dict):
            continue
        for key, value in record.items():
            if isinstance(value, _PRIMITIVES):
                keys.add(key)

    head = [name for name in preferred_fields if name in keys]
    tail = sorted(keys.difference(head))
    return head + tail


def _format_cell(value: Any) -> str:
    if value is None or not isinstance(value, _PRIMITIVES):
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def to_csv(records: List[Dict[str, Any]], preferred_fields: Sequence[str] = MARKET_PREFERRED_FIELDS) -> str:
    """只导出顶层基本类型字段；嵌套结构（字典、列表）输出为空单元格，非字典记录跳过。"""
    records = [record for record in records if isinstance(record, dict)]
    if not records:
        return ""

    header = csv_header(records, preferred_fields)
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n", quoting=csv.QUOTE_MINIMAL)
    writer.writerow(header)
    for record in records:
        writer.writerow([_format_cell(record.get(name)) for name in header])
    return buffer.getvalue().rstrip("\n")


def price_series_rows(prices: Any) -> List[Dict[str, Any]]:
    """把 [[毫秒时间戳, 价格], ...] 转换为 {"date": "YYYY-MM-DD", "price": 价格} 记录（UTC 日期）。"""
    if not isinstance(prices, list):
        raise ValueError(f"prices 格式错误：期望列表，得到 {type(prices)}")

    rows: List[Dict[str, Any]] = []
    for entry in prices:
        if not isinstance(entry, (list, tuple)) or len(entry) < 2:
            raise ValueError(f"价格数据格式错误：{entry}")
        try:
            timestamp_ms = int(entry[0])
        except (TypeError, ValueError) as exc:
            raise ValueError(f"价格数据时间戳无效：{entry}") from exc
        day = datetime.fromtimestamp(timestamp_ms / 1000, tz=timezone.utc).strftime("%Y-%m-%d")
        rows.append({"date": day, "price": entry[1]})
    return rows


def write_outputs(
    data: Any,
    base_path: Path,
    csv_records: Optional[List[Dict[str, Any]]] = None,
    preferred_fields: Sequence[str] = MARKET_PREFERRED_FIELDS,
) -> List[Path]:
    """
    写入 {base_path}.json；提供 csv_records 时同时写入 {base_path}.csv。

    每次运行整体覆盖，不做追加。返回写入的文件路径列表。
    """
    base_path = Path(base_path)
    json_path = base_path.with_name(base_path.name + ".json")
    save_json(data, json_path)
    written = [json_path]

    if csv_records is not None:
        csv_path = base_path.with_name(base_path.name + ".csv")
        save_csv(to_csv(csv_records, preferred_fields), csv_path)
        written.append(csv_path)

    return written
