"""
单币种区间行情获取脚本。

功能：
- 调用 CoinGecko Pro 的 coins/{id}/market_chart/range 接口，一次性获取指定日期区间的
  prices / market_caps / total_volumes 时间序列
- 原样保存为 JSON 到 data/ 目录
- 可选导出 CSV（每行 YYYY-MM-DD,price）

注意：区间查询是一次性请求，失败即退出，不重试、不保存部分结果。
"""

import argparse
import sys
from pathlib import Path
from typing import List, Optional

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cg_market_data.config import OUTPUT_DIR, load_config
from cg_market_data.errors import MissingCredentialError, UpstreamError
from cg_market_data.fetchers.coingecko import date_to_unix, fetch_range_query
from cg_market_data.storage import (
    PRICE_SERIES_FIELDS,
    build_output_path,
    price_series_rows,
    write_outputs,
)


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(description="获取 CoinGecko 单币种指定日期区间的行情时间序列")
    parser.add_argument("--asset", default="bitcoin", help="币种 id（如 bitcoin、ethereum），默认 bitcoin")
    parser.add_argument("--vs-currency", help="计价货币，默认读取 CG_VS_CURRENCY 或 usd")
    parser.add_argument("--from", dest="from_date", default="2024-01-01", help="起始日期 YYYY-MM-DD（UTC）")
    parser.add_argument("--to", dest="to_date", default="2024-12-31", help="结束日期 YYYY-MM-DD（UTC）")
    parser.add_argument("--csv", action="store_true", help="同时导出 prices 为 CSV（date,price）")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="输出目录，默认 data")
    parser.add_argument("--name", help="输出文件名（不含扩展名），默认 {asset}_market_chart_range")
    return parser.parse_args(argv)


def run(args: argparse.Namespace) -> List[Path]:
    config = load_config(vs_currency=args.vs_currency)

    from_ts = date_to_unix(args.from_date)
    to_ts = date_to_unix(args.to_date)
    if from_ts > to_ts:
        raise ValueError(f"起始日期 {args.from_date} 晚于结束日期 {args.to_date}")

    print(f"▶ 获取 {args.asset} 区间行情（{args.from_date} ~ {args.to_date}，vs_currency={config.vs_currency}）...")
    data = fetch_range_query(config, args.asset, config.vs_currency, from_ts, to_ts)

    csv_rows = price_series_rows(data.get("prices", [])) if args.csv else None
    base_path = build_output_path(args.name or f"{args.asset}_market_chart_range", args.output_dir)
    written = write_outputs(data, base_path, csv_rows, PRICE_SERIES_FIELDS)

    print(f"已写入 {', '.join(str(p) for p in written)}，价格点 {len(data.get('prices', []))} 条。")
    return written


def main(argv: Optional[List[str]] = None) -> None:
    """主函数：读取配置、发起区间查询并保存结果。"""
    try:
        run(parse_args(argv))
    except MissingCredentialError as exc:
        print(f"配置错误：{exc}", file=sys.stderr)
        sys.exit(1)
    except UpstreamError as exc:
        print(f"区间查询失败：{exc}", file=sys.stderr)
        sys.exit(1)
    except ValueError as exc:
        print(f"执行失败：{exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
