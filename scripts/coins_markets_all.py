"""
全市场币种列表获取脚本。

功能：
- 分页调用 CoinGecko Pro 的 coins/markets 接口（每页 250 条），直到最后一页或达到页数上限
- 单页失败重试一次，仍失败则保留已获取的数据
- 按 id 去重后保存为 JSON，可选导出 CSV（仅顶层基本类型字段）
"""

import argparse
import asyncio
import sys
from pathlib import Path
from typing import List, Optional

import httpx

PROJECT_ROOT = Path(__file__).resolve().parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))

from cg_market_data.config import OUTPUT_DIR, FetcherConfig, load_config
from cg_market_data.errors import MissingCredentialError
from cg_market_data.fetchers.coingecko import fetch_all_pages_async
from cg_market_data.storage import MARKET_PREFERRED_FIELDS, build_output_path, write_outputs


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    """解析命令行参数。"""
    parser = argparse.ArgumentParser(description="分页获取 CoinGecko coins/markets 全部币种行情")
    parser.add_argument("--vs-currency", help="计价货币，默认读取 CG_VS_CURRENCY 或 usd")
    parser.add_argument("--order", help="排序方式，默认读取 CG_ORDER 或 market_cap_desc")
    parser.add_argument("--max-pages", type=int, help="最多获取多少页，默认读取 CG_MAX_PAGES 或 200")
    parser.add_argument("--csv", action="store_true", help="同时导出 CSV")
    parser.add_argument("--output-dir", type=Path, default=OUTPUT_DIR, help="输出目录，默认 data")
    parser.add_argument("--name", default="coins_markets_all", help="输出文件名（不含扩展名）")
    return parser.parse_args(argv)


async def _async_main(args: argparse.Namespace, config: FetcherConfig) -> List[Path]:
    async with httpx.AsyncClient() as client:
        records = await fetch_all_pages_async(client, config)

    if not records:
        print("未获取到任何数据，仍写入空结果。", file=sys.stderr)

    base_path = build_output_path(args.name, args.output_dir)
    written = write_outputs(
        records,
        base_path,
        records if args.csv else None,
        MARKET_PREFERRED_FIELDS,
    )
    print(
        f"已保存 {len(records)} 条记录到 {', '.join(str(p) for p in written)}"
        f"（vs_currency={config.vs_currency}，order={config.order}）"
    )
    return written


def main(argv: Optional[List[str]] = None) -> None:
    """主函数：读取配置、分页抓取并保存结果。"""
    try:
        args = parse_args(argv)
        config = load_config(
            vs_currency=args.vs_currency,
            order=args.order,
            max_pages=args.max_pages,
        )
        asyncio.run(_async_main(args, config))
    except MissingCredentialError as exc:
        print(f"配置错误：{exc}", file=sys.stderr)
        sys.exit(1)
    except Exception as exc:  # pragma: no cover - 顶层兜底
        print(f"执行失败：{exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
