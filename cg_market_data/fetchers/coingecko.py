import asyncio
import json
import sys
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx
import requests

from cg_market_data.config import FetcherConfig
from cg_market_data.errors import UpstreamError


def date_to_unix(text: str) -> int:
    """把 YYYY-MM-DD 解析为 UTC 零点的 UNIX 秒。"""
    try:
        day = datetime.strptime(text.strip(), "%Y-%m-%d")
    except ValueError as exc:
        raise ValueError(f"日期格式错误（应为 YYYY-MM-DD）：{text}") from exc
    return int(day.replace(tzinfo=timezone.utc).timestamp())


def fetch_range_query(
    config: FetcherConfig,
    asset_id: str,
    vs_currency: str,
    from_ts: int,
    to_ts: int,
) -> Dict[str, Any]:
    """
    单次获取 coins/{id}/market_chart/range 的时间序列（prices / market_caps / total_volumes）。

    一次性分析请求：失败即抛出 UpstreamError，不重试。
    """
    try:
        response = requests.get(
            f"{config.base_url}/coins/{asset_id}/market_chart/range",
            params={"vs_currency": vs_currency, "from": from_ts, "to": to_ts},
            headers=config.headers,
            timeout=config.timeout,
        )
        response.raise_for_status()
    except requests.HTTPError as exc:
        resp = exc.response
        raise UpstreamError(
            f"区间查询失败（HTTP {resp.status_code if resp is not None else '?'}）",
            status_code=resp.status_code if resp is not None else None,
            body=resp.text if resp is not None else None,
        ) from exc
    except requests.RequestException as exc:
        raise UpstreamError(f"区间查询网络错误：{exc}") from exc

    try:
        data = response.json()
    except ValueError as exc:
        raise UpstreamError("区间查询返回的不是合法 JSON", response.status_code, response.text) from exc

    if not isinstance(data, dict):
        raise UpstreamError(f"API 返回格式错误：期望字典，得到 {type(data)}", response.status_code)
    return data


async def fetch_page_async(
    client: httpx.AsyncClient,
    config: FetcherConfig,
    page: int,
) -> Any:
    """获取 coins/markets 的单页数据，原样返回解析后的 JSON。"""
    try:
        response = await client.get(
            f"{config.base_url}/coins/markets",
            params={
                "vs_currency": config.vs_currency,
                "order": config.order,
                "per_page": config.per_page,
                "page": page,
            },
            headers=config.headers,
            timeout=config.timeout,
        )
        response.raise_for_status()
    except httpx.HTTPStatusError as exc:
        raise UpstreamError(
            f"第 {page} 页请求失败（HTTP {exc.response.status_code}）",
            status_code=exc.response.status_code,
            body=exc.response.text,
        ) from exc
    except httpx.HTTPError as exc:
        raise UpstreamError(f"第 {page} 页网络错误：{exc}") from exc

    _report_rate_limit(response.headers)

    try:
        return response.json()
    except ValueError as exc:
        raise UpstreamError(f"第 {page} 页返回的不是合法 JSON", response.status_code, response.text) from exc


def _report_rate_limit(headers: httpx.Headers) -> None:
    remaining = headers.get("x-ratelimit-remaining")
    if remaining is None:
        return
    reset = headers.get("x-ratelimit-reset")
    suffix = f"，约 {reset} 秒后重置" if reset else ""
    print(f"   ↳ 剩余请求配额：{remaining}{suffix}")


async def _fetch_page_with_retry(
    client: httpx.AsyncClient,
    config: FetcherConfig,
    page: int,
) -> Optional[Any]:
    """按 RetryPolicy 重试单页；重试耗尽时返回 None，由调用方停止分页。"""
    try:
        return await fetch_page_async(client, config, page)
    except UpstreamError as exc:
        print(f"第 {page} 页获取失败：{exc}", file=sys.stderr)
        last_error = exc

    for attempt, delay in enumerate(config.retry.delays(), start=1):
        await asyncio.sleep(delay)
        print(f"↻ 重试第 {page} 页（第 {attempt} 次）...")
        try:
            return await fetch_page_async(client, config, page)
        except UpstreamError as exc:
            print(f"第 {page} 页重试失败：{exc}", file=sys.stderr)
            last_error = exc

    print(f"第 {page} 页重试耗尽，停止分页。最后错误：{last_error}", file=sys.stderr)
    return None


async def fetch_all_pages_async(
    client: httpx.AsyncClient,
    config: FetcherConfig,
) -> List[Dict[str, Any]]:
    """
    从第 1 页开始顺序拉取 coins/markets，直到：
    - 返回空列表或非列表；
    - 返回条数少于 per_page（最后一页）；
    - 达到 max_pages 安全上限。

    单页失败按重试策略处理，重试仍失败则保留已获取的数据并停止（部分结果，不抛异常）。
    结果按 id 去重。
    """
    records: List[Dict[str, Any]] = []
    print(
        f"▶ 开始分页获取 coins/markets（vs_currency={config.vs_currency}，"
        f"order={config.order}，per_page={config.per_page}）..."
    )

    for page in range(1, config.max_pages + 1):
        print(f"→ 第 {page} 页")
        rows = await _fetch_page_with_retry(client, config, page)
        if rows is None:
            break

        if not isinstance(rows, list) or not rows:
            print("没有更多数据，分页结束。")
            break

        records.extend(rows)
        if len(rows) < config.per_page:
            print("收到最后一页（不足 per_page），分页结束。")
            break

        if page == config.max_pages:
            print(f"已达到页数上限 {config.max_pages}，停止分页。", file=sys.stderr)
            break

        await asyncio.sleep(config.request_delay)

    return deduplicate(records, "id")


def deduplicate(records: List[Dict[str, Any]], key_field: str = "id") -> List[Dict[str, Any]]:
    """按 key_field 保留首次出现的记录，保持原有顺序；缺少该字段的记录一律保留。"""
    seen = set()
    result: List[Dict[str, Any]] = []
    for record in records:
        if not isinstance(record, dict) or key_field not in record:
            result.append(record)
            continue
        key = _dedup_key(record[key_field])
        if key in seen:
            continue
        seen.add(key)
        result.append(record)
    return result


def _dedup_key(value: Any) -> tuple:
    # 1、true、1.0 以及同文本的字符串与对象在 JSON 中是不同的值
    return type(value).__name__, json.dumps(value, sort_keys=True, default=str)
