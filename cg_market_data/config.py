import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional, Union

from dotenv import load_dotenv

from .errors import MissingCredentialError
from .retry import RetryPolicy

# 统一项目输出目录
OUTPUT_DIR = Path("data")

COINGECKO_PRO_BASE_URL = "https://pro-api.coingecko.com/api/v3"
API_KEY_HEADER = "x-cg-pro-api-key"

DEFAULT_VS_CURRENCY = "usd"
DEFAULT_ORDER = "market_cap_desc"
# coins/markets 单页上限
PER_PAGE = 250
# 分页安全上限：200 * 250 = 50,000 行
MAX_PAGES = 200
REQUEST_DELAY = 0.25
RETRY_BACKOFF = 1.5
MAX_RETRIES = 1
REQUEST_TIMEOUT = 30


@dataclass(frozen=True)
class FetcherConfig:
    api_key: str
    base_url: str = COINGECKO_PRO_BASE_URL
    vs_currency: str = DEFAULT_VS_CURRENCY
    order: str = DEFAULT_ORDER
    per_page: int = PER_PAGE
    max_pages: int = MAX_PAGES
    request_delay: float = REQUEST_DELAY
    timeout: float = REQUEST_TIMEOUT
    retry: RetryPolicy = field(default_factory=RetryPolicy)

    def __post_init__(self) -> None:
        if not self.api_key:
            raise MissingCredentialError("缺少 COINGECKO_API_KEY，请在 .env 或环境变量中配置")
        if self.per_page < 1:
            raise ValueError("per_page must be >= 1")
        if self.max_pages < 1:
            raise ValueError("max_pages must be >= 1")
        if self.request_delay < 0:
            raise ValueError("request_delay must be >= 0")

    @property
    def headers(self) -> dict:
        return {"accept": "application/json", API_KEY_HEADER: self.api_key}


def _env(name: str, default: Any, cast: Callable[[str], Any]) -> Any:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except ValueError as exc:
        raise ValueError(f"环境变量 {name} 取值无效：{raw!r}") from exc


def load_config(env_file: Optional[Union[str, Path]] = None, **overrides: Any) -> FetcherConfig:
    """
    启动时读取一次配置：显式参数 > 环境变量（含 .env）> 默认值。

    缺少 API 密钥时抛出 MissingCredentialError。
    """
    load_dotenv(env_file, override=False)

    retry = overrides.pop("retry", None)
    if retry is None:
        retry = RetryPolicy(
            max_retries=_env("CG_MAX_RETRIES", MAX_RETRIES, int),
            backoff=_env("CG_RETRY_BACKOFF", RETRY_BACKOFF, float),
        )

    values = {
        "api_key": _env("COINGECKO_API_KEY", "", str),
        "base_url": _env("CG_BASE_URL", COINGECKO_PRO_BASE_URL, str).rstrip("/"),
        "vs_currency": _env("CG_VS_CURRENCY", DEFAULT_VS_CURRENCY, str),
        "order": _env("CG_ORDER", DEFAULT_ORDER, str),
        "max_pages": _env("CG_MAX_PAGES", MAX_PAGES, int),
        "request_delay": _env("CG_REQUEST_DELAY", REQUEST_DELAY, float),
    }
    values.update({key: value for key, value in overrides.items() if value is not None})
    return FetcherConfig(retry=retry, **values)
