import sys
from pathlib import Path

import pytest

PROJECT_ROOT = Path(__file__).resolve().parent.parent
for path in (PROJECT_ROOT, PROJECT_ROOT / "scripts"):
    if str(path) not in sys.path:
        sys.path.insert(0, str(path))

from cg_market_data.config import FetcherConfig
from cg_market_data.retry import RetryPolicy

ENV_VARS = (
    "COINGECKO_API_KEY",
    "CG_BASE_URL",
    "CG_VS_CURRENCY",
    "CG_ORDER",
    "CG_MAX_PAGES",
    "CG_REQUEST_DELAY",
    "CG_MAX_RETRIES",
    "CG_RETRY_BACKOFF",
)


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def empty_env_file(tmp_path):
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    return env_file


def make_config(**kwargs) -> FetcherConfig:
    params = {
        "api_key": "test-key",
        "base_url": "https://api.test/api/v3",
        "request_delay": 0,
        "retry": RetryPolicy(max_retries=1, backoff=0),
    }
    params.update(kwargs)
    return FetcherConfig(**params)


def make_coins(count: int):
    return [
        {
            "id": f"coin-{i}",
            "symbol": f"c{i}",
            "name": f"Coin {i}",
            "current_price": float(i),
            "market_cap_rank": i + 1,
            "roi": None,
        }
        for i in range(count)
    ]
