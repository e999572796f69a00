from .coingecko import (
    date_to_unix,
    deduplicate,
    fetch_all_pages_async,
    fetch_page_async,
    fetch_range_query,
)

__all__ = [
    "date_to_unix",
    "fetch_range_query",
    "fetch_page_async",
    "fetch_all_pages_async",
    "deduplicate",
]
