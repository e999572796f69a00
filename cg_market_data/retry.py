from typing import Iterator


class RetryPolicy:
    """分页请求失败后的重试策略：最多重试 max_retries 次，每次等待 backoff * multiplier**i 秒。"""

    def __init__(self, max_retries: int = 1, backoff: float = 1.5, multiplier: float = 1.0) -> None:
        if max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if backoff < 0:
            raise ValueError("backoff must be >= 0")
        if multiplier < 1:
            raise ValueError("multiplier must be >= 1")
        self.max_retries = max_retries
        self.backoff = backoff
        self.multiplier = multiplier

    def delays(self) -> Iterator[float]:
        for attempt in range(self.max_retries):
            yield self.backoff * (self.multiplier ** attempt)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RetryPolicy):
            return NotImplemented
        return (self.max_retries, self.backoff, self.multiplier) == (
            other.max_retries,
            other.backoff,
            other.multiplier,
        )

    def __repr__(self) -> str:
        return (
            f"RetryPolicy(max_retries={self.max_retries}, "
            f"backoff={self.backoff}, multiplier={self.multiplier})"
        )
