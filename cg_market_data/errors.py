from typing import Optional


class MissingCredentialError(RuntimeError):
    """缺少 API 密钥，任何请求发出之前即终止。"""


class UpstreamError(RuntimeError):
    """上游 API 请求失败：网络错误、非 2xx 响应或无法解析的 JSON。"""

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        body: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.status_code = status_code
        self.body = body

    def __str__(self) -> str:
        if self.body:
            return f"{self.message}：{self.body}"
        return self.message
