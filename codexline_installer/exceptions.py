"""
codexline 安装器统一异常体系

提供分层的异常结构，支持错误代码和上下文信息。
"""

from typing import Any, Dict, Optional


class CodexlineInstallError(Exception):
    """安装器基础异常类"""

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        context: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code or self._get_default_code()
        self.context = context or {}

    def _get_default_code(self) -> str:
        """获取默认错误代码"""
        return "E000"

    def __str__(self) -> str:
        return self.message


class ConfigError(CodexlineInstallError):
    """配置相关错误"""

    def _get_default_code(self) -> str:
        return "E100"


class DownloadError(CodexlineInstallError):
    """下载相关错误"""

    def _get_default_code(self) -> str:
        return "E300"


class DownloadNetworkError(DownloadError):
    """下载网络错误"""

    def _get_default_code(self) -> str:
        return "E301"


class HTTPStatusError(DownloadNetworkError):
    """非 200 响应"""

    def __init__(self, status: int, url: str):
        super().__init__(
            f"HTTP {status} from {url}", context={"status": status, "url": url}
        )
        self.status = status
        self.url = url

    def _get_default_code(self) -> str:
        return "E302"


class TooManyRedirectsError(DownloadNetworkError):
    """重定向次数超出上限"""

    def __init__(self, url: str):
        super().__init__(
            f"too many redirects while fetching {url}", context={"url": url}
        )
        self.url = url

    def _get_default_code(self) -> str:
        return "E303"


class DownloadTimeoutError(DownloadNetworkError):
    """请求超时"""

    def __init__(self, timeout_ms: int, url: str):
        super().__init__(
            f"request timed out after {timeout_ms}ms",
            context={"timeout_ms": timeout_ms, "url": url},
        )
        self.timeout_ms = timeout_ms

    def _get_default_code(self) -> str:
        return "E304"


class RetryExhaustedError(DownloadError):
    """重试次数耗尽"""

    def __init__(self, operation: str, attempts: int, last_error: Optional[Exception]):
        cause = str(last_error) if last_error is not None else "unknown error"
        super().__init__(
            f"{operation} failed after {attempts} attempts: {cause}",
            context={"operation": operation, "attempts": attempts},
        )
        self.operation = operation
        self.attempts = attempts
        self.last_error = last_error

    def _get_default_code(self) -> str:
        return "E305"


class ChecksumError(CodexlineInstallError):
    """校验相关错误"""

    def _get_default_code(self) -> str:
        return "E400"


class ChecksumUnavailableError(ChecksumError):
    """校验文件无法获取"""

    def _get_default_code(self) -> str:
        return "E401"


class ChecksumEntryMissingError(ChecksumError):
    """校验文件中缺少对应条目"""

    def _get_default_code(self) -> str:
        return "E402"


class ChecksumMismatchError(ChecksumError):
    """校验值不匹配"""

    def __init__(self, asset_name: str, expected: str, actual: str):
        super().__init__(
            f"checksum mismatch for {asset_name}: expected {expected}, got {actual}",
            context={"asset": asset_name, "expected": expected, "actual": actual},
        )
        self.expected = expected
        self.actual = actual

    def _get_default_code(self) -> str:
        return "E403"


__all__ = [
    # 基础异常
    "CodexlineInstallError",
    # 配置异常
    "ConfigError",
    # 下载异常
    "DownloadError",
    "DownloadNetworkError",
    "HTTPStatusError",
    "TooManyRedirectsError",
    "DownloadTimeoutError",
    "RetryExhaustedError",
    # 校验异常
    "ChecksumError",
    "ChecksumUnavailableError",
    "ChecksumEntryMissingError",
    "ChecksumMismatchError",
]
