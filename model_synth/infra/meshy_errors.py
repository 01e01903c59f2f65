"""
Meshy 错误分类

实现：
- 错误类型枚举（单一异常类型，按 kind 区分）
- 错误分类器（处理 400/401/402/403/404/429/5xx 错误）
- 传输层错误包装
"""

import json
from enum import Enum
from typing import Any

import httpx


class ErrorKind(str, Enum):
    """Meshy 错误类型"""

    BAD_REQUEST = "bad_request"
    UNAUTHORIZED = "unauthorized"
    PAYMENT_REQUIRED = "payment_required"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    RATE_LIMITED = "rate_limited"
    SERVER_ERROR = "server_error"
    UNEXPECTED = "unexpected"
    TRANSPORT = "transport"
    TIMEOUT = "timeout"
    TASK_FAILED = "task_failed"


# 状态码 -> 错误类型
STATUS_KINDS: dict[int, ErrorKind] = {
    400: ErrorKind.BAD_REQUEST,
    401: ErrorKind.UNAUTHORIZED,
    402: ErrorKind.PAYMENT_REQUIRED,
    403: ErrorKind.FORBIDDEN,
    404: ErrorKind.NOT_FOUND,
    429: ErrorKind.RATE_LIMITED,
    500: ErrorKind.SERVER_ERROR,
    502: ErrorKind.SERVER_ERROR,
    503: ErrorKind.SERVER_ERROR,
    504: ErrorKind.SERVER_ERROR,
}

# 执行器允许本地重试的错误类型
RETRYABLE_KINDS = frozenset(
    {ErrorKind.TRANSPORT, ErrorKind.RATE_LIMITED, ErrorKind.SERVER_ERROR}
)

# 需要人工介入（重新鉴权、充值）的错误类型
ALERT_KINDS = frozenset({ErrorKind.UNAUTHORIZED, ErrorKind.PAYMENT_REQUIRED})


class MeshyError(Exception):
    """Meshy API 错误"""

    def __init__(
        self,
        kind: ErrorKind,
        message: str,
        status_code: int | None = None,
        raw_body: str | None = None,
        task_id: str | None = None,
        task_status: str | None = None,
    ):
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.status_code = status_code
        self.raw_body = raw_body
        self.task_id = task_id
        self.task_status = task_status

    @property
    def should_alert(self) -> bool:
        return self.kind in ALERT_KINDS

    def __str__(self) -> str:
        return f"[{self.kind.value}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"MeshyError(kind={self.kind.value!r}, status_code={self.status_code!r}, "
            f"message={self.message!r})"
        )

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, MeshyError):
            return NotImplemented
        return (
            self.kind,
            self.message,
            self.status_code,
            self.raw_body,
            self.task_id,
            self.task_status,
        ) == (
            other.kind,
            other.message,
            other.status_code,
            other.raw_body,
            other.task_id,
            other.task_status,
        )

    __hash__ = Exception.__hash__


class MeshyErrorHandler:
    """Meshy 错误处理器"""

    @staticmethod
    def extract_message(status_code: int, body: str | None) -> str:
        """
        从错误响应体中提取错误消息

        处理以下情况：
        - JSON 对象含 message: 返回 message
        - JSON 对象含字符串 error: 返回 error
        - 非 JSON 文本: 原样返回
        - 空响应体: 返回 "HTTP {status}"

        Args:
            status_code: HTTP 状态码
            body: 原始响应体

        Returns:
            str: 非空的错误消息
        """
        if not body or not body.strip():
            return f"HTTP {status_code}"

        try:
            data: Any = json.loads(body)
        except ValueError:
            return body

        if isinstance(data, dict):
            message = data.get("message")
            if isinstance(message, str) and message:
                return message
            error = data.get("error")
            if isinstance(error, str) and error:
                return error
            if isinstance(error, dict) and error.get("message"):
                return str(error["message"])
        return body

    @staticmethod
    def classify(status_code: int, body: str | None) -> MeshyError:
        """
        将失败的 HTTP 响应归类为 MeshyError

        纯函数，相同输入总是得到相等的结果。

        Args:
            status_code: HTTP 状态码
            body: 原始响应体

        Returns:
            MeshyError: 分类后的错误
        """
        message = MeshyErrorHandler.extract_message(status_code, body)
        kind = STATUS_KINDS.get(status_code, ErrorKind.UNEXPECTED)

        match kind:
            case ErrorKind.BAD_REQUEST:
                text = f"Bad Request: {message}"
            case ErrorKind.UNAUTHORIZED:
                text = f"Unauthorized: {message}"
            case ErrorKind.PAYMENT_REQUIRED:
                text = f"Payment Required: {message}"
            case ErrorKind.FORBIDDEN:
                text = f"Forbidden: {message}"
            case ErrorKind.NOT_FOUND:
                text = f"Not Found: {message}"
            case ErrorKind.RATE_LIMITED:
                text = f"Rate Limit Exceeded: {message}"
            case ErrorKind.SERVER_ERROR:
                text = f"Server Error: {message}"
            case _:
                text = f"Unexpected error: {message}"

        return MeshyError(
            kind=kind,
            message=text,
            status_code=status_code,
            raw_body=body,
        )

    @staticmethod
    def handle_response_error(response: httpx.Response) -> None:
        """
        处理 HTTP 响应错误

        Args:
            response: httpx 响应对象（需已读取响应体）

        Raises:
            MeshyError: 非 2xx 响应时抛出对应的错误
        """
        if response.is_success:
            return
        raise MeshyErrorHandler.classify(response.status_code, response.text)

    @staticmethod
    def transport(error: httpx.RequestError) -> MeshyError:
        """将 httpx 传输层异常包装为 TRANSPORT 错误（超时也属于未收到响应）"""
        reason = type(error).__name__
        detail = str(error) or reason
        return MeshyError(
            kind=ErrorKind.TRANSPORT,
            message=f"Request failed ({reason}): {detail}",
        )

    @staticmethod
    def is_retryable(error: MeshyError) -> bool:
        """
        判断错误类型是否允许执行器重试

        Args:
            error: 错误对象

        Returns:
            bool: 是否可重试
        """
        return error.kind in RETRYABLE_KINDS
