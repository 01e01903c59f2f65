"""
重试策略

实现：
- 是否重试的判定（次数上限 + 可重试状态码）
- 带抖动的指数退避延迟计算
- 重试事件（供调用方观察）
"""

import random
from dataclasses import dataclass, field
from typing import Callable

from model_synth.config import get_settings
from model_synth.infra.meshy_errors import ErrorKind, MeshyError, MeshyErrorHandler

# 指数超过该值时必然被 max_delay 截断，避免浮点溢出
_MAX_EXPONENT = 64


@dataclass(frozen=True)
class RetryEvent:
    """一次重试的记录"""
    attempt: int
    delay: float
    cause: MeshyError


RetryObserver = Callable[[RetryEvent], None]


@dataclass
class RetryPolicy:
    """
    指数退避重试策略

    attempt 从 0 开始计数；max_retries 为首次请求之外允许的重试次数。
    """

    max_retries: int = 3
    base_delay: float = 1.0
    max_delay: float = 10.0
    retryable_statuses: frozenset[int] = frozenset({429, 500, 502, 503, 504})
    jitter_ratio: float = 0.3
    rng: random.Random = field(default_factory=random.Random)

    def __post_init__(self) -> None:
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")
        if self.base_delay <= 0:
            raise ValueError("base_delay must be > 0")
        if self.max_delay < self.base_delay:
            raise ValueError("max_delay must be >= base_delay")
        if not 0 <= self.jitter_ratio < 1:
            raise ValueError("jitter_ratio must be in [0, 1)")
        self.retryable_statuses = frozenset(self.retryable_statuses)

    @classmethod
    def from_settings(cls, rng: random.Random | None = None) -> "RetryPolicy":
        """根据应用配置构建重试策略"""
        settings = get_settings()
        return cls(
            max_retries=settings.retry_max_retries,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
            retryable_statuses=frozenset(settings.retry_retryable_statuses),
            rng=rng or random.Random(),
        )

    def is_retryable_error(self, error: MeshyError) -> bool:
        """
        判断错误本身是否可重试（不考虑次数）

        错误类型须可重试（见 MeshyErrorHandler.is_retryable）；传输层错误总是可重试，
        其余还须状态码在 retryable_statuses 中。除 429 外的 4xx 一律不可重试，
        即使被配置进了 retryable_statuses。
        """
        if not MeshyErrorHandler.is_retryable(error):
            return False
        if error.kind == ErrorKind.TRANSPORT:
            return True
        return error.status_code in self.retryable_statuses

    def should_retry(self, error: MeshyError, attempt: int) -> bool:
        """
        判断第 attempt 次尝试失败后是否还能重试

        Args:
            error: 本次失败的错误
            attempt: 本次尝试序号（从 0 开始）

        Returns:
            bool: 是否继续重试
        """
        return attempt < self.max_retries and self.is_retryable_error(error)

    def delay_for(self, attempt: int) -> float:
        """
        计算第 attempt 次失败后的等待时间

        base_delay * 2^attempt，叠加 ±jitter_ratio 的对称抖动，
        最终截断到 [base_delay, max_delay]。
        """
        if attempt < 0:
            raise ValueError("attempt must be >= 0")
        exponential = self.base_delay * (2 ** min(attempt, _MAX_EXPONENT))
        jitter = self.rng.uniform(-self.jitter_ratio, self.jitter_ratio) * exponential
        return max(self.base_delay, min(exponential + jitter, self.max_delay))
