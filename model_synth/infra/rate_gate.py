"""
滑动窗口限流器

每个客户端实例独享一个 RateGate，保证最近 1 秒内记录的请求数
不超过 requests_per_second。
"""

import asyncio
import logging
import time
from collections import deque
from typing import Awaitable, Callable

logger = logging.getLogger(__name__)


class RateGate:
    """
    滑动窗口准入控制

    admit() 在窗口已满时挂起调用方并预留名额；record() 在请求成功后
    记录一个时间戳，release() 在请求失败时归还名额。
    """

    def __init__(
        self,
        requests_per_second: int,
        window: float = 1.0,
        safety_margin: float = 0.1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        初始化限流器

        Args:
            requests_per_second: 窗口内允许的请求数，构造后不再变更
            window: 窗口长度（秒）
            safety_margin: 等待时额外增加的缓冲（秒）
            clock: 单调时钟，用于测试注入
            sleep: 异步等待函数，用于测试注入
        """
        if requests_per_second < 1:
            raise ValueError("requests_per_second must be >= 1")
        self._limit = requests_per_second
        self._window = window
        self._safety_margin = safety_margin
        self._clock = clock
        self._sleep = sleep
        self._timestamps: deque[float] = deque()
        self._lock = asyncio.Lock()
        self._in_flight = 0
        self._slot_freed = asyncio.Event()

    @property
    def requests_per_second(self) -> int:
        return self._limit

    @property
    def window(self) -> float:
        return self._window

    @property
    def in_flight(self) -> int:
        """已准入但尚未完成的请求数"""
        return self._in_flight

    def _prune(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self._window:
            self._timestamps.popleft()

    def in_window(self) -> int:
        """当前窗口内的请求数"""
        self._prune(self._clock())
        return len(self._timestamps)

    def snapshot(self) -> list[float]:
        """窗口内时间戳的副本"""
        self._prune(self._clock())
        return list(self._timestamps)

    async def admit(self) -> None:
        """
        等待直到可以再发送一个请求，并为其预留一个名额

        预留的名额与窗口内的时间戳一起计入上限，调用方必须在请求结束后
        调用 record()（成功）或 release()（失败）归还。
        """
        async with self._lock:
            while True:
                now = self._clock()
                self._prune(now)
                used = len(self._timestamps) + self._in_flight
                if used < self._limit:
                    self._in_flight += 1
                    return
                if self._timestamps:
                    wait = self._window - (now - self._timestamps[0]) + self._safety_margin
                    logger.warning(
                        f"Rate limit approaching ({len(self._timestamps)}/{self._limit} "
                        f"in window, {self._in_flight} in flight), waiting {wait:.2f}s..."
                    )
                    await self._sleep(wait)
                else:
                    # 名额全部被进行中的请求占用，等其中一个结束
                    self._slot_freed.clear()
                    await self._slot_freed.wait()

    def record(self) -> None:
        """将一个预留名额转为已完成请求的时间戳"""
        now = self._clock()
        self._prune(now)
        self._timestamps.append(now)
        self._finish()

    def release(self) -> None:
        """归还一个未成功的预留名额，不占用窗口"""
        self._finish()

    def _finish(self) -> None:
        if self._in_flight > 0:
            self._in_flight -= 1
        self._slot_freed.set()
