"""
任务轮询器

实现通用的异步任务状态轮询，包括：
- 轮询循环（直到终态或超过次数上限）
- 任务刚创建时 404 的容忍窗口
- 终态失败与超时的错误上报
"""

import asyncio
import logging
from typing import Awaitable, Callable, TypeVar

from model_synth.config import get_settings
from model_synth.infra.meshy_errors import ErrorKind, MeshyError
from model_synth.schemas import MeshyTask, TaskStatus

logger = logging.getLogger(__name__)

TaskT = TypeVar("TaskT", bound=MeshyTask)


class TaskPoller:
    """
    任务轮询器

    不关心具体接口：调用方提供 fetch_task(task_id)，
    轮询器负责节奏、终态判断和超时。
    """

    def __init__(
        self,
        max_attempts: int | None = None,
        interval: float | None = None,
        not_found_retries: int | None = None,
        not_found_delay: float | None = None,
        on_progress: Callable[[MeshyTask], Awaitable[None]] | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        初始化任务轮询器

        Args:
            max_attempts: 默认轮询次数上限
            interval: 默认轮询间隔（秒）
            not_found_retries: 任务可见之前 404 的额外容忍次数
            not_found_delay: 404 容忍的基础等待（秒），第 n 次等待 n 倍
            on_progress: 非终态时的进度回调
            sleep: 异步等待函数，用于测试注入
        """
        settings = get_settings()
        self._max_attempts = (
            max_attempts if max_attempts is not None else settings.poll_max_attempts
        )
        self._interval = interval if interval is not None else settings.poll_interval
        self._not_found_retries = (
            not_found_retries
            if not_found_retries is not None
            else settings.poll_not_found_retries
        )
        self._not_found_delay = (
            not_found_delay if not_found_delay is not None else settings.poll_not_found_delay
        )
        self._on_progress = on_progress
        self._sleep = sleep

    @property
    def max_attempts(self) -> int:
        """默认轮询次数上限"""
        return self._max_attempts

    @property
    def interval(self) -> float:
        """默认轮询间隔（秒）"""
        return self._interval

    async def poll_until_terminal(
        self,
        fetch_task: Callable[[str], Awaitable[TaskT]],
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> TaskT:
        """
        轮询直到任务到达终态

        Args:
            fetch_task: 查询任务当前状态的协程函数
            task_id: 任务 ID
            max_attempts: 轮询次数上限，默认使用构造参数
            interval: 轮询间隔（秒），默认使用构造参数

        Returns:
            状态为 SUCCEEDED 的任务

        Raises:
            MeshyError: TASK_FAILED（失败/取消/过期）、TIMEOUT（超过次数上限），
                或 fetch_task 抛出的错误
        """
        max_attempts = max_attempts if max_attempts is not None else self._max_attempts
        interval = interval if interval is not None else self._interval
        if max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")

        seen = False
        not_found_count = 0
        last_status: TaskStatus | None = None
        attempt = 0

        while attempt < max_attempts:
            try:
                task = await fetch_task(task_id)
            except MeshyError as e:
                if (
                    e.kind == ErrorKind.NOT_FOUND
                    and not seen
                    and not_found_count < self._not_found_retries
                ):
                    not_found_count += 1
                    delay = self._not_found_delay * not_found_count
                    logger.warning(
                        f"Task {task_id} not visible yet "
                        f"({not_found_count}/{self._not_found_retries}), "
                        f"retrying in {delay:.1f}s..."
                    )
                    await self._sleep(delay)
                    continue
                raise

            seen = True
            last_status = task.status

            if task.status == TaskStatus.SUCCEEDED:
                logger.info(f"Task {task_id} succeeded")
                return task

            if task.status.is_failure:
                reason = task.failure_message
                message = f"Task {task_id} failed with status: {task.status.value}"
                if reason:
                    message = f"{message} ({reason})"
                logger.error(message)
                raise MeshyError(
                    kind=ErrorKind.TASK_FAILED,
                    message=message,
                    task_id=task_id,
                    task_status=task.status.value,
                )

            if self._on_progress:
                await self._on_progress(task)

            attempt += 1
            if attempt < max_attempts:
                await self._sleep(interval)

        status_text = last_status.value if last_status else "UNKNOWN"
        message = (
            f"Task {task_id} timed out after {max_attempts} polls "
            f"(last status: {status_text})"
        )
        logger.error(message)
        raise MeshyError(
            kind=ErrorKind.TIMEOUT,
            message=message,
            task_id=task_id,
            task_status=last_status.value if last_status else None,
        )
