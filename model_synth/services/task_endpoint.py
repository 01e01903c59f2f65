"""
Task Endpoint

一类任务资源（/{resource}）的通用操作：创建、查询、删除、列表、轮询。
各接口服务持有一个 TaskEndpoint，而不是继承公共基类。
"""

import logging
from typing import Any, Generic, TypeVar

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.meshy_errors import ErrorKind, MeshyError
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import MeshyTask, TaskSubmission

logger = logging.getLogger(__name__)

TaskT = TypeVar("TaskT", bound=MeshyTask)


class TaskEndpoint(Generic[TaskT]):
    """单个任务资源的 CRUD + 轮询"""

    def __init__(
        self,
        client: MeshyClient,
        poller: TaskPoller,
        resource: str,
        task_model: type[TaskT],
    ):
        """
        Args:
            client: 共享的 Meshy 客户端
            poller: 共享的任务轮询器
            resource: 资源路径，例如 /v1/rigging
            task_model: 任务响应模型
        """
        self._client = client
        self._poller = poller
        self._resource = "/" + resource.strip("/")
        self._task_model = task_model

    @property
    def resource(self) -> str:
        return self._resource

    def _task_path(self, task_id: str) -> str:
        if not task_id:
            raise ValueError("task_id is required")
        return f"{self._resource}/{task_id}"

    async def create(self, payload: dict[str, Any]) -> str:
        """
        提交任务

        Returns:
            str: 任务 ID

        Raises:
            MeshyError: 提交失败，或响应中没有任务 ID
        """
        submission: TaskSubmission = await self._client.execute(
            "POST",
            self._resource,
            json=payload,
            response_model=TaskSubmission,
        )
        task_id = submission.task_id if submission else None
        if not task_id:
            raise MeshyError(
                kind=ErrorKind.UNEXPECTED,
                message=f"No task ID returned from {self._resource}",
                status_code=200,
            )
        logger.info(f"Created task {task_id} on {self._resource}")
        return task_id

    async def get(self, task_id: str) -> TaskT:
        """查询任务当前状态"""
        return await self._client.execute(
            "GET",
            self._task_path(task_id),
            response_model=self._task_model,
        )

    async def delete(self, task_id: str) -> None:
        """删除任务"""
        await self._client.execute("DELETE", self._task_path(task_id))
        logger.info(f"Deleted task {task_id} on {self._resource}")

    async def list_tasks(self, page_num: int = 1, page_size: int = 100) -> list[TaskT]:
        """分页列出任务"""
        if page_num < 1 or page_size < 1:
            raise ValueError("page_num and page_size must be >= 1")
        return await self._client.execute(
            "GET",
            self._resource,
            params={"page_num": page_num, "page_size": page_size},
            response_model=list[self._task_model],
        )

    async def poll(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> TaskT:
        """轮询任务直到终态"""
        return await self._poller.poll_until_terminal(
            self.get,
            task_id,
            max_attempts=max_attempts,
            interval=interval,
        )
