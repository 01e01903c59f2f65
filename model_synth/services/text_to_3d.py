"""
Text-to-3D Service

文生 3D 的预览（快速、低精度）与精修（高精度）任务。
"""

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import (
    TextTo3DPreviewRequest,
    TextTo3DRefineRequest,
    TextTo3DTask,
    to_payload,
)
from model_synth.services.task_endpoint import TaskEndpoint

RESOURCE = "/v2/text-to-3d"


class TextTo3DService:
    """文生 3D 服务"""

    def __init__(self, client: MeshyClient, poller: TaskPoller):
        self.endpoint: TaskEndpoint[TextTo3DTask] = TaskEndpoint(
            client, poller, RESOURCE, TextTo3DTask
        )

    async def create_preview_task(self, request: TextTo3DPreviewRequest) -> str:
        """
        提交预览任务

        Args:
            request: 预览任务参数

        Returns:
            str: 预览任务 ID
        """
        return await self.endpoint.create(to_payload(request))

    async def create_refine_task(self, request: TextTo3DRefineRequest) -> str:
        """
        基于预览任务提交精修任务

        Args:
            request: 精修任务参数

        Returns:
            str: 精修任务 ID
        """
        return await self.endpoint.create(to_payload(request))

    async def get_task(self, task_id: str) -> TextTo3DTask:
        return await self.endpoint.get(task_id)

    async def poll_task(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> TextTo3DTask:
        return await self.endpoint.poll(task_id, max_attempts, interval)

    async def delete_task(self, task_id: str) -> None:
        await self.endpoint.delete(task_id)

    async def list_tasks(self, page_num: int = 1, page_size: int = 100) -> list[TextTo3DTask]:
        return await self.endpoint.list_tasks(page_num, page_size)
