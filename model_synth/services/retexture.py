"""
Retexture Service

为已有模型重新生成贴图。
"""

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import RetextureRequest, RetextureTask, to_payload
from model_synth.services.task_endpoint import TaskEndpoint

RESOURCE = "/v1/retexture"


class RetextureService:
    """重贴图服务"""

    def __init__(self, client: MeshyClient, poller: TaskPoller):
        self.endpoint: TaskEndpoint[RetextureTask] = TaskEndpoint(
            client, poller, RESOURCE, RetextureTask
        )

    async def create_retexture_task(self, request: RetextureRequest) -> str:
        """
        提交重贴图任务

        参数的二选一约束由 RetextureRequest 在构造时校验。

        Returns:
            str: 重贴图任务 ID
        """
        return await self.endpoint.create(to_payload(request))

    async def get_retexture_task(self, task_id: str) -> RetextureTask:
        return await self.endpoint.get(task_id)

    async def poll_retexture_task(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> RetextureTask:
        return await self.endpoint.poll(task_id, max_attempts, interval)

    async def delete_retexture_task(self, task_id: str) -> None:
        await self.endpoint.delete(task_id)
