"""
Rigging Service

角色自动绑骨，结果附带基础的走/跑动画。
"""

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import RiggingRequest, RiggingTask, TaskStatus, to_payload
from model_synth.services.task_endpoint import TaskEndpoint

RESOURCE = "/v1/rigging"


class RiggingService:
    """绑骨服务"""

    def __init__(self, client: MeshyClient, poller: TaskPoller):
        self.endpoint: TaskEndpoint[RiggingTask] = TaskEndpoint(
            client, poller, RESOURCE, RiggingTask
        )

    async def create_rigging_task(self, request: RiggingRequest) -> str:
        """
        提交绑骨任务

        Args:
            request: 绑骨参数（输入模型任务 ID、角色身高）

        Returns:
            str: 绑骨任务 ID
        """
        return await self.endpoint.create(to_payload(request))

    async def get_rigging_task(self, task_id: str) -> RiggingTask:
        return await self.endpoint.get(task_id)

    async def poll_rigging_task(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> RiggingTask:
        return await self.endpoint.poll(task_id, max_attempts, interval)

    async def delete_rigging_task(self, task_id: str) -> None:
        await self.endpoint.delete(task_id)

    @staticmethod
    def get_animation_urls(task: RiggingTask) -> dict[str, str | None]:
        """
        提取绑骨结果中的模型与动画地址

        未成功的任务返回空字典。结果中额外的 *_glb_url 字段也一并返回。
        """
        if task.status != TaskStatus.SUCCEEDED or task.result is None:
            return {}

        result = task.result
        basic = result.basic_animations
        urls: dict[str, str | None] = {
            "rigged": result.rigged_character_glb_url,
            "walking": basic.walking_glb_url if basic else None,
            "running": basic.running_glb_url if basic else None,
        }
        for key, value in (result.model_extra or {}).items():
            if key.endswith("_glb_url") and isinstance(value, str):
                urls[key] = value
        return urls
