"""
Animation Service

将动画库中的动作应用到已绑骨的角色上。
"""

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import AnimationRequest, AnimationTask, to_payload
from model_synth.services.task_endpoint import TaskEndpoint

RESOURCE = "/v1/animations"

# 动画库动作 ID
OTTER_ANIMATIONS: dict[str, int] = {
    # 基础移动
    "idle": 0,
    "walk": 30,
    "run": 14,
    "run_fast": 16,
    # 游戏动作
    "jump": 466,
    "collect": 284,
    # 受击反馈
    "hit": 178,
    "death": 8,
    "victory": 59,
    "happy": 44,
    # 闪避
    "dodge_left": 158,
    "dodge_right": 159,
    "slide_left": 516,
    "slide_right": 517,
}


class AnimationService:
    """动画服务"""

    def __init__(self, client: MeshyClient, poller: TaskPoller):
        self.endpoint: TaskEndpoint[AnimationTask] = TaskEndpoint(
            client, poller, RESOURCE, AnimationTask
        )

    async def create_animation_task(self, request: AnimationRequest) -> str:
        """
        提交动画任务

        Returns:
            str: 动画任务 ID
        """
        return await self.endpoint.create(to_payload(request))

    async def get_animation_task(self, task_id: str) -> AnimationTask:
        return await self.endpoint.get(task_id)

    async def poll_animation_task(
        self,
        task_id: str,
        max_attempts: int | None = None,
        interval: float | None = None,
    ) -> AnimationTask:
        return await self.endpoint.poll(task_id, max_attempts, interval)

    async def delete_animation_task(self, task_id: str) -> None:
        await self.endpoint.delete(task_id)

    @staticmethod
    def get_animation_glb(task: AnimationTask) -> str | None:
        """动画 GLB 地址"""
        if task.result is None:
            return None
        return task.result.animation_glb_url
