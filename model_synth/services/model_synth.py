"""
ModelSynth Service

业务逻辑层：组合四类接口，提供常用的资源生成流程。
包括角色（可选绑骨与动画）、道具、收集物的生成。
"""

import logging
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Iterable

import httpx

from model_synth.infra.meshy_client import MeshyClient
from model_synth.infra.retry_policy import RetryObserver
from model_synth.infra.task_poller import TaskPoller
from model_synth.schemas import (
    AnimationRequest,
    AnimationTask,
    ArtStyle,
    MeshyTask,
    RiggingRequest,
    RiggingTask,
    TextTo3DPreviewRequest,
    TextTo3DTask,
)
from model_synth.services.animations import OTTER_ANIMATIONS, AnimationService
from model_synth.services.retexture import RetextureService
from model_synth.services.rigging import RiggingService
from model_synth.services.text_to_3d import TextTo3DService

logger = logging.getLogger(__name__)


@dataclass
class CharacterAssets:
    """角色生成结果"""
    model: TextTo3DTask
    rigging: RiggingTask | None = None
    animations: dict[str, AnimationTask] = field(default_factory=dict)


class ModelSynth:
    """
    3D 资源生成服务

    四类接口共享同一个 MeshyClient（因此共享限流窗口）和同一个 TaskPoller。
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        client: MeshyClient | None = None,
        poller: TaskPoller | None = None,
        http_client: httpx.AsyncClient | None = None,
        on_retry: RetryObserver | None = None,
        on_progress: Callable[[MeshyTask], Awaitable[None]] | None = None,
    ):
        """
        初始化 ModelSynth

        Args:
            api_key: Meshy API Key，默认从配置读取
            base_url: API 基础 URL，默认从配置读取
            client: 已构建的客户端（可选，用于测试注入）
            poller: 已构建的轮询器（可选，用于测试注入）
            http_client: 可选的 httpx 异步客户端
            on_retry: 重试观察者
            on_progress: 轮询进度回调
        """
        self.client = client or MeshyClient(
            api_key=api_key,
            base_url=base_url,
            http_client=http_client,
            on_retry=on_retry,
        )
        self.poller = poller or TaskPoller(on_progress=on_progress)

        self.text3d = TextTo3DService(self.client, self.poller)
        self.rigging = RiggingService(self.client, self.poller)
        self.retexture = RetextureService(self.client, self.poller)
        self.animations = AnimationService(self.client, self.poller)

    async def close(self) -> None:
        """关闭资源"""
        await self.client.close()

    async def __aenter__(self) -> "ModelSynth":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def character(
        self,
        prompt: str,
        style: ArtStyle = "cartoon",
        rigged: bool = False,
        animations: Iterable[str] = (),
        polycount: int = 8000,
        height_meters: float = 1.7,
    ) -> CharacterAssets:
        """
        生成角色模型，可选绑骨并应用动画

        Args:
            prompt: 文本提示词
            style: 美术风格
            rigged: 是否绑骨（同时以 A/T Pose 生成）
            animations: 动画名称列表，取自 OTTER_ANIMATIONS，需要 rigged
            polycount: 目标面数
            height_meters: 角色身高 (m)

        Returns:
            CharacterAssets: 模型、绑骨和动画任务

        Raises:
            ValueError: 动画名称未知，或请求动画但未绑骨
            MeshyError: 任一任务失败或超时
        """
        animation_names = list(animations)
        unknown = [name for name in animation_names if name not in OTTER_ANIMATIONS]
        if unknown:
            raise ValueError(f"Unknown animations: {', '.join(unknown)}")
        if animation_names and not rigged:
            raise ValueError("Animations require rigged=True")

        model = await self._generate_model(prompt, style, polycount, t_pose=rigged)
        assets = CharacterAssets(model=model)
        if not rigged:
            return assets

        rig_task_id = await self.rigging.create_rigging_task(
            RiggingRequest(input_task_id=model.id, height_meters=height_meters)
        )
        assets.rigging = await self.rigging.poll_rigging_task(rig_task_id)

        for name in animation_names:
            animation_task_id = await self.animations.create_animation_task(
                AnimationRequest(rig_task_id=rig_task_id, action_id=OTTER_ANIMATIONS[name])
            )
            assets.animations[name] = await self.animations.poll_animation_task(
                animation_task_id
            )
            logger.info(f"Animation {name} ready for rig {rig_task_id}")

        return assets

    async def prop(
        self,
        prompt: str,
        style: ArtStyle = "realistic",
        polycount: int = 5000,
    ) -> TextTo3DTask:
        """生成道具/障碍物模型"""
        return await self._generate_model(prompt, style, polycount)

    async def collectible(
        self,
        prompt: str,
        style: ArtStyle = "cartoon",
        polycount: int = 2000,
    ) -> TextTo3DTask:
        """生成收集物模型（金币、宝石等）"""
        return await self._generate_model(prompt, style, polycount)

    async def _generate_model(
        self,
        prompt: str,
        style: ArtStyle,
        polycount: int,
        t_pose: bool = False,
    ) -> TextTo3DTask:
        """提交预览任务并轮询到完成"""
        request = TextTo3DPreviewRequest(
            prompt=prompt,
            art_style=style,
            target_polycount=polycount,
            is_a_t_pose=t_pose,
        )
        task_id = await self.text3d.create_preview_task(request)
        return await self.text3d.poll_task(task_id)
