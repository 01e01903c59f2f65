"""
Pydantic Task/Request Schemas

定义 Meshy 任务的响应结构和各接口的请求参数。
包含数据验证逻辑，确保请求在发出前符合接口约束。
"""

from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator


# ============== 枚举类型 ==============

class TaskStatus(str, Enum):
    """任务状态枚举"""
    PENDING = "PENDING"
    IN_PROGRESS = "IN_PROGRESS"
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    CANCELED = "CANCELED"
    EXPIRED = "EXPIRED"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATUSES

    @property
    def is_failure(self) -> bool:
        return self in FAILURE_STATUSES


# 终态：到达后不再发生状态转换
TERMINAL_STATUSES = frozenset(
    {TaskStatus.SUCCEEDED, TaskStatus.FAILED, TaskStatus.CANCELED, TaskStatus.EXPIRED}
)
FAILURE_STATUSES = TERMINAL_STATUSES - {TaskStatus.SUCCEEDED}


ArtStyle = Literal[
    "realistic",
    "cartoon",
    "anime",
    "sculpture",
    "pbr",
    "realistic-3D",
    "voxel",
    "3D Printing",
    "heroic fantasy",
    "dark fantasy",
]

AiModel = Literal["meshy-4", "meshy-5", "latest"]


# ============== 通用模型 ==============

class TaskError(BaseModel):
    """任务失败信息"""
    message: str = ""


class MeshyTask(BaseModel):
    """
    Meshy 任务的通用表示

    未声明的字段保留在 model_extra 中，供各接口的结果解析使用。
    """
    model_config = ConfigDict(extra="allow")

    id: str = Field(..., min_length=1, description="任务 ID")
    status: TaskStatus = Field(..., description="任务状态")
    progress: int | None = Field(default=None, ge=0, le=100, description="进度 0-100")
    created_at: int | None = Field(default=None, description="创建时间 (ms)")
    started_at: int | None = Field(default=None, description="开始时间 (ms)")
    finished_at: int | None = Field(default=None, description="结束时间 (ms)")
    expires_at: int | None = Field(default=None, description="过期时间 (ms)")
    task_error: TaskError | None = Field(default=None, description="失败信息")
    preceding_tasks: int | None = Field(default=None, description="排队中的前序任务数")

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal

    @property
    def failure_message(self) -> str | None:
        """失败时的错误消息"""
        if self.task_error and self.task_error.message:
            return self.task_error.message
        return None


class ModelUrls(BaseModel):
    """模型下载地址"""
    glb: str | None = None
    fbx: str | None = None
    usdz: str | None = None
    obj: str | None = None
    mtl: str | None = None


class TextureUrls(BaseModel):
    """PBR 贴图地址"""
    base_color: str | None = None
    metallic: str | None = None
    normal: str | None = None
    roughness: str | None = None


class TextTo3DTask(MeshyTask):
    """文生 3D 任务"""
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_urls: ModelUrls | None = None
    thumbnail_url: str | None = None
    texture_urls: list[TextureUrls] | None = None
    prompt: str | None = None
    art_style: str | None = None


class BasicAnimations(BaseModel):
    """绑骨任务自带的走/跑动画"""
    walking_glb_url: str | None = None
    walking_fbx_url: str | None = None
    walking_armature_glb_url: str | None = None
    running_glb_url: str | None = None
    running_fbx_url: str | None = None
    running_armature_glb_url: str | None = None


class RiggingResult(BaseModel):
    """绑骨结果"""
    model_config = ConfigDict(extra="allow")

    rigged_character_glb_url: str | None = None
    rigged_character_fbx_url: str | None = None
    basic_animations: BasicAnimations | None = None


class RiggingTask(MeshyTask):
    """绑骨任务"""
    result: RiggingResult | None = None


class RetextureTask(MeshyTask):
    """重贴图任务"""
    model_config = ConfigDict(extra="allow", protected_namespaces=())

    model_urls: ModelUrls | None = None
    texture_urls: list[TextureUrls] | None = None


class AnimationResult(BaseModel):
    """动画结果"""
    model_config = ConfigDict(extra="allow")

    animation_glb_url: str | None = None
    animation_fbx_url: str | None = None
    processed_usdz_url: str | None = None
    processed_armature_fbx_url: str | None = None
    processed_animation_fps_fbx_url: str | None = None


class AnimationTask(MeshyTask):
    """动画任务"""
    result: AnimationResult | None = None


class TaskSubmission(BaseModel):
    """创建任务的响应：{"result": id} 或 {"id": id}"""
    model_config = ConfigDict(extra="allow")

    result: str | None = None
    id: str | None = None

    @property
    def task_id(self) -> str | None:
        return self.result or self.id


# ============== 请求模型 ==============

class TextTo3DPreviewRequest(BaseModel):
    """文生 3D 预览任务请求"""
    model_config = ConfigDict(protected_namespaces=())

    mode: Literal["preview"] = "preview"
    prompt: str = Field(..., min_length=1, description="文本提示词")
    art_style: ArtStyle = Field(default="realistic", description="美术风格")
    ai_model: AiModel = Field(default="meshy-5", description="模型版本")
    topology: Literal["triangle", "quad"] = Field(default="triangle", description="拓扑类型")
    target_polycount: int = Field(default=30000, gt=0, description="目标面数")
    should_remesh: bool = Field(default=True, description="是否重拓扑")
    symmetry_mode: Literal["auto", "symmetric", "asymmetric"] = Field(
        default="auto", description="对称模式"
    )
    is_a_t_pose: bool = Field(default=False, description="是否生成 A/T Pose")
    moderation: bool | Literal["strict"] = Field(default=False, description="内容审核")


class TextTo3DRefineRequest(BaseModel):
    """文生 3D 精修任务请求"""
    model_config = ConfigDict(protected_namespaces=())

    mode: Literal["refine"] = "refine"
    preview_task_id: str = Field(..., min_length=1, description="预览任务 ID")
    enable_pbr: bool = Field(default=False, description="是否生成 PBR 贴图")
    ai_model: str = Field(default="meshy-5", description="模型版本")
    texture_prompt: str | None = Field(default=None, description="贴图提示词")


class RiggingRequest(BaseModel):
    """绑骨任务请求"""
    input_task_id: str = Field(..., min_length=1, description="输入模型任务 ID")
    height_meters: float = Field(default=1.7, gt=0, description="角色身高 (m)")


class RetextureRequest(BaseModel):
    """
    重贴图任务请求

    输入二选一：input_task_id 或 model_url；
    风格二选一：text_style_prompt 或 image_style_url。
    """
    model_config = ConfigDict(protected_namespaces=())

    input_task_id: str | None = None
    model_url: str | None = None
    text_style_prompt: str | None = None
    image_style_url: str | None = None
    ai_model: Literal["meshy-4", "meshy-5"] | None = None
    enable_original_uv: bool | None = None
    enable_pbr: bool | None = None

    @model_validator(mode="after")
    def check_exclusive_inputs(self) -> "RetextureRequest":
        if bool(self.input_task_id) == bool(self.model_url):
            raise ValueError("Exactly one of input_task_id or model_url is required")
        if bool(self.text_style_prompt) == bool(self.image_style_url):
            raise ValueError(
                "Exactly one of text_style_prompt or image_style_url is required"
            )
        return self


class PostProcess(BaseModel):
    """动画后处理"""
    operation_type: Literal["change_fps", "fbx2usdz", "extract_armature"]
    fps: Literal[24, 25, 30, 60] | None = None


class AnimationRequest(BaseModel):
    """动画任务请求"""
    rig_task_id: str = Field(..., min_length=1, description="绑骨任务 ID")
    action_id: int = Field(..., ge=0, description="动画库中的动作 ID")
    post_process: PostProcess | None = None


def to_payload(request: BaseModel) -> dict[str, Any]:
    """将请求模型转换为请求体，排除 None 值"""
    return request.model_dump(mode="json", exclude_none=True)
