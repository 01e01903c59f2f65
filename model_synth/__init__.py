"""
model-synth

使用 Meshy API 进行程序化 3D 模型生成：文生 3D、自动绑骨、重贴图、动画。
"""

from model_synth.infra import (
    ErrorKind,
    MeshyClient,
    MeshyError,
    RateGate,
    RetryPolicy,
    TaskPoller,
)
from model_synth.schemas import MeshyTask, TaskStatus
from model_synth.services import CharacterAssets, ModelSynth

__all__ = [
    "ErrorKind",
    "MeshyClient",
    "MeshyError",
    "RateGate",
    "RetryPolicy",
    "TaskPoller",
    "MeshyTask",
    "TaskStatus",
    "CharacterAssets",
    "ModelSynth",
]
