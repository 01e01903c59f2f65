# Service Layer

from model_synth.services.task_endpoint import TaskEndpoint
from model_synth.services.text_to_3d import TextTo3DService
from model_synth.services.rigging import RiggingService
from model_synth.services.retexture import RetextureService
from model_synth.services.animations import AnimationService, OTTER_ANIMATIONS
from model_synth.services.model_synth import ModelSynth, CharacterAssets

__all__ = [
    "TaskEndpoint",
    "TextTo3DService",
    "RiggingService",
    "RetextureService",
    "AnimationService",
    "OTTER_ANIMATIONS",
    "ModelSynth",
    "CharacterAssets",
]
