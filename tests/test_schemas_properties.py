"""
属性测试：Pydantic Schema 验证

使用 hypothesis 进行属性测试，验证任务状态模型、请求参数约束、
资源清单结构和配置加载。
"""

import json
from pathlib import Path

import pytest
from hypothesis import given, strategies as st, settings
from pydantic import ValidationError

from model_synth.config import RATE_LIMITS, Settings
from model_synth.schemas import (
    MeshyTask,
    RetextureRequest,
    TaskStatus,
    TaskSubmission,
    TextTo3DPreviewRequest,
    TextTo3DTask,
    TERMINAL_STATUSES,
    to_payload,
)
from model_synth.schemas.manifest import AssetManifest, load_manifest


# ============== 任务状态 ==============


@given(status=st.sampled_from(list(TaskStatus)))
def test_terminal_statuses(status: TaskStatus):
    """只有 PENDING 和 IN_PROGRESS 是非终态"""
    non_terminal = {TaskStatus.PENDING, TaskStatus.IN_PROGRESS}
    assert status.is_terminal == (status not in non_terminal)
    assert status.is_failure == (status in TERMINAL_STATUSES and status != TaskStatus.SUCCEEDED)


@settings(max_examples=100)
@given(progress=st.integers(min_value=0, max_value=100))
def test_progress_within_range_accepted(progress: int):
    task = MeshyTask(id="t-1", status="IN_PROGRESS", progress=progress)
    assert task.progress == progress


@given(progress=st.one_of(st.integers(max_value=-1), st.integers(min_value=101)))
def test_progress_out_of_range_rejected(progress: int):
    with pytest.raises(ValidationError):
        MeshyTask(id="t-1", status="IN_PROGRESS", progress=progress)


def test_unknown_status_rejected():
    with pytest.raises(ValidationError):
        MeshyTask(id="t-1", status="QUEUED")


def test_unknown_fields_kept():
    task = TextTo3DTask.model_validate({
        "id": "t-1",
        "status": "SUCCEEDED",
        "model_urls": {"glb": "https://assets.test/t-1.glb"},
        "video_url": "https://assets.test/t-1.mp4",
    })
    assert task.model_urls.glb == "https://assets.test/t-1.glb"
    assert task.model_extra["video_url"] == "https://assets.test/t-1.mp4"


def test_failure_message():
    failed = MeshyTask(id="t-1", status="FAILED", task_error={"message": "policy"})
    assert failed.failure_message == "policy"
    assert MeshyTask(id="t-2", status="FAILED").failure_message is None


@pytest.mark.parametrize("body, expected", [
    ({"result": "abc"}, "abc"),
    ({"id": "def"}, "def"),
    ({"result": "abc", "id": "def"}, "abc"),
    ({}, None),
])
def test_submission_task_id(body: dict, expected: str | None):
    assert TaskSubmission.model_validate(body).task_id == expected


# ============== 请求参数 ==============


def test_preview_request_rejects_empty_prompt():
    with pytest.raises(ValidationError):
        TextTo3DPreviewRequest(prompt="")


def test_preview_request_rejects_unknown_style():
    with pytest.raises(ValidationError):
        TextTo3DPreviewRequest(prompt="rock", art_style="impressionist")


@pytest.mark.parametrize("kwargs", [
    {"text_style_prompt": "mossy"},
    {"input_task_id": "t-1", "model_url": "https://assets.test/m.glb", "text_style_prompt": "mossy"},
    {"input_task_id": "t-1"},
    {"input_task_id": "t-1", "text_style_prompt": "mossy", "image_style_url": "https://assets.test/s.png"},
])
def test_retexture_requires_exactly_one_input_and_style(kwargs: dict):
    with pytest.raises(ValidationError):
        RetextureRequest(**kwargs)


def test_retexture_payload_excludes_unset_fields():
    request = RetextureRequest(model_url="https://assets.test/m.glb", image_style_url="https://assets.test/s.png")
    assert to_payload(request) == {
        "model_url": "https://assets.test/m.glb",
        "image_style_url": "https://assets.test/s.png",
    }


# ============== 资源清单 ==============


def _manifest_dict() -> dict:
    return {
        "version": "1.0.0",
        "generated": "2026-01-05T10:00:00Z",
        "models": [{
            "id": "otter",
            "name": "Otter",
            "category": "character",
            "source": {"type": "meshy", "meshyTaskId": "t-1", "rigTaskId": "r-1", "prompt": "otter"},
            "files": {"glb": "models/otter.glb"},
            "animations": [{"name": "Jump", "type": "jump", "url": "models/otter_jump.glb"}],
            "metadata": {
                "polycount": 8000,
                "size": 1024,
                "checksum": "abc123",
                "generated": "2026-01-05T10:00:00Z",
                "version": "1",
            },
        }],
        "textures": [{
            "id": "moss",
            "name": "Moss",
            "category": "pbr",
            "source": {"type": "ambientcg", "assetId": "Moss001", "resolution": "2K"},
            "files": {"baseColor": "textures/moss_color.jpg"},
            "metadata": {"size": 2048, "checksum": "def456", "downloaded": "2026-01-05T10:00:00Z"},
        }],
        "sprites": [],
    }


def test_load_manifest(tmp_path: Path):
    path = tmp_path / "manifest.json"
    path.write_text(json.dumps(_manifest_dict()), encoding="utf-8")

    manifest = load_manifest(path)

    assert isinstance(manifest, AssetManifest)
    assert manifest.models[0].source.meshy_task_id == "t-1"
    assert manifest.models[0].animations[0].type == "jump"
    assert manifest.textures[0].files.base_color == "textures/moss_color.jpg"


def test_manifest_rejects_unknown_category():
    data = _manifest_dict()
    data["models"][0]["category"] = "vehicle"
    with pytest.raises(ValidationError):
        AssetManifest.model_validate(data)


# ============== 配置 ==============


@pytest.mark.parametrize("tier", sorted(RATE_LIMITS))
def test_requests_per_second_follows_tier(tier: str, monkeypatch):
    monkeypatch.setenv("MESHY_TIER", tier)
    monkeypatch.delenv("RATE_LIMIT_RPS", raising=False)
    settings_instance = Settings(_env_file=None)
    assert settings_instance.requests_per_second == RATE_LIMITS[tier]["requests_per_second"]


def test_requests_per_second_override(monkeypatch):
    monkeypatch.setenv("MESHY_TIER", "enterprise")
    monkeypatch.setenv("RATE_LIMIT_RPS", "5")
    assert Settings(_env_file=None).requests_per_second == 5


def test_retry_statuses_from_env(monkeypatch):
    monkeypatch.setenv("RETRY_RETRYABLE_STATUSES", "[429, 503]")
    assert Settings(_env_file=None).retry_retryable_statuses == [429, 503]
