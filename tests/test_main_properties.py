"""
属性测试：命令行入口

ModelSynth 被替换为假实现，验证退出码与错误日志。
"""

import logging
from pathlib import Path

import pytest

import main
from model_synth.infra.meshy_errors import MeshyErrorHandler
from model_synth.schemas import ModelUrls, TextTo3DTask


class FakeClient:
    def __init__(self) -> None:
        self.downloads: list[tuple[str, str]] = []

    async def download(self, url: str, dest_path: str) -> Path:
        self.downloads.append((url, dest_path))
        return Path(dest_path)


class FakeSynth:
    """按预设结果返回（或抛出）的 ModelSynth"""

    outcome: TextTo3DTask | Exception

    def __init__(self) -> None:
        self.client = FakeClient()
        FakeSynth.instance = self

    async def __aenter__(self) -> "FakeSynth":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        return None

    async def prop(self, prompt: str) -> TextTo3DTask:
        if isinstance(self.outcome, Exception):
            raise self.outcome
        return self.outcome


@pytest.fixture
def fake_synth(monkeypatch):
    monkeypatch.setattr(main, "ModelSynth", FakeSynth)
    return FakeSynth


@pytest.mark.asyncio
async def test_run_downloads_glb(fake_synth):
    fake_synth.outcome = TextTo3DTask(
        id="t-1",
        status="SUCCEEDED",
        model_urls=ModelUrls(glb="https://assets.test/t-1.glb"),
    )

    assert await main.run("river rock", "out/rock.glb") == 0
    assert fake_synth.instance.client.downloads == [
        ("https://assets.test/t-1.glb", "out/rock.glb"),
    ]


@pytest.mark.asyncio
async def test_run_logs_generation_failure(fake_synth, caplog):
    fake_synth.outcome = MeshyErrorHandler.classify(402, '{"message": "no credits"}')

    with caplog.at_level(logging.ERROR, logger="main"):
        code = await main.run("river rock", "out/rock.glb")

    assert code == 1
    assert main.logger.name == "main"
    assert any(
        record.name == "main" and "Payment Required: no credits" in record.getMessage()
        for record in caplog.records
    )
    assert fake_synth.instance.client.downloads == []


@pytest.mark.asyncio
async def test_run_without_glb_output_fails(fake_synth, caplog):
    fake_synth.outcome = TextTo3DTask(id="t-2", status="SUCCEEDED")

    with caplog.at_level(logging.ERROR, logger="main"):
        assert await main.run("river rock", "out/rock.glb") == 1

    assert "t-2" in caplog.text
