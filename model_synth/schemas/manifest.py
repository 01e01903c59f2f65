"""
资源清单 Schema

描述生成后的 3D 模型、贴图和精灵图资源清单。
"""

from datetime import datetime
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field


# ============== 模型资源 ==============

class ModelSource(BaseModel):
    type: Literal["meshy", "manual"]
    meshy_task_id: str | None = Field(default=None, alias="meshyTaskId")
    rig_task_id: str | None = Field(default=None, alias="rigTaskId")
    prompt: str | None = None


class ModelFiles(BaseModel):
    glb: str
    thumbnails: list[str] | None = None


class ModelVariant(BaseModel):
    id: str
    name: str
    retexture_task_id: str = Field(..., alias="retextureTaskId")
    prompt: str
    glb: str


class ModelAnimation(BaseModel):
    name: str
    type: Literal["idle", "walk", "run", "jump", "hit", "death", "collect"]
    url: str


class ModelMetadata(BaseModel):
    polycount: int
    size: int
    checksum: str
    generated: datetime
    version: str


class ModelAsset(BaseModel):
    """3D 模型资源"""
    id: str
    name: str
    category: Literal["character", "obstacle", "collectible", "environment"]
    source: ModelSource
    files: ModelFiles
    variants: list[ModelVariant] | None = None
    animations: list[ModelAnimation] | None = None
    metadata: ModelMetadata


# ============== 贴图资源 ==============

class TextureSource(BaseModel):
    type: Literal["ambientcg", "manual"]
    asset_id: str | None = Field(default=None, alias="assetId")
    resolution: Literal["1K", "2K", "4K", "8K"]


class TextureFiles(BaseModel):
    base_color: str = Field(..., alias="baseColor")
    normal: str | None = None
    roughness: str | None = None
    metallic: str | None = None
    ao: str | None = None
    displacement: str | None = None


class TextureMetadata(BaseModel):
    size: int
    checksum: str
    downloaded: datetime


class TextureAsset(BaseModel):
    """PBR 贴图资源"""
    id: str
    name: str
    category: Literal["pbr", "environment", "effect"]
    source: TextureSource
    files: TextureFiles
    metadata: TextureMetadata


# ============== 精灵图资源 ==============

class SpriteSource(BaseModel):
    type: Literal["openai", "manual"]
    prompt: str | None = None
    model: Literal["dall-e-2", "dall-e-3"] | None = None


class SpriteFiles(BaseModel):
    png: str
    variants: dict[str, str] | None = None


class SpriteMetadata(BaseModel):
    width: int
    height: int
    transparent: bool
    size: int
    checksum: str
    generated: datetime


class SpriteAsset(BaseModel):
    """精灵图资源"""
    id: str
    name: str
    category: Literal["ui", "particle", "icon", "effect", "hud"]
    source: SpriteSource
    files: SpriteFiles
    metadata: SpriteMetadata


class AssetManifest(BaseModel):
    """资源清单"""
    version: str
    generated: datetime
    models: list[ModelAsset]
    textures: list[TextureAsset]
    sprites: list[SpriteAsset]


def load_manifest(path: str | Path) -> AssetManifest:
    """
    读取并校验资源清单

    Args:
        path: JSON 清单文件路径

    Returns:
        AssetManifest: 校验通过的清单

    Raises:
        pydantic.ValidationError: 清单结构不合法
    """
    return AssetManifest.model_validate_json(Path(path).read_text(encoding="utf-8"))
