"""
配置管理模块

使用 Pydantic Settings 管理环境变量配置。
支持从 .env 文件或环境变量加载配置。
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Meshy 各套餐的频率限制
RATE_LIMITS: dict[str, dict[str, int]] = {
    "pro": {"requests_per_second": 20, "queue_tasks": 10},
    "studio": {"requests_per_second": 20, "queue_tasks": 20},
    "enterprise": {"requests_per_second": 100, "queue_tasks": 50},
}


class Settings(BaseSettings):
    """应用配置"""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Meshy API 配置
    meshy_api_key: str = Field(
        default="",
        description="Meshy API Key",
    )
    meshy_base_url: str = Field(
        default="https://api.meshy.ai/openapi",
        description="Meshy API 基础 URL（不含版本号）",
    )
    meshy_tier: str = Field(
        default="pro",
        description="Meshy 套餐等级 (pro/studio/enterprise)",
    )

    # 频率限制配置
    rate_limit_rps: int | None = Field(
        default=None,
        description="每秒请求上限，未设置时按套餐等级取值",
    )
    rate_limit_safety_margin: float = Field(
        default=0.1,
        description="限流等待的额外缓冲（秒）",
    )

    # HTTP 客户端配置
    http_timeout: float = Field(
        default=30.0,
        description="HTTP 请求超时时间（秒）",
    )

    # 重试配置
    retry_max_retries: int = Field(
        default=3,
        description="最大重试次数（不含首次请求）",
    )
    retry_base_delay: float = Field(
        default=1.0,
        description="重试基础延迟（秒）",
    )
    retry_max_delay: float = Field(
        default=10.0,
        description="重试最大延迟（秒）",
    )
    retry_retryable_statuses: list[int] = Field(
        default=[429, 500, 502, 503, 504],
        description="可重试的 HTTP 状态码",
    )

    # 任务轮询配置
    poll_max_attempts: int = Field(
        default=60,
        description="轮询最大次数",
    )
    poll_interval: float = Field(
        default=10.0,
        description="轮询间隔（秒）",
    )
    poll_not_found_retries: int = Field(
        default=3,
        description="任务创建后 404 的额外容忍次数",
    )
    poll_not_found_delay: float = Field(
        default=2.0,
        description="404 容忍窗口的基础等待（秒），按次数线性增长",
    )

    @property
    def requests_per_second(self) -> int:
        """当前生效的每秒请求上限"""
        if self.rate_limit_rps is not None:
            return self.rate_limit_rps
        tier = RATE_LIMITS.get(self.meshy_tier.lower(), RATE_LIMITS["pro"])
        return tier["requests_per_second"]


@lru_cache
def get_settings() -> Settings:
    """
    获取应用配置（单例模式）

    Returns:
        Settings: 应用配置实例
    """
    return Settings()
