"""
Meshy API 客户端

封装与 Meshy OpenAPI 的底层交互，包括：
- 滑动窗口限流
- 指数退避重试
- 错误分类
- 结果文件下载
"""

import asyncio
import logging
from pathlib import Path
from typing import Any, Awaitable, Callable

import httpx
from pydantic import TypeAdapter, ValidationError

from model_synth.config import get_settings
from model_synth.infra.meshy_errors import ErrorKind, MeshyError, MeshyErrorHandler
from model_synth.infra.rate_gate import RateGate
from model_synth.infra.retry_policy import RetryEvent, RetryObserver, RetryPolicy

logger = logging.getLogger(__name__)


class MeshyClient:
    """
    Meshy API 客户端

    同一实例内的所有请求共享一个 RateGate。限流按“完成的调用”计数：
    每次尝试前都会预留一个名额，只有最终成功的调用才把名额转为时间戳，
    失败或重试的尝试归还名额。
    """

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        retry_policy: RetryPolicy | None = None,
        rate_gate: RateGate | None = None,
        http_client: httpx.AsyncClient | None = None,
        on_retry: RetryObserver | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        """
        初始化 Meshy 客户端

        Args:
            api_key: Bearer 凭证，默认从配置读取
            base_url: API 基础 URL，默认从配置读取
            retry_policy: 重试策略，默认从配置构建
            rate_gate: 限流器，默认按配置的套餐等级构建
            http_client: 可选的 httpx 异步客户端，用于测试注入
            on_retry: 每次重试前调用的观察者
            sleep: 退避等待函数，用于测试注入
        """
        self._settings = get_settings()
        self._api_key = api_key if api_key is not None else self._settings.meshy_api_key
        if not self._api_key:
            raise ValueError("Meshy API key is required")

        self._base_url = base_url or self._settings.meshy_base_url
        self._retry_policy = retry_policy or RetryPolicy.from_settings()
        self._rate_gate = rate_gate or RateGate(
            self._settings.requests_per_second,
            safety_margin=self._settings.rate_limit_safety_margin,
        )
        self._http_client = http_client
        self._owned_client: httpx.AsyncClient | None = None
        self._on_retry = on_retry
        self._sleep = sleep

    @property
    def base_url(self) -> str:
        return self._base_url

    @property
    def retry_policy(self) -> RetryPolicy:
        return self._retry_policy

    @property
    def rate_gate(self) -> RateGate:
        return self._rate_gate

    @property
    def headers(self) -> dict[str, str]:
        """每个 API 请求都携带的请求头"""
        return {
            "Authorization": f"Bearer {self._api_key}",
            "Content-Type": "application/json",
        }

    async def _get_client(self) -> httpx.AsyncClient:
        """获取 HTTP 客户端"""
        if self._http_client:
            return self._http_client
        if self._owned_client is None or self._owned_client.is_closed:
            self._owned_client = httpx.AsyncClient(
                base_url=self._base_url,
                timeout=self._settings.http_timeout,
            )
        return self._owned_client

    async def close(self) -> None:
        """关闭自建的 HTTP 客户端；注入的客户端由调用方负责"""
        if self._owned_client is not None:
            await self._owned_client.aclose()
            self._owned_client = None

    async def __aenter__(self) -> "MeshyClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def execute(
        self,
        method: str,
        path: str,
        *,
        json: Any = None,
        params: dict[str, Any] | None = None,
        response_model: Any = None,
    ) -> Any:
        """
        执行一次逻辑 HTTP 调用（含限流与重试）

        Args:
            method: HTTP 方法
            path: 相对 base_url 的资源路径
            json: 请求体
            params: 查询参数
            response_model: 期望的响应类型，给出时用 pydantic 校验

        Returns:
            解码后的响应；响应体为空时返回 None

        Raises:
            MeshyError: 不可重试的错误，或重试耗尽后的最后一个错误
        """
        client = await self._get_client()
        attempt = 0

        while True:
            await self._rate_gate.admit()

            cause: Exception | None = None
            response: httpx.Response | None = None
            try:
                response = await client.request(
                    method,
                    path,
                    json=json,
                    params=params,
                    headers=self.headers,
                )
            except httpx.RequestError as e:
                cause = e
                error = MeshyErrorHandler.transport(e)
            finally:
                # 预留名额只在成功时转为时间戳，其余情况（含取消）一律归还
                if response is not None and response.is_success:
                    self._rate_gate.record()
                else:
                    self._rate_gate.release()

            if response is not None:
                if response.is_success:
                    return self._decode(response, response_model)
                error = MeshyErrorHandler.classify(response.status_code, response.text)

            if not self._retry_policy.should_retry(error, attempt):
                if attempt > 0 and self._retry_policy.is_retryable_error(error):
                    logger.error(
                        f"Retry exhausted after {attempt + 1} attempts "
                        f"for {method} {path}: {error}"
                    )
                raise error from cause

            delay = self._retry_policy.delay_for(attempt)
            logger.warning(
                f"Attempt {attempt + 1}/{self._retry_policy.max_retries + 1} "
                f"for {method} {path} failed: {error}. Retrying in {delay:.1f}s..."
            )
            if self._on_retry:
                self._on_retry(RetryEvent(attempt=attempt, delay=delay, cause=error))
            await self._sleep(delay)
            attempt += 1

    @staticmethod
    def _decode(response: httpx.Response, response_model: Any) -> Any:
        """解码成功响应"""
        if not response.content or not response.content.strip():
            return None
        try:
            data = response.json()
        except ValueError as e:
            raise MeshyError(
                kind=ErrorKind.UNEXPECTED,
                message=f"Invalid JSON in response: {e}",
                status_code=response.status_code,
                raw_body=response.text,
            ) from e

        if response_model is None:
            return data
        try:
            return TypeAdapter(response_model).validate_python(data)
        except ValidationError as e:
            raise MeshyError(
                kind=ErrorKind.UNEXPECTED,
                message=f"Unexpected response shape: {e.error_count()} validation errors",
                status_code=response.status_code,
                raw_body=response.text,
            ) from e

    async def download(self, url: str, dest_path: str | Path) -> Path:
        """
        下载结果文件到本地

        Args:
            url: 文件 URL（通常为预签名地址，不携带鉴权头）
            dest_path: 目标路径，父目录不存在时自动创建；下载中断时不会留下残缺文件

        Returns:
            Path: 写入的文件路径

        Raises:
            MeshyError: 下载失败时抛出
        """
        dest = Path(dest_path)
        partial = dest.with_name(f"{dest.name}.part")
        client = await self._get_client()
        try:
            async with client.stream("GET", url) as response:
                if not response.is_success:
                    await response.aread()
                    MeshyErrorHandler.handle_response_error(response)
                dest.parent.mkdir(parents=True, exist_ok=True)
                with partial.open("wb") as f:
                    async for chunk in response.aiter_bytes():
                        f.write(chunk)
            partial.replace(dest)
        except httpx.RequestError as e:
            raise MeshyErrorHandler.transport(e) from e
        finally:
            partial.unlink(missing_ok=True)

        logger.info(f"Downloaded {url} to {dest}")
        return dest
