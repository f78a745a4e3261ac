"""
Amazon Bedrock InvokeModel 客户端 (httpx, API key 鉴权)。

- claude / titan / llama 三种模型族, 请求体与响应解析见 formats.py
- 单次调用超时 (httpx) + 可选重试
"""
from __future__ import annotations
import asyncio
import time
from urllib.parse import quote

import httpx
import orjson
import structlog

from lensy.common.exceptions import ModelInvocationError
from lensy.llm_adapter.client.base import BaseLLMClient, LLMResponse
from lensy.llm_adapter.client.formats import ModelFormat

logger = structlog.get_logger()

BEDROCK_RUNTIME_BASE = "https://bedrock-runtime.{region}.amazonaws.com"


class BedrockClient(BaseLLMClient):
    """Bedrock Runtime 客户端。每个模型族一个实例。"""

    def __init__(
        self,
        model_format: ModelFormat,
        api_key: str = "",
        region: str = "us-east-1",
        endpoint: str = "",
        timeout: float = 60.0,
        http_client: httpx.AsyncClient | None = None,
    ):
        self._format = model_format
        self._api_key = api_key
        self._base_url = (endpoint or BEDROCK_RUNTIME_BASE.format(region=region)).rstrip("/")
        self._timeout = timeout
        self._client = http_client or httpx.AsyncClient(timeout=timeout)

    @property
    def invoke_url(self) -> str:
        return f"{self._base_url}/model/{quote(self._format.model_id, safe='')}/invoke"

    async def complete(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
    ) -> LLMResponse:
        body = self._format.build_body(prompt, temperature, max_tokens)
        headers = {
            "Content-Type": "application/json",
            "Accept": "application/json",
        }
        if self._api_key:
            headers["Authorization"] = f"Bearer {self._api_key}"

        start = time.monotonic()
        resp = await self._client.post(
            self.invoke_url, content=orjson.dumps(body), headers=headers)
        latency = (time.monotonic() - start) * 1000
        if resp.status_code >= 400:
            raise ModelInvocationError(
                f"Bedrock returned HTTP {resp.status_code}: {resp.text[:200]}")

        try:
            data = orjson.loads(resp.content)
        except orjson.JSONDecodeError as e:
            raise ModelInvocationError(f"Bedrock response is not JSON: {e}") from e

        return LLMResponse(
            content=self._format.extract_text(data),
            model=self._format.model_id,
            usage=self._format.usage(data),
            finish_reason=self._format.finish_reason(data),
            latency_ms=latency,
            raw_response=data,
        )

    async def complete_with_retry(
        self,
        prompt: str,
        max_retries: int = 0,
        **kwargs,
    ) -> LLMResponse:
        last_error: Exception | None = None
        for attempt in range(max_retries + 1):
            try:
                resp = await self.complete(prompt, **kwargs)
                resp.retry_count = attempt
                return resp
            except (httpx.HTTPError, ModelInvocationError) as e:
                last_error = e
                if attempt < max_retries:
                    await asyncio.sleep(1.0 * (attempt + 1))
                    logger.warning("bedrock_retry",
                                   model=self._format.model_id,
                                   attempt=attempt + 1, error=str(e))
        raise last_error  # type: ignore

    async def aclose(self) -> None:
        await self._client.aclose()

    @property
    def model_id(self) -> str:
        return self._format.model_id

    @property
    def provider(self) -> str:
        return self._format.family
