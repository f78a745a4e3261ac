"""
LLM 客户端注册表。

- 按选择 token (claude / titan / llama / auto) 注册客户端
- 未识别 token 回落到默认模型
"""
from __future__ import annotations

import httpx
import structlog

from lensy.common.enums import ModelSelection
from lensy.llm_adapter.client.base import BaseLLMClient
from lensy.llm_adapter.client.bedrock import BedrockClient
from lensy.llm_adapter.client.formats import MODEL_FORMATS
from lensy.settings import Settings

logger = structlog.get_logger()


class LLMClientRegistry:
    """LLM 客户端注册表 (多模型切换)。"""

    def __init__(self, default: ModelSelection = ModelSelection.CLAUDE):
        self._clients: dict[ModelSelection, BaseLLMClient] = {}
        self._default = default

    def register(self, selection: ModelSelection | str, client: BaseLLMClient) -> None:
        """注册模型。"""
        key = ModelSelection(selection)
        self._clients[key] = client
        logger.info("llm_registered",
                    selection=key.value, model_id=client.model_id,
                    provider=client.provider)

    def get_client(self, selection: str | None) -> BaseLLMClient | None:
        """获取选择 token 对应客户端 (未识别 → 默认模型)。"""
        key = ModelSelection.resolve(selection)
        client = self._clients.get(key)
        if client is None and key != self._default:
            client = self._clients.get(self._default)
        return client

    async def aclose(self) -> None:
        seen: set[int] = set()
        for client in self._clients.values():
            if id(client) in seen or not hasattr(client, "aclose"):
                continue
            seen.add(id(client))
            await client.aclose()


def build_bedrock_registry(cfg: Settings) -> LLMClientRegistry:
    """每进程构建一次; 所有选择 token 共用一个 httpx 连接池。"""
    http_client = httpx.AsyncClient(timeout=cfg.llm_timeout_seconds)
    registry = LLMClientRegistry(default=ModelSelection.resolve(cfg.default_model))
    by_model: dict[str, BedrockClient] = {}
    for selection, fmt in MODEL_FORMATS.items():
        client = by_model.get(fmt.model_id)
        if client is None:
            client = BedrockClient(
                fmt,
                api_key=cfg.bedrock_api_key,
                region=cfg.aws_region,
                endpoint=cfg.bedrock_endpoint,
                timeout=cfg.llm_timeout_seconds,
                http_client=http_client,
            )
            by_model[fmt.model_id] = client
        registry.register(selection, client)
    return registry
