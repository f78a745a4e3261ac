"""LLM Client Registry 测试。"""
import pytest

from lensy.common.enums import ModelSelection
from lensy.llm_adapter.client.base import BaseLLMClient, LLMResponse
from lensy.llm_adapter.client.registry import LLMClientRegistry, build_bedrock_registry
from lensy.settings import Settings


class MockClient(BaseLLMClient):
    def __init__(self, mid, prov):
        self._mid = mid
        self._prov = prov

    async def complete(self, prompt, **kw):
        return LLMResponse(content="mock", model=self._mid)

    async def complete_with_retry(self, prompt, **kw):
        return await self.complete(prompt, **kw)

    @property
    def model_id(self):
        return self._mid

    @property
    def provider(self):
        return self._prov


def test_register_and_get():
    reg = LLMClientRegistry()
    claude = MockClient("claude-id", "messages")
    titan = MockClient("titan-id", "titan")
    reg.register("claude", claude)
    reg.register(ModelSelection.TITAN, titan)

    assert reg.get_client("titan") is titan
    assert reg.get_client("claude") is claude


def test_unknown_selection_falls_back_to_default():
    reg = LLMClientRegistry()
    claude = MockClient("claude-id", "messages")
    reg.register("claude", claude)
    assert reg.get_client("mistral") is claude
    assert reg.get_client(None) is claude
    assert reg.get_client("llama") is claude


def test_empty_registry():
    assert LLMClientRegistry().get_client("claude") is None


@pytest.mark.asyncio
async def test_build_bedrock_registry():
    reg = build_bedrock_registry(Settings(aws_region="eu-west-1", bedrock_api_key="k"))
    try:
        assert reg.get_client("auto") is reg.get_client("claude")
        assert reg.get_client("titan").model_id == "amazon.titan-text-premier-v1:0"
        assert reg.get_client("llama").provider == "llama"
    finally:
        await reg.aclose()
    assert reg.get_client("titan")._client.is_closed
