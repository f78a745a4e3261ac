"""全局 pytest fixtures: 内存存储 / 内存 Redis / 脚本化 LLM 客户端。"""
import asyncio
import pytest
import orjson
from unittest.mock import AsyncMock

from lensy.common.schemas import ProcessedContent
from lensy.llm_adapter.client.base import BaseLLMClient, LLMResponse


class MemoryStorage:
    """StorageProvider 内存实现。fail_writes 中的路径写入时抛错。"""

    def __init__(self):
        self.files: dict[str, bytes] = {}
        self.fail_writes: set[str] = set()
        self.writes: list[str] = []

    async def save_file(self, path: str, data: bytes) -> str:
        if path in self.fail_writes:
            raise OSError(f"write denied: {path}")
        self.writes.append(path)
        self.files[path] = data
        return path

    async def read_file(self, path: str) -> bytes:
        if path not in self.files:
            raise FileNotFoundError(path)
        return self.files[path]

    async def delete_file(self, path: str) -> bool:
        return self.files.pop(path, None) is not None

    def put_json(self, path: str, data) -> None:
        self.files[path] = orjson.dumps(data)

    def get_json(self, path: str):
        return orjson.loads(self.files[path])


class MemoryRedis:
    """redis.asyncio.Redis 的最小内存替身 (get / set / publish / ping)。"""

    def __init__(self):
        self.data: dict[str, bytes] = {}
        self.published: list[tuple[str, bytes]] = []

    async def get(self, key):
        return self.data.get(key)

    async def set(self, key, value, ex=None, nx=False):
        if isinstance(value, str):
            value = value.encode()
        self.data[key] = value
        return True

    async def publish(self, channel, message):
        self.published.append((channel, message))
        return 1

    async def ping(self):
        return True


class ScriptedLLMClient(BaseLLMClient):
    """
    按 prompt 中的维度名返回脚本化响应。

    responses: {dimension: 文本响应 | Exception}; 未配置的维度返回 default_score。
    """

    def __init__(self, responses: dict | None = None, default_score: int = 70,
                 delay: float = 0.0, model: str = "scripted-model"):
        self.responses = responses or {}
        self.default_score = default_score
        self.delay = delay
        self.calls: list[str] = []
        self.prompts: list[str] = []
        self._model = model

    @staticmethod
    def dimension_of(prompt: str) -> str:
        for dim in ("relevance", "freshness", "clarity", "accuracy", "completeness"):
            if f"Analyze the {dim.upper()}" in prompt:
                return dim
        raise AssertionError("prompt does not name a dimension")

    async def complete(self, prompt, temperature=0.1, max_tokens=2000):
        dim = self.dimension_of(prompt)
        self.calls.append(dim)
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        scripted = self.responses.get(dim)
        if isinstance(scripted, Exception):
            raise scripted
        if scripted is None:
            scripted = orjson.dumps({
                "score": self.default_score,
                "findings": [f"{dim} looks fine"],
                "recommendations": [
                    {"priority": "low", "action": f"polish {dim}", "impact": "minor"}],
            }).decode()
        return LLMResponse(content=scripted, model=self._model)

    async def complete_with_retry(self, prompt, max_retries=0, **kwargs):
        return await self.complete(prompt, **kwargs)

    @property
    def model_id(self):
        return self._model

    @property
    def provider(self):
        return "scripted"


def analysis_json(score, findings=None, recommendations=None) -> str:
    return "Here is my analysis:\n" + orjson.dumps({
        "score": score,
        "findings": findings or [f"score is {score}"],
        "recommendations": recommendations or [],
    }).decode() + "\nLet me know if you need more."


@pytest.fixture
def memory_storage():
    return MemoryStorage()


@pytest.fixture
def memory_redis():
    return MemoryRedis()


@pytest.fixture
def mock_redis():
    redis = AsyncMock()
    redis.get = AsyncMock(return_value=None)
    redis.set = AsyncMock(return_value=True)
    redis.publish = AsyncMock(return_value=1)
    redis.ping = AsyncMock(return_value=True)
    return redis


@pytest.fixture
def scripted_llm():
    return ScriptedLLMClient


@pytest.fixture
def make_analysis():
    return analysis_json


@pytest.fixture
def tutorial_content_data() -> dict:
    return {
        "url": "https://docs.example.com/guide/?x=1",
        "title": "Getting started guide",
        "contentType": "tutorial",
        "markdownContent": "# Getting started\n\nInstall the CLI, then run `init`.\n" * 10,
        "codeSnippets": [
            {"code": "npm install -g example-cli@6.5", "language": "bash", "hasVersionInfo": True},
            {"code": "example init --yes", "language": "bash"},
        ],
        "mediaElements": [{"type": "image", "src": "/img/setup.png"}],
        "linkAnalysis": {
            "totalLinks": 12, "internalLinks": 9,
            "subPagesIdentified": ["Configuration", "Deploying"],
        },
    }


@pytest.fixture
def tutorial_content(tutorial_content_data) -> ProcessedContent:
    return ProcessedContent.model_validate(tutorial_content_data)


@pytest.fixture
def context_content_data(tutorial_content_data) -> dict:
    data = dict(tutorial_content_data)
    data["contextAnalysis"] = {
        "analysisScope": "with-context",
        "totalPagesAnalyzed": 3,
        "contextPages": [
            {"url": "https://docs.example.com/", "title": "Docs home",
             "relationship": "parent", "confidence": 0.92},
            {"url": "https://docs.example.com/config", "title": "Configuration",
             "relationship": "child", "confidence": 0.8},
        ],
    }
    return data
