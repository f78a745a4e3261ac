"""LLM 客户端基类。"""
from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass, field


@dataclass
class LLMResponse:
    """LLM 调用响应。"""
    content: str = ""
    model: str = ""
    usage: dict = field(default_factory=dict)  # {input_tokens, output_tokens}
    finish_reason: str = ""
    latency_ms: float = 0.0
    retry_count: int = 0
    raw_response: dict | None = None


class BaseLLMClient(ABC):
    """LLM 客户端基类。"""

    @abstractmethod
    async def complete(
        self,
        prompt: str,
        temperature: float = 0.1,
        max_tokens: int = 2000,
    ) -> LLMResponse:
        """发送 completion 请求。"""
        ...

    @abstractmethod
    async def complete_with_retry(
        self,
        prompt: str,
        max_retries: int = 0,
        **kwargs,
    ) -> LLMResponse:
        """带重试的 completion。"""
        ...

    @property
    @abstractmethod
    def model_id(self) -> str:
        ...

    @property
    @abstractmethod
    def provider(self) -> str:
        ...
