"""
模型族请求/响应格式。

三种模型族字段名各不相同:
- messages (Claude): Messages API, 响应 content[0].text
- titan: inputText + textGenerationConfig, 响应 results[0].outputText
- llama: 旧式 prompt completion, 响应 generation
"""
from __future__ import annotations
from dataclasses import dataclass
from typing import Any, Callable

from lensy.common.enums import ModelSelection
from lensy.common.exceptions import ModelInvocationError

ANTHROPIC_BEDROCK_VERSION = "bedrock-2023-05-31"
DEFAULT_TOP_P = 0.9


def _messages_body(prompt: str, temperature: float, max_tokens: int) -> dict:
    return {
        "anthropic_version": ANTHROPIC_BEDROCK_VERSION,
        "max_tokens": max_tokens,
        "temperature": temperature,
        "messages": [{"role": "user", "content": prompt}],
    }


def _messages_text(body: dict) -> str:
    return body["content"][0]["text"]


def _titan_body(prompt: str, temperature: float, max_tokens: int) -> dict:
    return {
        "inputText": prompt,
        "textGenerationConfig": {
            "maxTokenCount": max_tokens,
            "temperature": temperature,
            "topP": DEFAULT_TOP_P,
        },
    }


def _titan_text(body: dict) -> str:
    return body["results"][0]["outputText"]


def _llama_body(prompt: str, temperature: float, max_tokens: int) -> dict:
    return {
        "prompt": prompt,
        "max_gen_len": max_tokens,
        "temperature": temperature,
        "top_p": DEFAULT_TOP_P,
    }


def _llama_text(body: dict) -> str:
    return body["generation"]


@dataclass(frozen=True)
class ModelFormat:
    family: str
    model_id: str
    build_body: Callable[[str, float, int], dict]
    extract: Callable[[dict], str]

    def extract_text(self, body: dict[str, Any]) -> str:
        try:
            text = self.extract(body)
        except (KeyError, IndexError, TypeError) as e:
            raise ModelInvocationError(
                f"Unexpected {self.family} response shape: missing {e}") from e
        if not isinstance(text, str):
            raise ModelInvocationError(f"Unexpected {self.family} response text type")
        return text

    def usage(self, body: dict[str, Any]) -> dict:
        if self.family == "messages":
            u = body.get("usage", {})
            return {"input_tokens": u.get("input_tokens", 0),
                    "output_tokens": u.get("output_tokens", 0)}
        if self.family == "titan":
            results = body.get("results") or [{}]
            return {"input_tokens": body.get("inputTextTokenCount", 0),
                    "output_tokens": results[0].get("tokenCount", 0)}
        return {"input_tokens": body.get("prompt_token_count", 0),
                "output_tokens": body.get("generation_token_count", 0)}

    def finish_reason(self, body: dict[str, Any]) -> str:
        if self.family == "messages":
            return body.get("stop_reason") or ""
        if self.family == "titan":
            results = body.get("results") or [{}]
            return results[0].get("completionReason") or ""
        return body.get("stop_reason") or ""


CLAUDE_FORMAT = ModelFormat(
    "messages", "us.anthropic.claude-3-5-sonnet-20241022-v2:0", _messages_body, _messages_text)
TITAN_FORMAT = ModelFormat(
    "titan", "amazon.titan-text-premier-v1:0", _titan_body, _titan_text)
# 跨区域推理 profile
LLAMA_FORMAT = ModelFormat(
    "llama", "us.meta.llama3-1-70b-instruct-v1:0", _llama_body, _llama_text)

MODEL_FORMATS: dict[ModelSelection, ModelFormat] = {
    ModelSelection.CLAUDE: CLAUDE_FORMAT,
    ModelSelection.TITAN: TITAN_FORMAT,
    ModelSelection.LLAMA: LLAMA_FORMAT,
    ModelSelection.AUTO: CLAUDE_FORMAT,
}

