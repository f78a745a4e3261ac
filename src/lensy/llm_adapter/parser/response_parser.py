"""
响应解析器 (4 级 fallback)。

Level 1: 直接 JSON parse
Level 2: 提取 markdown code block 内的 JSON
Level 3: 正则提取 JSON 结构 (首个 "{" 到最后一个 "}")
Level 4: 返回 raw text (调用方自行处理)
"""
from __future__ import annotations
import re
from dataclasses import dataclass
from typing import Any
import orjson
import structlog

from lensy.common.exceptions import ResponseParseError

logger = structlog.get_logger()

_CODE_BLOCK_PATTERNS = [
    re.compile(r'```json\s*\n?(.*?)\n?\s*```', re.DOTALL),
    re.compile(r'```\s*\n?(.*?)\n?\s*```', re.DOTALL),
]
_OBJECT_PATTERN = re.compile(r'\{[\s\S]*\}')


@dataclass
class ParseResult:
    success: bool = False
    data: Any = None
    raw_text: str = ""
    parse_level: int = 0
    error: str | None = None


class ResponseParser:
    def parse(self, text: str) -> ParseResult:
        """解析 LLM 响应文本 → JSON 对象 (dict)。非对象的 JSON 视为解析失败。"""
        if not text or not text.strip():
            return ParseResult(raw_text=text, error="empty_response")

        # Level 1: 直接 JSON parse
        result = self._try_direct_json(text)
        if result.success:
            result.parse_level = 1
            return result

        # Level 2: Markdown code block
        result = self._try_code_block(text)
        if result.success:
            result.parse_level = 2
            return result

        # Level 3: 正则提取
        result = self._try_regex_extract(text)
        if result.success:
            result.parse_level = 3
            return result

        # Level 4: Raw text fallback
        logger.warning("parse_fallback_raw", text_preview=text[:200])
        return ParseResult(
            success=False, data=None, raw_text=text,
            parse_level=4, error="all_parse_methods_failed",
        )

    def _load(self, fragment: str, text: str) -> ParseResult:
        try:
            data = orjson.loads(fragment)
        except orjson.JSONDecodeError:
            return ParseResult(raw_text=text)
        if not isinstance(data, dict):
            return ParseResult(raw_text=text)
        return ParseResult(success=True, data=data, raw_text=text)

    def _try_direct_json(self, text: str) -> ParseResult:
        return self._load(text.strip(), text)

    def _try_code_block(self, text: str) -> ParseResult:
        """提取 ```json ... ``` 或 ``` ... ``` 内容。"""
        for pattern in _CODE_BLOCK_PATTERNS:
            match = pattern.search(text)
            if match:
                result = self._load(match.group(1).strip(), text)
                if result.success:
                    return result
        return ParseResult(raw_text=text)

    def _try_regex_extract(self, text: str) -> ParseResult:
        """正则提取首个 "{" 到最后一个 "}"。"""
        match = _OBJECT_PATTERN.search(text)
        if match:
            result = self._load(match.group(0), text)
            if result.success:
                return result
        return ParseResult(raw_text=text)

    def parse_dimension_analysis(self, text: str) -> dict:
        """
        专用: 解析单维度评分响应 → {score, findings, recommendations}。

        score 必须是数值; 缺失或非法时抛 ResponseParseError。
        """
        result = self.parse(text)
        if not result.success:
            if result.error == "empty_response":
                raise ResponseParseError("Empty AI response")
            raise ResponseParseError("No JSON found in AI response")

        data = result.data
        score = data.get("score")
        if isinstance(score, bool) or not isinstance(score, (int, float)):
            raise ResponseParseError("AI response is missing a numeric score")

        findings = data.get("findings") or []
        recommendations = data.get("recommendations") or []
        if not isinstance(findings, list):
            findings = [findings]
        if not isinstance(recommendations, list):
            recommendations = []

        return {
            "score": score,
            "findings": findings,
            "recommendations": recommendations,
        }
