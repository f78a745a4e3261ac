"""
内容类型感知加权。

每种内容类型 5 个维度权重, ΣWi = 1.0 (模块加载时校验)。
本模块只做标注 (originalScore / contentTypeWeight / contentType + 权重披露),
不做聚合; 综合分由下游按 score × contentTypeWeight 计算。
"""
from __future__ import annotations
import math

import structlog

from lensy.common.enums import Dimension, DIMENSIONS
from lensy.common.exceptions import WeightTableError
from lensy.common.schemas import WeightedAnalysisResult

logger = structlog.get_logger()

FALLBACK_CONTENT_TYPE = "mixed"

CONTENT_TYPE_WEIGHTS: dict[str, dict[str, float]] = {
    "api-reference": {
        "relevance": 0.15,     # API 文档天然相关
        "freshness": 0.25,     # API 变动频繁
        "clarity": 0.20,
        "accuracy": 0.30,      # 错误 API 信息直接破坏代码
        "completeness": 0.10,
    },
    "tutorial": {
        "relevance": 0.20,
        "freshness": 0.20,
        "clarity": 0.30,       # 必须易于跟随
        "accuracy": 0.20,
        "completeness": 0.10,
    },
    "conceptual": {
        "relevance": 0.25,
        "freshness": 0.10,     # 概念变化慢
        "clarity": 0.35,
        "accuracy": 0.20,
        "completeness": 0.10,
    },
    "how-to": {
        "relevance": 0.25,
        "freshness": 0.15,
        "clarity": 0.25,
        "accuracy": 0.25,
        "completeness": 0.10,
    },
    "overview": {
        "relevance": 0.30,
        "freshness": 0.15,
        "clarity": 0.30,
        "accuracy": 0.15,
        "completeness": 0.10,  # 刻意保持高层次
    },
    "reference": {
        "relevance": 0.15,
        "freshness": 0.20,
        "clarity": 0.20,
        "accuracy": 0.35,
        "completeness": 0.10,
    },
    "troubleshooting": {
        "relevance": 0.25,
        "freshness": 0.20,
        "clarity": 0.25,
        "accuracy": 0.25,
        "completeness": 0.05,
    },
    "changelog": {
        "relevance": 0.20,
        "freshness": 0.35,     # 必须及时
        "clarity": 0.20,
        "accuracy": 0.20,
        "completeness": 0.05,
    },
    "mixed": {
        "relevance": 0.20,
        "freshness": 0.20,
        "clarity": 0.25,
        "accuracy": 0.25,
        "completeness": 0.10,
    },
}

CONTENT_TYPE_GUIDANCE: dict[str, dict[str, str]] = {
    "api-reference": {
        "relevance": "API docs should focus on practical developer needs. Lower weight (15%) - inherently relevant.",
        "freshness": "Critical for API docs (25% weight) - APIs change frequently. Check for current versions.",
        "clarity": "Important (20% weight) - developers need clear parameter descriptions and return values.",
        "accuracy": "CRITICAL (30% weight) - wrong API info breaks developer code. Verify syntax and parameters.",
        "completeness": "Lower priority (10% weight) - can link to examples elsewhere. Focus on core API info.",
    },
    "tutorial": {
        "relevance": "Must solve real developer problems (20% weight). Check if examples are practical.",
        "freshness": "Important (20% weight) - outdated tutorials mislead learners. Verify current practices.",
        "clarity": "CRITICAL (30% weight) - tutorials must be easy to follow step-by-step.",
        "accuracy": "Important (20% weight) - wrong steps break the learning experience.",
        "completeness": "Lower priority (10% weight) - can focus on specific learning objectives.",
    },
    "conceptual": {
        "relevance": "High importance (25% weight) - must address real understanding needs.",
        "freshness": "Lower priority (10% weight) - concepts change slowly, focus on timeless principles.",
        "clarity": "CRITICAL (35% weight) - must explain complex ideas clearly to diverse audiences.",
        "accuracy": "Important (20% weight) - wrong concepts mislead understanding.",
        "completeness": "Lower priority (10% weight) - can focus on specific conceptual aspects.",
    },
    "how-to": {
        "relevance": "High importance (25% weight) - must solve specific, real problems.",
        "freshness": "Medium priority (15% weight) - methods evolve but not as rapidly as APIs.",
        "clarity": "High importance (25% weight) - procedural steps must be crystal clear.",
        "accuracy": "High importance (25% weight) - wrong steps break workflows and waste time.",
        "completeness": "Lower priority (10% weight) - can be task-focused rather than comprehensive.",
    },
    "overview": {
        "relevance": "CRITICAL (30% weight) - overviews must provide valuable high-level perspective.",
        "freshness": "Medium priority (15% weight) - overviews change moderately with ecosystem evolution.",
        "clarity": "CRITICAL (30% weight) - must be accessible to newcomers and provide clear mental models.",
        "accuracy": "Medium priority (15% weight) - high-level accuracy important but details can be elsewhere.",
        "completeness": "Lower priority (10% weight) - intentionally high-level, comprehensive details elsewhere.",
    },
    "reference": {
        "relevance": "Lower priority (15% weight) - reference material is inherently relevant to its domain.",
        "freshness": "Important (20% weight) - reference data must be current and accurate.",
        "clarity": "Important (20% weight) - must be scannable and well-organized for quick lookup.",
        "accuracy": "CRITICAL (35% weight) - reference material must be completely accurate.",
        "completeness": "Lower priority (10% weight) - can be comprehensive in scope elsewhere.",
    },
    "troubleshooting": {
        "relevance": "High importance (25% weight) - must address real, common problems developers face.",
        "freshness": "Important (20% weight) - solutions evolve as technology and best practices change.",
        "clarity": "High importance (25% weight) - problem descriptions and solutions must be clear.",
        "accuracy": "High importance (25% weight) - wrong solutions waste significant developer time.",
        "completeness": "Lower priority (5% weight) - can focus on specific issues rather than comprehensive coverage.",
    },
    "changelog": {
        "relevance": "Important (20% weight) - changes must be relevant to the target audience.",
        "freshness": "CRITICAL (35% weight) - changelogs must be current and up-to-date.",
        "clarity": "Important (20% weight) - changes must be clearly described and categorized.",
        "accuracy": "Important (20% weight) - must accurately describe what changed.",
        "completeness": "Lower priority (5% weight) - can be incremental, comprehensive history elsewhere.",
    },
    "mixed": {
        "relevance": "Balanced approach (20% weight) - evaluate relevance across all content types present.",
        "freshness": "Balanced approach (20% weight) - consider freshness needs of different content sections.",
        "clarity": "High importance (25% weight) - mixed content especially needs clear organization.",
        "accuracy": "High importance (25% weight) - accuracy important across all content types.",
        "completeness": "Lower priority (10% weight) - mixed content can have varied completeness needs.",
    },
}

DEFAULT_GUIDANCE = "Apply standard evaluation criteria for this dimension."


def _validate_weight_table(table: dict[str, dict[str, float]]) -> None:
    """INV: 每种内容类型覆盖全部 5 个维度且 ΣWi = 1.0。"""
    if FALLBACK_CONTENT_TYPE not in table:
        raise WeightTableError(f"Weight table has no '{FALLBACK_CONTENT_TYPE}' entry")
    for content_type, weights in table.items():
        if set(weights) != {d.value for d in DIMENSIONS}:
            raise WeightTableError(
                f"Weights for {content_type} do not cover all dimensions")
        total = sum(weights.values())
        if not math.isclose(total, 1.0, abs_tol=1e-9):
            raise WeightTableError(
                f"Weights for {content_type} sum to {total}, expected 1.0")


_validate_weight_table(CONTENT_TYPE_WEIGHTS)


def resolve_content_type(content_type: str | None) -> str:
    """未知 / 缺失的内容类型回落到 mixed。"""
    if content_type and content_type in CONTENT_TYPE_WEIGHTS:
        return content_type
    return FALLBACK_CONTENT_TYPE


def get_weights(content_type: str | None) -> dict[str, float]:
    return CONTENT_TYPE_WEIGHTS[resolve_content_type(content_type)]


def round_percent(weight: float) -> int:
    return int(math.floor(weight * 100 + 0.5))


def get_guidance(content_type: str | None, dimension: Dimension | str) -> str:
    return CONTENT_TYPE_GUIDANCE.get(
        resolve_content_type(content_type), {}).get(str(dimension), DEFAULT_GUIDANCE)


def apply_content_type_weights(
    results: WeightedAnalysisResult,
    content_type: str | None,
) -> WeightedAnalysisResult:
    """
    原地标注各维度权重, 返回同一映射。

    score 为 None 的维度 (failed) 原样跳过, 不影响其他维度。
    """
    label = content_type or FALLBACK_CONTENT_TYPE
    weights = get_weights(label)
    if resolve_content_type(label) != label:
        logger.warning("content_type_unknown_fallback",
                       content_type=label, fallback=FALLBACK_CONTENT_TYPE)

    for name, result in results.items():
        weight = weights.get(name)
        if result.score is None or weight is None:
            continue
        result.original_score = result.score
        result.content_type_weight = weight
        result.content_type = label
        result.findings.insert(
            0, f"Content type: {label} (weight: {round_percent(weight)}%)")

    logger.info("content_type_weights_applied",
                content_type=label, weights=weights)
    return results
