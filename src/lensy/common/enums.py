"""全系统枚举, 单一真理源。"""
from enum import StrEnum

class Dimension(StrEnum):
    RELEVANCE = "relevance"; FRESHNESS = "freshness"; CLARITY = "clarity"
    ACCURACY = "accuracy"; COMPLETENESS = "completeness"

DIMENSIONS: list[Dimension] = list(Dimension)

class DimensionStatus(StrEnum):
    COMPLETE = "complete"; FAILED = "failed"; TIMEOUT = "timeout"; RETRYING = "retrying"

class ContextualSetting(StrEnum):
    WITH_CONTEXT = "with-context"; WITHOUT_CONTEXT = "without-context"

class ModelSelection(StrEnum):
    CLAUDE = "claude"; TITAN = "titan"; LLAMA = "llama"; AUTO = "auto"

    @classmethod
    def resolve(cls, token: str | None) -> "ModelSelection":
        """未识别的 token 统一回落到 claude。"""
        try:
            return cls((token or "").strip().lower())
        except ValueError:
            return cls.CLAUDE

class RecommendationPriority(StrEnum):
    HIGH = "high"; MEDIUM = "medium"; LOW = "low"

class ProgressType(StrEnum):
    INFO = "info"; SUCCESS = "success"; ERROR = "error"; PROGRESS = "progress"
    CACHE_HIT = "cache-hit"; CACHE_MISS = "cache-miss"

class ProgressPhase(StrEnum):
    URL_PROCESSING = "url-processing"; STRUCTURE_DETECTION = "structure-detection"
    DIMENSION_ANALYSIS = "dimension-analysis"; REPORT_GENERATION = "report-generation"
