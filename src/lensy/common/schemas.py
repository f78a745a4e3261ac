"""核心 DTO。线上格式为 camelCase (与上游内容处理阶段共用)。"""
from __future__ import annotations
from typing import Any, ClassVar
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from lensy.common.enums import ContextualSetting, DimensionStatus, RecommendationPriority


class WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel, populate_by_name=True, extra="ignore")

    # 值为 None 时不落盘的可选字段 (score 等必填字段即使为 None 也保留)
    _omit_when_none: ClassVar[frozenset[str]] = frozenset()

    def to_wire(self) -> dict[str, Any]:
        data = self.model_dump(by_alias=True, mode="json")
        for key in self._omit_when_none:
            if data.get(key) is None:
                data.pop(key, None)
        return data


# ─── 上游 processed-content.json ───

class CodeSnippet(WireModel):
    code: str = ""; language: str = ""; has_version_info: bool = False

class MediaElement(WireModel):
    type: str = ""; src: str = ""; alt: str = ""

class LinkAnalysis(WireModel):
    total_links: int = 0; internal_links: int = 0; external_links: int = 0
    sub_pages_identified: list[str] = Field(default_factory=list)

class ContextPage(WireModel):
    url: str = ""; title: str = ""; relationship: str = ""; confidence: float = 0.0

class ContextAnalysis(WireModel):
    analysis_scope: str = "single-page"; total_pages_analyzed: int = 1
    context_pages: list[ContextPage] = Field(default_factory=list)

class ProcessedContent(WireModel):
    url: str
    title: str = ""
    content_type: str | None = None
    markdown_content: str = ""
    code_snippets: list[CodeSnippet] = Field(default_factory=list)
    media_elements: list[MediaElement] = Field(default_factory=list)
    link_analysis: LinkAnalysis = Field(default_factory=LinkAnalysis)
    context_analysis: ContextAnalysis | None = None

    @property
    def has_context_pages(self) -> bool:
        return bool(self.context_analysis and self.context_analysis.context_pages)


# ─── 维度结果 ───

class Recommendation(WireModel):
    priority: str = RecommendationPriority.MEDIUM.value
    action: str = ""
    impact: str = ""
    location: str | None = None
    code_example: str | None = None
    media_reference: str | None = None

    _omit_when_none: ClassVar[frozenset[str]] = frozenset({
        "location", "codeExample", "mediaReference"})

    @field_validator("priority", mode="before")
    @classmethod
    def _normalize_priority(cls, v: Any) -> str:
        return str(v or RecommendationPriority.MEDIUM).strip().lower()

    # 模型输出字段类型不可信: null → "", 标量 → str
    @field_validator("action", "impact", mode="before")
    @classmethod
    def _coerce_text(cls, v: Any) -> str:
        return "" if v is None else v if isinstance(v, str) else str(v)

    @field_validator("location", "code_example", "media_reference", mode="before")
    @classmethod
    def _coerce_optional_text(cls, v: Any) -> str | None:
        return v if v is None or isinstance(v, str) else str(v)


class DimensionResult(WireModel):
    """单维度结果。加权后追加 originalScore / contentTypeWeight / contentType。"""
    dimension: str
    score: int | float | None = None
    status: DimensionStatus = DimensionStatus.COMPLETE
    findings: list[str] = Field(default_factory=list)
    recommendations: list[Recommendation] = Field(default_factory=list)
    failure_reason: str | None = None
    retry_count: int = 0
    processing_time: int = 0  # ms
    original_score: int | float | None = None
    content_type_weight: float | None = None
    content_type: str | None = None

    _omit_when_none: ClassVar[frozenset[str]] = frozenset({
        "failureReason", "originalScore", "contentTypeWeight", "contentType"})

    @field_validator("findings", mode="before")
    @classmethod
    def _stringify_findings(cls, v: Any) -> list[str]:
        if v is None:
            return []
        return [f if isinstance(f, str) else str(f) for f in v]

    @field_validator("recommendations", mode="before")
    @classmethod
    def _drop_malformed_recommendations(cls, v: Any) -> list:
        if v is None:
            return []
        return [r for r in v if isinstance(r, (dict, Recommendation))]

    def to_wire(self) -> dict[str, Any]:
        data = super().to_wire()
        data["recommendations"] = [r.to_wire() for r in self.recommendations]
        return data

    @classmethod
    def failed(cls, dimension: str, reason: str, processing_time: int = 0,
               retry_count: int = 0) -> "DimensionResult":
        return cls(
            dimension=dimension, score=None, status=DimensionStatus.FAILED,
            failure_reason=reason, retry_count=retry_count,
            processing_time=processing_time,
        )


WeightedAnalysisResult = dict[str, DimensionResult]


def results_to_wire(results: WeightedAnalysisResult) -> dict[str, dict]:
    return {name: r.to_wire() for name, r in results.items()}


# ─── 缓存索引 ───

class CacheIndexEntry(WireModel):
    url: str
    contextual_setting: ContextualSetting
    s3_location: str = Field(alias="s3Location")
    processed_at: str | None = None
    layout_version: str = "v1"

    _omit_when_none: ClassVar[frozenset[str]] = frozenset({"processedAt"})


# ─── 调用契约 ───

class CacheControl(WireModel):
    enabled: bool = True

class AnalyzerEvent(WireModel):
    session_id: str
    url: str = ""
    selected_model: str = "claude"
    analysis_start_time: int | None = None
    cache_control: CacheControl = Field(default_factory=CacheControl)

class AnalyzerResponse(WireModel):
    success: bool
    session_id: str
    message: str
    completed_dimensions: int | None = None
    failed_dimensions: int | None = None
    error_code: str | None = None

    _omit_when_none: ClassVar[frozenset[str]] = frozenset({
        "completedDimensions", "failedDimensions", "errorCode"})
