"""
DimensionAnalyzerService: 维度分析主入口。

调用链:
1. 配置校验 (存储 bucket 缺失 → 失败响应)
2. 读取 sessions/{session_id}/processed-content.json
3. 缓存查询 (cacheControl.enabled 时) → 命中则透传写入会话位置并返回
4. 5 维度并发评分 (DimensionScorer)
5. 内容类型加权标注 (weights)
6. 发布: 会话副本 (致命) + 归档副本 (尽力)

只有配置缺失、输入读取失败、会话副本写失败会返回 success=False;
其余异常都已在各组件边界被吸收。
"""
from __future__ import annotations
import time

import orjson
import structlog
from pydantic import ValidationError

from lensy.analyzer.publisher import ResultPublisher
from lensy.analyzer.scorer import DimensionScorer
from lensy.analyzer.weights import apply_content_type_weights
from lensy.cache.gateway import DimensionCache
from lensy.cache.index import ContentIndex
from lensy.common.enums import DIMENSIONS, DimensionStatus, ProgressPhase
from lensy.common.exceptions import ConfigurationError, ContentNotFoundError, LensyError
from lensy.common.schemas import AnalyzerEvent, AnalyzerResponse, ProcessedContent
from lensy.identity.keys import contextual_setting_for
from lensy.identity.layout import processed_content_path
from lensy.llm_adapter.client.registry import LLMClientRegistry
from lensy.progress.publisher import ProgressPublisher
from lensy.storage.factory import StorageProvider

logger = structlog.get_logger()


class DimensionAnalyzerService:
    """维度分析编排器。依赖全部显式注入, 每进程构建一次。"""

    def __init__(
        self,
        storage: StorageProvider | None,
        registry: LLMClientRegistry,
        scorer: DimensionScorer,
        index: ContentIndex | None = None,
        progress_redis=None,
    ) -> None:
        self._storage = storage
        self._registry = registry
        self._scorer = scorer
        self._progress_redis = progress_redis
        self._cache = DimensionCache(storage, index) if storage is not None else None
        self._publisher = ResultPublisher(storage) if storage is not None else None

    async def aclose(self) -> None:
        await self._registry.aclose()

    async def analyze(self, event: AnalyzerEvent | dict) -> AnalyzerResponse:
        if isinstance(event, dict):
            try:
                event = AnalyzerEvent.model_validate(event)
            except ValidationError as e:
                logger.error("dimension_analysis_bad_event", error=str(e))
                return AnalyzerResponse(
                    success=False, session_id=str(event.get("sessionId", "")),
                    message=f"Invalid event: {e.error_count()} validation error(s)",
                    error_code="INVALID_EVENT")

        model = event.selected_model
        log = logger.bind(session_id=event.session_id, model=model)
        start = time.monotonic()
        log.info("dimension_analysis_start", url=event.url)

        try:
            response = await self._analyze(event, log)
        except LensyError as e:
            log.error("dimension_analysis_failed", error_code=e.code, error=e.message)
            return AnalyzerResponse(
                success=False, session_id=event.session_id,
                message=e.message, error_code=e.code)
        except Exception as e:
            log.exception("dimension_analysis_error")
            return AnalyzerResponse(
                success=False, session_id=event.session_id,
                message=str(e) or "Unknown error")

        log.info("dimension_analysis_complete",
                 elapsed_ms=int((time.monotonic() - start) * 1000),
                 message=response.message)
        return response

    async def _analyze(self, event: AnalyzerEvent, log) -> AnalyzerResponse:
        if self._storage is None or self._cache is None or self._publisher is None:
            raise ConfigurationError("ANALYSIS_BUCKET environment variable not set")

        model = event.selected_model
        progress = ProgressPublisher(event.session_id, self._progress_redis)
        content = await self._load_content(event.session_id)
        setting = contextual_setting_for(content)
        cache_enabled = event.cache_control.enabled

        # 缓存查询 (严格先于维度分析)
        if cache_enabled:
            cached = await self._cache.lookup(content, setting)
            if cached is not None:
                await progress.cache_hit(
                    f"Retrieved: {len(DIMENSIONS)}/{len(DIMENSIONS)} dimensions from cache")
                await self._publisher.publish_cached(event.session_id, cached.raw)
                return self._response(
                    event.session_id, cached.results,
                    f"Dimension analysis completed using cached results ({model})")
            await progress.cache_miss("Dimension cache miss - running fresh analysis")
        else:
            log.info("dimension_cache_skipped", reason="disabled_by_request")

        client = self._registry.get_client(model)
        if client is None:
            raise ConfigurationError(f"No LLM client registered for model {model!r}")

        await progress.success("Structure detected: Topics identified",
                               phase=ProgressPhase.STRUCTURE_DETECTION)
        results = await self._scorer.analyze_all(content, client, progress)

        content_type = content.content_type or "mixed"
        apply_content_type_weights(results, content_type)

        await self._publisher.publish(
            event.session_id, content, setting, results, archive=cache_enabled)
        return self._response(
            event.session_id, results, f"Dimension analysis completed using {model}")

    async def _load_content(self, session_id: str) -> ProcessedContent:
        path = processed_content_path(session_id)
        try:
            raw = await self._storage.read_file(path)
            return ProcessedContent.model_validate(orjson.loads(raw))
        except Exception as e:
            raise ContentNotFoundError(
                f"Unable to load processed content from {path}: {e}") from e

    @staticmethod
    def _response(session_id: str, results, message: str) -> AnalyzerResponse:
        completed = sum(1 for r in results.values() if r.status == DimensionStatus.COMPLETE)
        return AnalyzerResponse(
            success=True,
            session_id=session_id,
            message=message,
            completed_dimensions=completed,
            failed_dimensions=len(results) - completed,
        )
