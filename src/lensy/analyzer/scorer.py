"""
多维评分器。

5 个维度并发调用 LLM, 各自隔离:
单维度异常 (网络 / 超时 / 响应无 JSON / 缺 score) → 该维度 status=failed,
其余维度照常完成; 全部结束 (成功或失败) 后才返回。
"""
from __future__ import annotations
import asyncio
import time

import structlog

from lensy.common.enums import Dimension, DIMENSIONS, DimensionStatus, ProgressPhase
from lensy.common.schemas import DimensionResult, ProcessedContent, WeightedAnalysisResult
from lensy.llm_adapter.client.base import BaseLLMClient
from lensy.llm_adapter.parser.response_parser import ResponseParser
from lensy.llm_adapter.prompt.engine import PromptEngine
from lensy.progress.publisher import ProgressPublisher

logger = structlog.get_logger()

DEFAULT_TEMPERATURE = 0.1


class DimensionScorer:
    def __init__(
        self,
        prompt_engine: PromptEngine,
        parser: ResponseParser,
        timeout_seconds: float | None = 60.0,
        max_retries: int = 0,
        max_tokens: int = 2000,
    ) -> None:
        self._prompt = prompt_engine
        self._parser = parser
        self._timeout = timeout_seconds
        self._max_retries = max_retries
        self._max_tokens = max_tokens

    async def analyze_all(
        self,
        content: ProcessedContent,
        client: BaseLLMClient,
        progress: ProgressPublisher | None = None,
    ) -> WeightedAnalysisResult:
        """并发分析全部维度 → {dimension: DimensionResult}。"""
        outcomes = await asyncio.gather(*[
            self._analyze_isolated(dim, index, content, client, progress)
            for index, dim in enumerate(DIMENSIONS)
        ])
        results: WeightedAnalysisResult = {r.dimension: r for r in outcomes}

        failed = [name for name, r in results.items() if r.status != DimensionStatus.COMPLETE]
        logger.info("dimensions_analyzed",
                    url=content.url, model=client.model_id,
                    completed=len(results) - len(failed), failed=failed)
        return results

    async def _analyze_isolated(
        self,
        dimension: Dimension,
        index: int,
        content: ProcessedContent,
        client: BaseLLMClient,
        progress: ProgressPublisher | None,
    ) -> DimensionResult:
        label = dimension.value.capitalize()
        start = time.monotonic()
        logger.info("dimension_start", dimension=dimension.value)
        if progress:
            await progress.progress(
                f"Analyzing {label} ({index + 1}/{len(DIMENSIONS)})...",
                ProgressPhase.DIMENSION_ANALYSIS, {"dimension": dimension.value})

        try:
            result = await self._with_timeout(self.analyze_dimension(dimension, content, client))
        except Exception as e:
            elapsed = int((time.monotonic() - start) * 1000)
            reason = self._failure_reason(e)
            logger.warning("dimension_failed",
                           dimension=dimension.value, error=reason,
                           error_type=type(e).__name__, elapsed_ms=elapsed)
            if progress:
                await progress.error(f"{label} failed: {reason}",
                                     {"dimension": dimension.value})
            return DimensionResult.failed(dimension.value, reason, processing_time=elapsed)

        result.processing_time = int((time.monotonic() - start) * 1000)
        logger.info("dimension_complete",
                    dimension=dimension.value, score=result.score,
                    elapsed_ms=result.processing_time)
        if progress:
            await progress.success(
                f"{label}: {result.score}/100 ({result.processing_time / 1000:.1f}s)",
                {"dimension": dimension.value, "score": result.score,
                 "processingTime": result.processing_time})
        return result

    async def _with_timeout(self, coro):
        if not self._timeout:
            return await coro
        try:
            return await asyncio.wait_for(coro, timeout=self._timeout)
        except asyncio.TimeoutError:
            raise asyncio.TimeoutError(f"Timed out after {self._timeout:g}s") from None

    @staticmethod
    def _failure_reason(error: Exception) -> str:
        return str(error) or type(error).__name__ or "Unknown error"

    async def analyze_dimension(
        self,
        dimension: Dimension,
        content: ProcessedContent,
        client: BaseLLMClient,
    ) -> DimensionResult:
        """单维度: prompt → LLM → 解析。异常原样抛出, 由调用方隔离。"""
        prompt = self._prompt.build_dimension_prompt(dimension, content)
        resp = await client.complete_with_retry(
            prompt,
            max_retries=self._max_retries,
            temperature=DEFAULT_TEMPERATURE,
            max_tokens=self._max_tokens,
        )
        analysis = self._parser.parse_dimension_analysis(resp.content)
        return DimensionResult(
            dimension=dimension.value,
            score=analysis["score"],
            status=DimensionStatus.COMPLETE,
            findings=analysis["findings"],
            recommendations=analysis["recommendations"],
            retry_count=resp.retry_count,
        )
