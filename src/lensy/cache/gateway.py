"""
维度结果缓存网关。

查询链:
1. 未配置索引 → 直接未命中
2. 索引查询 (normalized_url, contextual_setting) → 未找到则未命中
3. 由 s3Location 推导同目录 dimension-results.json
4. 读取 + 校验归档
任一步骤异常都视为未命中, 只记日志, 绝不向上抛。只读, 从不写入。
"""
from __future__ import annotations
from dataclasses import dataclass

import orjson
import structlog

from lensy.cache.index import ContentIndex
from lensy.common.enums import ContextualSetting, DIMENSIONS
from lensy.common.schemas import DimensionResult, ProcessedContent, WeightedAnalysisResult
from lensy.identity.layout import archive_path_from_pointer
from lensy.storage.factory import StorageProvider

logger = structlog.get_logger()


@dataclass
class CachedAnalysis:
    """缓存命中结果。raw 为归档原始字节, 透传写入会话位置时原样使用。"""
    results: WeightedAnalysisResult
    raw: bytes
    path: str


class DimensionCache:
    def __init__(self, storage: StorageProvider, index: ContentIndex | None) -> None:
        self._storage = storage
        self._index = index

    async def lookup(
        self,
        content: ProcessedContent,
        contextual_setting: ContextualSetting,
    ) -> CachedAnalysis | None:
        if self._index is None:
            logger.info("dimension_cache_disabled")
            return None

        try:
            entry = await self._index.get(content.url, contextual_setting)
            if entry is None:
                logger.info("dimension_cache_miss",
                            url=content.url, setting=contextual_setting.value,
                            reason="no_index_entry")
                return None

            path = archive_path_from_pointer(entry.s3_location, entry.layout_version)
            raw = await self._storage.read_file(path)
            results = self._parse_archive(raw)
        except Exception as e:
            logger.warning("dimension_cache_error",
                           url=content.url, setting=contextual_setting.value,
                           error=str(e), error_type=type(e).__name__)
            return None

        logger.info("dimension_cache_hit", url=content.url,
                    setting=contextual_setting.value, path=path)
        return CachedAnalysis(results=results, raw=raw, path=path)

    @staticmethod
    def _parse_archive(raw: bytes) -> WeightedAnalysisResult:
        data = orjson.loads(raw)
        if not isinstance(data, dict):
            raise ValueError("archived dimension results are not an object")
        results: WeightedAnalysisResult = {}
        for dim in DIMENSIONS:
            if dim.value not in data:
                raise ValueError(f"archived dimension results missing {dim.value}")
            results[dim.value] = DimensionResult.model_validate(data[dim.value])
        return results
