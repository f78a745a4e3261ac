"""
结果发布。

1. 会话副本 sessions/{session_id}/dimension-results.json: 调用方据此取结果, 写失败即整体失败
2. 归档副本 sessions/{canonical_session_id}/dimension-results.json: 供后续缓存命中,
   canonical id 由内容自身 URL + contextual setting 重新推导, 写失败只记日志
"""
from __future__ import annotations

import orjson
import structlog

from lensy.common.enums import ContextualSetting
from lensy.common.exceptions import ResultWriteError
from lensy.common.schemas import ProcessedContent, WeightedAnalysisResult, results_to_wire
from lensy.identity.keys import derive_session_id
from lensy.identity.layout import dimension_results_path
from lensy.storage.factory import StorageProvider

logger = structlog.get_logger()


class ResultPublisher:
    def __init__(self, storage: StorageProvider) -> None:
        self._storage = storage

    @staticmethod
    def serialize(results: WeightedAnalysisResult) -> bytes:
        return orjson.dumps(results_to_wire(results))

    async def publish(
        self,
        session_id: str,
        content: ProcessedContent,
        contextual_setting: ContextualSetting,
        results: WeightedAnalysisResult,
        archive: bool = True,
    ) -> str:
        """写会话副本 (+ 归档)。返回会话副本路径。"""
        payload = self.serialize(results)
        session_path = await self._write_session_copy(session_id, payload)

        if archive:
            canonical_id = derive_session_id(content.url, contextual_setting)
            if canonical_id == session_id:
                logger.debug("archive_same_as_session", path=session_path)
            else:
                await self._write_archive(canonical_id, payload)
        return session_path

    async def publish_cached(self, session_id: str, raw: bytes) -> str:
        """缓存命中: 归档原始字节透传到会话位置。"""
        return await self._write_session_copy(session_id, raw)

    async def _write_session_copy(self, session_id: str, payload: bytes) -> str:
        path = dimension_results_path(session_id)
        try:
            await self._storage.save_file(path, payload)
        except Exception as e:
            logger.error("session_results_write_failed", path=path, error=str(e))
            raise ResultWriteError(f"Failed to store dimension results at {path}: {e}") from e
        logger.info("session_results_written", path=path, size=len(payload))
        return path

    async def _write_archive(self, canonical_id: str, payload: bytes) -> None:
        path = dimension_results_path(canonical_id)
        try:
            await self._storage.save_file(path, payload)
        except Exception as e:
            logger.warning("archive_write_failed", path=path, error=str(e))
            return
        logger.info("archive_written", path=path)
