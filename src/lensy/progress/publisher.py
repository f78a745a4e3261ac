"""
会话进度推送 (Redis Pub/Sub)。

频道: lensy:progress:{session_id}
尽力而为: 推送失败只记日志, 不影响分析流程。
"""
from __future__ import annotations
import time
from typing import Any

from redis.asyncio import Redis
import orjson
import structlog

from lensy.common.enums import ProgressPhase, ProgressType

logger = structlog.get_logger()

CHANNEL_PREFIX = "lensy:progress"


def progress_channel(session_id: str) -> str:
    return f"{CHANNEL_PREFIX}:{session_id}"


class ProgressPublisher:
    def __init__(self, session_id: str, redis: Redis | None = None) -> None:
        self._session_id = session_id
        self._redis = redis

    async def publish(
        self,
        type_: ProgressType,
        message: str,
        phase: ProgressPhase | None = None,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        payload: dict[str, Any] = {
            "type": type_.value,
            "message": message,
            "timestamp": int(time.time() * 1000),
        }
        if phase:
            payload["phase"] = phase.value
        if metadata:
            payload["metadata"] = metadata

        if self._redis is None:
            logger.debug("progress_skipped", session_id=self._session_id, message=message)
            return
        try:
            await self._redis.publish(progress_channel(self._session_id), orjson.dumps(payload))
        except Exception as e:
            logger.warning("progress_publish_failed",
                           session_id=self._session_id, error=str(e))

    async def success(self, message: str, metadata: dict | None = None,
                      phase: ProgressPhase | None = None) -> None:
        await self.publish(ProgressType.SUCCESS, message, phase=phase, metadata=metadata)

    async def error(self, message: str, metadata: dict | None = None) -> None:
        await self.publish(ProgressType.ERROR, message, metadata=metadata)

    async def progress(self, message: str, phase: ProgressPhase,
                       metadata: dict | None = None) -> None:
        await self.publish(ProgressType.PROGRESS, message, phase=phase, metadata=metadata)

    async def cache_hit(self, message: str, metadata: dict | None = None) -> None:
        await self.publish(ProgressType.CACHE_HIT, message,
                           metadata={"cacheStatus": "hit", **(metadata or {})})

    async def cache_miss(self, message: str, metadata: dict | None = None) -> None:
        await self.publish(ProgressType.CACHE_MISS, message,
                           metadata={"cacheStatus": "miss", **(metadata or {})})
