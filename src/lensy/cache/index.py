"""
已处理内容索引 (Redis KV)。

键: lensy:processed-content:{normalized_url}#{contextual_setting}
值: orjson 编码的 CacheIndexEntry, s3Location 指向上游的 processed-content.json
"""
from __future__ import annotations
from datetime import datetime, timezone

from redis.asyncio import Redis
import orjson
import structlog

from lensy.common.enums import ContextualSetting
from lensy.common.schemas import CacheIndexEntry
from lensy.identity.keys import normalize_url
from lensy.identity.layout import LAYOUT_VERSION

logger = structlog.get_logger()

KEY_PREFIX = "lensy:processed-content"


def index_key(table: str, url: str, contextual_setting: ContextualSetting | str) -> str:
    setting = ContextualSetting(contextual_setting)
    return f"{KEY_PREFIX}:{table}:{normalize_url(url)}#{setting.value}"


class ContentIndex:
    """表名 (PROCESSED_CONTENT_TABLE) 作为 key 命名空间。"""

    def __init__(self, redis: Redis, table: str, ttl_seconds: int = 0) -> None:
        self._redis = redis
        self._table = table
        self._ttl = ttl_seconds

    async def get(
        self, url: str, contextual_setting: ContextualSetting | str,
    ) -> CacheIndexEntry | None:
        """查询索引条目。Redis 异常直接抛出, 由调用方决定降级。"""
        data = await self._redis.get(index_key(self._table, url, contextual_setting))
        if not data:
            return None
        return CacheIndexEntry.model_validate(orjson.loads(data))

    async def put(
        self,
        url: str,
        contextual_setting: ContextualSetting | str,
        s3_location: str,
    ) -> CacheIndexEntry:
        """写入索引条目 (上游内容处理阶段首次处理 URL 时调用)。"""
        entry = CacheIndexEntry(
            url=normalize_url(url),
            contextual_setting=ContextualSetting(contextual_setting),
            s3_location=s3_location,
            processed_at=datetime.now(timezone.utc).isoformat(),
            layout_version=LAYOUT_VERSION,
        )
        await self._redis.set(
            index_key(self._table, url, contextual_setting),
            orjson.dumps(entry.to_wire()),
            ex=self._ttl or None,
        )
        logger.debug("content_index_put",
                     url=entry.url, setting=entry.contextual_setting.value,
                     location=s3_location)
        return entry
