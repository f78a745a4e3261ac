"""Redis 连接管理 (缓存索引 + 进度推送)。进程内单例, URL 由调用方显式传入。"""
import redis.asyncio as aioredis
import structlog

logger = structlog.get_logger()

redis_client: aioredis.Redis | None = None


async def get_redis(url: str) -> aioredis.Redis:
    global redis_client
    if redis_client is None:
        redis_client = aioredis.from_url(url, decode_responses=False)
    return redis_client


async def connect_redis(url: str) -> aioredis.Redis | None:
    """连接并 ping。不可用时返回 None, 缓存与进度推送随之关闭。"""
    try:
        client = await get_redis(url)
        await client.ping()
    except Exception as e:
        logger.warning("redis_unavailable", error=str(e))
        await close_redis()
        return None
    logger.info("redis_connected")
    return client


async def close_redis() -> None:
    global redis_client
    if redis_client is not None:
        client, redis_client = redis_client, None
        await client.aclose()
