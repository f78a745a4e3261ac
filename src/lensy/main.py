"""
Lensy 维度分析入口。

工作流调用: await handler({"sessionId": ..., "url": ..., "selectedModel": "claude"})
命令行:     python -m lensy.main <session_id> <url> [--model claude] [--no-cache]
需要: ANALYSIS_BUCKET + 存储 (MinIO / 本地); 可选 PROCESSED_CONTENT_TABLE + Redis
"""
from __future__ import annotations
import argparse
import asyncio
import sys

import orjson
import structlog

from lensy.settings import Settings, settings

logger = structlog.get_logger()

_service = None


def configure_logging(cfg: Settings = settings) -> None:
    processors = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]
    if cfg.app_env == "development":
        processors.append(structlog.dev.ConsoleRenderer())
    else:
        processors.append(structlog.processors.JSONRenderer())

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(
            {"DEBUG": 10, "INFO": 20, "WARNING": 30, "ERROR": 40}
            .get(cfg.log_level.upper(), 20)
        ),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=True,
    )


async def build_service(cfg: Settings = settings):
    """组合根: 存储 / Redis / LLM 客户端每进程只构建一次。"""
    from lensy.analyzer.scorer import DimensionScorer
    from lensy.analyzer.service import DimensionAnalyzerService
    from lensy.cache.index import ContentIndex
    from lensy.common.exceptions import ConfigurationError
    from lensy.common.redis import connect_redis
    from lensy.llm_adapter.client.registry import build_bedrock_registry
    from lensy.llm_adapter.parser.response_parser import ResponseParser
    from lensy.llm_adapter.prompt.engine import PromptEngine
    from lensy.storage.factory import get_storage_provider

    # ─── 1. Storage (缺失时每次请求返回配置错误) ───
    try:
        storage = get_storage_provider(cfg)
    except ConfigurationError as e:
        logger.error("storage_not_configured", error=e.message)
        storage = None

    # ─── 2. Redis (索引 + 进度) ───
    redis = None
    if cfg.cache_enabled or cfg.progress_enabled:
        redis = await connect_redis(cfg.redis_url)

    index = None
    if cfg.cache_enabled and redis is not None:
        index = ContentIndex(redis, cfg.processed_content_table, cfg.cache_ttl_seconds)
    elif not cfg.cache_enabled:
        logger.info("dimension_cache_not_configured")

    # ─── 3. LLM ───
    registry = build_bedrock_registry(cfg)
    scorer = DimensionScorer(
        PromptEngine(cfg.content_char_budget),
        ResponseParser(),
        timeout_seconds=cfg.llm_timeout_seconds,
        max_retries=cfg.llm_max_retries,
        max_tokens=cfg.llm_max_tokens,
    )

    return DimensionAnalyzerService(
        storage=storage,
        registry=registry,
        scorer=scorer,
        index=index,
        progress_redis=redis if cfg.progress_enabled else None,
    )


async def handler(event: dict) -> dict:
    """工作流阶段入口 → {success, sessionId, message, ...}。"""
    global _service
    if _service is None:
        configure_logging()
        _service = await build_service()
    response = await _service.analyze(event)
    return response.to_wire()


async def _run_once(event: dict) -> dict:
    """CLI 单次运行: 结束后释放 LLM 连接池与 Redis 连接。"""
    global _service
    from lensy.common.redis import close_redis
    try:
        return await handler(event)
    finally:
        if _service is not None:
            await _service.aclose()
            _service = None
        await close_redis()


def _parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(
        prog="lensy", description="Score a processed document along five quality dimensions.")
    parser.add_argument("session_id")
    parser.add_argument("url")
    parser.add_argument("--model", default=settings.default_model,
                        help="claude | titan | llama | auto")
    parser.add_argument("--no-cache", action="store_true",
                        help="skip cache lookup and archive write")
    return parser.parse_args(argv)


def main(argv: list[str] | None = None) -> int:
    args = _parse_args(argv)
    event = {
        "sessionId": args.session_id,
        "url": args.url,
        "selectedModel": args.model,
        "cacheControl": {"enabled": not args.no_cache},
    }
    result = asyncio.run(_run_once(event))
    sys.stdout.write(orjson.dumps(result, option=orjson.OPT_INDENT_2).decode() + "\n")
    return 0 if result.get("success") else 1


if __name__ == "__main__":
    sys.exit(main())
