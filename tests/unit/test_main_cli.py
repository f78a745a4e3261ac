"""入口 / CLI 测试。"""
import orjson
import pytest
from unittest.mock import AsyncMock

import lensy.main as main_mod
from lensy.common.schemas import AnalyzerResponse
from lensy.settings import Settings


@pytest.fixture
def fake_service(monkeypatch):
    service = AsyncMock()
    service.analyze.return_value = AnalyzerResponse(
        success=True, session_id="session-1", message="Dimension analysis completed using titan",
        completed_dimensions=5, failed_dimensions=0)
    monkeypatch.setattr(main_mod, "_service", service)
    return service


def test_cli_builds_event(fake_service, capsys):
    code = main_mod.main(["session-1", "https://example.com/doc", "--model", "titan", "--no-cache"])

    assert code == 0
    event = fake_service.analyze.await_args.args[0]
    assert event == {
        "sessionId": "session-1", "url": "https://example.com/doc",
        "selectedModel": "titan", "cacheControl": {"enabled": False},
    }
    out = orjson.loads(capsys.readouterr().out)
    assert out["success"] is True
    assert out["completedDimensions"] == 5


def test_cli_failure_exit_code(fake_service, capsys):
    fake_service.analyze.return_value = AnalyzerResponse(
        success=False, session_id="session-1", message="boom", error_code="CONFIG_MISSING")
    assert main_mod.main(["session-1", "https://example.com/doc"]) == 1
    assert orjson.loads(capsys.readouterr().out)["errorCode"] == "CONFIG_MISSING"


@pytest.mark.asyncio
async def test_build_service_without_bucket_reports_config_error():
    cfg = Settings(analysis_bucket="", processed_content_table="", progress_enabled=False)
    service = await main_mod.build_service(cfg)

    resp = await service.analyze({"sessionId": "session-1", "url": "https://example.com/"})

    assert not resp.success
    assert resp.error_code == "CONFIG_MISSING"
    assert resp.message == "ANALYSIS_BUCKET environment variable not set"


def test_cli_releases_service_after_run(fake_service, capsys):
    main_mod.main(["session-1", "https://example.com/doc"])

    fake_service.aclose.assert_awaited_once()
    assert main_mod._service is None


@pytest.mark.asyncio
async def test_build_service_uses_redis_url_from_cfg(monkeypatch):
    import lensy.common.redis as redis_mod

    urls = []
    fake_redis = AsyncMock()

    def from_url(url, **kwargs):
        urls.append(url)
        return fake_redis

    monkeypatch.setattr(redis_mod, "redis_client", None)
    monkeypatch.setattr(redis_mod.aioredis, "from_url", from_url)
    cfg = Settings(analysis_bucket="", processed_content_table="",
                   progress_enabled=True, redis_url="redis://custom:6380/2")

    service = await main_mod.build_service(cfg)

    assert urls == ["redis://custom:6380/2"]
    fake_redis.ping.assert_awaited_once()
    assert service._progress_redis is fake_redis
    await service.aclose()
    await redis_mod.close_redis()
    fake_redis.aclose.assert_awaited_once()


@pytest.mark.asyncio
async def test_connect_redis_unavailable_returns_none(monkeypatch):
    import lensy.common.redis as redis_mod

    fake_redis = AsyncMock()
    fake_redis.ping.side_effect = ConnectionError("refused")
    monkeypatch.setattr(redis_mod, "redis_client", None)
    monkeypatch.setattr(redis_mod.aioredis, "from_url", lambda url, **kw: fake_redis)

    assert await redis_mod.connect_redis("redis://down:6379/0") is None
    assert redis_mod.redis_client is None
    fake_redis.aclose.assert_awaited_once()
