"""存储实现测试。"""
import pytest
from unittest.mock import MagicMock
from minio.error import S3Error

from lensy.common.exceptions import ConfigurationError
from lensy.settings import Settings
from lensy.storage.factory import get_storage_provider
from lensy.storage.local_provider import LocalStorageProvider
from lensy.storage.minio_provider import MinioStorageProvider


@pytest.mark.asyncio
async def test_local_round_trip(tmp_path):
    storage = LocalStorageProvider(str(tmp_path))
    await storage.save_file("sessions/s/dimension-results.json", b"{}")
    assert await storage.read_file("sessions/s/dimension-results.json") == b"{}"
    assert await storage.delete_file("sessions/s/dimension-results.json") is True
    assert await storage.delete_file("sessions/s/dimension-results.json") is False


@pytest.mark.asyncio
async def test_local_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        await LocalStorageProvider(str(tmp_path)).read_file("nope.json")


@pytest.mark.asyncio
async def test_local_bucket_subdirectory(tmp_path):
    storage = LocalStorageProvider(str(tmp_path), bucket="analysis")
    full = await storage.save_file("sessions/s/processed-content.json", b"{}")
    assert full == str(tmp_path / "analysis" / "sessions" / "s" / "processed-content.json")
    assert (tmp_path / "analysis" / "sessions" / "s" / "processed-content.json").read_bytes() == b"{}"


@pytest.mark.asyncio
@pytest.mark.parametrize("key", ["../outside.json", "sessions/../../outside.json", ""])
async def test_local_rejects_keys_outside_bucket(tmp_path, key):
    storage = LocalStorageProvider(str(tmp_path), bucket="analysis")
    with pytest.raises(ValueError):
        await storage.save_file(key, b"x")
    assert not (tmp_path / "outside.json").exists()


def _s3_error(code):
    return S3Error(code=code, message="missing", resource="key", request_id="req",
                   host_id="host", response=MagicMock())


@pytest.mark.asyncio
async def test_minio_save_and_read():
    client = MagicMock()
    client.get_object.return_value.read.return_value = b"payload"
    storage = MinioStorageProvider("bucket", client=client)

    assert await storage.save_file("a/b.json", b"xyz") == "bucket/a/b.json"
    args, kwargs = client.put_object.call_args
    assert args[:2] == ("bucket", "a/b.json")
    assert kwargs["length"] == 3
    assert await storage.read_file("a/b.json") == b"payload"
    client.get_object.return_value.release_conn.assert_called_once()


@pytest.mark.asyncio
async def test_minio_missing_key_is_file_not_found():
    client = MagicMock()
    client.get_object.side_effect = _s3_error("NoSuchKey")
    with pytest.raises(FileNotFoundError):
        await MinioStorageProvider("bucket", client=client).read_file("x")


@pytest.mark.asyncio
async def test_minio_other_errors_propagate():
    client = MagicMock()
    client.get_object.side_effect = _s3_error("AccessDenied")
    with pytest.raises(S3Error):
        await MinioStorageProvider("bucket", client=client).read_file("x")


def test_factory_requires_bucket():
    with pytest.raises(ConfigurationError) as exc:
        get_storage_provider(Settings(analysis_bucket=""))
    assert "ANALYSIS_BUCKET" in exc.value.message


def test_factory_local(tmp_path):
    storage = get_storage_provider(Settings(
        analysis_bucket="lensy", storage_backend="local", local_storage_dir=str(tmp_path)))
    assert isinstance(storage, LocalStorageProvider)
    assert storage.root == str(tmp_path / "lensy")


def test_factory_unknown_backend():
    with pytest.raises(ConfigurationError):
        get_storage_provider(Settings(analysis_bucket="b", storage_backend="ftp"))
