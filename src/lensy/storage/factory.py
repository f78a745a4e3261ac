"""按配置选择存储实现。"""
from __future__ import annotations
from typing import Protocol

from lensy.common.exceptions import ConfigurationError
from lensy.settings import Settings
from lensy.storage.local_provider import LocalStorageProvider
from lensy.storage.minio_provider import MinioStorageProvider


class StorageProvider(Protocol):
    async def save_file(self, path: str, data: bytes) -> str: ...
    async def read_file(self, path: str) -> bytes: ...
    async def delete_file(self, path: str) -> bool: ...


def get_storage_provider(cfg: Settings) -> StorageProvider:
    if not cfg.analysis_bucket:
        raise ConfigurationError("ANALYSIS_BUCKET environment variable not set")

    if cfg.storage_backend == "local":
        return LocalStorageProvider(
            base_dir=cfg.local_storage_dir, bucket=cfg.analysis_bucket)
    if cfg.storage_backend == "minio":
        return MinioStorageProvider(
            bucket=cfg.analysis_bucket,
            endpoint=cfg.minio_endpoint,
            access_key=cfg.minio_access_key,
            secret_key=cfg.minio_secret_key,
            secure=cfg.minio_secure,
            region=cfg.aws_region,
        )
    raise ConfigurationError(f"Unknown storage backend: {cfg.storage_backend}")
