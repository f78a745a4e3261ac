"""MinIO / S3 存储实现。bucket 即 ANALYSIS_BUCKET。"""
from __future__ import annotations
import io
from minio import Minio
from minio.error import S3Error
import structlog

logger = structlog.get_logger()

_MISSING_CODES = {"NoSuchKey", "NoSuchObject", "NoSuchBucket"}


class MinioStorageProvider:
    def __init__(
        self,
        bucket: str,
        endpoint: str = "localhost:9000",
        access_key: str = "minioadmin",
        secret_key: str = "minioadmin",
        secure: bool = False,
        region: str | None = None,
        client: Minio | None = None,
    ) -> None:
        self._client = client or Minio(
            endpoint=endpoint,
            access_key=access_key,
            secret_key=secret_key,
            secure=secure,
            region=region,
        )
        self._bucket = bucket

    async def save_file(self, path: str, data: bytes) -> str:
        self._client.put_object(
            self._bucket, path, io.BytesIO(data), length=len(data),
            content_type="application/json",
        )
        return f"{self._bucket}/{path}"

    async def read_file(self, path: str) -> bytes:
        try:
            resp = self._client.get_object(self._bucket, path)
        except S3Error as e:
            if e.code in _MISSING_CODES:
                raise FileNotFoundError(f"{self._bucket}/{path}") from e
            raise
        try:
            return resp.read()
        finally:
            resp.close()
            resp.release_conn()

    async def delete_file(self, path: str) -> bool:
        try:
            self._client.remove_object(self._bucket, path)
            return True
        except S3Error as e:
            logger.warning("minio_delete_failed", path=path, code=e.code)
            return False
