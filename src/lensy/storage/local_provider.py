"""本地文件存储 (开发 / 离线运行)。目录布局 {base_dir}/{bucket}/{key}, 与 MinIO 对象键一致。"""
import os

import aiofiles


class LocalStorageProvider:
    def __init__(self, base_dir: str = "/tmp/lensy-storage", bucket: str = ""):
        self.base_dir = base_dir
        self.bucket = bucket
        self.root = os.path.abspath(os.path.join(base_dir, bucket))
        os.makedirs(self.root, exist_ok=True)

    def _full_path(self, key: str) -> str:
        full = os.path.abspath(os.path.join(self.root, key.lstrip("/")))
        if os.path.commonpath([self.root, full]) != self.root or full == self.root:
            raise ValueError(f"Storage key escapes bucket root: {key}")
        return full

    async def save_file(self, path: str, data: bytes) -> str:
        full = self._full_path(path)
        os.makedirs(os.path.dirname(full), exist_ok=True)
        async with aiofiles.open(full, "wb") as f:
            await f.write(data)
        return full

    async def read_file(self, path: str) -> bytes:
        async with aiofiles.open(self._full_path(path), "rb") as f:
            return await f.read()

    async def delete_file(self, path: str) -> bool:
        try:
            os.remove(self._full_path(path))
        except FileNotFoundError:
            return False
        return True
