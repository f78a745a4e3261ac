"""
存储布局契约 (版本化)。

上游与本阶段共用的路径约定:
  sessions/{session_id}/processed-content.json   上游产物
  sessions/{session_id}/dimension-results.json   本阶段产物
索引条目里的 s3Location 指向上游产物, 本阶段的归档与其同目录。
"""
from __future__ import annotations
import posixpath

from lensy.common.exceptions import CacheLayoutError

LAYOUT_VERSION = "v1"
SESSIONS_PREFIX = "sessions"
PROCESSED_CONTENT_FILENAME = "processed-content.json"
DIMENSION_RESULTS_FILENAME = "dimension-results.json"


def session_dir(session_id: str) -> str:
    return f"{SESSIONS_PREFIX}/{session_id}"


def processed_content_path(session_id: str) -> str:
    return f"{session_dir(session_id)}/{PROCESSED_CONTENT_FILENAME}"


def dimension_results_path(session_id: str) -> str:
    return f"{session_dir(session_id)}/{DIMENSION_RESULTS_FILENAME}"


def archive_path_from_pointer(pointer: str, layout_version: str = LAYOUT_VERSION) -> str:
    """
    由索引指针推导维度归档路径。

    指针文件名或布局版本与约定不符时抛 CacheLayoutError,
    不做字符串替换式的猜测。
    """
    if layout_version != LAYOUT_VERSION:
        raise CacheLayoutError(
            f"Unsupported layout version {layout_version!r} (expected {LAYOUT_VERSION})")
    directory, filename = posixpath.split(pointer.strip())
    if filename != PROCESSED_CONTENT_FILENAME or not directory:
        raise CacheLayoutError(f"Unexpected content pointer: {pointer!r}")
    return f"{directory}/{DIMENSION_RESULTS_FILENAME}"
