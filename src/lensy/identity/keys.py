"""
缓存寻址。

上游内容处理阶段与本评分阶段独立部署, 两边仅通过
session_id = "session-" + sha256(normalize(url) + "#" + setting)[:12]
约定同一存储位置, 不共享任何运行时状态。
"""
from __future__ import annotations
import hashlib
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import structlog

from lensy.common.enums import ContextualSetting
from lensy.common.schemas import ProcessedContent

logger = structlog.get_logger()

SESSION_PREFIX = "session-"
SESSION_HASH_LENGTH = 12
DEFAULT_PORTS = {"http": 80, "https": 443}


def normalize_url(url: str) -> str:
    """
    URL 规范化: 去 fragment, query 按 key 排序, 去尾部斜杠 (根路径除外), host 小写, 去默认端口。
    幂等: normalize_url(normalize_url(u)) == normalize_url(u)。

    非法 URL 原样返回 (缓存退化为精确匹配, 不影响请求)。
    """
    try:
        parts = urlsplit(url)
        hostname = parts.hostname
        if not parts.scheme or not hostname:
            raise ValueError("not an absolute URL")

        # 重复 key 保留最后一个值
        params = dict(parse_qsl(parts.query, keep_blank_values=True))
        query = urlencode(sorted(params.items()))

        path = parts.path.rstrip("/") or "/"

        netloc = hostname.lower()
        if ":" in netloc:
            netloc = f"[{netloc}]"
        scheme = parts.scheme.lower()
        if parts.port is not None and parts.port != DEFAULT_PORTS.get(scheme):
            netloc = f"{netloc}:{parts.port}"
        userinfo = parts.netloc.rpartition("@")[0]
        if userinfo:
            netloc = f"{userinfo}@{netloc}"

        return urlunsplit((scheme, netloc, path, query, ""))
    except ValueError:
        logger.warning("url_normalize_failed", url=url)
        return url


def contextual_setting_for(content: ProcessedContent) -> ContextualSetting:
    if content.has_context_pages:
        return ContextualSetting.WITH_CONTEXT
    return ContextualSetting.WITHOUT_CONTEXT


def derive_session_id(url: str, contextual_setting: ContextualSetting | str) -> str:
    """确定性 session id。相同 (url, setting) 跨进程、跨时间恒等。"""
    setting = ContextualSetting(contextual_setting)
    digest = hashlib.sha256(
        f"{normalize_url(url)}#{setting.value}".encode("utf-8")).hexdigest()
    return f"{SESSION_PREFIX}{digest[:SESSION_HASH_LENGTH]}"
