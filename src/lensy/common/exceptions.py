"""
异常体系。
每个异常携带 code + severity。只有配置缺失与结果写入失败会让整次分析失败,
其余异常都在所属组件边界被吸收 (缓存未命中 / 维度 failed)。
"""
from __future__ import annotations


class LensyError(Exception):
    """基类异常。"""
    code: str = "UNKNOWN_ERROR"
    severity: str = "error"

    def __init__(self, message: str = "", code: str | None = None):
        self.message = message
        if code:
            self.code = code
        super().__init__(message)

    def to_dict(self) -> dict:
        return {"error_code": self.code, "message": self.message, "severity": self.severity}


# === 致命 (整次请求失败) ===
class ConfigurationError(LensyError):
    code = "CONFIG_MISSING"; severity = "critical"

class ContentNotFoundError(LensyError):
    code = "CONTENT_NOT_FOUND"

class ResultWriteError(LensyError):
    code = "RESULT_WRITE_FAILED"; severity = "critical"

class WeightTableError(LensyError):
    code = "WEIGHT_TABLE_INVALID"; severity = "critical"


# === 可恢复 ===
class CacheLayoutError(LensyError):
    code = "CACHE_LAYOUT_MISMATCH"; severity = "warning"

class ResponseParseError(LensyError):
    code = "LLM_RESPONSE_UNPARSABLE"

class ModelInvocationError(LensyError):
    code = "LLM_INVOCATION_FAILED"
