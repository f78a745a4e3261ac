"""枚举完整性测试。"""
from lensy.common.enums import *

def test_five_dimensions_in_order():
    assert [d.value for d in DIMENSIONS] == [
        "relevance", "freshness", "clarity", "accuracy", "completeness"]

def test_contextual_setting_values():
    assert {s.value for s in ContextualSetting} == {"with-context", "without-context"}

def test_model_selection_resolve():
    assert ModelSelection.resolve("titan") is ModelSelection.TITAN
    assert ModelSelection.resolve(" Llama ") is ModelSelection.LLAMA
    assert ModelSelection.resolve("auto") is ModelSelection.AUTO
    assert ModelSelection.resolve("unknown") is ModelSelection.CLAUDE
    assert ModelSelection.resolve(None) is ModelSelection.CLAUDE

def test_progress_type_wire_values():
    assert ProgressType.CACHE_HIT == "cache-hit"
    assert ProgressType.CACHE_MISS == "cache-miss"
