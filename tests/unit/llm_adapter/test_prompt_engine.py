"""PromptEngine 测试。"""
import pytest

from lensy.common.enums import DIMENSIONS, Dimension
from lensy.common.schemas import ProcessedContent
from lensy.llm_adapter.prompt.engine import PromptEngine


@pytest.fixture
def engine():
    return PromptEngine()


@pytest.mark.parametrize("dimension", DIMENSIONS)
def test_prompt_names_dimension_and_format(engine, tutorial_content, dimension):
    prompt = engine.build_dimension_prompt(dimension, tutorial_content)
    assert prompt.startswith(f"Analyze the {dimension.value.upper()} of this developer documentation.")
    assert '"score": 0-100' in prompt
    assert "URL: https://docs.example.com/guide/?x=1" in prompt
    assert "{" + "base_context}" not in prompt


def test_base_context_weight_line(engine, tutorial_content):
    prompt = engine.build_dimension_prompt(Dimension.CLARITY, tutorial_content)
    assert "Content Type: tutorial (clarity weight: 30%)" in prompt
    assert "Code Snippets: 2" in prompt
    assert "Total Links: 12" in prompt
    assert "CRITICAL (30% weight)" in prompt


def test_content_truncated_to_budget(tutorial_content):
    content = tutorial_content.model_copy(update={"markdown_content": "x" * 5000})
    prompt = PromptEngine(content_char_budget=100).build_dimension_prompt("relevance", content)
    assert "Content (first 100 chars):" in prompt
    assert "x" * 100 in prompt
    assert "x" * 101 not in prompt


def test_single_page_context(engine, tutorial_content):
    prompt = engine.build_dimension_prompt("relevance", tutorial_content)
    assert "Single page analysis (no related pages discovered)" in prompt


def test_context_pages_listed(engine, context_content_data):
    content = ProcessedContent.model_validate(context_content_data)
    prompt = engine.build_dimension_prompt("completeness", content)
    assert "CONTEXT ANALYSIS ENABLED" in prompt
    assert "- PARENT: Docs home (confidence: 92%)" in prompt
    assert "- CHILD: Configuration (confidence: 80%)" in prompt


def test_freshness_versioned_snippets(engine, tutorial_content):
    prompt = engine.build_dimension_prompt("freshness", tutorial_content)
    assert "npm install -g example-cli@6.5" in prompt
    assert "example init --yes" not in prompt


def test_accuracy_snippets_include_language(engine, tutorial_content):
    prompt = engine.build_dimension_prompt("accuracy", tutorial_content)
    assert "Language: bash\nexample init --yes" in prompt


def test_completeness_sub_pages(engine, tutorial_content):
    prompt = engine.build_dimension_prompt("completeness", tutorial_content)
    assert "Sub-pages Referenced: Configuration, Deploying" in prompt


def test_document_braces_not_expanded(engine):
    content = ProcessedContent(url="https://example.com/",
                               markdown_content="Use {response_format} and {url} literally")
    prompt = engine.build_dimension_prompt("clarity", content)
    assert "Use {response_format} and {url} literally" in prompt
    assert "Content Type: mixed (clarity weight: 25%)" in prompt

