"""
Prompt 渲染引擎。

职责:
- 5 个维度模板 (relevance / freshness / clarity / accuracy / completeness)
- 变量注入 (内容统计、内容类型权重、上下文页面、类型指导)
- 输入截断: 正文按字符预算截取, 代码片段按维度截取
"""
from __future__ import annotations
import re

import structlog

from lensy.analyzer.weights import get_guidance, get_weights, round_percent
from lensy.common.enums import Dimension
from lensy.common.schemas import ProcessedContent

logger = structlog.get_logger()

DEFAULT_CONTENT_CHAR_BUDGET = 3000
VERSIONED_SNIPPET_CHARS = 200
ACCURACY_SNIPPET_CHARS = 300
_PLACEHOLDER = re.compile(r"\{(\w+)\}")

# ─── Prompt 模板 (内嵌) ───

RESPONSE_FORMAT = """Respond in JSON format:
{
  "score": 0-100,
  "findings": ["finding 1", "finding 2"],
  "recommendations": [
    {
      "priority": "high|medium|low",
      "action": "specific action",
      "impact": "expected impact"
    }
  ]
}"""

BASE_CONTEXT_TEMPLATE = """
URL: {url}
Content Type: {content_type} ({dimension} weight: {weight}%)
Code Snippets: {code_count}
Media Elements: {media_count}
Total Links: {link_count}

Content (first {char_budget} chars):
{content}
"""

CONTEXT_ENABLED_TEMPLATE = """
CONTEXT ANALYSIS ENABLED:
Analysis Scope: {scope}
Total Pages Analyzed: {total_pages}
Related Pages Discovered:
{pages}

IMPORTANT: Consider this broader documentation context when evaluating the target page.
The target page is part of a larger documentation structure, so evaluate how well it fits
within this context and whether it properly references or builds upon related pages.
"""

SINGLE_PAGE_CONTEXT = """
CONTEXT ANALYSIS: Single page analysis (no related pages discovered)
"""

DIMENSION_TEMPLATES: dict[Dimension, str] = {
    Dimension.RELEVANCE: """Analyze the RELEVANCE of this developer documentation.
{base_context}
{context_info}
CONTENT TYPE SPECIFIC GUIDANCE:
{guidance}

Evaluate:
1. Is the content relevant to its intended developer audience?
2. Are examples practical and applicable?
3. Does it address real developer needs?
4. Is the scope appropriate for the topic?
5. If context pages are available, does this page fit well within the broader documentation structure?

{response_format}""",

    Dimension.FRESHNESS: """Analyze the FRESHNESS of this developer documentation.
{base_context}
{context_info}
CONTENT TYPE SPECIFIC GUIDANCE:
{guidance}

Code Snippets with Version Info:
{versioned_snippets}

Evaluate:
1. Are version references current?
2. Are code examples using modern practices?
3. Are deprecated features flagged?
4. Is the content up-to-date?
5. If context pages are available, consider whether this page's version information is consistent with related pages.

{response_format}""",

    Dimension.CLARITY: """Analyze the CLARITY of this developer documentation.
{base_context}
{context_info}
CONTENT TYPE SPECIFIC GUIDANCE:
{guidance}

Evaluate:
1. Is the content well-structured and organized?
2. Are explanations clear and understandable?
3. Are code examples well-commented?
4. Is technical jargon explained?
5. If context pages are available, does this page clearly explain its relationship to parent/child/sibling pages?

{response_format}""",

    Dimension.ACCURACY: """Analyze the ACCURACY of this developer documentation.
{base_context}
{context_info}
CONTENT TYPE SPECIFIC GUIDANCE:
{guidance}

Code Snippets:
{all_snippets}

Evaluate:
1. Are code examples syntactically correct?
2. Is API usage accurate?
3. Are technical details correct?
4. Are there any misleading statements?
5. If context pages are available, is the information consistent with related documentation?

{response_format}""",

    Dimension.COMPLETENESS: """Analyze the COMPLETENESS of this developer documentation.
{base_context}
{context_info}
CONTENT TYPE SPECIFIC GUIDANCE:
{guidance}

Sub-pages Referenced: {sub_pages}

Evaluate:
1. Does it cover the main topic thoroughly?
2. Are important details missing?
3. Are edge cases addressed?
4. Is error handling documented?
5. If context pages are available, does this page properly reference or link to related information in parent/child/sibling pages?

{response_format}""",
}


class PromptEngine:
    """维度 prompt 渲染。"""

    def __init__(self, content_char_budget: int = DEFAULT_CONTENT_CHAR_BUDGET):
        self._char_budget = content_char_budget

    def build_dimension_prompt(
        self,
        dimension: Dimension | str,
        content: ProcessedContent,
    ) -> str:
        """渲染单维度 prompt。"""
        dimension = Dimension(dimension)
        content_type = content.content_type or "mixed"
        weight = get_weights(content_type)[dimension.value]

        # 单次替换, 文档正文里的花括号不会被再次展开
        return self._render(DIMENSION_TEMPLATES[dimension], {
            "base_context": self._base_context(dimension, content, content_type, weight),
            "context_info": self._context_info(content),
            "guidance": get_guidance(content_type, dimension),
            "versioned_snippets": self._versioned_snippets(content),
            "all_snippets": self._all_snippets(content),
            "sub_pages": ", ".join(content.link_analysis.sub_pages_identified) or "None",
            "response_format": RESPONSE_FORMAT,
        })

    @staticmethod
    def _render(template: str, variables: dict[str, str]) -> str:
        return _PLACEHOLDER.sub(
            lambda m: variables.get(m.group(1), m.group(0)), template)

    def _base_context(
        self,
        dimension: Dimension,
        content: ProcessedContent,
        content_type: str,
        weight: float,
    ) -> str:
        return self._render(BASE_CONTEXT_TEMPLATE, {
            "url": content.url,
            "content_type": content_type,
            "dimension": dimension.value,
            "weight": str(round_percent(weight)),
            "code_count": str(len(content.code_snippets)),
            "media_count": str(len(content.media_elements)),
            "link_count": str(content.link_analysis.total_links),
            "char_budget": str(self._char_budget),
            "content": content.markdown_content[:self._char_budget],
        })

    @staticmethod
    def _context_info(content: ProcessedContent) -> str:
        if not content.has_context_pages:
            return SINGLE_PAGE_CONTEXT
        ctx = content.context_analysis
        pages = "\n".join(
            f"- {p.relationship.upper()}: {p.title} "
            f"(confidence: {round_percent(p.confidence)}%)"
            for p in ctx.context_pages
        )
        return PromptEngine._render(CONTEXT_ENABLED_TEMPLATE, {
            "scope": ctx.analysis_scope,
            "total_pages": str(ctx.total_pages_analyzed),
            "pages": pages,
        })

    @staticmethod
    def _versioned_snippets(content: ProcessedContent) -> str:
        snippets = [
            s.code[:VERSIONED_SNIPPET_CHARS]
            for s in content.code_snippets if s.has_version_info
        ]
        return "\n---\n".join(snippets) or "None"

    @staticmethod
    def _all_snippets(content: ProcessedContent) -> str:
        snippets = [
            f"Language: {s.language}\n{s.code[:ACCURACY_SNIPPET_CHARS]}"
            for s in content.code_snippets
        ]
        return "\n---\n".join(snippets) or "None"
