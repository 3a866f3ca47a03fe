"""Extraction sub-package: deterministic HTML -> Markdown conversion."""

from .frontmatter import render_frontmatter
from .jsonld import extract_jsonld
from .main_content import find_content_element
from .markdown import HtmlToMarkdown, element_to_markdown, finalize_markdown, html_to_markdown
from .noise import should_skip

__all__ = [
    "HtmlToMarkdown",
    "element_to_markdown",
    "extract_jsonld",
    "finalize_markdown",
    "find_content_element",
    "html_to_markdown",
    "render_frontmatter",
    "should_skip",
]
