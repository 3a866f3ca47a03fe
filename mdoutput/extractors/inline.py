"""Inline Markdown formatting for short spans (emphasis, code, links, images)."""

from __future__ import annotations

LINE_BREAK = "  \n"


def wrap(content: str, marker: str) -> str:
    """Surround *content* with *marker*; empty content yields no bare marker pair."""
    if not content:
        return ""
    return f"{marker}{content}{marker}"


def wrap_html(content: str, tag: str) -> str:
    # Markdown has no sub/superscript syntax, so the HTML tags pass through
    if not content:
        return ""
    return f"<{tag}>{content}</{tag}>"


def quotation(content: str) -> str:
    return wrap(content, '"')


def abbreviation(content: str, title: str) -> str:
    if title and content:
        return f"{content} ({title})"
    return content


def time_value(content: str, datetime_attr: str) -> str:
    if datetime_attr and not content:
        return datetime_attr
    return content


def link(content: str, href: str, title: str = "") -> str:
    """Render an anchor.  Empty or fragment-only hrefs keep just the text."""
    if not content:
        return ""
    if href in ("", "#"):
        return content
    if title:
        return f'[{content}]({href} "{title}")'
    return f"[{content}]({href})"


def image(alt: str, src: str) -> str:
    return f"![{alt}]({src})"
