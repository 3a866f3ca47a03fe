"""Pydantic option models for the converter and the negotiation middleware."""

from __future__ import annotations

from pydantic import BaseModel, Field, field_validator

from mdoutput import settings

# ---------------------------------------------------------------------------
# Converter
# ---------------------------------------------------------------------------

class ConverterOptions(BaseModel):
    """Per-converter knobs.  Frozen so a converter can be shared across threads."""

    model_config = {"frozen": True, "extra": "forbid"}

    include_frontmatter: bool = True
    max_depth: int = Field(default=settings.MAX_DEPTH, ge=1, le=settings.MAX_DEPTH_LIMIT)
    skip_attribute: str = settings.SKIP_ATTRIBUTE

    @field_validator("skip_attribute", mode="before")
    @classmethod
    def normalize_attribute(cls, v: object) -> object:
        # lxml lower-cases attribute names while parsing
        if isinstance(v, str):
            return v.strip().lower()
        return v


# ---------------------------------------------------------------------------
# Content negotiation
# ---------------------------------------------------------------------------

class NegotiationOptions(BaseModel):
    """How :class:`~mdoutput.middlewares.MarkdownMiddleware` detects Markdown requests."""

    model_config = {"frozen": True, "extra": "forbid"}

    query_param: str = settings.QUERY_PARAM
    query_value: str = settings.QUERY_VALUE
    accept_token: str = settings.ACCEPT_TOKEN
    content_selectors: tuple[str, ...] = settings.CONTENT_SELECTORS

    @field_validator("query_value", "accept_token", mode="before")
    @classmethod
    def lower(cls, v: object) -> object:
        if isinstance(v, str):
            return v.strip().lower()
        return v
