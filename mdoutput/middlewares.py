"""WSGI middleware serving Markdown through content negotiation.

Wrap any WSGI application::

    from mdoutput import MarkdownMiddleware

    app = MarkdownMiddleware(app)

A client gets Markdown instead of HTML when it sends ``Accept: text/markdown``
or adds ``?v=md`` to the URL.  The HTML response is buffered, parsed once,
its main content located and converted, and Schema.org JSON-LD from anywhere
in the page becomes YAML-like frontmatter.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable
from email.message import Message
from typing import Any
from urllib.parse import parse_qs

from bs4 import BeautifulSoup

from mdoutput import settings
from mdoutput.extractors.main_content import find_content_element
from mdoutput.extractors.markdown import HtmlToMarkdown
from mdoutput.items import NegotiationOptions

logger = logging.getLogger(__name__)

Headers = list[tuple[str, str]]
StartResponse = Callable[..., Callable[[bytes], Any]]
WSGIApp = Callable[[dict, StartResponse], Iterable[bytes]]

# Headers describing the original representation; replaced on conversion
_REPLACED_HEADERS = frozenset({"content-type", "content-length", "cache-control", "vary"})


def is_markdown_requested(environ: dict, options: NegotiationOptions | None = None) -> bool:
    """Return True if the request asks for Markdown (query flag or Accept header)."""
    options = options or NegotiationOptions()

    query = parse_qs(environ.get("QUERY_STRING", ""), keep_blank_values=True)
    values = query.get(options.query_param)
    if values and values[-1].lower() == options.query_value:
        return True

    accept = environ.get("HTTP_ACCEPT", "")
    return options.accept_token in accept.lower()


# ---------------------------------------------------------------------------
# Header helpers
# ---------------------------------------------------------------------------

def _get_header(headers: Headers, name: str) -> str:
    name = name.lower()
    for key, value in headers:
        if key.lower() == name:
            return value
    return ""


def _with_vary(headers: Headers) -> Headers:
    """Return *headers* with ``Accept`` merged into ``Vary``."""
    existing = _get_header(headers, "Vary")
    tokens = [t.strip() for t in existing.split(",") if t.strip()]
    if any(t == "*" or t.lower() == "accept" for t in tokens):
        return list(headers)
    merged = ", ".join([*tokens, "Accept"])
    return [(k, v) for k, v in headers if k.lower() != "vary"] + [("Vary", merged)]


def _markdown_headers(headers: Headers, body: bytes) -> Headers:
    vary = _with_vary(headers)
    kept = [(k, v) for k, v in headers if k.lower() not in _REPLACED_HEADERS]
    return kept + [
        ("Content-Type", settings.MARKDOWN_CONTENT_TYPE),
        ("Content-Length", str(len(body))),
        ("Cache-Control", "no-transform"),
        ("Vary", _get_header(vary, "Vary")),
    ]


def _parse_content_type(value: str) -> tuple[str, str]:
    """Split a Content-Type header into (media type, charset).

    Unknown or non-text charsets come back as utf-8.
    """
    msg = Message()
    msg["Content-Type"] = value or "text/html"
    charset = msg.get_content_charset("utf-8") or "utf-8"
    try:
        b"".decode(charset)
    except LookupError:
        logger.debug("Unusable charset %r, decoding as utf-8", charset)
        charset = "utf-8"
    return msg.get_content_type(), charset


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class MarkdownMiddleware:
    """Dual HTML/Markdown output for a wrapped WSGI application.

    Every response carries ``Vary: Accept``.  Responses that are not HTML, or
    that are already content-encoded, are passed through untouched.
    """

    def __init__(
        self,
        app: WSGIApp,
        options: NegotiationOptions | None = None,
        converter: HtmlToMarkdown | None = None,
    ) -> None:
        self.app = app
        self.options = options or NegotiationOptions()
        self.converter = converter or HtmlToMarkdown()

    def __call__(self, environ: dict, start_response: StartResponse) -> Iterable[bytes]:
        if not is_markdown_requested(environ, self.options):
            def _start_with_vary(status: str, headers: Headers, exc_info: Any = None) -> Callable:
                return start_response(status, _with_vary(headers), exc_info)

            return self.app(environ, _start_with_vary)

        status, headers, body = self._buffer(environ)
        status, headers, body = self.negotiate(status, headers, body)
        start_response(status, headers)
        return [body]

    def _buffer(self, environ: dict) -> tuple[str, Headers, bytes]:
        """Run the wrapped app to completion and collect its response."""
        captured: dict[str, Any] = {}
        chunks: list[bytes] = []

        def _capture(status: str, headers: Headers, exc_info: Any = None) -> Callable:
            captured["status"] = status
            captured["headers"] = list(headers)
            return chunks.append

        result = self.app(environ, _capture)
        try:
            chunks.extend(result)
        finally:
            close = getattr(result, "close", None)
            if close is not None:
                close()

        return (
            captured.get("status", "200 OK"),
            captured.get("headers", []),
            b"".join(chunks),
        )

    def negotiate(self, status: str, headers: Headers, body: bytes) -> tuple[str, Headers, bytes]:
        """Turn a buffered HTML response into its Markdown representation."""
        encoding = _get_header(headers, "Content-Encoding").strip().lower()
        if encoding and encoding != "identity":
            logger.debug("Response is %s-encoded, passing through", encoding)
            return status, _with_vary(headers), body

        media_type, charset = _parse_content_type(_get_header(headers, "Content-Type"))
        if media_type not in settings.HTML_CONTENT_TYPES:
            logger.debug("Response is %s, not HTML; passing through", media_type)
            return status, _with_vary(headers), body

        html = body.decode(charset, errors="replace")
        if not html.strip():
            return status, _markdown_headers(headers, b""), b""

        markdown = self.convert(html).encode("utf-8")
        return status, _markdown_headers(headers, markdown), markdown

    def convert(self, html: str) -> str:
        return convert_page(html, self.converter, self.options.content_selectors)


def convert_page(
    html: str,
    converter: HtmlToMarkdown | None = None,
    selectors: tuple[str, ...] = settings.CONTENT_SELECTORS,
) -> str:
    """Convert a full HTML page, preferring its main content element.

    The page is parsed once; the same tree feeds both the content walk and
    JSON-LD extraction.  Without any matching element the page is converted
    as a fragment.
    """
    converter = converter or HtmlToMarkdown()
    try:
        soup = BeautifulSoup(html, "lxml")
    except Exception as exc:
        logger.debug("Page parse failed, converting as fragment: %s", exc)
        return converter.convert(html)

    element = find_content_element(soup, selectors)
    if element is None:
        logger.debug("No content element found, converting as fragment")
        return converter.convert(html)
    return converter.convert_element(element, soup)
