"""Tests for mdoutput.middlewares - WSGI content negotiation."""

from __future__ import annotations

import pytest

from mdoutput.items import NegotiationOptions
from mdoutput.middlewares import MarkdownMiddleware, is_markdown_requested

PAGE = b"<html><body><nav>Menu</nav><main><h1>Hi</h1><p>Text</p></main></body></html>"


def _app(body=PAGE, content_type="text/html; charset=utf-8", status="200 OK", extra_headers=()):
    def app(environ, start_response):
        start_response(status, [("Content-Type", content_type), *extra_headers])
        return [body]
    return app


def _environ(query="", accept=None):
    environ = {"REQUEST_METHOD": "GET", "PATH_INFO": "/", "QUERY_STRING": query}
    if accept is not None:
        environ["HTTP_ACCEPT"] = accept
    return environ


def _call(app, query="", accept=None):
    captured = {}

    def start_response(status, headers, exc_info=None):
        captured["status"] = status
        captured["headers"] = list(headers)
        return lambda data: None

    body = b"".join(app(_environ(query, accept), start_response))
    return captured["status"], captured["headers"], body


def _header(headers, name):
    values = [v for k, v in headers if k.lower() == name.lower()]
    assert len(values) <= 1, f"duplicate {name} header"
    return values[0] if values else None


# ---------------------------------------------------------------------------
# Request detection
# ---------------------------------------------------------------------------

class TestIsMarkdownRequested:
    @pytest.mark.parametrize(
        ("query", "accept", "expected"),
        [
            ("", None, False),
            ("v=md", None, True),
            ("v=MD", None, True),
            ("v=html", None, False),
            ("v=md&v=html", None, False),
            ("v=html&v=md", None, True),
            ("x=md", None, False),
            ("", "text/markdown", True),
            ("", "text/html, Text/Markdown;q=0.9", True),
            ("", "text/html", False),
        ],
    )
    def test_detection(self, query, accept, expected):
        assert is_markdown_requested(_environ(query, accept)) is expected

    def test_custom_options(self):
        options = NegotiationOptions(query_param="format", query_value="Markdown")
        assert is_markdown_requested(_environ("format=markdown"), options)
        assert not is_markdown_requested(_environ("v=md"), options)


# ---------------------------------------------------------------------------
# Middleware
# ---------------------------------------------------------------------------

class TestMarkdownMiddleware:
    def test_html_request_untouched_but_varies(self):
        status, headers, body = _call(MarkdownMiddleware(_app()))
        assert status == "200 OK"
        assert body == PAGE
        assert _header(headers, "Content-Type") == "text/html; charset=utf-8"
        assert _header(headers, "Vary") == "Accept"

    def test_existing_vary_merged(self):
        app = MarkdownMiddleware(_app(extra_headers=[("Vary", "Accept-Encoding")]))
        _, headers, _ = _call(app)
        assert _header(headers, "Vary") == "Accept-Encoding, Accept"

    def test_vary_not_duplicated(self):
        app = MarkdownMiddleware(_app(extra_headers=[("Vary", "accept")]))
        _, headers, _ = _call(app, accept="text/markdown")
        assert _header(headers, "Vary") == "accept"

    def test_accept_header_converts(self):
        status, headers, body = _call(MarkdownMiddleware(_app()), accept="text/markdown")
        assert status == "200 OK"
        assert body == b"# Hi\n\nText"
        assert _header(headers, "Content-Type") == "text/markdown; charset=utf-8"
        assert _header(headers, "Content-Length") == str(len(body))
        assert _header(headers, "Cache-Control") == "no-transform"
        assert _header(headers, "Vary") == "Accept"

    def test_query_flag_converts(self):
        _, _, body = _call(MarkdownMiddleware(_app()), query="v=MD")
        assert body == b"# Hi\n\nText"

    def test_original_representation_headers_replaced(self):
        app = MarkdownMiddleware(
            _app(extra_headers=[("Content-Length", "999"), ("Cache-Control", "private"), ("X-Trace", "1")]),
        )
        _, headers, body = _call(app, query="v=md")
        assert _header(headers, "Content-Length") == str(len(body))
        assert _header(headers, "Cache-Control") == "no-transform"
        assert _header(headers, "X-Trace") == "1"

    def test_status_preserved(self):
        app = MarkdownMiddleware(_app(status="404 Not Found"))
        status, _, body = _call(app, query="v=md")
        assert status == "404 Not Found"
        assert body == b"# Hi\n\nText"

    def test_empty_body(self):
        _, headers, body = _call(MarkdownMiddleware(_app(body=b"")), query="v=md")
        assert body == b""
        assert _header(headers, "Content-Type") == "text/markdown; charset=utf-8"
        assert _header(headers, "Content-Length") == "0"

    def test_non_html_passes_through(self):
        app = MarkdownMiddleware(_app(body=b'{"a": 1}', content_type="application/json"))
        _, headers, body = _call(app, query="v=md")
        assert body == b'{"a": 1}'
        assert _header(headers, "Content-Type") == "application/json"
        assert _header(headers, "Vary") == "Accept"

    def test_encoded_response_passes_through(self):
        app = MarkdownMiddleware(_app(body=b"\x1f\x8b...", extra_headers=[("Content-Encoding", "gzip")]))
        _, headers, body = _call(app, query="v=md")
        assert body == b"\x1f\x8b..."
        assert _header(headers, "Content-Type") == "text/html; charset=utf-8"

    def test_xhtml_converted(self):
        app = MarkdownMiddleware(_app(content_type="application/xhtml+xml"))
        _, _, body = _call(app, query="v=md")
        assert body == b"# Hi\n\nText"

    def test_charset_honoured(self):
        page = "<html><body><main><p>Café</p></main></body></html>".encode("iso-8859-1")
        app = MarkdownMiddleware(_app(body=page, content_type="text/html; charset=iso-8859-1"))
        _, _, body = _call(app, query="v=md")
        assert body.decode("utf-8") == "Café"

    def test_non_text_charset_falls_back_to_utf8(self):
        app = MarkdownMiddleware(_app(content_type="text/html; charset=hex"))
        _, _, body = _call(app, query="v=md")
        assert body == b"# Hi\n\nText"

    def test_unknown_charset_falls_back_to_utf8(self):
        app = MarkdownMiddleware(_app(content_type="text/html; charset=no-such-codec"))
        _, _, body = _call(app, query="v=md")
        assert body == b"# Hi\n\nText"

    def test_write_callable_output_collected(self):
        def app(environ, start_response):
            write = start_response("200 OK", [("Content-Type", "text/html")])
            write(b"<main><p>Written</p>")
            return [b"<p>Returned</p></main>"]

        _, _, body = _call(MarkdownMiddleware(app), query="v=md")
        assert body == b"Written\n\nReturned"

    def test_result_closed(self):
        closed = []

        class Result:
            def __iter__(self):
                return iter([PAGE])

            def close(self):
                closed.append(True)

        def app(environ, start_response):
            start_response("200 OK", [("Content-Type", "text/html")])
            return Result()

        _call(MarkdownMiddleware(app), query="v=md")
        assert closed == [True]

    def test_custom_selectors(self):
        options = NegotiationOptions(content_selectors=("body",))
        _, _, body = _call(MarkdownMiddleware(_app(), options), query="v=md")
        # <nav> is still filtered as noise
        assert body == b"# Hi\n\nText"

    def test_frontmatter_from_head(self):
        page = (
            b'<html><head><script type="application/ld+json">{"@type": "WebPage", "name": "Home"}</script>'
            b"</head><body><main><p>Body</p></main></body></html>"
        )
        _, _, body = _call(MarkdownMiddleware(_app(body=page)), accept="text/markdown")
        assert body == b"---\n@type: WebPage\nname: Home\n---\n\nBody"
