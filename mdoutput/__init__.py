"""mdoutput - serve any HTML page as clean Markdown.

Quick conversion::

    from mdoutput import html_to_markdown

    md = html_to_markdown("<h1>Hello</h1><p>World with <strong>bold</strong>.</p>")
    # "# Hello\\n\\nWorld with **bold**."

Already holding a parsed tree::

    from bs4 import BeautifulSoup
    from mdoutput import element_to_markdown

    soup = BeautifulSoup(page_html, "lxml")
    md = element_to_markdown(soup.find("main"), soup)

Content negotiation for a WSGI app::

    from mdoutput import MarkdownMiddleware

    app = MarkdownMiddleware(app)   # Accept: text/markdown  or  ?v=md
"""

from mdoutput.extractors.markdown import HtmlToMarkdown, element_to_markdown, html_to_markdown
from mdoutput.items import ConverterOptions, NegotiationOptions
from mdoutput.middlewares import MarkdownMiddleware, convert_page, is_markdown_requested
from mdoutput.profiles import ProfileError, load_profile

__version__ = "0.1.0"
__all__ = [
    "ConverterOptions",
    "HtmlToMarkdown",
    "MarkdownMiddleware",
    "NegotiationOptions",
    "ProfileError",
    "convert_page",
    "element_to_markdown",
    "html_to_markdown",
    "is_markdown_requested",
    "load_profile",
]
