"""Locate the main content element of a parsed page.

Priority CSS selectors are tried in order; the first element matching a
selector (in document order) wins, with ``<body>`` as the last resort.
"""

from __future__ import annotations

import logging

from bs4 import BeautifulSoup, Tag

from mdoutput import settings

logger = logging.getLogger(__name__)


def find_content_element(
    soup: BeautifulSoup,
    selectors: tuple[str, ...] = settings.CONTENT_SELECTORS,
) -> Tag | None:
    """Return the best content root in *soup*, or None if nothing matches."""
    for selector in selectors:
        try:
            el = soup.select_one(selector)
        except Exception as exc:
            logger.debug("CSS selector %r failed: %s", selector, exc)
            continue
        if isinstance(el, Tag):
            logger.debug("Content element matched selector %r", selector)
            return el
    return None
