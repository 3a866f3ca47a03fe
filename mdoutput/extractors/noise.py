"""Per-element noise filter: buttons, navigation, widgets, icons and hidden nodes.

Every check reads attributes only; computed styles and rendered sizes are not
available to a static converter.
"""

from __future__ import annotations

import re

from bs4 import Tag

from mdoutput import settings

from .nodes import attr, has_attr, leading_int, tag_name

_SVG_SRC_RE = re.compile(r"\.svg(\?|$)")


def _is_icon_image(el: Tag) -> bool:
    src = attr(el, "src").lower()
    if any(marker in src for marker in settings.ICON_SRC_MARKERS):
        return True
    for dimension in ("width", "height"):
        size = leading_int(attr(el, dimension))
        if size is not None and 0 < size < settings.ICON_MAX_DIMENSION:
            return True
    return bool(_SVG_SRC_RE.search(src))


def should_skip(el: Tag, skip_attribute: str = settings.SKIP_ATTRIBUTE) -> bool:
    """Return True if *el* and its whole subtree should be left out."""
    if has_attr(el, skip_attribute):
        return True

    tag = tag_name(el)
    if tag in settings.SKIP_TAGS:
        return True

    role = attr(el, "role").lower()
    if role and role in settings.SKIP_ROLES:
        return True

    if attr(el, "aria-hidden") == "true":
        return True

    css_class = attr(el, "class").lower()
    if css_class and any(fragment in css_class for fragment in settings.SKIP_CLASS_FRAGMENTS):
        return True

    return tag == "img" and _is_icon_image(el)
