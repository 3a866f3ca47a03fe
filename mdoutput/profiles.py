"""YAML-based option profiles.

A profile holds optional ``converter`` and ``negotiation`` mappings::

    converter:
      include_frontmatter: false
      max_depth: 64
    negotiation:
      query_param: format
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, NamedTuple

import yaml

from mdoutput.items import ConverterOptions, NegotiationOptions


class ProfileError(ValueError):
    """Raised when a profile file is not a mapping of known sections."""


class Profile(NamedTuple):
    converter: ConverterOptions
    negotiation: NegotiationOptions

    @classmethod
    def defaults(cls) -> Profile:
        return cls(converter=ConverterOptions(), negotiation=NegotiationOptions())


def _section(data: dict[str, Any], name: str, path: Path) -> dict[str, Any]:
    section = data.get(name) or {}
    if not isinstance(section, dict):
        raise ProfileError(f"{path}: section {name!r} must be a mapping")
    return section


def load_profile(path: str | Path) -> Profile:
    """Load the YAML profile at *path*; missing sections fall back to defaults."""
    path = Path(path)
    data = yaml.safe_load(path.read_text(encoding="utf-8")) or {}
    if not isinstance(data, dict):
        raise ProfileError(f"{path}: top level must be a mapping")

    unknown = set(data) - {"converter", "negotiation"}
    if unknown:
        raise ProfileError(f"{path}: unknown sections {sorted(map(str, unknown))}")

    return Profile(
        converter=ConverterOptions(**_section(data, "converter", path)),
        negotiation=NegotiationOptions(**_section(data, "negotiation", path)),
    )
