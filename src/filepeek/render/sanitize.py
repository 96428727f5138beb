"""HTML sanitization with nh3.

Allows nh3's default tag set plus the attributes the render pipeline adds:
``class`` and ``title`` anywhere, ``target`` and ``data-file-path`` on
anchors and ``style`` (``text-align`` only) on table cells. ``rel`` is
always rewritten to ``noopener noreferrer`` by nh3 itself.
"""

from __future__ import annotations

import nh3

LINK_REL = "noopener noreferrer"

_EXTRA_ATTRIBUTES = {
    "*": {"class", "title"},
    "a": {"href", "target", "data-file-path"},
    "th": {"style"},
    "td": {"style"},
}


def _build_attributes() -> dict[str, set[str]]:
    attributes = {tag: set(names) for tag, names in nh3.ALLOWED_ATTRIBUTES.items()}
    for tag, names in _EXTRA_ATTRIBUTES.items():
        attributes.setdefault(tag, set()).update(names)
    return attributes


ALLOWED_TAGS = set(nh3.ALLOWED_TAGS)
ALLOWED_ATTRIBUTES = _build_attributes()


def sanitize_html(html: str) -> str:
    """Strip scripts and unsafe markup; output is a fixed point."""
    if not html:
        return ""
    return nh3.clean(
        html,
        tags=ALLOWED_TAGS,
        attributes=ALLOWED_ATTRIBUTES,
        link_rel=LINK_REL,
        filter_style_properties={"text-align"},
    )
