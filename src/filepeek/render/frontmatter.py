"""Leading ``---`` metadata blocks in markdown documents.

The parser is deliberately line-oriented: ``key: value`` pairs and ``- item``
lists only. Nested mappings and multi-line scalars are not supported; such
lines are ignored.
"""

from __future__ import annotations

import re
from html import escape
from typing import List, Tuple

from filepeek.models import FrontMatter

_DELIMITER = "---"
_LIST_ITEM = re.compile(r"^\s*-\s+(.+)$")
_KEY_VALUE = re.compile(r"^([^:]+):\s*(.*)$")


def extract_front_matter(text: str) -> Tuple[str | None, str]:
    """Split ``text`` into ``(block, body)``.

    ``block`` is ``None`` when the text does not open with a ``---`` line or
    the block is never closed; the whole text is then the body.
    """
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip("\r\n") != _DELIMITER:
        return None, text

    for index in range(1, len(lines)):
        if lines[index].rstrip("\r\n") == _DELIMITER:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return block, body
    return None, text


def parse_front_matter(block: str) -> FrontMatter:
    """Parse a front-matter block. Never raises; unknown lines are skipped."""
    front_matter: FrontMatter = {}
    current_key = ""

    for line in block.splitlines():
        if not line.strip():
            continue

        item = _LIST_ITEM.match(line)
        if item:
            values = front_matter.get(current_key)
            if isinstance(values, list):
                values.append(item.group(1).strip())
            continue

        pair = _KEY_VALUE.match(line)
        if pair:
            current_key = pair.group(1).strip()
            value = pair.group(2).strip()
            front_matter[current_key] = value if value else []

    return front_matter


def _format_value(value: str | List[str]) -> str:
    if isinstance(value, list):
        return " ".join(f'<span class="fm-tag">{escape(item)}</span>' for item in value)
    return escape(value)


def render_front_matter(front_matter: FrontMatter) -> str:
    """Render parsed front matter as HTML; ``""`` when nothing survives."""
    entries = [(key, value) for key, value in front_matter.items() if value]
    if not entries:
        return ""

    items = []
    for key, value in entries:
        is_tag = key == "tags" or (isinstance(value, list) and len(value) > 1)
        value_class = "fm-value fm-tags" if is_tag else "fm-value"
        items.append(
            '<div class="fm-item">'
            f'<span class="fm-key">{escape(key)}</span>'
            f'<span class="{value_class}">{_format_value(value)}</span>'
            "</div>"
        )
    return f'<div class="fm-container">{"".join(items)}</div>'
