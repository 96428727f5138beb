"""Markdown rendering pipeline.

Stages: front matter extraction and rendering, markdown-it conversion of the
body, rewriting of ``[[path|label]]`` wiki links and ``(label)[path]``
reverse links into internal anchors, and finally sanitization.
"""

from __future__ import annotations

import logging
import re
from html import escape, unescape

from markdown_it import MarkdownIt

from filepeek.models import RenderedDocument
from filepeek.render.frontmatter import extract_front_matter, parse_front_matter, render_front_matter
from filepeek.render.sanitize import LINK_REL, sanitize_html

LOGGER = logging.getLogger(__name__)

INTERNAL_LINK_CLASS = "internal-link"

_WIKI_LINK = re.compile(r"\[\[([^\]|]+)(?:\|([^\]]+))?\]\]")
_REVERSE_LINK = re.compile(r"\(([^)]+)\)\[([^\]]+)\]")
_CODE_SEGMENT = re.compile(r"(<pre[\s>].*?</pre>|<code[\s>].*?</code>)", re.DOTALL)
_TAG = re.compile(r"(<[^>]*>)")


def _render_link_open(self, tokens, idx, options, env):
    token = tokens[idx]
    token.attrSet("target", "_blank")
    token.attrSet("rel", LINK_REL)
    return self.renderToken(tokens, idx, options, env)


def _build_markdown() -> MarkdownIt:
    md = MarkdownIt("commonmark", {"html": False, "linkify": False, "breaks": True})
    md.enable(["table", "strikethrough"])
    md.add_render_rule("link_open", _render_link_open)
    return md


_markdown = _build_markdown()


def _internal_anchor(path: str, label: str) -> str:
    escaped_path = escape(path, quote=True)
    return (
        f'<a href="#" data-file-path="{escaped_path}" class="{INTERNAL_LINK_CLASS}" '
        f'title="{escaped_path}">{escape(label)}</a>'
    )


def _text_only(html: str, transform) -> str:
    # Odd indices are tags; attribute values are never rewritten.
    parts = _TAG.split(html)
    return "".join(part if index % 2 else transform(part) for index, part in enumerate(parts))


def _outside_code(html: str, transform) -> str:
    """Apply ``transform`` to text nodes that are not inside ``<pre>``/``<code>``.

    A link has to sit inside a single text node to match, so syntax spread
    across inline tags such as ``(see *x*)[p]`` is left as written.
    """
    # Odd indices are <pre>/<code> segments and stay verbatim.
    parts = _CODE_SEGMENT.split(html)
    return "".join(
        part if index % 2 else _text_only(part, transform) for index, part in enumerate(parts)
    )


def _replace_wiki_link(match: re.Match) -> str:
    path = unescape(match.group(1))
    label = unescape(match.group(2)) if match.group(2) else path.split("/")[-1] or path
    return _internal_anchor(path, label)


def _replace_reverse_link(match: re.Match) -> str:
    return _internal_anchor(unescape(match.group(2)), unescape(match.group(1)))


def convert_wiki_links(html: str) -> str:
    """``[[path]]`` / ``[[path|label]]`` to internal anchors."""
    return _outside_code(html, lambda part: _WIKI_LINK.sub(_replace_wiki_link, part))


def convert_reverse_links(html: str) -> str:
    """``(label)[path]`` to internal anchors."""
    return _outside_code(html, lambda part: _REVERSE_LINK.sub(_replace_reverse_link, part))


def render_body(text: str) -> str:
    """Markdown to HTML with internal links rewritten; not yet sanitized."""
    html = _markdown.render(text)
    html = convert_wiki_links(html)
    return convert_reverse_links(html)


def render(text: str) -> RenderedDocument:
    """Render markdown source into sanitized front matter and body HTML."""
    if not text:
        return RenderedDocument()

    block, body = extract_front_matter(text)
    front_matter_html = ""
    if block is not None:
        front_matter_html = render_front_matter(parse_front_matter(block))

    LOGGER.debug("Rendering markdown: %d chars, front matter: %s", len(text), bool(front_matter_html))
    return RenderedDocument(
        front_matter_html=sanitize_html(front_matter_html),
        body_html=sanitize_html(render_body(body)),
    )


def render_markdown(text: str) -> str:
    """Render markdown source into a single sanitized HTML string."""
    return render(text).html
