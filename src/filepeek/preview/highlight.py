"""Code highlighting grammar resolution and rendering.

Grammar names follow the client-side highlighter's naming. ``highlight_code``
renders server-side with Pygments, mapping each grammar to a Pygments lexer
and falling back to ``guess_lexer`` when no grammar matches.
"""

from __future__ import annotations

import logging
from typing import Optional

from pygments import highlight
from pygments.formatters import HtmlFormatter
from pygments.lexers import get_lexer_by_name, guess_lexer
from pygments.lexers.special import TextLexer
from pygments.util import ClassNotFound

from filepeek.render.sanitize import sanitize_html

LOGGER = logging.getLogger(__name__)

# Returned by resolve_language when the caller should auto-detect.
AUTO_DETECT: Optional[str] = None

REGISTERED_GRAMMARS = frozenset(
    {
        "bash", "c", "cpp", "cs", "dockerfile", "go", "graphql", "ini",
        "java", "javascript", "json", "kotlin", "lua", "makefile", "php",
        "plaintext", "protobuf", "python", "ruby", "rust", "sql", "swift",
        "typescript", "xml", "yaml",
    }
)

LANGUAGE_ALIASES = {
    "yml": "yaml",
    "sh": "bash",
    "zsh": "bash",
    "js": "javascript",
    "mjs": "javascript",
    "cjs": "javascript",
    "jsx": "javascript",
    "ts": "typescript",
    "tsx": "typescript",
    "py": "python",
    "rb": "ruby",
    "rs": "rust",
    "proto": "protobuf",
    "gql": "graphql",
    "kt": "kotlin",
    "kts": "kotlin",
    "html": "xml",
    "cc": "cpp",
    "cxx": "cpp",
    "h": "cpp",
    "hh": "cpp",
    "hpp": "cpp",
    "hxx": "cpp",
    "gitignore": "ini",
    "env": "ini",
    "conf": "ini",
    "toml": "ini",
    "properties": "ini",
    "eslintrc": "json",
    "prettierrc": "json",
    "tsconfig": "json",
    "lock": "plaintext",
    "gradle": "plaintext",
    "vue": "plaintext",
    "svelte": "plaintext",
    "astro": "plaintext",
    "scala": "plaintext",
    "dart": "plaintext",
    "r": "plaintext",
    "clj": "plaintext",
    "cljs": "plaintext",
    "cljc": "plaintext",
    "ps1": "plaintext",
    "psm1": "plaintext",
    "bat": "plaintext",
    "cmd": "plaintext",
    "css": "plaintext",
    "scss": "plaintext",
    "sass": "plaintext",
    "less": "plaintext",
    "styl": "plaintext",
}

# Grammar names whose Pygments alias differs.
_PYGMENTS_NAMES = {
    "cs": "csharp",
    "dockerfile": "docker",
    "makefile": "make",
    "plaintext": "text",
}


def _filename_grammar(filename: str) -> str | None:
    lower = filename.lower()
    if lower == "dockerfile" or lower.startswith("dockerfile."):
        return "dockerfile"
    if lower == "makefile" or lower.startswith("makefile."):
        return "makefile"
    return None


def resolve_language(extension: str | None, filename: str | None = None) -> str | None:
    """Return the grammar for ``extension`` or ``AUTO_DETECT``.

    Dockerfile and Makefile style names win over the extension. Otherwise the
    alias table is applied and the result must be a registered grammar.
    """
    if filename:
        named = _filename_grammar(filename)
        if named is not None:
            return named

    if not extension:
        return AUTO_DETECT
    key = extension.lower().lstrip(".")
    grammar = LANGUAGE_ALIASES.get(key, key)
    if grammar in REGISTERED_GRAMMARS:
        return grammar
    return AUTO_DETECT


def _lexer_for(content: str, grammar: str | None):
    if grammar is not None:
        try:
            return get_lexer_by_name(_PYGMENTS_NAMES.get(grammar, grammar))
        except ClassNotFound:
            LOGGER.debug("No Pygments lexer for grammar %s, guessing", grammar)
    try:
        return guess_lexer(content)
    except ClassNotFound:
        return TextLexer()


def highlight_code(
    content: str, extension: str | None = None, filename: str | None = None
) -> tuple[str, str | None]:
    """Highlight ``content`` and return ``(sanitized_html, grammar)``.

    ``grammar`` is ``None`` when the lexer was picked by auto-detection.
    """
    grammar = resolve_language(extension, filename)
    lexer = _lexer_for(content, grammar)
    formatter = HtmlFormatter(nowrap=True)
    highlighted = highlight(content, lexer, formatter)
    return sanitize_html(f'<pre><code class="hljs">{highlighted}</code></pre>'), grammar
