"""Presentation category of a file, decided from its name alone."""

from __future__ import annotations

from filepeek.models import Classification
from filepeek.preview.highlight import resolve_language

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "svg", "webp", "bmp", "ico"})

MARKDOWN_EXTENSIONS = frozenset({"md", "markdown"})

CODE_EXTENSIONS = frozenset(
    {
        "js", "jsx", "ts", "tsx", "mjs", "cjs", "py", "rb", "go", "rs", "java",
        "c", "cc", "cpp", "cxx", "h", "hh", "hpp", "hxx", "m", "mm",
        "cs", "kt", "kts", "swift", "php", "lua", "scala", "groovy",
        "clj", "cljs", "cljc", "dart", "r",
        "css", "scss", "sass", "less", "styl",
        "html", "xml", "yaml", "yml", "json", "toml", "ini", "conf",
        "sh", "bash", "zsh", "ps1", "psm1", "bat", "cmd",
        "sql", "dockerfile", "proto", "graphql", "gql", "vue", "svelte", "astro",
        "env", "gitignore", "eslintrc", "prettierrc", "lock", "tsconfig",
        "gradle", "properties", "makefile",
    }
)

TEXT_EXTENSIONS = frozenset(
    {
        "txt", "md", "markdown", "json", "js", "jsx", "ts", "tsx", "mjs", "cjs",
        "css", "html", "xml", "yaml", "yml", "ini", "conf",
        "py", "rb", "go", "rs", "java", "c", "cpp", "h",
        "sh", "bash", "zsh", "sql", "graphql", "gql", "toml",
        "env", "gitignore", "eslintrc", "prettierrc",
        "lock", "tsconfig", "dockerfile", "makefile",
        "proto", "vue", "svelte", "astro",
        "cs", "kt", "kts", "swift", "php", "lua", "scala", "groovy",
        "clj", "cljs", "cljc", "gradle", "properties",
    }
)

_CONVENTION_FILES = ("dockerfile", "makefile")


def _convention_name(name: str) -> str | None:
    lower = name.lower()
    for convention in _CONVENTION_FILES:
        if lower == convention or lower.startswith(convention + "."):
            return convention
    return None


def file_extension(name: str) -> str:
    """Lower-cased extension of ``name`` without the dot.

    ``Dockerfile*`` and ``Makefile*`` map to pseudo-extensions, and hidden
    files such as ``.gitignore`` use the remainder of the name.
    """
    convention = _convention_name(name)
    if convention is not None:
        return convention

    lower = name.lower()
    if lower.startswith(".") and "." not in lower[1:]:
        return lower[1:]

    idx = lower.rfind(".")
    if idx <= 0 or idx == len(lower) - 1:
        return ""
    return lower[idx + 1 :]


def is_image(extension: str) -> bool:
    return extension.lower() in IMAGE_EXTENSIONS


def is_markdown(extension: str) -> bool:
    return extension.lower() in MARKDOWN_EXTENSIONS


def is_code(extension: str, name: str | None = None) -> bool:
    if name and _convention_name(name) is not None:
        return True
    return extension.lower() in CODE_EXTENSIONS


def is_text(extension: str) -> bool:
    return extension.lower() in TEXT_EXTENSIONS


def classify(name: str) -> Classification:
    """Map a file name to its presentation category.

    Directories are never passed here; the caller handles them.
    """
    extension = file_extension(name)
    if is_image(extension):
        return Classification(category="image", extension=extension)
    if is_markdown(extension):
        return Classification(category="markdown", extension=extension)
    if is_code(extension, name):
        return Classification(
            category="code",
            extension=extension,
            language=resolve_language(extension, name),
        )
    if is_text(extension):
        return Classification(category="text", extension=extension)
    return Classification(category="binary", extension=extension)
