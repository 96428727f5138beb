"""Markdown to sanitized HTML."""

from filepeek.render.markdown import render, render_markdown

__all__ = ["render", "render_markdown"]
