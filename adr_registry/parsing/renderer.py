"""Markdown -> HTML rendering backed by markdown-it-py."""
from __future__ import annotations

from markdown_it import MarkdownIt


class MarkdownRenderer:
    """
    CommonMark renderer with GitHub-style tables and strikethrough.

    Raw HTML in ADR sources is escaped rather than passed through: the files
    come from many repositories and end up on a shared site.
    """

    def __init__(self) -> None:
        self._md = (
            MarkdownIt("commonmark", {"html": False, "linkify": False, "typographer": False})
            .enable("table")
            .enable("strikethrough")
        )

    def render(self, text: str) -> str:
        return self._md.render(text)
