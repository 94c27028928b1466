"""Output formatters for document views."""

from __future__ import annotations

from typing import Sequence

from .json_fmt import format_json
from .terminal import format_table, format_text

__all__ = ["format_table", "format_text", "format_json", "render_document"]


def render_document(
    lines: Sequence[str],
    fmt: str = "text",
    *,
    name: str = "",
    hidden: bool = True,
) -> str:
    """Render the displayed *lines* of a document using the requested format.

    Args:
        lines: The lines as displayed (masked when *hidden*).
        fmt: ``"text"`` for the file content, ``"table"`` for a Rich table
            of parsed lines, ``"json"`` for JSON.
        name: Document name shown in headers.
        hidden: Whether *lines* carry masked values.

    Returns:
        A string representation of the document (may contain ANSI codes for table).
    """
    if fmt == "json":
        return format_json(lines, name=name, hidden=hidden)
    if fmt == "table":
        return format_table(lines, name=name, hidden=hidden)
    return format_text(lines)
