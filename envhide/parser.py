"""Classify .env lines and split assignments into their exact parts."""

from __future__ import annotations

import re
from typing import Iterable

from .models import EnvLine, LineKind, QuoteStyle

# Matches:  export KEY=value  (prefix keeps the whitespace around `export`)
_EXPORT_RE = re.compile(
    r"""^
    (\s*export\s+)          # leading whitespace, 'export', whitespace
    ([A-Za-z0-9_]+)         # key
    (\s*=\s*)               # equals sign with optional whitespace
    (.*)                    # raw value (quotes handled below)
    \Z""",
    re.VERBOSE,
)

# Matches:  KEY=value  or  KEY="value"  or  KEY='value'
_PAIR_RE = re.compile(
    r"""^
    (\s*)                   # leading whitespace
    ([A-Za-z0-9_]+)         # key
    (\s*=\s*)               # equals sign with optional whitespace
    (.*)                    # raw value (quotes handled below)
    \Z""",
    re.VERBOSE,
)

_COMMENT_RE = re.compile(r"^\s*#")
_BLANK_RE = re.compile(r"^\s*$")

_QUOTES = {'"': QuoteStyle.DOUBLE, "'": QuoteStyle.SINGLE}


def _split_quotes(raw: str) -> tuple[QuoteStyle, str]:
    """Return the quote style wrapping *raw* and the interior text.

    Only a value fully wrapped in one matching pair counts as quoted; the
    interior may contain anything, including the other kind of quote.
    """
    if len(raw) >= 2 and raw[0] in _QUOTES and raw[-1] == raw[0]:
        return _QUOTES[raw[0]], raw[1:-1]
    return QuoteStyle.NONE, raw


def parse_line(raw: str) -> EnvLine:
    """Parse a single line of an env file.

    - Blank lines and full-line comments are classified and left alone.
    - ``export KEY=value`` is tried before ``KEY=value``.
    - Only the first ``=`` ends the key; the rest of the line is the value.
    - Anything else is :attr:`LineKind.UNPARSED`, never an error.
    """
    if _BLANK_RE.match(raw):
        return EnvLine(raw=raw, kind=LineKind.BLANK)
    if _COMMENT_RE.match(raw):
        return EnvLine(raw=raw, kind=LineKind.COMMENT)

    # A CRLF line keeps its carriage return outside the value.
    eol = "\r" if raw.endswith("\r") else ""
    body = raw[: len(raw) - len(eol)]

    m = _EXPORT_RE.match(body) or _PAIR_RE.match(body)
    if not m:
        return EnvLine(raw=raw, kind=LineKind.UNPARSED)

    prefix, key, separator, remainder = m.groups()
    quote, value = _split_quotes(remainder)
    return EnvLine(
        raw=raw,
        kind=LineKind.ASSIGNMENT,
        prefix=prefix,
        key=key,
        separator=separator,
        quote=quote,
        value=value,
        eol=eol,
    )


def parse_lines(lines: Iterable[str]) -> list[EnvLine]:
    """Parse every line of a document, preserving order."""
    return [parse_line(line) for line in lines]
