"""Core data models for envhide."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class LineKind(str, Enum):
    """How a single line of an env file was classified."""

    BLANK = "blank"
    COMMENT = "comment"
    ASSIGNMENT = "assignment"
    UNPARSED = "unparsed"  # not blank, not a comment, not KEY=VALUE


class QuoteStyle(str, Enum):
    NONE = ""
    DOUBLE = '"'
    SINGLE = "'"


class DisplayState(str, Enum):
    """Display state of a document with respect to masking."""

    SHOWN = "shown"
    HIDDEN = "hidden"
    SAVING = "saving"  # originals restored for a write, rehide owed


@dataclass(frozen=True)
class EnvLine:
    """A parsed line of an env file.

    For assignments, ``prefix + key + separator + quote + value + quote +
    eol`` reproduces ``raw`` exactly.  ``eol`` holds the carriage return of
    a CRLF line.
    """

    raw: str
    kind: LineKind
    prefix: str = ""
    key: str = ""
    separator: str = ""
    quote: QuoteStyle = QuoteStyle.NONE
    value: str = ""
    eol: str = ""

    @property
    def is_assignment(self) -> bool:
        return self.kind == LineKind.ASSIGNMENT

    @property
    def is_exported(self) -> bool:
        return self.is_assignment and "export" in self.prefix

    @property
    def maskable(self) -> bool:
        """True when the line carries a non-empty value to hide."""
        return self.is_assignment and bool(self.value)


@dataclass(frozen=True)
class DocumentSnapshot:
    """The true content of a document while it is hidden."""

    original_lines: tuple[str, ...]
    was_modified: bool
    masked_lines: tuple[str, ...] = field(default_factory=tuple)
