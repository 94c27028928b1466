"""Exceptions raised by the envhide engine.

Every failure is local to the operation that raised it.  Callers that
face a user (the session commands and the CLI) turn these into status
messages instead of letting them escape.
"""

from __future__ import annotations


class EnvHideError(Exception):
    """Base class for all envhide errors."""

    #: Status level used when the error is reported to the user.
    level = "error"


class NotEnvFile(EnvHideError):
    """The document does not match any configured pattern or env kind."""

    level = "warning"

    def __init__(self, name: str) -> None:
        super().__init__(f"{name or '[No Name]'} is not an .env file")
        self.name = name


class StateGuard(EnvHideError):
    """An operation was a no-op because the document is already in place."""

    level = "info"


class AlreadyHidden(StateGuard):
    def __init__(self, name: str) -> None:
        super().__init__(f"Environment values already hidden in {name}")
        self.name = name


class NotHidden(StateGuard):
    def __init__(self, name: str) -> None:
        super().__init__(f"Environment values are not hidden in {name}")
        self.name = name


class NoSnapshot(EnvHideError):
    """Show was requested but no original content is on record.

    Seeing this means original data may have been lost.
    """

    def __init__(self, handle: int) -> None:
        super().__init__(f"No original content recorded for document {handle}")
        self.handle = handle


class AlreadySnapshotted(EnvHideError):
    def __init__(self, handle: int) -> None:
        super().__init__(f"Document {handle} already has original content recorded")
        self.handle = handle


class UnsafeEdit(EnvHideError):
    """An edit made while values were hidden cannot be mapped back safely.

    The display is left as it is and nothing is written until the edit is
    undone or the line is retyped in full.
    """


class PlaceholderInValue(UnsafeEdit):
    def __init__(self, keys: list[str]) -> None:
        super().__init__(
            f"Hidden placeholder text left in {', '.join(keys)}; "
            "show the values before editing them"
        )
        self.keys = keys


class AmbiguousEdit(UnsafeEdit):
    def __init__(self, line: str) -> None:
        super().__init__(
            f"Cannot tell which hidden value {line!r} stands for; "
            "undo the edit or show the values first"
        )
        self.line = line
