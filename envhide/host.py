"""Documents and deferred scheduling: what the engine needs from its host."""

from __future__ import annotations

import heapq
import itertools
import logging
import os
import stat
import tempfile
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Callable, Iterable, Optional

logger = logging.getLogger(__name__)

_handles = itertools.count(1)

ChangeListener = Callable[["Document"], None]


class Document(ABC):
    """An open document, identified by a stable integer handle."""

    def __init__(self, name: str = "", kind: Optional[str] = None) -> None:
        self.handle: int = next(_handles)
        self.name = name
        self.kind = kind
        self.modified = False
        self._valid = True
        self._listeners: list[ChangeListener] = []

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.handle} {self.name!r}>"

    @abstractmethod
    def get_lines(self) -> list[str]:
        """Return every line of the document, without line terminators."""

    @abstractmethod
    def _replace(self, lines: list[str]) -> None:
        """Store *lines* as the new content."""

    def set_lines(self, lines: Iterable[str]) -> None:
        """Replace all content and notify change listeners.

        Replacing content marks the document modified, as an editor would.
        Callers that must not dirty the document reset :attr:`modified`.
        """
        if not self._valid:
            raise RuntimeError(f"{self!r} is closed")
        self._replace(list(lines))
        self.modified = True
        for listener in list(self._listeners):
            listener(self)

    def subscribe(self, listener: ChangeListener) -> None:
        self._listeners.append(listener)

    def is_valid(self) -> bool:
        return self._valid

    def close(self) -> None:
        self._valid = False
        self._listeners.clear()


class MemoryDocument(Document):
    """A document that only lives in memory."""

    def __init__(
        self,
        name: str = "",
        lines: Iterable[str] = (),
        kind: Optional[str] = None,
    ) -> None:
        super().__init__(name, kind)
        self._lines = list(lines)

    def get_lines(self) -> list[str]:
        return list(self._lines)

    def _replace(self, lines: list[str]) -> None:
        self._lines = lines


class FileDocument(MemoryDocument):
    """A document loaded from, and written back to, a file on disk.

    Lines are split on ``\\n`` only, so ``\\r`` of CRLF files stays part of
    each line and is written back unchanged.
    """

    def __init__(self, path: str | Path, kind: Optional[str] = None) -> None:
        self.path = Path(path)
        self.final_newline = True
        lines: list[str] = []
        if self.path.exists():
            text = self.path.read_bytes().decode("utf-8")
            if text:
                lines = text.split("\n")
                self.final_newline = lines[-1] == ""
                if self.final_newline:
                    lines.pop()
        super().__init__(str(self.path), lines, kind)

    def write(self, lines: Iterable[str]) -> None:
        """Persist *lines* to :attr:`path` atomically and mark the document clean."""
        lines = list(lines)
        content = "\n".join(lines)
        if self.final_newline and lines:
            content += "\n"

        # Keep the mode of an existing file; new files are owner-only.
        mode = stat.S_IRUSR | stat.S_IWUSR
        if self.path.exists():
            mode = stat.S_IMODE(self.path.stat().st_mode)

        # Atomic write: write to a temp file in the same directory, then rename.
        fd, tmp_path = tempfile.mkstemp(
            dir=self.path.parent,
            prefix=f".{self.path.name}.tmp.",
            suffix="",
        )
        closed = False
        try:
            os.write(fd, content.encode("utf-8"))
            os.fchmod(fd, mode)
            os.close(fd)
            closed = True
            os.replace(tmp_path, self.path)
        except BaseException:
            if not closed:
                os.close(fd)
            if os.path.exists(tmp_path):
                os.unlink(tmp_path)
            raise
        self.modified = False
        logger.debug("Wrote %s", self.path)


# ---------------------------------------------------------------------------
# Deferred scheduling
# ---------------------------------------------------------------------------


class Scheduler(ABC):
    """Runs callbacks after a delay, outside the caller's call stack."""

    @abstractmethod
    def defer(self, callback: Callable[[], None], delay_ms: int) -> None:
        """Schedule *callback* to run once after *delay_ms* milliseconds."""


class ManualScheduler(Scheduler):
    """A scheduler driven by a virtual clock.

    Nothing runs until :meth:`advance` or :meth:`run_pending` is called,
    which keeps deferred work deterministic in tests and one-shot tools.
    """

    def __init__(self) -> None:
        self.now = 0
        self._queue: list[tuple[int, int, Callable[[], None]]] = []
        self._seq = itertools.count()

    def __len__(self) -> int:
        return len(self._queue)

    def defer(self, callback: Callable[[], None], delay_ms: int) -> None:
        heapq.heappush(self._queue, (self.now + max(delay_ms, 0), next(self._seq), callback))

    def advance(self, ms: int) -> int:
        """Move the clock forward *ms*, running everything that falls due.

        Returns the number of callbacks run.
        """
        target = self.now + ms
        ran = 0
        while self._queue and self._queue[0][0] <= target:
            due, _, callback = heapq.heappop(self._queue)
            self.now = due
            self._run(callback)
            ran += 1
        self.now = target
        return ran

    def run_pending(self) -> int:
        """Run callbacks until the queue is empty, including newly deferred ones."""
        ran = 0
        while self._queue:
            ran += self.advance(self._queue[0][0] - self.now)
        return ran

    @staticmethod
    def _run(callback: Callable[[], None]) -> None:
        # Deferred callbacks are fire-and-forget; a failure must not stop the loop.
        try:
            callback()
        except Exception:
            logger.exception("Deferred callback %r failed", callback)
