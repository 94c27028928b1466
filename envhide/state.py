"""Per-document record of the original content while values are hidden."""

from __future__ import annotations

import logging
from typing import Iterable, Optional

from .errors import AlreadySnapshotted, NoSnapshot
from .models import DocumentSnapshot

logger = logging.getLogger(__name__)


class SnapshotStore:
    """Snapshots keyed by document handle.

    A store belongs to exactly one :class:`~envhide.orchestrator.EnvHider`;
    it is the only place the real content of a hidden document lives.
    """

    def __init__(self) -> None:
        self._snapshots: dict[int, DocumentSnapshot] = {}
        self._pending: set[int] = set()

    def __contains__(self, handle: int) -> bool:
        return handle in self._snapshots

    def __len__(self) -> int:
        return len(self._snapshots)

    def snapshot(
        self,
        handle: int,
        lines: Iterable[str],
        was_modified: bool,
        masked_lines: Iterable[str] = (),
    ) -> DocumentSnapshot:
        """Record *lines* as the original content of *handle*."""
        if handle in self._snapshots:
            raise AlreadySnapshotted(handle)
        snap = DocumentSnapshot(
            original_lines=tuple(lines),
            was_modified=was_modified,
            masked_lines=tuple(masked_lines),
        )
        self._snapshots[handle] = snap
        logger.debug("Snapshot taken for document %d (%d lines)", handle, len(snap.original_lines))
        return snap

    def lookup(self, handle: int) -> Optional[DocumentSnapshot]:
        return self._snapshots.get(handle)

    def restore(self, handle: int) -> list[str]:
        """Return the original lines recorded for *handle*."""
        snap = self._snapshots.get(handle)
        if snap is None:
            logger.error("No snapshot for document %d; original content may be lost", handle)
            raise NoSnapshot(handle)
        return list(snap.original_lines)

    def discard(self, handle: int) -> None:
        self._snapshots.pop(handle, None)

    # ------------------------------------------------------------------
    # Save sequence
    # ------------------------------------------------------------------

    def mark_pending(self, handle: int) -> None:
        """Remember that *handle* must be hidden again once it is saved."""
        self._pending.add(handle)

    def is_pending(self, handle: int) -> bool:
        return handle in self._pending

    def take_pending(self, handle: int) -> bool:
        """Clear the rehide marker, returning whether one was set."""
        if handle in self._pending:
            self._pending.discard(handle)
            return True
        return False

    def clear(self, handle: int) -> None:
        """Forget everything about *handle* (the document was closed)."""
        self.discard(handle)
        self._pending.discard(handle)
