"""Hide, show and toggle env values in open documents.

:class:`EnvHider` swaps a document's content for a masked rendering and
keeps the originals in its own :class:`~envhide.state.SnapshotStore`.
Whatever is written to disk comes from the originals: before a save the
document is shown, after the save it is hidden again.
"""

from __future__ import annotations

import fnmatch
import logging
from pathlib import PurePath
from typing import Optional

from .codec import mask_lines, unmask_lines
from .config import Config
from .errors import AlreadyHidden, EnvHideError, NotEnvFile, NotHidden, PlaceholderInValue
from .host import Document, ManualScheduler, Scheduler
from .models import DisplayState
from .parser import parse_line
from .state import SnapshotStore

logger = logging.getLogger(__name__)

ENV_KINDS = ("env", "dotenv")

# Delays let the triggering event finish before the display is re-derived.
AUTO_HIDE_DELAY_MS = 100
REHIDE_DELAY_MS = 50


class DeferredHide:
    """A hide scheduled to run after the event that asked for it.

    ``reason`` is ``"auto"`` (hide a freshly opened document) or
    ``"rehide"`` (re-derive the masked display after an edit).
    """

    def __init__(self, hider: EnvHider, document: Document, reason: str) -> None:
        self.hider = hider
        self.document = document
        self.handle = document.handle
        self.reason = reason

    def __repr__(self) -> str:
        return f"<DeferredHide {self.reason} document={self.handle}>"

    def __call__(self) -> None:
        doc = self.document
        if not doc.is_valid():
            logger.debug("Document %d closed before %s ran", self.handle, self.reason)
            return
        try:
            if self.reason == "auto":
                if self.hider.state(doc) is DisplayState.SHOWN:
                    self.hider.hide(doc)
            else:
                self.hider.refresh(doc)
        except EnvHideError as exc:
            logger.warning("Deferred %s skipped for document %d: %s", self.reason, self.handle, exc)


class EnvHider:
    """Masks values of env documents and restores them on demand."""

    def __init__(
        self,
        config: Optional[Config] = None,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        self.config = config or Config()
        self.scheduler = scheduler or ManualScheduler()
        self._store = SnapshotStore()
        # Handles whose content is being replaced by us, not by the user.
        self._applying: set[int] = set()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def is_env_file(self, doc: Document) -> bool:
        """True if *doc*'s file name matches a pattern or its kind is env."""
        basename = PurePath(doc.name).name if doc.name else ""
        if basename and any(
            fnmatch.fnmatchcase(basename, pattern) for pattern in self.config.patterns
        ):
            return True
        return doc.kind in ENV_KINDS

    def state(self, doc: Document) -> DisplayState:
        if self._store.is_pending(doc.handle):
            return DisplayState.SAVING
        if doc.handle in self._store:
            return DisplayState.HIDDEN
        return DisplayState.SHOWN

    def persistable_lines(self, doc: Document) -> list[str]:
        """Lines that may be written to disk for *doc*.

        While hidden these are the originals, including any edits made to
        the masked display; otherwise the displayed lines.
        """
        if doc.handle in self._store:
            return self._originals(doc)
        return doc.get_lines()

    # ------------------------------------------------------------------
    # Commands
    # ------------------------------------------------------------------

    def hide(self, doc: Document) -> None:
        self._require_env(doc)
        if self.state(doc) is not DisplayState.SHOWN:
            raise AlreadyHidden(doc.name)
        self._hide_lines(doc, doc.get_lines(), doc.modified)
        logger.debug("Document %d hidden", doc.handle)

    def show(self, doc: Document) -> None:
        self._require_env(doc)
        if self.state(doc) is not DisplayState.HIDDEN:
            raise NotHidden(doc.name)
        originals = self._originals(doc)
        self._apply(doc, originals, doc.modified)
        self._store.discard(doc.handle)
        logger.debug("Document %d shown", doc.handle)

    def toggle(self, doc: Document) -> DisplayState:
        if self.state(doc) is DisplayState.HIDDEN:
            self.show(doc)
        else:
            self.hide(doc)
        return self.state(doc)

    def refresh(self, doc: Document) -> bool:
        """Re-mask a hidden document whose display was edited.

        Returns True if the display was re-derived, False if there was
        nothing to do.
        """
        snap = self._store.lookup(doc.handle)
        if snap is None or self.state(doc) is not DisplayState.HIDDEN:
            return False
        if doc.get_lines() == list(snap.masked_lines):
            return False

        originals = self._originals(doc)
        self._store.discard(doc.handle)
        try:
            self._hide_lines(doc, originals, doc.modified)
        except Exception:
            self._store.snapshot(
                doc.handle, snap.original_lines, snap.was_modified, snap.masked_lines
            )
            raise
        logger.debug("Document %d re-hidden after edit", doc.handle)
        return True

    # ------------------------------------------------------------------
    # Host events
    # ------------------------------------------------------------------

    def on_open(self, doc: Document) -> None:
        if self.config.auto_hide and self.is_env_file(doc):
            self.scheduler.defer(DeferredHide(self, doc, "auto"), AUTO_HIDE_DELAY_MS)

    def on_change(self, doc: Document) -> None:
        if doc.handle in self._applying:
            return
        if self.state(doc) is DisplayState.HIDDEN:
            self.scheduler.defer(DeferredHide(self, doc, "rehide"), REHIDE_DELAY_MS)

    def on_before_save(self, doc: Document) -> None:
        """Put the originals back in place before *doc* is written.

        Raises :class:`~envhide.errors.UnsafeEdit` and leaves the document
        hidden if the originals cannot be recovered, or if a masked line
        would reach the file.
        """
        if self.state(doc) is not DisplayState.HIDDEN:
            return
        snap = self._store.lookup(doc.handle)
        originals = self._originals(doc)
        placeholders = set(snap.masked_lines) - set(snap.original_lines)
        stray = [line for line in originals if line in placeholders]
        if stray:
            logger.error("Document %d would write masked lines; save refused", doc.handle)
            raise PlaceholderInValue([parse_line(line).key for line in stray])
        self._apply(doc, originals, doc.modified)
        self._store.discard(doc.handle)
        self._store.mark_pending(doc.handle)
        logger.debug("Document %d saving with original content", doc.handle)

    def on_after_save(self, doc: Document) -> None:
        """Hide *doc* again if it was hidden when the save started.

        Called whether or not the write succeeded.  If hiding fails the
        document is left shown.
        """
        if not self._store.take_pending(doc.handle) or not doc.is_valid():
            return
        try:
            self.hide(doc)
        except EnvHideError:
            logger.warning("Could not hide document %d again after saving", doc.handle)
            raise

    def on_close(self, doc: Document) -> None:
        self._store.clear(doc.handle)
        self._applying.discard(doc.handle)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _require_env(self, doc: Document) -> None:
        if not self.is_env_file(doc):
            raise NotEnvFile(doc.name)

    def _originals(self, doc: Document) -> list[str]:
        originals = self._store.restore(doc.handle)
        snap = self._store.lookup(doc.handle)
        displayed = doc.get_lines()
        if snap is None or displayed == list(snap.masked_lines):
            return originals
        return unmask_lines(
            displayed, snap, self.config.hide_char, self.config.min_hide_length
        )

    def _hide_lines(self, doc: Document, lines: list[str], was_modified: bool) -> None:
        masked = mask_lines(lines, self.config.hide_char, self.config.min_hide_length)
        self._store.snapshot(doc.handle, lines, was_modified, masked)
        try:
            self._apply(doc, masked, was_modified)
        except Exception:
            self._store.discard(doc.handle)
            raise

    def _apply(self, doc: Document, lines: list[str], modified: bool) -> None:
        """Replace *doc*'s content without dirtying it or firing a rehide."""
        self._applying.add(doc.handle)
        try:
            doc.set_lines(lines)
        finally:
            self._applying.discard(doc.handle)
            doc.modified = modified
