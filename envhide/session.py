"""An in-process editing session: open documents, commands and keymaps.

The session plays the part of the editor around :class:`EnvHider`.  It
routes document events to it, exposes the ``EnvHide`` / ``EnvShow`` /
``EnvToggle`` commands on the active document, and reports every outcome
as a short status message.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Callable, Iterable, Optional

from rich.console import Console
from rich.markup import escape

from .config import Config
from .errors import EnvHideError
from .host import Document, FileDocument, ManualScheduler, MemoryDocument, Scheduler
from .models import DisplayState
from .orchestrator import EnvHider

logger = logging.getLogger(__name__)

# Status level → (logging level, Rich style)
_LEVELS: dict[str, tuple[int, str]] = {
    "info": (logging.INFO, "bold green"),
    "warning": (logging.WARNING, "bold yellow"),
    "error": (logging.ERROR, "bold red"),
}

COMMAND_DESCRIPTIONS = {
    "EnvToggle": "Toggle env values visibility",
    "EnvHide": "Hide env values",
    "EnvShow": "Show env values",
}


class Notifier:
    """Prints status messages and keeps them for inspection."""

    def __init__(self, console: Optional[Console] = None) -> None:
        self.console = console or Console(stderr=True)
        self.history: list[tuple[str, str]] = []

    def notify(self, message: str, level: str = "info") -> None:
        log_level, style = _LEVELS.get(level, _LEVELS["info"])
        self.history.append((level, message))
        logger.log(log_level, message)
        self.console.print(f"[{style}]{escape(message)}[/]")

    @property
    def last(self) -> Optional[tuple[str, str]]:
        return self.history[-1] if self.history else None


class Session:
    """Documents open in one editor, with envhide wired into their events."""

    def __init__(
        self,
        config: Optional[Config] = None,
        scheduler: Optional[Scheduler] = None,
        notifier: Optional[Notifier] = None,
    ) -> None:
        self.config = config or Config()
        self.scheduler = scheduler or ManualScheduler()
        self.notifier = notifier or Notifier()
        self.hider = EnvHider(self.config, self.scheduler)
        self.documents: dict[int, Document] = {}
        self.active: Optional[Document] = None
        self._keymaps: dict[int, dict[str, str]] = {}
        self.commands: dict[str, Callable[[], bool]] = {
            "EnvHide": self.hide,
            "EnvShow": self.show,
            "EnvToggle": self.toggle,
        }

    # ------------------------------------------------------------------
    # Documents
    # ------------------------------------------------------------------

    def open(
        self,
        name: str | Path,
        lines: Optional[Iterable[str]] = None,
        kind: Optional[str] = None,
    ) -> Document:
        """Open *name* from disk, or as an in-memory buffer when *lines* is given."""
        if lines is None:
            doc: Document = FileDocument(name, kind=kind)
        else:
            doc = MemoryDocument(str(name), lines, kind=kind)
        return self.attach(doc)

    def attach(self, doc: Document) -> Document:
        """Register *doc*, make it active and fire the open event."""
        self.documents[doc.handle] = doc
        doc.subscribe(self.hider.on_change)
        self.active = doc
        if self.hider.is_env_file(doc):
            if not doc.kind:
                doc.kind = "env"
            self._bind_keymaps(doc)
        self.hider.on_open(doc)
        return doc

    def focus(self, doc: Document) -> None:
        if doc.handle not in self.documents:
            raise ValueError(f"{doc!r} is not open in this session")
        self.active = doc

    def edit(self, doc: Document, lines: Iterable[str]) -> None:
        """Replace the content of *doc* as a user edit would."""
        doc.set_lines(lines)

    def save(self, doc: Optional[Document] = None) -> Optional[list[str]]:
        """Write *doc* (default: active) and return the lines written.

        Returns None if the save was aborted or the write failed.  A
        document that was hidden is hidden again either way.
        """
        doc = doc or self.active
        if doc is None:
            self.notifier.notify("No active document", "warning")
            return None
        try:
            self.hider.on_before_save(doc)
        except EnvHideError as exc:
            self._report(exc)
            self.notifier.notify(f"Save of {doc.name} aborted", "error")
            return None

        written: Optional[list[str]] = None
        try:
            lines = self.hider.persistable_lines(doc)
            if isinstance(doc, FileDocument):
                doc.write(lines)
            else:
                doc.modified = False
        except OSError as exc:
            logger.debug("Write of %s failed", doc.name, exc_info=True)
            self.notifier.notify(f"Could not write {doc.name}: {exc}", "error")
        else:
            written = lines
            self.notifier.notify(f"Wrote {doc.name} ({len(lines)} lines)")
        finally:
            try:
                self.hider.on_after_save(doc)
            except EnvHideError as exc:
                self._report(exc)
        return written

    def close(self, doc: Optional[Document] = None) -> None:
        doc = doc or self.active
        if doc is None:
            return
        self.hider.on_close(doc)
        doc.close()
        self.documents.pop(doc.handle, None)
        self._keymaps.pop(doc.handle, None)
        if self.active is doc:
            self.active = next(reversed(list(self.documents.values())), None)

    # ------------------------------------------------------------------
    # Commands and keymaps
    # ------------------------------------------------------------------

    def run_command(self, name: str) -> bool:
        try:
            command = self.commands[name]
        except KeyError:
            raise ValueError(f"Unknown command: {name!r}") from None
        return command()

    def hide(self) -> bool:
        return self._dispatch(self.hider.hide, "Environment values hidden")

    def show(self) -> bool:
        return self._dispatch(self.hider.show, "Environment values shown")

    def toggle(self) -> bool:
        doc = self.active
        hidden = doc is not None and self.hider.state(doc) is DisplayState.HIDDEN
        if hidden:
            return self.show()
        return self.hide()

    def keymaps_for(self, doc: Document) -> dict[str, str]:
        """Key sequence → command name bound for *doc*."""
        return dict(self._keymaps.get(doc.handle, {}))

    def press(self, keys: str) -> bool:
        """Run the command bound to *keys* in the active document, if any."""
        if self.active is None:
            return False
        command = self._keymaps.get(self.active.handle, {}).get(keys)
        if command is None:
            return False
        self.run_command(command)
        return True

    def _bind_keymaps(self, doc: Document) -> None:
        if not self.config.enable_keymaps:
            return
        km = self.config.keymaps
        self._keymaps[doc.handle] = {
            km.toggle: "EnvToggle",
            km.hide: "EnvHide",
            km.show: "EnvShow",
        }

    def _dispatch(self, action: Callable[[Document], None], success: str) -> bool:
        doc = self.active
        if doc is None:
            self.notifier.notify("No active document", "warning")
            return False
        try:
            action(doc)
        except EnvHideError as exc:
            self._report(exc)
            return False
        self.notifier.notify(success)
        return True

    def _report(self, exc: EnvHideError) -> None:
        self.notifier.notify(str(exc), exc.level)
