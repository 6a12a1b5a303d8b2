"""Editing session: one document with its history.

An EditingSession owns the deferred queue, the HistoryManager and the two
stores for one open ledger file. Opening another file means creating a new
session; history never crosses documents.
"""

from __future__ import annotations

import logging
from pathlib import Path

from ..models.entry import DataEntry
from .deferred import DeferredQueue
from .history import HistoryManager
from .ledger_file import load_ledger, save_ledger
from .ledger_store import LedgerStore
from .settings_store import SettingsStore

logger = logging.getLogger(__name__)


class EditingSession:
    """A ledger document being edited.

    Usage:
        session = EditingSession.open_file(path)
        session.ledger.set_value(202403, 0, "amount", 1200)
        session.flush()       # end of the user command
        session.undo()
        session.save()
    """

    def __init__(
        self,
        file_path: Path | None = None,
        queue: DeferredQueue | None = None,
        backup_count: int = 1,
    ):
        """Create an empty session.

        Args:
            file_path: File this session saves to (None until saved).
            queue: Deferred queue to commit undo steps on; a new one if None.
            backup_count: Number of backups kept when saving.
        """
        self.file_path = file_path
        self.backup_count = backup_count

        self.queue = queue if queue is not None else DeferredQueue()
        self.history = HistoryManager(self.queue)
        self.ledger = LedgerStore(self.history)
        self.settings = SettingsStore(self.history, self.ledger)

        self._is_dirty = False
        self._loading = False

        self.ledger.add_observer(self._on_changed)
        self.settings.add_observer(self._on_changed)

        # Redraws are held back while a group replays
        self.history.before_undo_or_redo = self._before_replay
        self.history.after_undo_or_redo = self._after_replay

    @classmethod
    def open_file(
        cls,
        file_path: Path | str,
        queue: DeferredQueue | None = None,
        backup_count: int = 1,
    ) -> EditingSession:
        """Create a session from a ledger file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file is not a valid ledger file.
        """
        file_path = Path(file_path)
        pages, settings = load_ledger(file_path)

        session = cls(file_path, queue=queue, backup_count=backup_count)
        session.load(pages, settings)
        return session

    def load(self, pages: dict[int, list[DataEntry]], settings: dict | None = None) -> None:
        """Fill a fresh session. Records no undo step and leaves the session clean.

        Args:
            pages: Month pages for the ledger.
            settings: Settings dict; defaults are used for anything missing.
        """
        self._loading = True
        try:
            self.ledger.load(pages)
            self.settings.load(settings or {})
        finally:
            self._loading = False
        self._is_dirty = False

    @property
    def is_dirty(self) -> bool:
        """Whether there are changes since the last open/save."""
        return self._is_dirty

    def _on_changed(self, sender: object, *args) -> None:
        if not self._loading:
            self._is_dirty = True

    def _before_replay(self, is_undoing: bool) -> None:
        self.ledger.suspend_notifications()

    def _after_replay(self, is_undoing: bool) -> None:
        self.ledger.resume_notifications()

    def flush(self) -> None:
        """Commit pending undo steps. Call at the end of every user command."""
        self.queue.flush()

    def _replay(self, replay) -> bool:
        try:
            done = replay()
        except Exception:
            # The after hook was skipped; don't leave redraws suspended
            self.ledger.resume_notifications()
            raise
        self.flush()
        return done

    def undo(self) -> bool:
        """Undo one step.

        Returns:
            True if something was undone.
        """
        return self._replay(self.history.do_undo)

    def redo(self) -> bool:
        """Redo one step.

        Returns:
            True if something was redone.
        """
        return self._replay(self.history.do_redo)

    def save(self, file_path: Path | str | None = None) -> Path:
        """Save to file_path, or to the session's file.

        Returns:
            The path written.

        Raises:
            ValueError: If no path is given and the session has no file yet.
            OSError: If the file cannot be written.
        """
        if file_path is not None:
            self.file_path = Path(file_path)
        if self.file_path is None:
            raise ValueError("No file path to save to")

        self.flush()
        save_ledger(
            self.file_path,
            self.ledger.pages,
            self.settings.to_dict(),
            backup_count=self.backup_count,
        )
        self._is_dirty = False
        return self.file_path
