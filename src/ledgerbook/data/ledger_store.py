"""Ledger store holding month pages of DataEntry rows.

Every mutation records its exact inverse with the HistoryManager, in the
same turn as the mutation, so the edit can be undone. Inverses are ordinary
store operations: when replayed they register their own inverse, which is
what builds the redo history.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import Any

from ..models.entry import DataEntry, validate_field_value
from ..utils.formatting import end_month_in_data, first_month_in_data
from .history import HistoryManager

logger = logging.getLogger(__name__)

# Observer signature: (sender, month) where month None means "everything"
Observer = Callable[[object, int | None], None]


def check_month(page: int) -> None:
    """Validate a yyyymm month key.

    Raises:
        ValueError: If page is not a plausible yyyymm value.
    """
    if isinstance(page, bool) or not isinstance(page, int):
        raise ValueError(f"Month must be an integer yyyymm value, got {page!r}")
    if page < 100 or not 1 <= page % 100 <= 12:
        raise ValueError(f"Invalid month: {page}")


class LedgerStore:
    """Month pages of ledger rows with undoable editing operations.

    Usage:
        store = LedgerStore(history)
        store.insert_page(202403)
        store.insert_row(202403, 0)
        store.set_value(202403, 0, "item", "Groceries")
        store.set_value(202403, 0, "amount", 3200)
    """

    def __init__(self, history: HistoryManager):
        """Initialize an empty store.

        Args:
            history: HistoryManager that receives the inverse of every edit.
        """
        self._history = history
        self.pages: dict[int, list[DataEntry]] = {}

        self._observers: list[Observer] = []
        self._suspend_depth = 0
        self._changed_while_suspended = False

    # --- Observers ---

    def add_observer(self, callback: Observer) -> None:
        """Add observer callback."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Observer) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def suspend_notifications(self) -> None:
        """Hold back observer notifications until resume_notifications()."""
        self._suspend_depth += 1

    def resume_notifications(self) -> None:
        """Release held notifications as one whole-ledger notification."""
        if self._suspend_depth == 0:
            return
        self._suspend_depth -= 1
        if self._suspend_depth == 0 and self._changed_while_suspended:
            self._changed_while_suspended = False
            self._notify_observers(None)

    def _notify_observers(self, month: int | None) -> None:
        if self._suspend_depth:
            self._changed_while_suspended = True
            return
        for callback in list(self._observers):
            try:
                callback(self, month)
            except Exception:
                # One broken observer must not stop the others
                logger.exception("Ledger observer %r failed", callback)

    # --- Queries ---

    def _get_rows(self, page: int) -> list[DataEntry]:
        try:
            return self.pages[page]
        except KeyError:
            raise KeyError(f"No page for month {page}") from None

    def has_page(self, page: int) -> bool:
        return page in self.pages

    def get_page(self, page: int) -> list[DataEntry]:
        """Rows of a month page (a copy of the list; entries are shared).

        Raises:
            KeyError: If the month has no page.
        """
        return list(self._get_rows(page))

    def get_entry(self, page: int, row: int) -> DataEntry:
        """Get one row.

        Raises:
            KeyError: If the month has no page.
            IndexError: If row is out of range.
        """
        rows = self._get_rows(page)
        if not 0 <= row < len(rows):
            raise IndexError(f"Row {row} out of range for month {page}")
        return rows[row]

    def months(self) -> list[int]:
        """All months with a page, oldest first."""
        return sorted(self.pages)

    def first_month(self) -> int | None:
        return first_month_in_data(self.pages)

    def end_month(self) -> int | None:
        return end_month_in_data(self.pages)

    def iter_entries(self) -> Iterator[tuple[int, int, DataEntry]]:
        """Yield (month, row, entry) for every row, in month order."""
        for page in self.months():
            for row, entry in enumerate(self.pages[page]):
                yield page, row, entry

    def month_totals(self, page: int) -> tuple[int, int]:
        """Sum income and payment amounts for a month.

        Returns:
            Tuple of (income_total, payment_total). Blank amounts count as 0.
        """
        income = 0
        payment = 0
        for entry in self._get_rows(page):
            if entry.amount is None:
                continue
            if entry.is_income:
                income += entry.amount
            else:
                payment += entry.amount
        return income, payment

    # --- Undoable edits ---

    def set_value(self, page: int, row: int, key: str, value: Any) -> None:
        """Set one field of one row.

        Setting the value a field already holds does nothing and records no
        undo step.

        Raises:
            ValueError: If key is not an editable field or value is invalid.
            KeyError: If the month has no page.
            IndexError: If row is out of range.
        """
        validate_field_value(key, value)
        entry = self.get_entry(page, row)
        old_value = getattr(entry, key)
        if old_value == value:
            return

        setattr(entry, key, value)
        self._history.register_undo(lambda: self.set_value(page, row, key, old_value))
        self._notify_observers(page)

    def insert_row(self, page: int, row: int, entry: DataEntry | None = None) -> None:
        """Insert a row; row == len(page) appends.

        Args:
            page: Month key.
            row: Position of the new row.
            entry: Row to insert; a blank DataEntry if None.

        Raises:
            KeyError: If the month has no page.
            IndexError: If row is out of range.
        """
        rows = self._get_rows(page)
        if not 0 <= row <= len(rows):
            raise IndexError(f"Row {row} out of range for month {page}")

        rows.insert(row, entry if entry is not None else DataEntry())
        self._history.register_undo(lambda: self.delete_row(page, row))
        self._notify_observers(page)

    def delete_row(self, page: int, row: int) -> None:
        """Delete a row.

        Raises:
            KeyError: If the month has no page.
            IndexError: If row is out of range.
        """
        rows = self._get_rows(page)
        if not 0 <= row < len(rows):
            raise IndexError(f"Row {row} out of range for month {page}")

        entry = rows.pop(row)
        self._history.register_undo(lambda: self.insert_row(page, row, entry))
        self._notify_observers(page)

    def insert_page(self, page: int, entries: Iterable[DataEntry] | None = None) -> None:
        """Create a month page, optionally with rows.

        Raises:
            ValueError: If page is not a valid month or already exists.
        """
        check_month(page)
        if page in self.pages:
            raise ValueError(f"Month {page} already exists")

        self.pages[page] = list(entries) if entries is not None else []
        self._history.register_undo(lambda: self.delete_page(page))
        self._notify_observers(None)

    def delete_page(self, page: int) -> None:
        """Delete a month page and all its rows.

        Raises:
            KeyError: If the month has no page.
        """
        rows = self._get_rows(page)
        del self.pages[page]
        self._history.register_undo(lambda: self.insert_page(page, rows))
        self._notify_observers(None)

    # --- Bulk load (not undoable) ---

    def load(self, pages: dict[int, list[DataEntry]]) -> None:
        """Replace all pages, e.g. after opening a file. Records no undo step."""
        for page in pages:
            check_month(page)
        self.pages = {page: list(rows) for page, rows in pages.items()}
        logger.debug(f"Loaded {len(self.pages)} month page(s)")
        self._notify_observers(None)
