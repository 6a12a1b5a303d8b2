"""Panel showing one month page of the ledger in a tksheet table."""

from __future__ import annotations

import logging
import tkinter as tk
from collections.abc import Callable
from tkinter import ttk
from typing import TYPE_CHECKING, Any

from tksheet import Sheet

from ..debug_trace import perf_timer
from ..models.entry import FIELD_NAMES, DataEntry
from ..utils.formatting import format_amount, number_from_string, year_month_to_string

if TYPE_CHECKING:
    from ..data.session import EditingSession

logger = logging.getLogger(__name__)

HEADERS = ["Day", "Item", "Kind", "Income", "Amount", "Card"]

# Sheet column -> DataEntry field
COLUMN_FIELDS: tuple[str, ...] = FIELD_NAMES

COL_AMOUNT = COLUMN_FIELDS.index("amount")

_YES = frozenset({"1", "y", "yes", "true", "income", "✓"})
_NO = frozenset({"", "0", "n", "no", "false", "payment"})


def parse_cell(key: str, text: Any) -> Any:
    """Convert typed cell text to a DataEntry field value.

    Raises:
        ValueError: If the text is not valid for the field.
    """
    text = "" if text is None else str(text).strip()

    if key in ("date", "amount"):
        value = number_from_string(text)
        if value is not None and not isinstance(value, int):
            raise ValueError(f"{key.capitalize()} must be a whole number")
        return value

    if key == "is_income":
        lowered = text.lower()
        if lowered in _YES:
            return True
        if lowered in _NO:
            return False
        raise ValueError("Income must be yes or no")

    return text


def format_cell(entry: DataEntry, key: str, separators: bool = True) -> str:
    """Display text for one field of an entry."""
    value = getattr(entry, key)
    if key == "amount":
        if value is None:
            return ""
        return format_amount(value) if separators else str(value)
    if key == "date":
        return "" if value is None else str(value)
    if key == "is_income":
        return "✓" if value else ""
    return value


class LedgerPanel(ttk.Frame):
    """Editable table for one month.

    Cell edits are turned into LedgerStore.set_value() calls; the table is
    redrawn from the store whenever the store notifies a change.
    """

    def _rows(self) -> list[DataEntry]:
        if self.session is None or self.month is None:
            return []
        if not self.session.ledger.has_page(self.month):
            return []
        return self.session.ledger.get_page(self.month)

    def _populate_sheet(self) -> None:
        """Populate sheet with the current month's rows."""
        rows = self._rows()
        separators = self.show_separators()
        self._suppress_notifications = True
        try:
            with perf_timer("populate_sheet", row_count=len(rows)):
                data = [
                    [format_cell(entry, key, separators) for key in COLUMN_FIELDS]
                    for entry in rows
                ]
                self.sheet.set_sheet_data(data, reset_col_positions=False)
        finally:
            self._suppress_notifications = False
        self._update_status()

    def _update_status(self) -> None:
        """Update the month title and totals footer."""
        if self.session is None or self.month is None:
            self.title_label.config(text="")
            self.status_label.config(text="")
            return

        self.title_label.config(text=year_month_to_string(self.month))
        if not self.session.ledger.has_page(self.month):
            self.status_label.config(text="No page for this month")
            return

        income, payment = self.session.ledger.month_totals(self.month)
        self.status_label.config(
            text=(
                f"Income {format_amount(income)}   "
                f"Payments {format_amount(payment)}   "
                f"Balance {format_amount(income - payment)}"
            )
        )

    def _on_store_changed(self, sender: object, month: int | None) -> None:
        """Redraw when the shown month (or everything) changed."""
        if month is None or month == self.month:
            self._populate_sheet()

    def _on_sheet_modified(self, event) -> None:
        """Push cell edits into the store."""
        if self._suppress_notifications or self.session is None or self.month is None:
            return

        cells = getattr(event, "cells", None)
        if not cells:
            return
        table_cells = cells.get("table", {})
        if not table_cells:
            return

        ledger = self.session.ledger
        row_count = len(self._rows())
        errors: list[str] = []

        # Read everything first; applying an edit redraws the sheet
        edits = [
            (row_idx, COLUMN_FIELDS[col], self.sheet.get_cell_data(row_idx, col))
            for (row_idx, col) in sorted(table_cells)
            if row_idx < row_count and col < len(COLUMN_FIELDS)
        ]

        ledger.suspend_notifications()
        try:
            for row_idx, key, text in edits:
                try:
                    ledger.set_value(self.month, row_idx, key, parse_cell(key, text))
                except ValueError as e:
                    errors.append(f"Row {row_idx + 1}: {e}")
        finally:
            ledger.resume_notifications()

        # One user edit, one undo step
        self.session.flush()

        # Redraw so rejected edits and normalized text are shown from the store
        self._populate_sheet()
        if errors:
            logger.warning("Rejected cell edit(s): %s", "; ".join(errors))
            self.status_label.config(text=errors[0])

        if self.on_modified:
            self.on_modified()

    def _selected_rows(self) -> list[int]:
        rows = set(self.sheet.get_selected_rows())
        current = self.sheet.get_currently_selected()
        if not rows and current:
            rows.add(current.row)
        return sorted(rows)

    def insert_row(self) -> None:
        """Insert a blank row above the selection, or append one."""
        if self.session is None or self.month is None:
            return
        if not self.session.ledger.has_page(self.month):
            return
        selected = self._selected_rows()
        row = selected[0] if selected else len(self._rows())
        self.session.ledger.insert_row(self.month, row)
        self.session.flush()
        if self.on_modified:
            self.on_modified()

    def delete_rows(self) -> None:
        """Delete the selected rows as one undo step."""
        if self.session is None or self.month is None:
            return
        row_count = len(self._rows())
        selected = [r for r in self._selected_rows() if r < row_count]
        if not selected:
            return
        ledger = self.session.ledger
        ledger.suspend_notifications()
        try:
            # Bottom-up so earlier indices stay valid
            for row in reversed(selected):
                ledger.delete_row(self.month, row)
        finally:
            ledger.resume_notifications()
        self.session.flush()
        if self.on_modified:
            self.on_modified()

    def _create_widgets(self) -> None:
        """Create all panel widgets."""
        self.title_label = ttk.Label(self, text="", font=("TkDefaultFont", 12, "bold"))
        self.title_label.pack(anchor=tk.W, padx=5, pady=(5, 0))

        self.sheet = Sheet(
            self,
            headers=HEADERS,
            show_row_index=True,
            height=400,
            width=720,
        )
        self.sheet.pack(fill=tk.BOTH, expand=True, padx=5, pady=5)

        self.sheet.enable_bindings()
        # Row structure and undo go through the store so they share one history
        self.sheet.disable_bindings(
            "undo",
            "rc_insert_row",
            "rc_delete_row",
            "row_drag_and_drop",
            "column_drag_and_drop",
            "rc_select_column",
            "rc_insert_column",
            "rc_delete_column",
            "sort_cells",
            "sort_row",
            "sort_column",
            "sort_rows",
            "sort_columns",
        )

        self.sheet.set_column_widths([50, 220, 120, 60, 110, 120])
        self.sheet.row_index(40)
        self.sheet.align_columns([COL_AMOUNT], align="e")

        self.sheet.bind("<<SheetModified>>", self._on_sheet_modified)

        footer = ttk.Frame(self)
        footer.pack(fill=tk.X, padx=5, pady=(2, 5))

        ttk.Button(footer, text="Insert Row", command=self.insert_row).pack(side=tk.LEFT)
        ttk.Button(footer, text="Delete Rows", command=self.delete_rows).pack(
            side=tk.LEFT, padx=(5, 0)
        )

        self.status_label = ttk.Label(footer, text="")
        self.status_label.pack(side=tk.RIGHT)

    def set_session(self, session: EditingSession) -> None:
        """Show a (new) editing session."""
        if self.session is not None:
            self.session.ledger.remove_observer(self._on_store_changed)
        self.session = session
        session.ledger.add_observer(self._on_store_changed)
        self._populate_sheet()

    def set_month(self, month: int | None) -> None:
        """Show another month."""
        self.month = month
        self._populate_sheet()

    def refresh(self) -> None:
        self._populate_sheet()

    def _on_destroy(self, event) -> None:
        """Detach from the store when the panel goes away."""
        if event.widget == self and self.session is not None:
            self.session.ledger.remove_observer(self._on_store_changed)

    def __init__(
        self,
        parent: tk.Widget,
        show_separators: Callable[[], bool] = lambda: True,
        on_modified: Callable[[], None] | None = None,
    ):
        """Initialize the ledger panel.

        Args:
            parent: Parent widget
            show_separators: Returns whether amounts get thousands separators
            on_modified: Callback after the user changed something
        """
        super().__init__(parent)

        self.session: EditingSession | None = None
        self.month: int | None = None
        self.show_separators = show_separators
        self.on_modified = on_modified

        # Suppress SheetModified handling during programmatic updates
        self._suppress_notifications = False

        self._create_widgets()
        self.bind("<Destroy>", self._on_destroy)
