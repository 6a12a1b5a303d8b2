"""Dialog for editing income kinds, payment kinds and cards."""

from __future__ import annotations

import tkinter as tk
from abc import ABC, abstractmethod
from collections.abc import Callable
from tkinter import ttk
from typing import TYPE_CHECKING

from ..utils.formatting import number_from_string
from .dialogs import ask_string, confirm, show_error

if TYPE_CHECKING:
    from ..data.session import EditingSession


class _ListEditor(ttk.Frame, ABC):
    """Listbox with Add / Edit / Delete / Up / Down buttons.

    Subclasses supply the item labels and the store operations.
    """

    @abstractmethod
    def _labels(self) -> list[str]:
        """Return the display text for each item."""

    @abstractmethod
    def _add(self, index: int) -> None:
        """Ask for a new item and insert it at index."""

    @abstractmethod
    def _edit(self, index: int) -> None:
        """Ask for new values for the item at index."""

    @abstractmethod
    def _delete(self, index: int) -> None:
        """Delete the item at index, confirming if it is in use."""

    @abstractmethod
    def _move(self, from_index: int, to_index: int) -> None:
        """Move an item to another position."""

    def refresh(self) -> None:
        """Reload the listbox, keeping the selection where possible."""
        selected = self._selected_index()
        self.listbox.delete(0, tk.END)
        for label in self._labels():
            self.listbox.insert(tk.END, label)
        if selected is not None and self.listbox.size():
            index = min(selected, self.listbox.size() - 1)
            self.listbox.selection_set(index)
            self.listbox.see(index)

    def _selected_index(self) -> int | None:
        selection = self.listbox.curselection()
        return selection[0] if selection else None

    def _run(self, operation: Callable[[], None]) -> None:
        """Run one store operation as one undo step."""
        try:
            operation()
        except (ValueError, IndexError) as e:
            show_error(self, str(e))
        finally:
            self.session.flush()

    def _on_add(self) -> None:
        index = self._selected_index()
        self._add(index + 1 if index is not None else self.listbox.size())

    def _on_edit(self) -> None:
        index = self._selected_index()
        if index is not None:
            self._edit(index)

    def _on_delete(self) -> None:
        index = self._selected_index()
        if index is not None:
            self._delete(index)

    def _on_move(self, offset: int) -> None:
        index = self._selected_index()
        if index is None:
            return
        target = index + offset
        if not 0 <= target < self.listbox.size():
            return
        self._run(lambda: self._move(index, target))
        self.listbox.selection_clear(0, tk.END)
        self.listbox.selection_set(target)

    def _create_widgets(self) -> None:
        """Create listbox and button column."""
        list_frame = ttk.Frame(self)
        list_frame.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)

        self.listbox = tk.Listbox(list_frame, height=12, exportselection=False)
        scrollbar = ttk.Scrollbar(list_frame, orient=tk.VERTICAL, command=self.listbox.yview)
        self.listbox.configure(yscrollcommand=scrollbar.set)
        self.listbox.pack(side=tk.LEFT, fill=tk.BOTH, expand=True)
        scrollbar.pack(side=tk.RIGHT, fill=tk.Y)
        self.listbox.bind("<Double-1>", lambda e: self._on_edit())

        button_frame = ttk.Frame(self)
        button_frame.pack(side=tk.LEFT, fill=tk.Y, padx=(8, 0))
        for text, command in (
            ("Add...", self._on_add),
            ("Edit...", self._on_edit),
            ("Delete", self._on_delete),
            ("Move Up", lambda: self._on_move(-1)),
            ("Move Down", lambda: self._on_move(1)),
        ):
            ttk.Button(button_frame, text=text, command=command, width=12).pack(pady=2)

    def __init__(self, parent: tk.Widget, session: EditingSession):
        super().__init__(parent, padding=10)
        self.session = session
        self._create_widgets()
        self.refresh()


class _KindEditor(_ListEditor):
    """Editor for the income or payment kind list."""

    def __init__(self, parent: tk.Widget, session: EditingSession, income: bool):
        self.income = income
        super().__init__(parent, session)

    @property
    def _items(self) -> list[str]:
        settings = self.session.settings
        return settings.income_kinds if self.income else settings.payment_kinds

    def _labels(self) -> list[str]:
        return list(self._items)

    def _validator(self, index: int | None) -> Callable[[str], str]:
        def validate(text: str) -> str:
            text = text.strip()
            if not text:
                return "Enter a name"
            if any(kind == text and i != index for i, kind in enumerate(self._items)):
                return "This kind already exists"
            return ""

        return validate

    def _add(self, index: int) -> None:
        kind = ask_string(
            self, "Add Kind", "Name of the new kind:", validator=self._validator(None)
        )
        if not kind:
            return
        settings = self.session.settings
        insert = settings.insert_income_kind if self.income else settings.insert_payment_kind
        self._run(lambda: insert(kind.strip(), index))

    def _edit(self, index: int) -> None:
        kind = ask_string(
            self,
            "Rename Kind",
            "New name:",
            initial=self._items[index],
            validator=self._validator(index),
        )
        if not kind:
            return
        settings = self.session.settings
        replace = settings.replace_income_kind if self.income else settings.replace_payment_kind
        self._run(lambda: replace(kind.strip(), index))

    def _delete(self, index: int) -> None:
        settings = self.session.settings
        kind = self._items[index]
        in_use = (
            settings.is_income_kind_in_use(kind)
            if self.income
            else settings.is_payment_kind_in_use(kind)
        )
        if in_use and not confirm(
            self, f"'{kind}' is used in the ledger. Delete it anyway?", danger=True
        ):
            return
        delete = settings.delete_income_kind if self.income else settings.delete_payment_kind
        self._run(lambda: delete(index))

    def _move(self, from_index: int, to_index: int) -> None:
        settings = self.session.settings
        move = settings.move_income_kind if self.income else settings.move_payment_kind
        move(from_index, to_index)


def _validate_closing(text: str) -> str:
    try:
        value = number_from_string(text)
    except ValueError:
        return "Enter a day from 0 to 31"
    if not isinstance(value, int) or not 0 <= value <= 31:
        return "Enter a day from 0 to 31"
    return ""


class _CardEditor(_ListEditor):
    """Editor for the card list."""

    def _labels(self) -> list[str]:
        return [
            f"{card.name} (closes on day {card.closing})" if card.closing else card.name
            for card in self.session.settings.cards
        ]

    def _name_validator(self, index: int | None) -> Callable[[str], str]:
        def validate(text: str) -> str:
            text = text.strip()
            if not text:
                return "Enter a name"
            if any(
                card.name == text and i != index
                for i, card in enumerate(self.session.settings.cards)
            ):
                return "This card already exists"
            return ""

        return validate

    def _ask_closing(self, initial: int) -> int | None:
        text = ask_string(
            self,
            "Closing Day",
            "Statement closing day (0 if none):",
            initial=str(initial),
            validator=_validate_closing,
        )
        if text is None:
            return None
        return number_from_string(text)

    def _add(self, index: int) -> None:
        name = ask_string(self, "Add Card", "Card name:", validator=self._name_validator(None))
        if not name:
            return
        closing = self._ask_closing(0)
        if closing is None:
            return
        self._run(lambda: self.session.settings.insert_card_entry(name.strip(), closing, index))

    def _edit(self, index: int) -> None:
        card = self.session.settings.cards[index]
        name = ask_string(
            self,
            "Edit Card",
            "Card name:",
            initial=card.name,
            validator=self._name_validator(index),
        )
        if not name:
            return
        closing = self._ask_closing(card.closing)
        if closing is None:
            return
        self._run(lambda: self.session.settings.change_card_entry(name.strip(), closing, index))

    def _delete(self, index: int) -> None:
        settings = self.session.settings
        name = settings.cards[index].name
        if settings.is_card_entry_in_use(name) and not confirm(
            self, f"'{name}' is used in the ledger. Delete it anyway?", danger=True
        ):
            return
        self._run(lambda: settings.delete_card_entry(index))

    def _move(self, from_index: int, to_index: int) -> None:
        self.session.settings.move_card_entry(from_index, to_index)


class SettingsDialog(tk.Toplevel):
    """Tabbed editor for kinds and cards.

    Edits are undoable from the main window like any ledger edit; the lists
    refresh themselves when the settings change.
    """

    def _on_settings_changed(self, sender: object) -> None:
        for editor in self.editors:
            editor.refresh()

    def _on_close(self) -> None:
        self.session.settings.remove_observer(self._on_settings_changed)
        self.destroy()

    def _create_widgets(self) -> None:
        """Create dialog widgets."""
        notebook = ttk.Notebook(self)
        notebook.pack(fill=tk.BOTH, expand=True, padx=10, pady=(10, 5))

        self.editors: list[_ListEditor] = [
            _KindEditor(notebook, self.session, income=True),
            _KindEditor(notebook, self.session, income=False),
            _CardEditor(notebook, self.session),
        ]
        for editor, title in zip(self.editors, ("Income Kinds", "Payment Kinds", "Cards")):
            notebook.add(editor, text=title)

        ttk.Button(self, text="Close", command=self._on_close, width=12).pack(
            anchor=tk.E, padx=10, pady=(0, 10)
        )

    def __init__(self, parent: tk.Misc, session: EditingSession):
        """Initialize the settings dialog.

        Args:
            parent: Parent widget
            session: Session whose settings are edited
        """
        super().__init__(parent)
        self.title("Settings")
        self.transient(parent)

        self.session = session
        self._create_widgets()
        session.settings.add_observer(self._on_settings_changed)

        self.bind("<Escape>", lambda e: self._on_close())
        self.protocol("WM_DELETE_WINDOW", self._on_close)
