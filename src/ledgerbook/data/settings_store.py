"""Application settings: income kinds, payment kinds and cards.

All list edits are undoable and go through the same HistoryManager as the
ledger, so settings changes and ledger edits share one history.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from ..models.entry import CardEntry
from .history import HistoryManager

if TYPE_CHECKING:
    from .ledger_store import LedgerStore

logger = logging.getLogger(__name__)

DEFAULT_INCOME_KINDS: tuple[str, ...] = ("Salary", "Bonus", "Other income")
DEFAULT_PAYMENT_KINDS: tuple[str, ...] = (
    "Food",
    "Housing",
    "Utilities",
    "Transport",
    "Health",
    "Leisure",
    "Other",
)


class SettingsStore:
    """Undoable lists of income kinds, payment kinds and cards.

    Usage:
        settings = SettingsStore(history, ledger)
        settings.insert_payment_kind("Books", 0)
        if not settings.is_payment_kind_in_use("Books"):
            settings.delete_payment_kind(0)
    """

    def __init__(self, history: HistoryManager, ledger: LedgerStore | None = None):
        """Initialize with default kinds and no cards.

        Args:
            history: HistoryManager that receives the inverse of every edit.
            ledger: Ledger scanned by the is_*_in_use checks.
        """
        self._history = history
        self._ledger = ledger

        self.income_kinds: list[str] = list(DEFAULT_INCOME_KINDS)
        self.payment_kinds: list[str] = list(DEFAULT_PAYMENT_KINDS)
        self.cards: list[CardEntry] = []

        self._observers: list[Callable[[object], None]] = []

    # --- Observers ---

    def add_observer(self, callback: Callable[[object], None]) -> None:
        """Add observer callback."""
        if callback not in self._observers:
            self._observers.append(callback)

    def remove_observer(self, callback: Callable[[object], None]) -> None:
        """Remove observer callback."""
        if callback in self._observers:
            self._observers.remove(callback)

    def _notify_observers(self) -> None:
        for callback in list(self._observers):
            try:
                callback(self)
            except Exception:
                logger.exception("Settings observer %r failed", callback)

    # --- Generic undoable list operations ---

    def _insert(self, items: list, value: Any, index: int) -> None:
        if not 0 <= index <= len(items):
            raise IndexError(f"Insert position {index} out of range")
        items.insert(index, value)
        self._history.register_undo(lambda: self._delete(items, index))
        self._notify_observers()

    def _delete(self, items: list, index: int) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"Index {index} out of range")
        value = items.pop(index)
        self._history.register_undo(lambda: self._insert(items, value, index))
        self._notify_observers()

    def _replace(self, items: list, value: Any, index: int) -> None:
        if not 0 <= index < len(items):
            raise IndexError(f"Index {index} out of range")
        old_value = items[index]
        if old_value == value:
            return
        items[index] = value
        self._history.register_undo(lambda: self._replace(items, old_value, index))
        self._notify_observers()

    def _move(self, items: list, from_index: int, to_index: int) -> None:
        if not 0 <= from_index < len(items) or not 0 <= to_index < len(items):
            raise IndexError(f"Cannot move {from_index} to {to_index}")
        if from_index == to_index:
            return
        items.insert(to_index, items.pop(from_index))
        self._history.register_undo(lambda: self._move(items, to_index, from_index))
        self._notify_observers()

    @staticmethod
    def _check_kind(kind: str, items: list[str], index: int | None = None) -> None:
        if not kind or not kind.strip():
            raise ValueError("Kind name cannot be blank")
        for i, existing in enumerate(items):
            if existing == kind and i != index:
                raise ValueError(f"Kind {kind!r} already exists")

    # --- Income kinds ---

    def insert_income_kind(self, kind: str, index: int) -> None:
        self._check_kind(kind, self.income_kinds)
        self._insert(self.income_kinds, kind, index)

    def delete_income_kind(self, index: int) -> None:
        self._delete(self.income_kinds, index)

    def replace_income_kind(self, kind: str, index: int) -> None:
        self._check_kind(kind, self.income_kinds, index)
        self._replace(self.income_kinds, kind, index)

    def move_income_kind(self, from_index: int, to_index: int) -> None:
        self._move(self.income_kinds, from_index, to_index)

    def is_income_kind_in_use(self, kind: str) -> bool:
        """Check if any income row uses this kind."""
        if self._ledger is None:
            return False
        return any(e.is_income and e.kind == kind for _, _, e in self._ledger.iter_entries())

    # --- Payment kinds ---

    def insert_payment_kind(self, kind: str, index: int) -> None:
        self._check_kind(kind, self.payment_kinds)
        self._insert(self.payment_kinds, kind, index)

    def delete_payment_kind(self, index: int) -> None:
        self._delete(self.payment_kinds, index)

    def replace_payment_kind(self, kind: str, index: int) -> None:
        self._check_kind(kind, self.payment_kinds, index)
        self._replace(self.payment_kinds, kind, index)

    def move_payment_kind(self, from_index: int, to_index: int) -> None:
        self._move(self.payment_kinds, from_index, to_index)

    def is_payment_kind_in_use(self, kind: str) -> bool:
        """Check if any payment row uses this kind."""
        if self._ledger is None:
            return False
        return any(
            not e.is_income and e.kind == kind for _, _, e in self._ledger.iter_entries()
        )

    # --- Cards ---

    def card_names(self) -> list[str]:
        return [card.name for card in self.cards]

    def insert_card_entry(self, name: str, closing: int, index: int) -> None:
        """Add a card.

        Raises:
            ValueError: If the name is blank or taken, or closing is not 0-31.
            IndexError: If index is out of range.
        """
        self._check_card(name, closing)
        self._insert(self.cards, CardEntry(name, closing), index)

    def change_card_entry(self, name: str | None, closing: int | None, index: int) -> None:
        """Rename a card and/or change its closing day; None leaves a part unchanged.

        Raises:
            ValueError: If the new name is blank or taken, or closing is not 0-31.
            IndexError: If index is out of range.
        """
        if not 0 <= index < len(self.cards):
            raise IndexError(f"Index {index} out of range")
        current = self.cards[index]
        new_card = CardEntry(
            name if name is not None else current.name,
            closing if closing is not None else current.closing,
        )
        self._check_card(new_card.name, new_card.closing, index)
        self._replace(self.cards, new_card, index)

    def delete_card_entry(self, index: int) -> None:
        self._delete(self.cards, index)

    def move_card_entry(self, from_index: int, to_index: int) -> None:
        self._move(self.cards, from_index, to_index)

    def is_card_entry_in_use(self, name: str) -> bool:
        """Check if any row was paid with this card."""
        if self._ledger is None:
            return False
        return any(e.card == name for _, _, e in self._ledger.iter_entries())

    def _check_card(self, name: str, closing: int, index: int | None = None) -> None:
        if not name or not name.strip():
            raise ValueError("Card name cannot be blank")
        if isinstance(closing, bool) or not isinstance(closing, int) or not 0 <= closing <= 31:
            raise ValueError(f"Closing day must be 0-31, got {closing!r}")
        for i, card in enumerate(self.cards):
            if card.name == name and i != index:
                raise ValueError(f"Card {name!r} already exists")

    # --- Persistence ---

    def to_dict(self) -> dict[str, Any]:
        return {
            "income_kinds": list(self.income_kinds),
            "payment_kinds": list(self.payment_kinds),
            "cards": [card.to_dict() for card in self.cards],
        }

    def load(self, data: dict[str, Any]) -> None:
        """Replace all settings from a dict. Records no undo step.

        Missing keys fall back to the defaults. Nothing changes if any part
        is invalid.

        Raises:
            ValueError: If a kind list is not a list of strings, or a card is
                not a valid card object.
        """
        income_kinds = _kind_list(data, "income_kinds", DEFAULT_INCOME_KINDS)
        payment_kinds = _kind_list(data, "payment_kinds", DEFAULT_PAYMENT_KINDS)
        raw_cards = data.get("cards", [])
        if not isinstance(raw_cards, list):
            raise ValueError(f"'cards' must be a list, got {raw_cards!r}")
        cards = [CardEntry.from_dict(c) for c in raw_cards]

        self.income_kinds[:] = income_kinds
        self.payment_kinds[:] = payment_kinds
        self.cards[:] = cards
        self._notify_observers()


def _kind_list(data: dict[str, Any], key: str, default: tuple[str, ...]) -> list[str]:
    kinds = data.get(key, default)
    if not isinstance(kinds, (list, tuple)) or not all(isinstance(k, str) for k in kinds):
        raise ValueError(f"{key!r} must be a list of names, got {kinds!r}")
    return list(kinds)
