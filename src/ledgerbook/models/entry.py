"""Data model for ledger rows and settings entries.

Ledger data is organised in month pages keyed by yyyymm integers
(e.g. 202403 for March 2024). Each page is an ordered list of DataEntry rows.
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

# Editable DataEntry fields, in display order
FIELD_NAMES: tuple[str, ...] = ("date", "item", "kind", "is_income", "amount", "card")

# Fields that hold integers (or None when left blank)
NUMERIC_FIELDS: frozenset[str] = frozenset({"date", "amount"})


@dataclass
class DataEntry:
    """One ledger row.

    Attributes:
        date: Day of month, or None if not entered yet.
        item: Free-text description.
        kind: Income or payment category name.
        is_income: True for income, False for a payment.
        amount: Amount in whole currency units, or None if not entered yet.
        card: Name of the card used for a payment ("" for cash).
    """

    date: int | None = None
    item: str = ""
    kind: str = ""
    is_income: bool = False
    amount: int | None = None
    card: str = ""

    @property
    def is_empty(self) -> bool:
        """Check if nothing has been entered in this row."""
        return (
            self.date is None
            and not self.item
            and not self.kind
            and self.amount is None
            and not self.card
        )

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> DataEntry:
        """Build an entry from a dict, ignoring unknown keys.

        Raises:
            ValueError: If a field holds a value the editor would reject.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Row must be an object, got {data!r}")
        values = {k: v for k, v in data.items() if k in FIELD_NAMES}
        if "is_income" in values:
            values["is_income"] = bool(values["is_income"])
        for key, value in values.items():
            validate_field_value(key, value)
        return cls(**values)


@dataclass
class CardEntry:
    """A payment card and its statement closing day."""

    name: str
    closing: int = 0

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> CardEntry:
        """Build a card from a dict; a missing closing day means 0.

        Raises:
            ValueError: If the name is not a string or closing is not a day 0-31.
        """
        if not isinstance(data, dict):
            raise ValueError(f"Card must be an object, got {data!r}")
        name = data.get("name", "")
        closing = data.get("closing", 0)
        if not isinstance(name, str):
            raise ValueError(f"Card name must be a string, got {name!r}")
        if isinstance(closing, bool) or not isinstance(closing, int) or not 0 <= closing <= 31:
            raise ValueError(f"Closing day must be 0-31, got {closing!r}")
        return cls(name=name, closing=closing)


def validate_field_value(key: str, value: Any) -> None:
    """Check that value is acceptable for DataEntry field key.

    Raises:
        ValueError: If key is not an editable field or value has the wrong type.
    """
    if key not in FIELD_NAMES:
        raise ValueError(f"Unknown field: {key!r}")

    if key in NUMERIC_FIELDS:
        if value is not None and (isinstance(value, bool) or not isinstance(value, int)):
            raise ValueError(f"Field {key!r} must be an integer or None, got {value!r}")
        if key == "date" and value is not None and not 1 <= value <= 31:
            raise ValueError(f"Day of month out of range: {value}")
    elif key == "is_income":
        if not isinstance(value, bool):
            raise ValueError(f"Field 'is_income' must be a bool, got {value!r}")
    elif not isinstance(value, str):
        raise ValueError(f"Field {key!r} must be a string, got {value!r}")
