"""Month arithmetic and number formatting helpers.

Months are yyyymm integers: 202403 is March 2024.
"""

from __future__ import annotations

import math
import re
import unicodedata
from collections.abc import Mapping
from datetime import date

# Characters accepted as thousands separators in typed amounts
_SEPARATORS = re.compile(r"[,、，]")

# Long vowel mark typed in place of a minus sign on Japanese keyboards
_MINUS_LOOKALIKES = str.maketrans({"ー": "-", "−": "-", "－": "-"})


def year_month_to_string(ym: int | str) -> str:
    """Format a yyyymm value for display, e.g. 202403 -> "2024/03"."""
    ym = int(ym)
    return f"{ym // 100}/{ym % 100:02d}"


def next_month(ym: int) -> int:
    """Month after ym (202412 -> 202501)."""
    return ym + 89 if ym % 100 == 12 else ym + 1


def last_month(ym: int) -> int:
    """Month before ym (202501 -> 202412)."""
    return ym - 89 if ym % 100 == 1 else ym - 1


def current_year_month(today: date | None = None) -> int:
    """The yyyymm value for today (or the given date)."""
    today = today or date.today()
    return today.year * 100 + today.month


def first_month_in_data(pages: Mapping[int, object]) -> int | None:
    """Earliest month that has a page, or None if there are no pages."""
    return min(pages) if pages else None


def end_month_in_data(pages: Mapping[int, object]) -> int | None:
    """Latest month that has a page, or None if there are no pages."""
    return max(pages) if pages else None


def format_amount(amount: int | None) -> str:
    """Format an amount with thousands separators (-1234567 -> "-1,234,567")."""
    if amount is None:
        return ""
    return f"{amount:,}"


def number_from_string(text: str) -> int | float | None:
    """Parse a typed number.

    Removes thousands separators, treats the long vowel mark as a minus sign
    and converts full-width digits and letters to their ASCII forms.

    Args:
        text: Raw text from an entry cell.

    Returns:
        int for whole numbers, float otherwise, None for blank input.

    Raises:
        ValueError: If the text is not a number.
    """
    text = unicodedata.normalize("NFKC", text.translate(_MINUS_LOOKALIKES))
    text = _SEPARATORS.sub("", text).strip()
    if not text:
        return None

    try:
        return int(text)
    except ValueError:
        pass

    value = float(text)  # raises ValueError for garbage
    if not math.isfinite(value):
        raise ValueError(f"Not a finite number: {text!r}")
    if value.is_integer():
        return int(value)
    return value
