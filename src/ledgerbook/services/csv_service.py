"""CSV import and export for ledger rows.

File format (UTF-8 with BOM so spreadsheet programs detect the encoding):

    month,date,item,kind,income,amount,card
    202403,1,Rent,Housing,0,85000,
    202403,25,Pay,Salary,1,310000,

- month: yyyymm
- income: 1 for income rows, 0 (or blank) for payments
- date/amount: may be blank; typed forms such as "1,200" are accepted
"""

from __future__ import annotations

import csv
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from ..data.ledger_store import check_month
from ..models.entry import DataEntry
from ..utils.formatting import number_from_string

if TYPE_CHECKING:
    from ..data.ledger_store import LedgerStore

logger = logging.getLogger(__name__)

CSV_COLUMNS: tuple[str, ...] = ("month", "date", "item", "kind", "income", "amount", "card")
CSV_ENCODING = "utf-8-sig"

_TRUE_VALUES = frozenset({"1", "true", "yes", "y", "income"})
_FALSE_VALUES = frozenset({"", "0", "false", "no", "n", "payment"})


def _parse_int(text: str, column: str, line_num: int) -> int | None:
    try:
        value = number_from_string(text)
    except ValueError:
        raise ValueError(f"Line {line_num}: invalid {column} {text!r}") from None
    if value is not None and not isinstance(value, int):
        raise ValueError(f"Line {line_num}: {column} must be a whole number, got {text!r}")
    return value


def _parse_income(text: str, line_num: int) -> bool:
    value = text.strip().lower()
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    raise ValueError(f"Line {line_num}: invalid income flag {text!r}")


def read_csv(path: Path | str) -> list[tuple[int, DataEntry]]:
    """Read ledger rows from a CSV file.

    Args:
        path: Path to the CSV file.

    Returns:
        List of (month, entry) tuples in file order.

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the header is missing columns or a row is invalid.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"CSV file not found: {path}")

    rows: list[tuple[int, DataEntry]] = []
    with open(path, newline="", encoding=CSV_ENCODING) as csvfile:
        reader = csv.DictReader(csvfile)
        missing = [c for c in CSV_COLUMNS if c not in (reader.fieldnames or [])]
        if missing:
            raise ValueError(f"CSV file is missing column(s): {', '.join(missing)}")

        for csv_row in reader:
            line_num = reader.line_num
            values = {k: (v or "").strip() for k, v in csv_row.items() if k is not None}
            if not any(values.values()):
                continue

            month = _parse_int(values["month"], "month", line_num)
            if month is None:
                raise ValueError(f"Line {line_num}: month is required")
            try:
                check_month(month)
            except ValueError:
                raise ValueError(f"Line {line_num}: invalid month {values['month']!r}") from None

            date = _parse_int(values["date"], "date", line_num)
            if date is not None and not 1 <= date <= 31:
                raise ValueError(f"Line {line_num}: day of month out of range: {date}")

            entry = DataEntry(
                date=date,
                item=values["item"],
                kind=values["kind"],
                is_income=_parse_income(values["income"], line_num),
                amount=_parse_int(values["amount"], "amount", line_num),
                card=values["card"],
            )
            rows.append((month, entry))

    logger.info(f"Read {len(rows)} row(s) from {path}")
    return rows


def export_csv(path: Path | str, store: LedgerStore) -> int:
    """Write every ledger row to a CSV file, in month order.

    Returns:
        Number of rows written.
    """
    path = Path(path)
    count = 0
    with open(path, "w", newline="", encoding=CSV_ENCODING) as csvfile:
        writer = csv.writer(csvfile)
        writer.writerow(CSV_COLUMNS)
        for month, _row, entry in store.iter_entries():
            writer.writerow(
                [
                    month,
                    "" if entry.date is None else entry.date,
                    entry.item,
                    entry.kind,
                    1 if entry.is_income else 0,
                    "" if entry.amount is None else entry.amount,
                    entry.card,
                ]
            )
            count += 1

    logger.info(f"Exported {count} row(s) to {path}")
    return count


class CsvService:
    """Merges CSV rows into the ledger.

    All methods are static as the service is stateless. Everything an import
    changes is registered in the same turn, so the whole import is a single
    undo step.
    """

    @staticmethod
    def import_rows(store: LedgerStore, rows: list[tuple[int, DataEntry]]) -> int:
        """Append rows to their month pages, creating missing pages.

        Args:
            store: The ledger to import into.
            rows: (month, entry) tuples, e.g. from read_csv().

        Returns:
            Number of rows imported.
        """
        for month, entry in rows:
            if not store.has_page(month):
                store.insert_page(month)
            store.insert_row(month, len(store.pages[month]), entry)
        return len(rows)

    @staticmethod
    def import_file(store: LedgerStore, path: Path | str) -> int:
        """Read a CSV file and import it. Nothing is imported if the file is invalid."""
        return CsvService.import_rows(store, read_csv(path))
