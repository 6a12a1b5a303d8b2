"""Ledger file I/O.

Ledger files are UTF-8 JSON documents:

    {
      "version": 1,
      "data": {"202403": [{"date": 1, "item": "...", ...}, ...], ...},
      "settings": {"income_kinds": [...], "payment_kinds": [...], "cards": [...]}
    }

Month keys are stored as strings because JSON object keys must be strings.
"""

from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Any

from ..models.entry import CardEntry, DataEntry
from .ledger_store import check_month

logger = logging.getLogger(__name__)

FILE_VERSION = 1


def _parse_pages(raw: Any, path: Path) -> dict[int, list[DataEntry]]:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid ledger file (data is not an object): {path}")

    pages: dict[int, list[DataEntry]] = {}
    for key, rows in raw.items():
        try:
            page = int(key)
            check_month(page)
        except ValueError:
            raise ValueError(f"Invalid month key {key!r} in {path}") from None
        if not isinstance(rows, list):
            raise ValueError(f"Invalid rows for month {key} in {path}")
        try:
            pages[page] = [DataEntry.from_dict(row) for row in rows]
        except ValueError as e:
            raise ValueError(f"Invalid row in month {key} of {path}: {e}") from None
    return pages


def _check_settings(raw: Any, path: Path) -> dict[str, Any]:
    if not isinstance(raw, dict):
        raise ValueError(f"Invalid settings in {path}")

    for key in ("income_kinds", "payment_kinds"):
        if key not in raw:
            continue
        kinds = raw[key]
        if not isinstance(kinds, list) or not all(isinstance(k, str) for k in kinds):
            raise ValueError(f"Invalid {key} in {path}: expected a list of names")

    cards = raw.get("cards", [])
    if not isinstance(cards, list):
        raise ValueError(f"Invalid cards in {path}: expected a list")
    for card in cards:
        try:
            CardEntry.from_dict(card)
        except ValueError as e:
            raise ValueError(f"Invalid card in {path}: {e}") from None
    return raw


def load_ledger(path: Path | str) -> tuple[dict[int, list[DataEntry]], dict[str, Any]]:
    """Load a ledger file.

    Args:
        path: Path to the ledger file.

    Returns:
        Tuple of (pages, settings) where pages maps yyyymm to rows and
        settings is the raw settings dict (empty if absent).

    Raises:
        FileNotFoundError: If the file doesn't exist.
        ValueError: If the file is not a valid ledger file.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Ledger file not found: {path}")

    try:
        document = json.loads(path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in {path}: {e}") from None

    if not isinstance(document, dict):
        raise ValueError(f"Invalid ledger file: {path}")

    version = document.get("version", FILE_VERSION)
    if not isinstance(version, int) or version > FILE_VERSION:
        raise ValueError(f"Unsupported ledger file version {version!r}: {path}")

    pages = _parse_pages(document.get("data", {}), path)
    settings = _check_settings(document.get("settings", {}), path)

    logger.info(f"Loaded {len(pages)} month(s) from {path}")
    return pages, settings


def _rotate_backups(path: Path, backup_count: int) -> None:
    """Shift name.bak -> name.bak2 ... and move the current file to name.bak."""
    if backup_count <= 0 or not path.exists():
        return

    def backup_name(n: int) -> Path:
        suffix = ".bak" if n == 1 else f".bak{n}"
        return path.with_name(path.name + suffix)

    oldest = backup_name(backup_count)
    if oldest.exists():
        oldest.unlink()
    for n in range(backup_count - 1, 0, -1):
        src = backup_name(n)
        if src.exists():
            src.replace(backup_name(n + 1))
    path.replace(backup_name(1))


def save_ledger(
    path: Path | str,
    pages: dict[int, list[DataEntry]],
    settings: dict[str, Any],
    backup_count: int = 1,
) -> None:
    """Save a ledger file.

    The document is written to a temporary sibling first; the previous file
    is kept as a backup and the new one renamed into place.

    Args:
        path: Destination path.
        pages: Month pages to save.
        settings: Settings dict (from SettingsStore.to_dict()).
        backup_count: Number of previous versions to keep (0 for none).
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)

    document = {
        "version": FILE_VERSION,
        "data": {
            str(page): [entry.to_dict() for entry in pages[page]] for page in sorted(pages)
        },
        "settings": settings,
    }

    tmp_path = path.with_name(path.name + ".tmp")
    tmp_path.write_text(json.dumps(document, ensure_ascii=False, indent=1), encoding="utf-8")

    _rotate_backups(path, backup_count)
    os.replace(tmp_path, path)
    logger.info(f"Saved {len(pages)} month(s) to {path}")
