"""Application configuration: where the ledger lives and how it is saved.

Defaults can be overridden from the environment:

- LEDGERBOOK_DATA_DIR: folder holding the ledger file
- LEDGERBOOK_DEBUG: "1"/"true" to enable debug logging
"""

from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

APP_DIR_NAME = "Ledgerbook"
DEFAULT_DATA_FILE = "ledger.json"


def default_data_dir(environ: Mapping[str, str] | None = None) -> Path:
    """Per-user data folder: %LOCALAPPDATA%/Ledgerbook, else ~/Ledgerbook."""
    environ = os.environ if environ is None else environ
    base = Path(environ.get("LOCALAPPDATA", Path.home()))
    return base / APP_DIR_NAME


@dataclass
class AppConfig:
    """Startup configuration.

    Attributes:
        data_dir: Folder holding the ledger file and its backups.
        data_file_name: Ledger file name inside data_dir.
        backup_count: Number of previous versions kept when saving.
        debug: Whether debug logging goes to the console.
    """

    data_dir: Path = field(default_factory=default_data_dir)
    data_file_name: str = DEFAULT_DATA_FILE
    backup_count: int = 1
    debug: bool = False

    @property
    def data_path(self) -> Path:
        """Full path of the default ledger file."""
        return self.data_dir / self.data_file_name


def _is_true(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")


def load_config(environ: Mapping[str, str] | None = None, debug: bool = False) -> AppConfig:
    """Build the configuration from defaults and environment overrides.

    Args:
        environ: Environment mapping (os.environ if None).
        debug: Debug flag from the entry point; the environment can also set it.
    """
    environ = os.environ if environ is None else environ

    data_dir_override = environ.get("LEDGERBOOK_DATA_DIR", "").strip()
    data_dir = Path(data_dir_override) if data_dir_override else default_data_dir(environ)

    return AppConfig(
        data_dir=data_dir,
        debug=debug or _is_true(environ.get("LEDGERBOOK_DEBUG", "")),
    )
