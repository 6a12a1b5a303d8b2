"""Main application window for Ledgerbook."""

from __future__ import annotations

import logging
import tkinter as tk
from pathlib import Path
from tkinter import filedialog, messagebox, ttk

from .config import AppConfig, load_config
from .data.deferred import DeferredQueue
from .data.session import EditingSession
from .debug_trace import setup_debug_logging
from .services.csv_service import CsvService, export_csv
from .settings import AppSettings
from .utils.formatting import (
    current_year_month,
    last_month,
    next_month,
    year_month_to_string,
)
from .views.dialogs import alert, confirm, show_error
from .views.ledger_panel import LedgerPanel
from .views.settings_dialog import SettingsDialog

logger = logging.getLogger(__name__)

LEDGER_FILETYPES = [("Ledger files", "*.json"), ("All files", "*.*")]
CSV_FILETYPES = [("CSV files", "*.csv"), ("All files", "*.*")]


def get_version():
    """Get version from package metadata."""
    try:
        from importlib.metadata import version

        return version("ledgerbook")
    except Exception:
        return "Development"


class LedgerApp:
    """Main application for Ledgerbook."""

    # --- Session handling ---

    def _new_session(self, file_path: Path | None) -> EditingSession:
        """Empty ledger with a page for the current month."""
        session = EditingSession(
            file_path, queue=self.queue, backup_count=self.config.backup_count
        )
        session.load({current_year_month(): []})
        return session

    def _set_session(self, session: EditingSession) -> None:
        # Commits still queued belong to the old session
        self.queue.flush()
        self.session = session
        self.panel.set_session(session)
        month = self.settings.month
        if not session.ledger.has_page(month):
            month = session.ledger.end_month() or current_year_month()
        self._show_month(month)

    def _load_startup_session(self) -> EditingSession:
        path = self.config.data_path
        if path.exists():
            try:
                return EditingSession.open_file(
                    path, queue=self.queue, backup_count=self.config.backup_count
                )
            except (OSError, ValueError) as e:
                logger.warning(f"Could not open {path}: {e}")
                show_error(self.root, f"Could not open {path}:\n{e}")
        return self._new_session(path)

    def _maybe_save_changes(self) -> bool:
        """Offer to save unsaved changes.

        Returns:
            False if the user cancelled.
        """
        self.queue.flush()
        if not self.session.is_dirty:
            return True
        answer = messagebox.askyesnocancel(
            "Unsaved Changes", "Save changes before continuing?", parent=self.root
        )
        if answer is None:
            return False
        if answer:
            return self.save()
        return True

    # --- Commands ---

    def open_file(self) -> None:
        if not self._maybe_save_changes():
            return
        file_path = filedialog.askopenfilename(
            parent=self.root, title="Open Ledger", filetypes=LEDGER_FILETYPES
        )
        if not file_path:
            return
        try:
            session = EditingSession.open_file(
                file_path, queue=self.queue, backup_count=self.config.backup_count
            )
        except (OSError, ValueError) as e:
            show_error(self.root, f"Could not open file:\n{e}")
            return
        self._set_session(session)
        self._update_controls()

    def save(self) -> bool:
        """Save to the current file.

        Returns:
            True if saved.
        """
        if self.session.file_path is None:
            return self.save_as()
        try:
            self.session.save()
        except OSError as e:
            show_error(self.root, f"Could not save:\n{e}")
            return False
        self._update_controls()
        return True

    def save_as(self) -> bool:
        file_path = filedialog.asksaveasfilename(
            parent=self.root,
            title="Save Ledger As",
            defaultextension=".json",
            filetypes=LEDGER_FILETYPES,
        )
        if not file_path:
            return False
        try:
            self.session.save(file_path)
        except OSError as e:
            show_error(self.root, f"Could not save:\n{e}")
            return False
        self._update_controls()
        return True

    def import_csv(self) -> None:
        file_path = filedialog.askopenfilename(
            parent=self.root, title="Import CSV", filetypes=CSV_FILETYPES
        )
        if not file_path:
            return
        try:
            count = CsvService.import_file(self.session.ledger, file_path)
        except (OSError, ValueError) as e:
            show_error(self.root, f"Could not import CSV:\n{e}")
            return
        finally:
            self.queue.flush()
        self._update_controls()
        alert(self.root, f"Imported {count} row(s).")

    def export_csv(self) -> None:
        file_path = filedialog.asksaveasfilename(
            parent=self.root,
            title="Export CSV",
            defaultextension=".csv",
            filetypes=CSV_FILETYPES,
        )
        if not file_path:
            return
        try:
            count = export_csv(file_path, self.session.ledger)
        except OSError as e:
            show_error(self.root, f"Could not export CSV:\n{e}")
            return
        alert(self.root, f"Exported {count} row(s).")

    def undo(self) -> None:
        self.session.undo()
        self._update_controls()

    def redo(self) -> None:
        self.session.redo()
        self._update_controls()

    def open_settings(self) -> None:
        SettingsDialog(self.root, self.session)

    # --- Month navigation ---

    def _show_month(self, month: int) -> None:
        self.settings.month = month
        self.month_label.config(text=year_month_to_string(month))
        self.panel.set_month(month)
        self._update_controls()

    def previous_month(self) -> None:
        self._show_month(last_month(self.settings.month))

    def next_month(self) -> None:
        self._show_month(next_month(self.settings.month))

    def create_month(self) -> None:
        month = self.settings.month
        if self.session.ledger.has_page(month):
            return
        self.session.ledger.insert_page(month)
        self.queue.flush()
        self._update_controls()

    def delete_month(self) -> None:
        month = self.settings.month
        if not self.session.ledger.has_page(month):
            return
        if not confirm(
            self.root,
            f"Delete all rows of {year_month_to_string(month)}?",
            danger=True,
        ):
            return
        self.session.ledger.delete_page(month)
        self.queue.flush()
        self._update_controls()

    # --- UI state ---

    def _update_controls(self) -> None:
        """Refresh title, menu states and month buttons."""
        history = self.session.history
        self.edit_menu.entryconfig(
            self._undo_index, state=tk.NORMAL if history.can_undo() else tk.DISABLED
        )
        self.edit_menu.entryconfig(
            self._redo_index, state=tk.NORMAL if history.can_redo() else tk.DISABLED
        )

        has_page = self.session.ledger.has_page(self.settings.month)
        self.create_month_button.state(["disabled"] if has_page else ["!disabled"])
        self.delete_month_button.state(["!disabled"] if has_page else ["disabled"])

        name = self.session.file_path.name if self.session.file_path else "Untitled"
        dirty = "*" if self.session.is_dirty else ""
        self.root.title(f"Ledgerbook - {name}{dirty}")

    def _create_menu_bar(self) -> None:
        """Create the application menu bar."""
        menubar = tk.Menu(self.root)
        self.root.config(menu=menubar)

        file_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="File", menu=file_menu)
        file_menu.add_command(label="Open...", command=self.open_file, accelerator="Ctrl+O")
        file_menu.add_command(label="Save", command=self.save, accelerator="Ctrl+S")
        file_menu.add_command(label="Save As...", command=self.save_as)
        file_menu.add_separator()
        file_menu.add_command(label="Import CSV...", command=self.import_csv)
        file_menu.add_command(label="Export CSV...", command=self.export_csv)
        file_menu.add_separator()
        file_menu.add_command(label="Exit", command=self.on_closing)

        self.edit_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Edit", menu=self.edit_menu)
        self.edit_menu.add_command(label="Undo", command=self.undo, accelerator="Ctrl+Z")
        self._undo_index = self.edit_menu.index(tk.END)
        self.edit_menu.add_command(label="Redo", command=self.redo, accelerator="Ctrl+Y")
        self._redo_index = self.edit_menu.index(tk.END)
        self.edit_menu.add_separator()
        self.edit_menu.add_command(label="Settings...", command=self.open_settings)

        view_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="View", menu=view_menu)
        view_menu.add_checkbutton(
            label="Thousands Separators",
            variable=self.settings.show_separators_var,
            command=lambda: self.panel.refresh(),
        )

        help_menu = tk.Menu(menubar, tearoff=0)
        menubar.add_cascade(label="Help", menu=help_menu)
        help_menu.add_command(
            label="About Ledgerbook...",
            command=lambda: alert(self.root, f"Ledgerbook {get_version()}"),
        )

    def _create_widgets(self) -> None:
        """Create all UI widgets."""
        self._create_menu_bar()

        main_frame = ttk.Frame(self.root, padding=10)
        main_frame.pack(fill=tk.BOTH, expand=True)

        nav = ttk.Frame(main_frame)
        nav.pack(fill=tk.X)
        ttk.Button(nav, text="◀", width=3, command=self.previous_month).pack(side=tk.LEFT)
        self.month_label = ttk.Label(nav, text="", width=10, anchor=tk.CENTER)
        self.month_label.pack(side=tk.LEFT, padx=5)
        ttk.Button(nav, text="▶", width=3, command=self.next_month).pack(side=tk.LEFT)

        self.delete_month_button = ttk.Button(nav, text="Delete Month", command=self.delete_month)
        self.delete_month_button.pack(side=tk.RIGHT)
        self.create_month_button = ttk.Button(nav, text="Create Month", command=self.create_month)
        self.create_month_button.pack(side=tk.RIGHT, padx=(0, 5))

        self.panel = LedgerPanel(
            main_frame,
            show_separators=lambda: self.settings.show_separators,
            on_modified=self._update_controls,
        )
        self.panel.pack(fill=tk.BOTH, expand=True, pady=(5, 0))

    def _bind_shortcuts(self) -> None:
        self.root.bind_all("<Control-z>", lambda e: self.undo())
        self.root.bind_all("<Control-y>", lambda e: self.redo())
        self.root.bind_all("<Control-Z>", lambda e: self.redo())  # Ctrl+Shift+Z
        self.root.bind_all("<Control-s>", lambda e: self.save())
        self.root.bind_all("<Control-o>", lambda e: self.open_file())

    def __init__(self, config: AppConfig):
        self.config = config

        self.root = tk.Tk()
        self.root.title("Ledgerbook")
        self.root.withdraw()

        # Undo steps are committed once the current Tk event handler returns
        self.queue = DeferredQueue()
        self.queue.attach(self.root)

        self.settings = AppSettings(current_year_month())

        self._create_widgets()
        self._bind_shortcuts()
        self.root.protocol("WM_DELETE_WINDOW", self.on_closing)

        self.session = self._load_startup_session()
        self._set_session(self.session)

        self.root.update_idletasks()
        self.root.deiconify()

    def on_closing(self) -> None:
        """Handle application shutdown."""
        if not self._maybe_save_changes():
            return
        self.queue.detach()
        self.root.destroy()

    def run(self) -> None:
        """Run the Ledgerbook application."""
        self.root.mainloop()


def main() -> None:
    """Entry point for the application."""
    config = load_config()
    setup_debug_logging(config.debug)
    LedgerApp(config).run()


def main_dev() -> None:
    """Entry point with debug logging to the console."""
    config = load_config(debug=True)
    setup_debug_logging(True)
    logger.info(f"Ledgerbook {get_version()} starting, data file {config.data_path}")
    LedgerApp(config).run()


if __name__ == "__main__":
    main()
