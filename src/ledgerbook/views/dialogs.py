"""Small modal dialogs: text prompt with validation, alert and confirm."""

from __future__ import annotations

import tkinter as tk
from collections.abc import Callable
from tkinter import messagebox, ttk

# Validator returns an error message, or "" if the text is acceptable
Validator = Callable[[str], str]


class AskDialog(tk.Toplevel):
    """Prompt for a line of text, with an optional live validator."""

    def _on_text_changed(self, *_args) -> None:
        """Re-run the validator and show its message under the entry."""
        if self.validator is None:
            return
        error = self.validator(self.text_var.get())
        self.error_label.config(text=error)
        self.ok_button.state(["disabled"] if error else ["!disabled"])

    def _on_ok(self) -> None:
        """Handle OK button click."""
        text = self.text_var.get()
        if self.validator is not None and self.validator(text):
            return
        self.result = text
        self.destroy()

    def _on_cancel(self) -> None:
        """Handle Cancel button click."""
        self.result = None
        self.destroy()

    def _create_widgets(self, message: str) -> None:
        """Create dialog widgets."""
        main_frame = ttk.Frame(self, padding=15)
        main_frame.pack(fill=tk.BOTH, expand=True)

        ttk.Label(main_frame, text=message, justify=tk.LEFT).pack(anchor=tk.W, pady=(0, 8))

        self.text_entry = ttk.Entry(main_frame, textvariable=self.text_var, width=40)
        self.text_entry.pack(fill=tk.X)

        self.error_label = ttk.Label(main_frame, text="", foreground="red")
        self.error_label.pack(anchor=tk.W, pady=(2, 8))

        button_frame = ttk.Frame(main_frame)
        button_frame.pack(anchor=tk.E)

        ttk.Button(button_frame, text="Cancel", command=self._on_cancel, width=10).pack(
            side=tk.LEFT, padx=(0, 5)
        )
        self.ok_button = ttk.Button(button_frame, text="OK", command=self._on_ok, width=10)
        self.ok_button.pack(side=tk.LEFT)

    def __init__(
        self,
        parent: tk.Misc,
        title: str,
        message: str,
        initial: str = "",
        validator: Validator | None = None,
    ):
        """Initialize the prompt.

        Args:
            parent: Parent widget
            title: Window title
            message: Prompt text shown above the entry
            initial: Initial entry text
            validator: Optional callable returning an error message for bad input
        """
        super().__init__(parent)
        self.title(title)
        self.transient(parent)
        self.resizable(False, False)

        self.validator = validator
        self.result: str | None = None
        self.text_var = tk.StringVar(value=initial)

        self._create_widgets(message)
        self.text_var.trace_add("write", self._on_text_changed)
        self._on_text_changed()

        # Center on parent
        self.update_idletasks()
        x = parent.winfo_rootx() + (parent.winfo_width() - self.winfo_width()) // 2
        y = parent.winfo_rooty() + (parent.winfo_height() - self.winfo_height()) // 2
        self.geometry(f"+{x}+{y}")

        self.grab_set()
        self.text_entry.focus_set()
        self.text_entry.select_range(0, tk.END)

        self.bind("<Return>", lambda e: self._on_ok())
        self.bind("<Escape>", lambda e: self._on_cancel())
        self.protocol("WM_DELETE_WINDOW", self._on_cancel)


def ask_string(
    parent: tk.Misc,
    title: str,
    message: str,
    initial: str = "",
    validator: Validator | None = None,
) -> str | None:
    """Show a text prompt and wait for it.

    Returns:
        The entered text, or None if cancelled.
    """
    dialog = AskDialog(parent, title, message, initial, validator)
    dialog.wait_window()
    return dialog.result


def alert(parent: tk.Misc, message: str, title: str = "Ledgerbook") -> None:
    messagebox.showinfo(title, message, parent=parent)


def show_error(parent: tk.Misc, message: str, title: str = "Error") -> None:
    messagebox.showerror(title, message, parent=parent)


def confirm(parent: tk.Misc, message: str, danger: bool = False, title: str = "Confirm") -> bool:
    """Ask OK/Cancel. With danger=True, Cancel is the default button."""
    return messagebox.askokcancel(
        title,
        message,
        parent=parent,
        icon=messagebox.WARNING if danger else messagebox.QUESTION,
        default=messagebox.CANCEL if danger else messagebox.OK,
    )
