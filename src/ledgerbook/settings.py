import tkinter as tk
from dataclasses import dataclass


@dataclass
class AppSettings:
    """UI preferences for the running application."""

    def __init__(self, initial_month: int):
        self.show_separators_var = tk.BooleanVar(value=True)
        self.month_var = tk.IntVar(value=initial_month)

    @property
    def show_separators(self) -> bool:
        """Get thousands separator display setting."""
        return self.show_separators_var.get() if self.show_separators_var else True

    @property
    def month(self) -> int:
        """Get the month being viewed."""
        return self.month_var.get()

    @month.setter
    def month(self, value: int) -> None:
        self.month_var.set(value)
