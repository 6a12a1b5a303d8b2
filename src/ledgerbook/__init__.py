"""Ledgerbook: monthly household ledger with grouped undo/redo."""
