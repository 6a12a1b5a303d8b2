"""Data layer: history, stores, file I/O and the editing session.

- DeferredQueue: runs end-of-turn work such as undo commits
- HistoryManager: undo/redo stacks built from registered inverse actions
- LedgerStore / SettingsStore: undoable editing operations
- EditingSession: one open document with its own history
"""

from .deferred import DeferredQueue
from .history import HistoryManager, UndoMode
from .ledger_store import LedgerStore
from .session import EditingSession
from .settings_store import SettingsStore

__all__ = [
    "DeferredQueue",
    "EditingSession",
    "HistoryManager",
    "LedgerStore",
    "SettingsStore",
    "UndoMode",
]
