"""Deferred task queue for work that must run after the current turn.

Callbacks queued with call_soon() run together when flush() is called, which
the application does at the end of every user command. When attached to a Tk
root, the queue also drains itself through after_idle(), i.e. as soon as the
current event handler has returned.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import tkinter as tk

logger = logging.getLogger(__name__)


class DeferredQueue:
    """FIFO queue of zero-argument callbacks drained at turn boundaries.

    Usage:
        queue = DeferredQueue()
        queue.call_soon(commit)
        ...               # more synchronous work in the same turn
        queue.flush()     # commit runs here

    Or bound to the Tk event loop:
        queue.attach(root)
        queue.call_soon(commit)  # runs once the current handler returns
    """

    def __init__(self) -> None:
        self._tasks: deque[Callable[[], None]] = deque()
        self._flushing = False
        self._tk_root: tk.Misc | None = None
        self._after_id: str | None = None

    @property
    def pending(self) -> int:
        """Number of callbacks waiting to run."""
        return len(self._tasks)

    @property
    def is_attached(self) -> bool:
        """Whether the queue drains itself through a Tk root."""
        return self._tk_root is not None

    def attach(self, tk_root: tk.Misc) -> None:
        """Drain automatically from the Tk event loop.

        Args:
            tk_root: Any Tk widget; used for after_idle() scheduling.
        """
        self._tk_root = tk_root
        if self._tasks:
            self._schedule_idle()

    def detach(self) -> None:
        """Stop automatic draining. Queued callbacks stay queued."""
        if self._after_id and self._tk_root:
            try:
                self._tk_root.after_cancel(self._after_id)
            except Exception:
                logger.debug("after_cancel failed; root already destroyed")
        self._after_id = None
        self._tk_root = None

    def _schedule_idle(self) -> None:
        if self._tk_root is None or self._after_id is not None:
            return
        self._after_id = self._tk_root.after_idle(self._on_idle)

    def _on_idle(self) -> None:
        self._after_id = None
        self.flush()

    def call_soon(self, callback: Callable[[], None]) -> None:
        """Queue a callback to run at the next flush.

        Args:
            callback: Zero-argument callable.
        """
        self._tasks.append(callback)
        self._schedule_idle()

    def flush(self) -> int:
        """Run queued callbacks until the queue is empty.

        Callbacks queued while flushing run in the same flush. A flush
        requested from inside a running callback returns immediately; the
        outer flush picks up whatever was queued. If a callback raises, the
        exception propagates and the remaining callbacks stay queued.

        Returns:
            Number of callbacks that ran.
        """
        if self._flushing:
            return 0

        ran = 0
        self._flushing = True
        try:
            while self._tasks:
                callback = self._tasks.popleft()
                callback()
                ran += 1
        finally:
            self._flushing = False
            if self._tasks:
                self._schedule_idle()
        return ran
