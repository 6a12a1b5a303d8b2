"""Undo/redo history built from inverse actions.

Editing operations report how to reverse themselves by calling
register_undo() with a zero-argument callable. Everything registered during
one synchronous burst of work (one cell edit, one CSV import, one replayed
group) is committed together as a single undo step once the burst ends.

Replaying a group runs its actions newest first. Each action performs an
ordinary edit, so it registers its own inverse; during an undo those land in
the redo buffer, which is how the redo history is built.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import IntEnum

from .deferred import DeferredQueue

logger = logging.getLogger(__name__)

Action = Callable[[], None]
Hook = Callable[[bool], None]


class UndoMode(IntEnum):
    """What the history manager is currently doing."""

    IDLE = 0
    UNDOING = 1
    REDOING = 2


class HistoryManager:
    """Undo and redo stacks of action groups.

    Usage:
        history = HistoryManager(queue)

        def set_name(value):
            old = model.name
            model.name = value
            history.register_undo(lambda: set_name(old))

        set_name("new")
        queue.flush()       # burst committed as one undo step
        history.do_undo()   # runs the inverse, which registers the redo
        queue.flush()
        history.do_redo()

    Attributes:
        before_undo_or_redo: Optional hook called with is_undoing before a
            group is replayed.
        after_undo_or_redo: Optional hook called with is_undoing after a
            group is replayed.
    """

    def __init__(self, queue: DeferredQueue | None = None):
        """Initialize an empty history.

        Args:
            queue: Queue used to schedule the end-of-burst commit. A private
                queue is created if none is given.
        """
        self._queue = queue if queue is not None else DeferredQueue()

        self._undo_stack: list[list[Action]] = []
        self._redo_stack: list[list[Action]] = []

        # Actions registered since the last commit
        self._pending_undos: list[Action] = []
        self._pending_redos: list[Action] = []

        self._mode = UndoMode.IDLE

        self.before_undo_or_redo: Hook | None = None
        self.after_undo_or_redo: Hook | None = None

    @property
    def queue(self) -> DeferredQueue:
        """The queue that commits pending bursts."""
        return self._queue

    @property
    def mode(self) -> UndoMode:
        """Current mode; IDLE between top-level calls."""
        return self._mode

    @property
    def undo_count(self) -> int:
        """Number of groups on the undo stack."""
        return len(self._undo_stack)

    @property
    def redo_count(self) -> int:
        """Number of groups on the redo stack."""
        return len(self._redo_stack)

    @property
    def has_pending(self) -> bool:
        """Whether a burst has been registered but not committed yet."""
        return bool(self._pending_undos or self._pending_redos)

    def register_undo(self, action: Action) -> None:
        """Record the inverse of a mutation that was just applied.

        The first registration of a burst schedules the commit that moves the
        burst onto a stack. The mode is captured at that moment, so the whole
        burst commits the same way.

        Args:
            action: Zero-argument callable that reverses the mutation.
        """
        if not self._pending_undos and not self._pending_redos:
            captured_mode = self._mode
            self._queue.call_soon(lambda: self._commit(captured_mode))

        if self._mode == UndoMode.UNDOING:
            self._pending_redos.append(action)
        else:
            self._pending_undos.append(action)

    def _commit(self, captured_mode: UndoMode) -> None:
        """Push the pending burst onto the stack chosen by captured_mode."""
        if captured_mode == UndoMode.UNDOING:
            group, self._pending_redos = self._pending_redos, []
            self._redo_stack.append(group)
            logger.debug(f"Committed {len(group)} action(s) to redo stack")
            return

        group, self._pending_undos = self._pending_undos, []
        self._undo_stack.append(group)
        if captured_mode == UndoMode.IDLE:
            # New work invalidates redo history
            self._redo_stack.clear()
        logger.debug(f"Committed {len(group)} action(s) to undo stack")

    def _replay(self, stack: list[list[Action]], mode: UndoMode) -> bool:
        """Pop the newest group off stack and run it in reverse order."""
        # Anything still pending belongs to the previous turn
        self._queue.flush()

        is_undoing = mode == UndoMode.UNDOING
        self._mode = mode
        try:
            if not stack:
                return False
            actions = stack.pop()
            logger.debug(
                f"{'Undoing' if is_undoing else 'Redoing'} group of {len(actions)} action(s)"
            )
            if self.before_undo_or_redo is not None:
                self.before_undo_or_redo(is_undoing)
            while actions:
                action = actions.pop()
                action()
            if self.after_undo_or_redo is not None:
                self.after_undo_or_redo(is_undoing)
            return True
        finally:
            self._mode = UndoMode.IDLE

    def do_undo(self) -> bool:
        """Undo the most recent group. No-op when there is nothing to undo.

        Returns:
            True if a group was replayed.
        """
        return self._replay(self._undo_stack, UndoMode.UNDOING)

    def do_redo(self) -> bool:
        """Redo the most recently undone group. No-op when there is nothing to redo.

        Returns:
            True if a group was replayed.
        """
        return self._replay(self._redo_stack, UndoMode.REDOING)

    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 0

    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0
