"""Tests for SettingsDialog wiring (the Tk window itself is mocked out)."""

from unittest.mock import MagicMock, patch

import pytest

tk = pytest.importorskip("tkinter")

from ledgerbook.data.session import EditingSession  # noqa: E402
from ledgerbook.views.settings_dialog import (  # noqa: E402
    SettingsDialog,
    _CardEditor,
    _ListEditor,
)


@pytest.fixture
def dialog_bindings():
    """Build a SettingsDialog without a display and return its bind() mock."""
    with (
        patch.object(tk.Toplevel, "__init__", return_value=None),
        patch.object(SettingsDialog, "_create_widgets"),
        patch.object(SettingsDialog, "title"),
        patch.object(SettingsDialog, "transient"),
        patch.object(SettingsDialog, "protocol"),
        patch.object(SettingsDialog, "bind") as mock_bind,
    ):
        SettingsDialog(MagicMock(), EditingSession())
    return [c.args[0] for c in mock_bind.call_args_list]


class TestSettingsDialogBindings:
    def test_undo_redo_left_to_application_shortcuts(self, dialog_bindings):
        """Ctrl+Z/Ctrl+Y reach the app's bind_all handler exactly once."""
        assert "<Control-z>" not in dialog_bindings
        assert "<Control-y>" not in dialog_bindings

    def test_escape_closes(self, dialog_bindings):
        assert "<Escape>" in dialog_bindings


class TestListEditor:
    def test_hooks_are_abstract(self):
        assert _ListEditor.__abstractmethods__ == frozenset(
            {"_labels", "_add", "_edit", "_delete", "_move"}
        )

    def test_card_editor_implements_all_hooks(self):
        assert not _CardEditor.__abstractmethods__
