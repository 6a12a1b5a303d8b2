"""Tests for EditingSession: dirty tracking, undo/redo and saving."""

import json
from unittest.mock import MagicMock

import pytest

from ledgerbook.data.ledger_file import save_ledger
from ledgerbook.data.session import EditingSession
from ledgerbook.models.entry import DataEntry

MARCH = 202403


@pytest.fixture
def ledger_path(tmp_path):
    path = tmp_path / "ledger.json"
    save_ledger(
        path,
        {MARCH: [DataEntry(date=1, item="Rent", kind="Housing", amount=85000)]},
        {"income_kinds": ["Salary"], "payment_kinds": ["Housing"], "cards": []},
    )
    return path


@pytest.fixture
def session(ledger_path):
    return EditingSession.open_file(ledger_path)


class TestOpen:
    def test_open_file_loads_data(self, session, ledger_path):
        assert session.file_path == ledger_path
        assert session.ledger.get_entry(MARCH, 0).item == "Rent"
        assert session.settings.payment_kinds == ["Housing"]

    def test_open_file_is_clean_with_no_history(self, session):
        session.flush()
        assert session.is_dirty is False
        assert session.history.can_undo() is False

    @pytest.mark.parametrize(
        "settings",
        [
            {"cards": [{"name": "Visa", "closing": None}]},
            {"cards": ["Visa"]},
            {"income_kinds": None},
        ],
    )
    def test_open_file_with_bad_settings(self, tmp_path, settings):
        path = tmp_path / "ledger.json"
        path.write_text(json.dumps({"version": 1, "settings": settings}), encoding="utf-8")

        with pytest.raises(ValueError, match="ledger.json"):
            EditingSession.open_file(path)

    def test_open_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            EditingSession.open_file(tmp_path / "missing.json")

    def test_new_session_is_empty(self):
        session = EditingSession()
        assert session.file_path is None
        assert session.ledger.months() == []
        assert session.is_dirty is False

    def test_load_leaves_session_clean(self):
        session = EditingSession()

        session.load({202404: [DataEntry(item="Gas")]})
        session.flush()

        assert session.is_dirty is False
        assert session.ledger.months() == [202404]
        assert session.settings.cards == []


class TestDirty:
    def test_ledger_edit_marks_dirty(self, session):
        session.ledger.set_value(MARCH, 0, "amount", 90000)
        assert session.is_dirty is True

    def test_settings_edit_marks_dirty(self, session):
        session.settings.insert_card_entry("Visa", 10, 0)
        assert session.is_dirty is True

    def test_save_clears_dirty(self, session):
        session.ledger.set_value(MARCH, 0, "amount", 90000)

        session.save()

        assert session.is_dirty is False
        reopened = EditingSession.open_file(session.file_path)
        assert reopened.ledger.get_entry(MARCH, 0).amount == 90000

    def test_save_commits_pending_step(self, session):
        session.ledger.set_value(MARCH, 0, "item", "Rent (March)")
        session.save()
        assert session.history.can_undo() is True


class TestSave:
    def test_save_without_path_raises(self):
        with pytest.raises(ValueError):
            EditingSession().save()

    def test_save_as_sets_file_path(self, tmp_path):
        session = EditingSession()
        session.ledger.insert_page(MARCH)
        target = tmp_path / "new.json"

        assert session.save(target) == target
        assert session.file_path == target
        assert EditingSession.open_file(target).ledger.months() == [MARCH]

    def test_save_keeps_backup(self, session, ledger_path):
        session.save()
        assert ledger_path.with_name("ledger.json.bak").exists()


class TestUndoRedo:
    def test_undo_redo_return_values(self, session):
        assert session.undo() is False
        assert session.redo() is False

        session.ledger.set_value(MARCH, 0, "amount", 90000)
        session.flush()

        assert session.undo() is True
        assert session.ledger.get_entry(MARCH, 0).amount == 85000
        assert session.redo() is True
        assert session.ledger.get_entry(MARCH, 0).amount == 90000

    def test_undo_is_committed_immediately(self, session):
        session.ledger.set_value(MARCH, 0, "amount", 90000)
        session.flush()

        session.undo()

        assert session.history.can_redo() is True

    def test_undo_marks_dirty(self, session):
        session.ledger.set_value(MARCH, 0, "amount", 90000)
        session.save()

        session.undo()

        assert session.is_dirty is True

    def test_replay_sends_one_ledger_notification(self, session):
        session.ledger.set_value(MARCH, 0, "item", "A")
        session.ledger.set_value(MARCH, 0, "kind", "B")
        session.ledger.insert_row(MARCH, 1)
        session.flush()
        observer = MagicMock()
        session.ledger.add_observer(observer)

        session.undo()

        observer.assert_called_once_with(session.ledger, None)

    def test_failing_action_resumes_notifications(self, session):
        session.history.register_undo(MagicMock(side_effect=RuntimeError("boom")))
        session.flush()

        with pytest.raises(RuntimeError):
            session.undo()

        observer = MagicMock()
        session.ledger.add_observer(observer)
        session.ledger.set_value(MARCH, 0, "item", "After")
        observer.assert_called_once_with(session.ledger, MARCH)
