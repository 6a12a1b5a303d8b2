"""Tests for LedgerStore editing operations and their undo/redo."""

import copy

import pytest

from ledgerbook.data.deferred import DeferredQueue
from ledgerbook.data.history import HistoryManager
from ledgerbook.data.ledger_store import LedgerStore, check_month
from ledgerbook.models.entry import DataEntry

MARCH = 202403
APRIL = 202404


@pytest.fixture
def queue():
    return DeferredQueue()


@pytest.fixture
def history(queue):
    return HistoryManager(queue)


@pytest.fixture
def store(history, queue):
    """Store with a March page holding two rows, history cleared."""
    s = LedgerStore(history)
    s.load(
        {
            MARCH: [
                DataEntry(date=1, item="Rent", kind="Housing", amount=85000),
                DataEntry(date=25, item="Pay", kind="Salary", is_income=True, amount=310000),
            ]
        }
    )
    return s


def snapshot(store):
    return copy.deepcopy(store.pages)


def undo(history, queue):
    history.do_undo()
    queue.flush()


def redo(history, queue):
    history.do_redo()
    queue.flush()


class TestLoad:
    """Tests for bulk loading."""

    def test_load_records_no_history(self, store, history, queue):
        queue.flush()
        assert history.can_undo() is False
        assert store.months() == [MARCH]

    def test_load_rejects_bad_month(self, history):
        s = LedgerStore(history)
        with pytest.raises(ValueError):
            s.load({202413: []})


class TestSetValue:
    """Tests for set_value."""

    def test_set_value_updates_field(self, store):
        store.set_value(MARCH, 0, "amount", 90000)
        assert store.get_entry(MARCH, 0).amount == 90000

    def test_set_value_undo_redo(self, store, history, queue):
        before = snapshot(store)
        store.set_value(MARCH, 0, "item", "Rent (March)")
        queue.flush()
        after = snapshot(store)

        undo(history, queue)
        assert store.pages == before

        redo(history, queue)
        assert store.pages == after

    def test_same_value_records_nothing(self, store, history, queue):
        store.set_value(MARCH, 0, "item", "Rent")
        queue.flush()
        assert history.can_undo() is False

    def test_unknown_field_raises_before_mutating(self, store, history, queue):
        with pytest.raises(ValueError):
            store.set_value(MARCH, 0, "colour", "red")
        queue.flush()
        assert history.can_undo() is False

    def test_wrong_type_raises(self, store):
        with pytest.raises(ValueError):
            store.set_value(MARCH, 0, "amount", "lots")
        with pytest.raises(ValueError):
            store.set_value(MARCH, 0, "is_income", 1)
        with pytest.raises(ValueError):
            store.set_value(MARCH, 0, "date", 32)

    def test_none_clears_numeric_field(self, store, history, queue):
        store.set_value(MARCH, 0, "amount", None)
        queue.flush()
        assert store.get_entry(MARCH, 0).amount is None

        undo(history, queue)
        assert store.get_entry(MARCH, 0).amount == 85000

    def test_bad_row_and_page(self, store):
        with pytest.raises(IndexError):
            store.set_value(MARCH, 5, "item", "x")
        with pytest.raises(KeyError):
            store.set_value(APRIL, 0, "item", "x")

    def test_several_fields_one_undo_step(self, store, history, queue):
        before = snapshot(store)
        store.set_value(MARCH, 0, "item", "Groceries")
        store.set_value(MARCH, 0, "kind", "Food")
        store.set_value(MARCH, 0, "amount", 4200)
        queue.flush()

        assert history.undo_count == 1
        undo(history, queue)
        assert store.pages == before


class TestRows:
    """Tests for insert_row and delete_row."""

    def test_insert_blank_row(self, store, history, queue):
        store.insert_row(MARCH, 1)
        queue.flush()

        assert len(store.get_page(MARCH)) == 3
        assert store.get_entry(MARCH, 1).is_empty

        undo(history, queue)
        assert len(store.get_page(MARCH)) == 2
        assert store.get_entry(MARCH, 1).item == "Pay"

    def test_insert_row_appends_at_end(self, store):
        store.insert_row(MARCH, 2, DataEntry(item="Bus"))
        assert store.get_entry(MARCH, 2).item == "Bus"

    def test_insert_row_out_of_range(self, store):
        with pytest.raises(IndexError):
            store.insert_row(MARCH, 3)

    def test_delete_row_undo_restores_position(self, store, history, queue):
        before = snapshot(store)
        store.delete_row(MARCH, 0)
        queue.flush()
        assert store.get_entry(MARCH, 0).item == "Pay"

        undo(history, queue)
        assert store.pages == before

        redo(history, queue)
        assert [e.item for e in store.get_page(MARCH)] == ["Pay"]

    def test_delete_all_rows_in_one_burst(self, store, history, queue):
        before = snapshot(store)
        store.delete_row(MARCH, 1)
        store.delete_row(MARCH, 0)
        queue.flush()
        assert store.get_page(MARCH) == []

        undo(history, queue)
        assert store.pages == before

    def test_edit_then_delete_round_trip(self, store, history, queue):
        """Inverses run newest first, so the edit is undone on the restored row."""
        before = snapshot(store)
        store.set_value(MARCH, 0, "amount", 1)
        store.delete_row(MARCH, 0)
        queue.flush()
        after = snapshot(store)

        undo(history, queue)
        assert store.pages == before
        redo(history, queue)
        assert store.pages == after


class TestPages:
    """Tests for insert_page and delete_page."""

    def test_insert_page(self, store, history, queue):
        store.insert_page(APRIL)
        queue.flush()
        assert store.months() == [MARCH, APRIL]

        undo(history, queue)
        assert store.months() == [MARCH]

    def test_insert_existing_page_raises(self, store):
        with pytest.raises(ValueError):
            store.insert_page(MARCH)

    def test_insert_invalid_month_raises(self, store):
        with pytest.raises(ValueError):
            store.insert_page(202400)

    def test_delete_page_undo_restores_rows(self, store, history, queue):
        before = snapshot(store)
        store.delete_page(MARCH)
        queue.flush()
        assert store.months() == []

        undo(history, queue)
        assert store.pages == before

        redo(history, queue)
        assert store.months() == []

    def test_delete_missing_page_raises(self, store):
        with pytest.raises(KeyError):
            store.delete_page(APRIL)

    def test_new_page_with_rows_is_one_step(self, store, history, queue):
        store.insert_page(APRIL)
        store.insert_row(APRIL, 0, DataEntry(item="Gas"))
        store.insert_row(APRIL, 1, DataEntry(item="Water"))
        queue.flush()

        assert history.undo_count == 1
        undo(history, queue)
        assert not store.has_page(APRIL)

        redo(history, queue)
        assert [e.item for e in store.get_page(APRIL)] == ["Gas", "Water"]


class TestQueries:
    """Tests for read helpers."""

    def test_month_totals(self, store):
        store.insert_row(MARCH, 2, DataEntry(item="Blank"))
        assert store.month_totals(MARCH) == (310000, 85000)

    def test_first_and_end_month(self, store):
        store.insert_page(202312)
        store.insert_page(APRIL)
        assert store.first_month() == 202312
        assert store.end_month() == APRIL

    def test_empty_store_months(self, history):
        s = LedgerStore(history)
        assert s.first_month() is None
        assert s.end_month() is None
        assert list(s.iter_entries()) == []

    def test_iter_entries_in_month_order(self, store):
        store.insert_page(202312, [DataEntry(item="Old")])
        items = [(m, r, e.item) for m, r, e in store.iter_entries()]
        assert items == [(202312, 0, "Old"), (MARCH, 0, "Rent"), (MARCH, 1, "Pay")]

    def test_get_page_returns_copy(self, store):
        rows = store.get_page(MARCH)
        rows.clear()
        assert len(store.get_page(MARCH)) == 2


class TestObservers:
    """Tests for change notification."""

    def test_observer_notified_with_month(self, store):
        notifications = []
        store.add_observer(lambda sender, month: notifications.append(month))

        store.set_value(MARCH, 0, "item", "New")
        store.insert_page(APRIL)

        assert notifications == [MARCH, None]

    def test_suspended_notifications_collapse(self, store):
        notifications = []
        store.add_observer(lambda sender, month: notifications.append(month))

        store.suspend_notifications()
        store.set_value(MARCH, 0, "item", "A")
        store.set_value(MARCH, 1, "item", "B")
        assert notifications == []
        store.resume_notifications()

        assert notifications == [None]

    def test_resume_without_changes_is_silent(self, store):
        notifications = []
        store.add_observer(lambda sender, month: notifications.append(month))

        store.suspend_notifications()
        store.resume_notifications()
        store.resume_notifications()  # extra resume is harmless

        assert notifications == []

    def test_failing_observer_does_not_block_others(self, store):
        def broken(sender, month):
            raise RuntimeError("broken observer")

        notifications = []
        store.add_observer(broken)
        store.add_observer(lambda sender, month: notifications.append(month))

        store.set_value(MARCH, 0, "item", "X")

        assert notifications == [MARCH]

    def test_remove_observer(self, store):
        notifications = []

        def callback(sender, month):
            notifications.append(month)

        store.add_observer(callback)
        store.remove_observer(callback)
        store.set_value(MARCH, 0, "item", "X")

        assert notifications == []


class TestCheckMonth:
    @pytest.mark.parametrize("month", [202401, 202412, 199901])
    def test_valid(self, month):
        check_month(month)

    @pytest.mark.parametrize("month", [202400, 202413, 12, "202401", True])
    def test_invalid(self, month):
        with pytest.raises(ValueError):
            check_month(month)
