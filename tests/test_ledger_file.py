"""Tests for ledger file load/save."""

import json

import pytest

from ledgerbook.data.ledger_file import FILE_VERSION, load_ledger, save_ledger
from ledgerbook.models.entry import DataEntry

PAGES = {
    202404: [DataEntry(item="家賃", kind="Housing", amount=85000)],
    202403: [
        DataEntry(date=1, item="Rent", kind="Housing", amount=85000),
        DataEntry(date=25, item="Pay", kind="Salary", is_income=True, amount=310000),
    ],
}
SETTINGS = {
    "income_kinds": ["Salary"],
    "payment_kinds": ["Housing", "Food"],
    "cards": [{"name": "Visa", "closing": 15}],
}


def write_json(path, document):
    path.write_text(json.dumps(document), encoding="utf-8")
    return path


class TestSaveLoad:
    def test_round_trip(self, tmp_path):
        path = tmp_path / "ledger.json"

        save_ledger(path, PAGES, SETTINGS)
        pages, settings = load_ledger(path)

        assert pages == PAGES
        assert settings == SETTINGS

    def test_document_layout(self, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(path, PAGES, SETTINGS)

        document = json.loads(path.read_text(encoding="utf-8"))

        assert document["version"] == FILE_VERSION
        # Month keys are strings, written in month order
        assert list(document["data"]) == ["202403", "202404"]
        assert document["data"]["202403"][1]["is_income"] is True

    def test_non_ascii_written_as_is(self, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(path, PAGES, SETTINGS)

        assert "家賃" in path.read_text(encoding="utf-8")

    def test_creates_parent_folder(self, tmp_path):
        path = tmp_path / "Ledgerbook" / "ledger.json"
        save_ledger(path, {}, {})
        assert path.exists()

    def test_no_temp_file_left(self, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(path, PAGES, SETTINGS)
        assert sorted(p.name for p in tmp_path.iterdir()) == ["ledger.json"]

    def test_missing_sections_default_to_empty(self, tmp_path):
        path = write_json(tmp_path / "ledger.json", {"version": 1})

        pages, settings = load_ledger(path)

        assert pages == {}
        assert settings == {}


class TestBackups:
    def test_previous_file_kept_as_backup(self, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(path, PAGES, SETTINGS)
        first = path.read_text(encoding="utf-8")

        save_ledger(path, {}, SETTINGS)

        assert (tmp_path / "ledger.json.bak").read_text(encoding="utf-8") == first
        assert load_ledger(path)[0] == {}

    def test_backups_rotate(self, tmp_path):
        path = tmp_path / "ledger.json"
        for n in range(3):
            save_ledger(path, {}, {"n": n}, backup_count=2)

        assert load_ledger(path)[1] == {"n": 2}
        assert load_ledger(tmp_path / "ledger.json.bak")[1] == {"n": 1}
        assert load_ledger(tmp_path / "ledger.json.bak2")[1] == {"n": 0}
        assert not (tmp_path / "ledger.json.bak3").exists()

    def test_no_backup_when_disabled(self, tmp_path):
        path = tmp_path / "ledger.json"
        save_ledger(path, {}, {}, backup_count=0)
        save_ledger(path, {}, {}, backup_count=0)

        assert not (tmp_path / "ledger.json.bak").exists()


class TestLoadErrors:
    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_ledger(tmp_path / "missing.json")

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "ledger.json"
        path.write_text("{not json", encoding="utf-8")
        with pytest.raises(ValueError, match="Invalid JSON"):
            load_ledger(path)

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"version": FILE_VERSION + 1},
            {"version": "1"},
            {"data": []},
            {"data": {"2024-03": []}},
            {"data": {"202413": []}},
            {"data": {"202403": {}}},
            {"data": {"202403": [{"amount": "lots"}]}},
            {"data": {"202403": ["row"]}},
            {"settings": []},
        ],
    )
    def test_invalid_document(self, tmp_path, document):
        path = write_json(tmp_path / "ledger.json", document)
        with pytest.raises(ValueError):
            load_ledger(path)

    @pytest.mark.parametrize(
        "settings",
        [
            {"cards": [{"name": "Visa", "closing": None}]},
            {"cards": ["Visa"]},
            {"cards": [{"name": 5}]},
            {"cards": [{"name": "Visa", "closing": 40}]},
            {"cards": {"name": "Visa"}},
            {"income_kinds": None},
            {"payment_kinds": ["Food", 3]},
        ],
    )
    def test_invalid_settings_name_the_file(self, tmp_path, settings):
        path = write_json(tmp_path / "ledger.json", {"version": 1, "settings": settings})

        with pytest.raises(ValueError) as excinfo:
            load_ledger(path)

        assert str(path) in str(excinfo.value)

    @pytest.mark.parametrize(
        "row",
        [{"date": 40}, {"date": 0}, {"item": 5}, {"kind": None}, {"card": ["Visa"]}],
    )
    def test_row_values_checked_like_edits(self, tmp_path, row):
        path = write_json(tmp_path / "ledger.json", {"data": {"202403": [row]}})
        with pytest.raises(ValueError, match="Invalid row in month 202403"):
            load_ledger(path)
