"""Tests for configuration and logging setup."""

import logging
from pathlib import Path

import pytest

from ledgerbook import debug_trace
from ledgerbook.config import AppConfig, default_data_dir, load_config


class TestDefaultDataDir:
    def test_uses_localappdata(self, tmp_path):
        environ = {"LOCALAPPDATA": str(tmp_path)}
        assert default_data_dir(environ) == tmp_path / "Ledgerbook"

    def test_falls_back_to_home(self):
        assert default_data_dir({}) == Path.home() / "Ledgerbook"


class TestLoadConfig:
    def test_defaults(self, tmp_path):
        config = load_config({"LOCALAPPDATA": str(tmp_path)})

        assert config.data_dir == tmp_path / "Ledgerbook"
        assert config.data_path == tmp_path / "Ledgerbook" / "ledger.json"
        assert config.backup_count == 1
        assert config.debug is False

    def test_data_dir_override(self, tmp_path):
        config = load_config({"LEDGERBOOK_DATA_DIR": str(tmp_path / "books")})
        assert config.data_dir == tmp_path / "books"

    def test_blank_override_ignored(self, tmp_path):
        config = load_config({"LEDGERBOOK_DATA_DIR": "  ", "LOCALAPPDATA": str(tmp_path)})
        assert config.data_dir == tmp_path / "Ledgerbook"

    @pytest.mark.parametrize(
        "value,expected", [("1", True), ("TRUE", True), ("0", False), ("", False)]
    )
    def test_debug_from_environment(self, value, expected):
        assert load_config({"LEDGERBOOK_DEBUG": value}).debug is expected

    def test_debug_from_entry_point(self):
        assert load_config({}, debug=True).debug is True

    def test_data_path_property(self, tmp_path):
        config = AppConfig(data_dir=tmp_path, data_file_name="home.json")
        assert config.data_path == tmp_path / "home.json"


class TestDebugLogging:
    @pytest.fixture(autouse=True)
    def restore_logger(self):
        level = debug_trace.logger.level
        handlers = list(debug_trace.logger.handlers)
        yield
        debug_trace.logger.setLevel(level)
        debug_trace.logger.handlers[:] = handlers

    def test_debug_mode_attaches_one_handler(self):
        debug_trace.logger.handlers.clear()

        debug_trace.setup_debug_logging(debug=True)
        debug_trace.setup_debug_logging(debug=True)

        assert debug_trace.logger.level == logging.DEBUG
        assert len(debug_trace.logger.handlers) == 1

    def test_normal_mode_shows_warnings_only(self):
        debug_trace.setup_debug_logging(debug=False)
        assert debug_trace.logger.level == logging.WARNING

    def test_perf_timer_logs_elapsed_time(self, caplog):
        debug_trace.logger.setLevel(logging.DEBUG)
        with caplog.at_level(logging.DEBUG, logger="ledgerbook"):
            with debug_trace.perf_timer("refresh", row_count=12):
                pass

        assert "PERF: refresh (12 rows) took" in caplog.text
