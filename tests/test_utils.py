"""
Unit Tests for utility helpers.
"""

import logging
from datetime import datetime, timezone
from logging.handlers import RotatingFileHandler

import pytest

from appointment_monitor.config import LoggingConfig
from appointment_monitor.utils import format_date, setup_logging


class TestFormatDate:
    """Test suite for operator-facing date formatting."""

    def test_winter_time(self):
        assert format_date(datetime(2025, 3, 12, 13, 30, tzinfo=timezone.utc)) == "12 mrt 2025 14:30"

    def test_summer_time(self):
        assert format_date(datetime(2025, 7, 1, 8, 5, tzinfo=timezone.utc)) == "1 jul 2025 10:05"

    def test_crosses_midnight(self):
        assert format_date(datetime(2024, 12, 31, 23, 15, tzinfo=timezone.utc)) == "1 jan 2025 00:15"

    def test_naive_is_local_wall_clock(self):
        assert format_date(datetime(2025, 10, 3, 9, 0)) == "3 okt 2025 09:00"

    def test_other_timezone(self):
        value = datetime(2025, 5, 20, 12, 0, tzinfo=timezone.utc)

        assert format_date(value, "UTC") == "20 mei 2025 12:00"


class TestSetupLogging:
    """Test suite for logging setup."""

    @pytest.fixture(autouse=True)
    def _restore_root_logger(self):
        root = logging.getLogger()
        handlers, level = list(root.handlers), root.level
        yield
        for handler in root.handlers:
            handler.close()
        root.handlers[:] = handlers
        root.setLevel(level)

    def test_file_and_console_handlers(self, tmp_path):
        setup_logging(LoggingConfig(logs_dir=tmp_path / "logs", log_level="debug"))

        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 2
        file_handlers = [h for h in root.handlers if isinstance(h, RotatingFileHandler)]
        assert len(file_handlers) == 1
        assert file_handlers[0].baseFilename == str(tmp_path / "logs" / "appointment_monitor.log")

    def test_writes_to_file(self, tmp_path):
        setup_logging(LoggingConfig(logs_dir=tmp_path))

        logging.getLogger("appointment_monitor.test").info("Checking for appointments")
        for handler in logging.getLogger().handlers:
            handler.flush()

        content = (tmp_path / "appointment_monitor.log").read_text(encoding="utf-8")
        assert "[INFO] appointment_monitor.test - Checking for appointments" in content
