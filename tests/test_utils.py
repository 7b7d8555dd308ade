"""
Tests for the utils module.

Tests cover:
- Environment variable helpers
- Text sanitizing
- The error log sink
"""

import os
from datetime import datetime
from pathlib import Path
from unittest.mock import patch

import pytest

from scorer_watcher.utils import (
    build_error_log_path,
    format_error,
    get_env_var,
    is_truthy,
    sanitize_text,
    write_error_log,
)


class TestGetEnvVar:
    """Tests for get_env_var."""

    def test_required_missing(self):
        with patch.dict(os.environ, {}, clear=True):
            with pytest.raises(ValueError, match="MISSING"):
                get_env_var("MISSING")

    def test_optional_default(self):
        with patch.dict(os.environ, {"BLANK": "  "}, clear=True):
            assert get_env_var("BLANK", required=False, default="x") == "x"

    def test_value_stripped(self):
        with patch.dict(os.environ, {"NAME": " value "}, clear=True):
            assert get_env_var("NAME") == "value"


class TestTextHelpers:
    """Tests for small text helpers."""

    def test_is_truthy(self):
        assert is_truthy("True") is True
        assert is_truthy(" yes ") is True
        assert is_truthy("0") is False
        assert is_truthy(None) is False

    def test_sanitize_text(self):
        """Test that whitespace runs, including nbsp, collapse."""
        assert sanitize_text("  Erling \n Haaland ") == "Erling Haaland"
        assert sanitize_text(None) == ""


class TestErrorLog:
    """Tests for the error log sink."""

    def test_path_shape(self):
        """Test the <date>-error-logs-<epoch_ms>.txt file name."""
        now = datetime(2024, 3, 9, 22, 5, 0)

        path = build_error_log_path("logs", now)

        assert path.parent == Path("logs")
        assert path.name == f"2024-03-09-error-logs-{int(now.timestamp() * 1000)}.txt"

    def test_format_unraised_error(self):
        """Test that an error without traceback renders as one line."""
        assert format_error(RuntimeError("boom")) == "RuntimeError: boom\n"

    def test_format_raised_error_has_traceback(self):
        """Test that a raised error includes its traceback."""
        try:
            raise RuntimeError("boom")
        except RuntimeError as e:
            text = format_error(e)

        assert text.startswith("RuntimeError: boom")
        assert "Traceback" in text

    def test_write_creates_directory_and_file(self, tmp_path):
        """Test that one file per failure is written in a new directory."""
        log_dir = tmp_path / "logs"

        path = write_error_log(RuntimeError("Best players not found"), str(log_dir))

        assert path is not None
        content = Path(path).read_text(encoding="utf-8")
        assert "RuntimeError: Best players not found" in content

    def test_write_failure_returns_none(self, tmp_path):
        """Test that an unwritable log directory does not raise."""
        blocker = tmp_path / "file"
        blocker.write_text("not a directory")

        assert write_error_log(RuntimeError("boom"), str(blocker / "logs")) is None
