# tests/unit/logging/test_unit_handlers.py — v2
"""Tests for logging/handlers.py — size parsing and rotating handler."""

from __future__ import annotations

import pytest

from candidaterank.logging.handlers import create_rotating_handler, parse_size


class TestParseSize:
    @pytest.mark.parametrize(
        ("text", "expected"),
        [("10MB", 10 * 1024**2), ("512kb", 512 * 1024), ("1GB", 1024**3), ("2048", 2048)],
    )
    def test_valid(self, text, expected):
        assert parse_size(text) == expected

    def test_invalid(self):
        with pytest.raises(ValueError, match="Invalid size"):
            parse_size("ten megabytes")


class TestRotatingHandler:
    def test_creates_parent_dir(self, tmp_path):
        path = tmp_path / "nested" / "app.log"
        handler = create_rotating_handler(str(path), rotation="1KB", retention=3)
        try:
            assert path.parent.exists()
            assert handler.maxBytes == 1024
            assert handler.backupCount == 3
        finally:
            handler.close()
