"""
Tests for settings and logging setup.
"""

import logging

import pytest
import structlog
from pydantic import ValidationError

from api.config import APIConfig
from utilities.config import BookshelfConfig
from utilities.logger import get_logger, setup_logging


class TestBookshelfConfig:

    def test_defaults(self, monkeypatch):
        for name in ("ID_LENGTH", "LOG_LEVEL", "LOG_FORMAT", "LOG_FILE", "DEBUG"):
            monkeypatch.delenv(name, raising=False)

        config = BookshelfConfig(_env_file=None)

        assert config.id_length == 16
        assert config.log_level == "INFO"
        assert config.log_format == "json"
        assert config.get_log_file_path() is None

    def test_reads_environment(self, monkeypatch, tmp_path):
        monkeypatch.setenv("LOG_LEVEL", "debug")
        monkeypatch.setenv("LOG_FORMAT", "CONSOLE")
        monkeypatch.setenv("LOG_FILE", str(tmp_path / "bookshelf.log"))
        monkeypatch.setenv("ID_LENGTH", "21")

        config = BookshelfConfig(_env_file=None)

        assert config.log_level == "DEBUG"
        assert config.log_format == "console"
        assert config.id_length == 21
        assert config.get_log_file_path() == tmp_path / "bookshelf.log"

    def test_invalid_log_level(self):
        with pytest.raises(ValidationError) as exc_info:
            BookshelfConfig(_env_file=None, log_level="LOUD")

        assert "log_level must be one of" in str(exc_info.value)

    def test_invalid_log_format(self):
        with pytest.raises(ValidationError):
            BookshelfConfig(_env_file=None, log_format="xml")

    @pytest.mark.parametrize("length", [0, 65])
    def test_invalid_id_length(self, length):
        with pytest.raises(ValidationError) as exc_info:
            BookshelfConfig(_env_file=None, id_length=length)

        assert "id_length must be between 1 and 64" in str(exc_info.value)


class TestAPIConfig:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("PORT", "9100")
        monkeypatch.setenv("DEBUG", "true")

        config = APIConfig(_env_file=None)

        assert config.port == 9100
        assert config.debug is True
        assert config.cors_origins == ["*"]


def test_setup_logging_writes_file(tmp_path):
    log_file = tmp_path / "logs" / "bookshelf.log"
    root = logging.getLogger()
    handlers_before = list(root.handlers)
    level_before = root.level

    setup_logging(log_level="INFO", log_format="json", log_file=log_file)
    try:
        get_logger("tests.logging").info("hello", book_id="book-0001")

        assert log_file.exists()
        assert "book-0001" in log_file.read_text()
    finally:
        for handler in list(root.handlers):
            if handler not in handlers_before:
                root.removeHandler(handler)
                handler.close()
        root.setLevel(level_before)
        structlog.reset_defaults()
