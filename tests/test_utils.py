import logging
import logging.handlers

import pytest

from flatconf.settings import SettingsManager
from flatconf.utils import setup_logger, get_logger, exception_handler
from flatconf.utils.logger import _parse_size
from flatconf.utils.exceptions import (
    ConfigStoreException,
    FormatException,
    InvalidArgumentException,
    IOFailureException,
)


@pytest.fixture
def clean_logger():
    logger = logging.getLogger("flatconf")
    saved_level = logger.level
    yield logger
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(saved_level)


class TestLogger:
    @pytest.mark.parametrize(
        "size, expected",
        [("10KB", 10 * 1024), ("2MB", 2 * 1024 * 1024), ("1gb", 1024 ** 3), ("512", 512), (2048, 2048)],
    )
    def test_parse_size(self, size, expected):
        assert _parse_size(size) == expected

    def test_get_logger_namespace(self):
        assert get_logger().name == "flatconf"
        assert get_logger("store").name == "flatconf.store"

    def test_setup_logger_console_only(self, clean_logger):
        logger = setup_logger({"level": "DEBUG"})
        assert logger is clean_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1

    def test_setup_logger_with_file(self, clean_logger, tmp_path):
        log_file = tmp_path / "logs" / "flatconf.log"
        logger = setup_logger({"level": "INFO", "file_path": str(log_file), "max_file_size": "1MB"})
        assert len(logger.handlers) == 2
        logger.info("hello file")
        for handler in logger.handlers:
            handler.flush()
        assert "hello file" in log_file.read_text(encoding="utf-8")

    def test_setup_logger_replaces_handlers(self, clean_logger):
        setup_logger({})
        setup_logger({})
        assert len(clean_logger.handlers) == 1


class TestExceptions:
    def test_base_carries_code_and_details(self):
        error = ConfigStoreException("boom")
        assert error.message == "boom"
        assert error.error_code == 2000
        assert error.details == {}
        assert str(error) == "boom"

    def test_validation_errors_are_value_errors(self):
        assert isinstance(InvalidArgumentException("bad", "key", "a b"), ValueError)
        assert isinstance(FormatException("bad", 3, "x"), ValueError)

    def test_format_exception_details(self):
        error = FormatException("bad line", 4, "foo=bar")
        assert error.error_code == 2004
        assert error.details == {"line_number": 4, "line": "foo=bar"}

    def test_exception_handler_swallows_and_logs(self, caplog):
        @exception_handler((ConfigStoreException,), default_return="fallback")
        def failing():
            raise IOFailureException("disk gone", "/tmp/x", "write")

        with caplog.at_level(logging.WARNING, logger="flatconf"):
            assert failing() == "fallback"
        assert "disk gone" in caplog.text
        assert "2005" in caplog.text

    def test_exception_handler_lets_other_errors_through(self):
        @exception_handler((ConfigStoreException,))
        def failing():
            raise KeyError("other")

        with pytest.raises(KeyError):
            failing()

    def test_exception_handler_keeps_name(self):
        @exception_handler()
        def named():
            return 1

        assert named.__name__ == "named"
        assert named() == 1


class TestLoggingFromSettings:
    def test_apply_logging_uses_logging_section(self, clean_logger, tmp_path):
        log_file = tmp_path / "logs" / "flatconf.log"
        settings_file = tmp_path / "flatconf.yaml"
        settings_file.write_text(
            "logging:\n"
            "  level: debug\n"
            "  console: false\n"
            f"  file_path: '{log_file.as_posix()}'\n"
            "  max_file_size: 64KB\n"
            "  backup_count: 2\n",
            encoding="utf-8",
        )
        settings = SettingsManager(str(settings_file))

        logger = settings.apply_logging()
        assert logger is clean_logger
        assert logger.level == logging.DEBUG
        assert len(logger.handlers) == 1
        handler = logger.handlers[0]
        assert isinstance(handler, logging.handlers.RotatingFileHandler)
        assert handler.maxBytes == 64 * 1024
        assert handler.backupCount == 2

        get_logger("store").debug("store event")
        handler.flush()
        assert "store event" in log_file.read_text(encoding="utf-8")

    def test_apply_logging_defaults_to_console(self, clean_logger):
        logger = SettingsManager().apply_logging()
        assert logger.level == logging.INFO
        assert [type(h) for h in logger.handlers] == [logging.StreamHandler]

    def test_unknown_level_rejected(self, clean_logger):
        with pytest.raises(ValueError):
            setup_logger({"level": "LOUD"})

    def test_bad_size_rejected(self):
        with pytest.raises(ValueError):
            _parse_size("tenMB")
