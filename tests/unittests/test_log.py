# This file is part of instancemd. See LICENSE file for license information.

import logging

import pytest

from instancemd import log


@pytest.fixture(autouse=True)
def restore_root_logger(mocker):
    mocker.patch.object(log, "_HANDLER", None)
    root = logging.getLogger()
    level = root.level
    yield
    if log._HANDLER is not None:
        root.removeHandler(log._HANDLER)
    root.setLevel(level)


def installed_handlers():
    return [h for h in logging.getLogger().handlers if h is log._HANDLER]


class TestSetupLogging:
    def test_defaults(self):
        log.setup_logging()
        assert logging.WARNING == logging.getLogger().level
        assert 1 == len(installed_handlers())

    def test_level_from_config(self):
        log.setup_logging({"logging": {"level": "info"}})
        assert logging.INFO == logging.getLogger().level

    def test_numeric_level(self):
        log.setup_logging({"logging": {"level": logging.ERROR}})
        assert logging.ERROR == logging.getLogger().level

    def test_unknown_level_falls_back(self):
        log.setup_logging({"logging": {"level": "chatty"}})
        assert logging.WARNING == logging.getLogger().level

    def test_debug_overrides_config(self):
        log.setup_logging({"logging": {"level": "ERROR"}}, debug=True)
        assert logging.DEBUG == logging.getLogger().level

    def test_format(self):
        log.setup_logging({"logging": {"format": "%(levelname)s:%(message)s"}})
        (handler,) = installed_handlers()
        record = logging.LogRecord(
            "x", logging.WARNING, __file__, 1, "hello", None, None
        )
        assert "WARNING:hello" == handler.format(record)

    def test_repeated_setup_replaces_handler(self):
        log.setup_logging()
        first = log._HANDLER
        log.setup_logging()
        assert first not in logging.getLogger().handlers
        assert 1 == len(installed_handlers())
