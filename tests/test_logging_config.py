import logging

import cv_backend.logging_config as lc


def test_setup_logging_string_level():
    lc.setup_logging("debug")
    assert logging.getLogger().level <= logging.DEBUG
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_setup_logging_uses_configured_level(monkeypatch):
    monkeypatch.setattr("cv_backend.config.settings.log_level", "error")
    lc.setup_logging(None)
    assert logging.getLogger().level == logging.ERROR
    assert len(logging.getLogger().handlers) == 1


def test_setup_logging_unknown_level_falls_back_to_info():
    lc.setup_logging("chatty")
    assert logging.getLogger().level == logging.INFO
