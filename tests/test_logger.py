"""Tests for the logging setup."""

import logging

from profile_form.utils.logger import PACKAGE_LOGGER, configure_logging, default_level, get_logger


def test_module_loggers_share_the_package_handler():
    """Test that handlers are attached once, on the package logger only."""
    first = get_logger("profile_form.services.form_schema")
    second = get_logger("profile_form.services.storage_service")
    package = logging.getLogger(PACKAGE_LOGGER)
    
    assert first.handlers == [] and second.handlers == []
    assert len(package.handlers) == 1
    assert first.parent is package or first.parent.name.startswith(PACKAGE_LOGGER)


def test_outside_names_are_nested_under_the_package():
    """Test that scripts outside the package still log through it."""
    assert get_logger("streamlit_app").name == "profile_form.streamlit_app"
    assert get_logger(PACKAGE_LOGGER).name == PACKAGE_LOGGER


def test_level_from_environment(monkeypatch):
    """Test the level override and its fallback."""
    monkeypatch.setenv("PROFILE_FORM_LOG_LEVEL", "debug")
    assert default_level() == logging.DEBUG
    
    monkeypatch.setenv("PROFILE_FORM_LOG_LEVEL", "LOUD")
    assert default_level() == logging.INFO
    
    monkeypatch.delenv("PROFILE_FORM_LOG_LEVEL")
    assert default_level() == logging.INFO


def test_configure_logging_sets_level():
    """Test an explicit level and that reconfiguring keeps one handler."""
    logger = configure_logging(logging.WARNING)
    assert logger.level == logging.WARNING
    assert len(logger.handlers) == 1
    
    configure_logging(logging.INFO)
