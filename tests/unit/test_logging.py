"""Tests for consoleblue logging setup."""

from __future__ import annotations

import logging

from rich.logging import RichHandler

from consoleblue.logging import configure_logging


def test_default_level_is_warning():
    logger = configure_logging()
    assert logger.level == logging.WARNING
    assert logger.propagate is False


def test_verbose_enables_debug():
    assert configure_logging(verbose=True).level == logging.DEBUG


def test_reconfigure_does_not_duplicate_handlers():
    configure_logging()
    logger = configure_logging()
    assert len(logger.handlers) == 1
    assert isinstance(logger.handlers[0], RichHandler)


def test_log_file_receives_records(tmp_path):
    log_file = tmp_path / "consoleblue.log"
    configure_logging(log_file=log_file)
    logging.getLogger("consoleblue.docs.publisher").warning("push failed: %s", "boom")
    configure_logging()  # closes the file handler

    assert "push failed: boom" in log_file.read_text(encoding="utf-8")


def test_log_file_receives_debug_without_verbose(tmp_path):
    log_file = tmp_path / "consoleblue.log"
    logger = configure_logging(log_file=log_file)
    assert logger.level == logging.DEBUG
    assert logger.handlers[0].level == logging.WARNING

    logging.getLogger("consoleblue.docs.generator").info("Generated docs for %s", "acme")
    configure_logging()

    assert "Generated docs for acme" in log_file.read_text(encoding="utf-8")
