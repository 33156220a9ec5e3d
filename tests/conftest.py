"""Shared pytest fixtures."""

import logging

import pytest


@pytest.fixture(autouse=True)
def _reset_cli_logging():
    """Drop the stderr handler installed by in-process CLI runs."""
    yield
    from relcov.cli import LOG_HANDLER_NAME

    package_logger = logging.getLogger("relcov")
    for handler in list(package_logger.handlers):
        if handler.get_name() == LOG_HANDLER_NAME:
            package_logger.removeHandler(handler)
    package_logger.setLevel(logging.NOTSET)
