from __future__ import annotations

import logging

import pytest
import structlog

from career_search.core.logging import configure_logging
from tests.fakes import make_settings


def test_configure_logging_routes_structlog_to_standard_logging(
    caplog: pytest.LogCaptureFixture,
) -> None:
    caplog.set_level(logging.INFO)
    configure_logging(make_settings())

    logger = structlog.get_logger("test")
    logger.info("hello", feature="logging")

    assert any("hello" in record.getMessage() for record in caplog.records)
    assert any("feature" in record.getMessage() for record in caplog.records)


def test_client_library_loggers_are_quietened() -> None:
    configure_logging(make_settings())

    for name in ("httpx", "httpcore", "openai"):
        assert logging.getLogger(name).level == logging.WARNING
