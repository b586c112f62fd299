import logging

import pytest
from loguru import logger

from notification_store.core.logging import configure_logging


@pytest.fixture(autouse=True)
def _drop_sinks():
    yield
    logger.remove()


def test_configure_logging_sets_intercept_handler():
    configure_logging("INFO")
    assert logging.root.handlers, "expected root handlers to be configured"
    handler = logging.root.handlers[0]
    assert handler.__class__.__name__ == "_InterceptHandler"
    assert logging.root.level == logging.INFO
    assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING


def test_configure_logging_renders_event_fields(capsys):
    configure_logging("INFO")
    logger.info("notification.opened", notification_id=42)
    logger.complete()
    out = capsys.readouterr().out
    assert "notification.opened" in out
    assert "notification_id=42" in out


def test_configure_logging_renders_stdlib_records(capsys):
    configure_logging("INFO")
    logging.getLogger("notification_store.test").warning("plain stdlib record")
    logger.complete()
    assert "plain stdlib record" in capsys.readouterr().out
