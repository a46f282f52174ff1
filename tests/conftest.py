"""Shared test fixtures and helpers."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from eventemitter.emitter import EventEmitter


@pytest.fixture(autouse=True, scope="session")
def _isolate_logging():
    """Keep library log records off the test output.

    CLI tests invoke click commands that call ``setup_logging()`` which
    attaches a stderr handler bound to the runner's captured stream.  We
    patch it to drop stderr output, and reset the ``eventemitter`` logger
    to a ``NullHandler`` for tests that never configure logging.
    """
    import eventemitter.cli as _cli
    import eventemitter.logging as _emitter_logging

    _real_setup = _emitter_logging.setup_logging

    def _test_setup(level="WARNING", log_file=None, stderr=False):
        return _real_setup(level=level, log_file=log_file, stderr=False)

    with patch.object(_cli, "setup_logging", _test_setup):
        logger = logging.getLogger("eventemitter")
        logger.handlers.clear()
        logger.addHandler(logging.NullHandler())
        logger.setLevel(logging.WARNING)
        yield


class RecordingSink:
    """DiagnosticsSink that keeps every message."""

    def __init__(self) -> None:
        self.messages: list[str] = []

    def warn(self, message: str) -> None:
        self.messages.append(message)


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def emitter(sink) -> EventEmitter:
    """Emitter restricted to ``message`` and ``close``."""
    return EventEmitter("message", "close", diagnostics=sink)


@pytest.fixture
def open_emitter(sink) -> EventEmitter:
    """Emitter with no vocabulary."""
    return EventEmitter(diagnostics=sink)


@pytest.fixture
def clean_logging():
    """Put the ``eventemitter`` logger back to its session baseline afterwards."""
    yield logging.getLogger("eventemitter")
    logger = logging.getLogger("eventemitter")
    for h in logger.handlers[:]:
        h.close()
    logger.handlers.clear()
    logger.addHandler(logging.NullHandler())
    logger.setLevel(logging.WARNING)
