from __future__ import annotations

import io
import logging

import pytest
import structlog

from devlog.handler import DevLogHandler, HandlerOptions


@pytest.fixture
def sink() -> io.BytesIO:
    return io.BytesIO()


@pytest.fixture
def handler(sink: io.BytesIO) -> DevLogHandler:
    return DevLogHandler(sink, HandlerOptions())


@pytest.fixture
def restore_logging():
    """Undo global structlog/stdlib configuration done by a test."""
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    structlog.reset_defaults()
    logging.captureWarnings(False)
    root.handlers[:] = handlers
    root.setLevel(level)
