"""Pytest fixtures for Stratus tests."""

import logging
from typing import Generator

import pytest
import structlog

from helpers import FakeClock, RecordingDecoder


@pytest.fixture(autouse=True)
def reset_logging_state() -> Generator[None, None, None]:
    """Reset structlog and root logger handlers around each test.

    This ensures test isolation for logging configuration.
    """
    structlog.reset_defaults()

    root_logger = logging.getLogger()
    original_level = root_logger.level
    original_handlers = root_logger.handlers[:]
    for handler in original_handlers:
        root_logger.removeHandler(handler)

    yield

    structlog.reset_defaults()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
    for handler in original_handlers:
        root_logger.addHandler(handler)
    root_logger.setLevel(original_level)


@pytest.fixture
def clock() -> FakeClock:
    """A manually advanced clock whose sleep() moves time forward instantly."""
    return FakeClock()


@pytest.fixture
def decoder() -> RecordingDecoder:
    """A decoder that answers every token with DECODED_TEXT."""
    return RecordingDecoder("DECODED_TEXT")
