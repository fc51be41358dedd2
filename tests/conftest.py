"""
Shared pytest fixtures and configuration for signalkit tests.
"""

import logging

import pytest

from signalkit import MutableProperty, Signal
from tests.utils import CallCounter, EventRecorder


@pytest.fixture(autouse=True)
def quiet_handler_logging(caplog):
    """Capture handler-error logs so failing-tap tests stay readable."""
    caplog.set_level(logging.CRITICAL, logger="signalkit")


@pytest.fixture
def pipe():
    """Provide a fresh (signal, observer) pair."""
    return Signal.pipe()


@pytest.fixture
def recorder():
    """Provide an event recorder."""
    return EventRecorder()


@pytest.fixture
def make_recorder():
    """Factory for additional named recorders."""
    return EventRecorder


@pytest.fixture
def counter():
    """Provide a callback counting its invocations."""
    return CallCounter()


@pytest.fixture
def make_counter():
    """Factory for additional call counters."""
    return CallCounter


@pytest.fixture
def prop():
    """Provide a mutable property holding 0."""
    return MutableProperty(0, key="counter")
