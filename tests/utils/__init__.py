"""
Test utilities for signalkit.

This package contains shared testing utilities to help write
better, more maintainable tests.
"""

from .recorder import CallCounter, EventRecorder

__all__ = [
    "CallCounter",
    "EventRecorder",
]
