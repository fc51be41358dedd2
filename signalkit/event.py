"""
signalkit Event - The Four-Way Event Algebra
=============================================

Every stream in signalkit delivers a sequence of events:

    Value(v)* ; (Failed(e) | Completed | Interrupted)

Zero or more values followed by exactly one terminal event. `Event` is the
tagged union carrying one of these; streams never emit after a terminal.

Example:
    ```python
    event = Event.of_value(3)
    event.map(lambda x: x * 2).value   # 6

    Event.COMPLETED.is_terminating     # True
    ```
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Callable, Generic, Optional, TypeVar

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")


class EventKind(Enum):
    """Classification of stream events."""

    VALUE = "value"
    FAILED = "failed"
    COMPLETED = "completed"
    INTERRUPTED = "interrupted"


@dataclass(frozen=True)
class Event(Generic[T, E]):
    """
    A single stream event.

    The payload is the value for VALUE events, the error for FAILED events
    and None for the two payload-less terminals.
    """

    kind: EventKind
    payload: Any = None

    # Singletons for the payload-less terminals, assigned below the class
    COMPLETED = None  # type: Event
    INTERRUPTED = None  # type: Event

    @staticmethod
    def of_value(value: T) -> "Event[T, Any]":
        return Event(EventKind.VALUE, value)

    @staticmethod
    def of_failure(error: E) -> "Event[Any, E]":
        return Event(EventKind.FAILED, error)

    @property
    def is_value(self) -> bool:
        return self.kind is EventKind.VALUE

    @property
    def is_terminating(self) -> bool:
        """True for FAILED, COMPLETED and INTERRUPTED."""
        return self.kind is not EventKind.VALUE

    @property
    def value(self) -> Optional[T]:
        return self.payload if self.kind is EventKind.VALUE else None

    @property
    def error(self) -> Optional[E]:
        return self.payload if self.kind is EventKind.FAILED else None

    def map(self, transform: Callable[[T], U]) -> "Event[U, E]":
        """Transform the value of a VALUE event; terminals are returned as-is."""
        if self.kind is EventKind.VALUE:
            return Event(EventKind.VALUE, transform(self.payload))
        return self  # type: ignore[return-value]

    def map_error(self, transform: Callable[[E], U]) -> "Event[T, U]":
        """Transform the error of a FAILED event; everything else is returned as-is."""
        if self.kind is EventKind.FAILED:
            return Event(EventKind.FAILED, transform(self.payload))
        return self  # type: ignore[return-value]

    def __repr__(self) -> str:
        if self.kind in (EventKind.VALUE, EventKind.FAILED):
            return f"Event.{self.kind.name}({self.payload!r})"
        return f"Event.{self.kind.name}"


Event.COMPLETED = Event(EventKind.COMPLETED)
Event.INTERRUPTED = Event(EventKind.INTERRUPTED)


__all__ = ["Event", "EventKind"]
