"""
signalkit Observer - Event Sinks with a Single Terminal
=======================================================

An `Observer` receives the events of one subscription. It enforces the
stream grammar locally: once a terminal event has been delivered, every
further event is ignored. Delivery is serialized with a reentrant lock so a
handler may safely send on the same observer it is being called from.
"""

import threading
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from .event import Event, EventKind

T = TypeVar("T")
E = TypeVar("E")


class Observer(Generic[T, E]):
    """
    Sink for stream events.

    Either pass a single `action` receiving every `Event`, or per-kind
    callbacks:

        Observer(value=print, failed=log_error, completed=done)
    """

    __slots__ = ("_action", "_lock", "_terminated")

    def __init__(
        self,
        action: Optional[Callable[[Event], None]] = None,
        *,
        value: Optional[Callable[[T], None]] = None,
        failed: Optional[Callable[[E], None]] = None,
        completed: Optional[Callable[[], None]] = None,
        interrupted: Optional[Callable[[], None]] = None,
    ) -> None:
        if action is None:
            action = _dispatching_action(value, failed, completed, interrupted)
        self._action = action
        self._lock = threading.RLock()
        self._terminated = False

    @property
    def is_terminated(self) -> bool:
        return self._terminated

    def send(self, event: Event) -> None:
        with self._lock:
            if self._terminated:
                return
            if event.is_terminating:
                self._terminated = True
            self._action(event)

    def send_value(self, value: T) -> None:
        self.send(Event.of_value(value))

    def send_failed(self, error: E) -> None:
        self.send(Event.of_failure(error))

    def send_completed(self) -> None:
        self.send(Event.COMPLETED)

    def send_interrupted(self) -> None:
        self.send(Event.INTERRUPTED)

    def __call__(self, event: Event) -> None:
        self.send(event)

    def __repr__(self) -> str:
        state = "terminated" if self._terminated else "open"
        return f"Observer({state})"


def _dispatching_action(value, failed, completed, interrupted) -> Callable[[Event], None]:
    def action(event: Event) -> None:
        kind = event.kind
        if kind is EventKind.VALUE:
            if value is not None:
                value(event.payload)
        elif kind is EventKind.FAILED:
            if failed is not None:
                failed(event.payload)
        elif kind is EventKind.COMPLETED:
            if completed is not None:
                completed()
        elif interrupted is not None:
            interrupted()

    return action


def as_observer(candidate: Union[Observer, Callable[[Event], Any], None]) -> Observer:
    """Coerce a plain event callback (or None) into an Observer."""
    if isinstance(candidate, Observer):
        return candidate
    if candidate is None:
        return Observer(lambda event: None)
    if callable(candidate):
        return Observer(candidate)
    raise TypeError(f"Cannot observe with {type(candidate).__name__}")


__all__ = ["Observer", "as_observer"]
