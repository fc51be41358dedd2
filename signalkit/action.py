"""
signalkit Action - Serialized, Observable Units of Work
=======================================================

An `Action` wraps a function `input -> SignalProducer`. Applying it yields a
producer that, when started, runs the work unless the action is disabled or
already executing. Every execution is reported on the action's own signals,
so UI code can observe outcomes without holding on to individual runs:

- `events`    - every event of every execution
- `values`    - values of every execution
- `errors`    - failures of every execution
- `completed` - one `None` per completed execution

`is_executing` and `is_enabled` are properties suitable for binding to a
busy indicator or a control (see `signalkit.bindings.ui`).
"""

import logging
import threading
from typing import Any, Callable, Generic, NoReturn, Optional, TypeVar

from .disposable import CompositeDisposable, Disposable
from .event import Event, EventKind
from .observer import Observer
from .producer import SignalProducer
from .property import MutableProperty, Property
from .signal import Signal

I = TypeVar("I")
T = TypeVar("T")
E = TypeVar("E")

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================


class ActionError(Exception):
    """Base class for failures of an applied action."""

    pass


class ActionDisabledError(ActionError):
    """The action was started while disabled or already executing."""

    def __init__(self) -> None:
        super().__init__("Action is disabled or already executing")


class ActionProducerFailed(ActionError):
    """The work producer failed; the original error is kept as `error`."""

    def __init__(self, error: Any) -> None:
        super().__init__(f"Action producer failed: {error!r}")
        self.error = error


# ============================================================================
# ACTION
# ============================================================================


class Action(Generic[I, T, E]):
    """
    Args:
        execute: Builds the work producer for an input.
        enabled_if: Optional boolean property gating execution. The action is
            enabled when this holds and no execution is in flight.
    """

    __slots__ = (
        "_execute",
        "_lock",
        "_executing",
        "_enabled",
        "_user_enabled",
        "_events",
        "_events_input",
        "is_executing",
        "is_enabled",
    )

    def __init__(
        self,
        execute: Callable[[I], SignalProducer[T, E]],
        enabled_if: Optional[Property[bool]] = None,
    ) -> None:
        self._execute = execute
        self._lock = threading.RLock()
        self._user_enabled = enabled_if if enabled_if is not None else Property(True)
        self._executing = MutableProperty(False, key="is_executing")
        self._enabled = MutableProperty(
            bool(self._user_enabled.value), key="is_enabled"
        )
        self._events, self._events_input = Signal.pipe()

        self.is_executing: Property[bool] = Property(
            False, changes=self._executing.signal, key="is_executing"
        )
        self.is_enabled: Property[bool] = Property(
            self._enabled.value, changes=self._enabled.signal, key="is_enabled"
        )

        self._user_enabled.signal.observe_values(lambda _: self._refresh_enabled())
        self._executing.signal.observe_values(lambda _: self._refresh_enabled())

    def _refresh_enabled(self) -> None:
        with self._lock:
            enabled = bool(self._user_enabled.value) and not self._executing.value
            if enabled != self._enabled.value:
                self._enabled.value = enabled

    # ------------------------------------------------------------------------
    # Execution signals
    # ------------------------------------------------------------------------

    @property
    def events(self) -> Signal[Event[T, E], NoReturn]:
        return self._events

    @property
    def values(self) -> Signal[T, NoReturn]:
        return self._events.filter(lambda event: event.is_value).map(
            lambda event: event.payload
        )

    @property
    def errors(self) -> Signal[E, NoReturn]:
        return self._events.filter(lambda event: event.kind is EventKind.FAILED).map(
            lambda event: event.payload
        )

    @property
    def completed(self) -> Signal[None, NoReturn]:
        return self._events.filter(
            lambda event: event.kind is EventKind.COMPLETED
        ).map(lambda event: None)

    # ------------------------------------------------------------------------
    # Applying
    # ------------------------------------------------------------------------

    def apply(self, input: Optional[I] = None) -> SignalProducer[T, ActionError]:
        """
        Producer running the work for `input` on each start.

        Fails with `ActionDisabledError` when started while disabled; a work
        failure arrives wrapped in `ActionProducerFailed`. So does an
        exception raised while building or starting the work producer.
        """

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            with self._lock:
                startable = self._enabled.value
                if startable:
                    self._executing.value = True

            if not startable:
                logger.debug("Rejected start of disabled action %r", self)
                observer.send_failed(ActionDisabledError())
                return

            terminals = []

            def forward(event: Event) -> None:
                if terminals:
                    return
                self._events_input.send_value(event)
                if event.is_terminating:
                    terminals.append(event)
                    self._executing.value = False
                if event.kind is EventKind.FAILED:
                    observer.send_failed(ActionProducerFailed(event.payload))
                else:
                    observer.send(event)

            try:
                lifetime.add(self._execute(input).start(Observer(forward)))
            except Exception as exc:
                if terminals:
                    raise
                logger.error("Work for action %r raised %r", self, exc)
                forward(Event.of_failure(exc))

        return SignalProducer(start_handler)

    # ------------------------------------------------------------------------
    # UI bindings
    # ------------------------------------------------------------------------

    def bind_loading(
        self, indicator: Any, dispatch: Optional[Callable[[Callable[[], Any]], Any]] = None
    ) -> Disposable:
        """Show `indicator` while executing and hide it afterwards."""
        from .bindings.ui import bind_loading

        return bind_loading(self, indicator, dispatch)

    def bind_disabled(
        self, control: Any, dispatch: Optional[Callable[[Callable[[], Any]], Any]] = None
    ) -> Disposable:
        """Dim `control`'s background while the action is disabled."""
        from .bindings.ui import bind_disabled

        return bind_disabled(self, control, dispatch)

    def __repr__(self) -> str:
        return (
            f"Action(executing={self._executing.value}, enabled={self._enabled.value})"
        )


__all__ = ["Action", "ActionError", "ActionDisabledError", "ActionProducerFailed"]
