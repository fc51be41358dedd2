"""
signalkit Signal - Hot Event Streams
====================================

A `Signal` is a hot, shared stream: its generator runs once, at creation,
and every observer attached afterwards sees the events sent from then on.

Lifecycle:

    alive --(terminal event)--> terminated --> torn down
    alive --(last observer detaches, derived signals only)--> torn down

Teardown is idempotent: it drops all observers and disposes whatever the
generator returned, which releases the upstream subscription of a derived
signal and fires any `on(disposed=...)` taps exactly once.

Combinators derive new signals by observing this one and re-wiring each
event; they keep no state shared between subscriptions.

Example:
    ```python
    signal, observer = Signal.pipe()

    doubled = signal >> (lambda x: x * 2)
    doubled.observe_values(print)

    observer.send_value(21)   # prints 42
    observer.send_completed()
    ```
"""

import logging
import threading
from typing import (
    TYPE_CHECKING,
    Any,
    Callable,
    Generic,
    List,
    NoReturn,
    Optional,
    Tuple,
    TypeVar,
    Union,
)

from .disposable import CompositeDisposable, Disposable, DisposableLike, as_disposable
from .event import Event, EventKind
from .flatten import FlattenStrategy, Flattener
from .observer import Observer, as_observer
from .operations import ResultOperationsMixin
from .outcome import Err, Ok, Outcome

if TYPE_CHECKING:
    from .producer import SignalProducer

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

logger = logging.getLogger(__name__)


# ============================================================================
# EXCEPTIONS
# ============================================================================


class HandlerError(Exception):
    """
    A side-effect handler attached with `on(...)` raised.

    `stage` names what the handler was observing ("value", "failed",
    "completed", "interrupted" or "disposed"); the original exception is
    chained as `__cause__`.
    """

    def __init__(self, stage: str, cause: BaseException):
        super().__init__(f"{stage} handler raised {cause!r}")
        self.stage = stage
        self.__cause__ = cause


# ============================================================================
# SIGNAL
# ============================================================================


class Signal(ResultOperationsMixin, Generic[T, E]):
    """
    Hot stream of `Event[T, E]`.

    Args:
        generator: Called once with the input `Observer`; may return a
            disposable released at teardown.
        dispose_when_unobserved: Tear the signal down when its last observer
            detaches. True for derived signals, False for `pipe()` signals.
    """

    __slots__ = (
        "_observers",
        "_lock",
        "_terminal",
        "_disposed",
        "_disposable",
        "_dispose_when_unobserved",
    )

    def __init__(
        self,
        generator: Callable[[Observer[T, E]], DisposableLike],
        dispose_when_unobserved: bool = True,
    ) -> None:
        self._observers: List[Observer[T, E]] = []
        self._lock = threading.RLock()
        self._terminal: Optional[Event] = None
        self._disposed = False
        self._disposable: Optional[Disposable] = None
        self._dispose_when_unobserved = dispose_when_unobserved

        disposable = as_disposable(generator(Observer(self._send)))

        with self._lock:
            if not self._disposed:
                self._disposable, disposable = disposable, None

        # The generator terminated the signal synchronously
        if disposable is not None:
            disposable.dispose()

    @classmethod
    def pipe(
        cls, disposable: DisposableLike = None
    ) -> Tuple["Signal[T, E]", Observer[T, E]]:
        """
        Create a signal together with the observer that drives it.

        The optional `disposable` is released when the signal terminates.
        """
        inputs: List[Observer[T, E]] = []

        def generator(observer: Observer[T, E]) -> DisposableLike:
            inputs.append(observer)
            return disposable

        signal = cls(generator, dispose_when_unobserved=False)
        return signal, inputs[0]

    # ------------------------------------------------------------------------
    # Event delivery
    # ------------------------------------------------------------------------

    def _send(self, event: Event) -> None:
        if not event.is_terminating:
            with self._lock:
                if self._disposed:
                    return
                observers = tuple(self._observers)
            _broadcast(observers, event)
            return

        with self._lock:
            if self._disposed:
                return
            self._terminal = event
            observers, self._observers = self._observers, []

        try:
            _broadcast(observers, event)
        finally:
            self._teardown()

    def _teardown(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            self._observers = []
            disposable, self._disposable = self._disposable, None

        logger.debug("Tearing down %r", self)
        if disposable is not None:
            disposable.dispose()

    @property
    def is_terminated(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------------
    # Observation
    # ------------------------------------------------------------------------

    def observe(
        self, observer: Union[Observer[T, E], Callable[[Event], Any], None]
    ) -> Disposable:
        """
        Attach an observer; returns a Disposable that detaches it.

        Observing a signal that has already been torn down delivers
        INTERRUPTED at once.
        """
        observer = as_observer(observer)

        with self._lock:
            if not self._disposed and self._terminal is None:
                self._observers.append(observer)
                return Disposable(lambda: self._remove(observer))

        observer.send_interrupted()
        handle = Disposable()
        handle.dispose()
        return handle

    def _remove(self, observer: Observer[T, E]) -> None:
        with self._lock:
            try:
                self._observers.remove(observer)
            except ValueError:
                return
            unobserved = self._dispose_when_unobserved and not self._observers

        if unobserved:
            self._teardown()

    def observe_values(self, handler: Callable[[T], Any]) -> Disposable:
        return self.observe(Observer(value=handler))

    def observe_failed(self, handler: Callable[[E], Any]) -> Disposable:
        return self.observe(Observer(failed=handler))

    def observe_completed(self, handler: Callable[[], Any]) -> Disposable:
        return self.observe(Observer(completed=handler))

    def observe_interrupted(self, handler: Callable[[], Any]) -> Disposable:
        return self.observe(Observer(interrupted=handler))

    def observe_result(self, handler: Callable[[Outcome[T, E]], Any]) -> Disposable:
        """Observe values as `Ok` and a failure as `Err`."""
        return self.observe(
            Observer(value=lambda v: handler(Ok(v)), failed=lambda e: handler(Err(e)))
        )

    # ------------------------------------------------------------------------
    # Base combinators
    # ------------------------------------------------------------------------

    def _derive(
        self, make_action: Callable[[Observer], Callable[[Event], None]]
    ) -> "Signal":
        """Build a derived signal whose input re-wires each upstream event."""

        def generator(observer: Observer) -> Disposable:
            return self.observe(make_action(observer))

        return Signal(generator)

    def map(self, transform: Callable[[T], U]) -> "Signal[U, E]":
        """Transform each value."""

        def make_action(observer):
            return lambda event: observer.send(event.map(transform))

        return self._derive(make_action)

    def __rshift__(self, transform: Callable[[T], U]) -> "Signal[U, E]":
        """Map operator: signal >> f"""
        return self.map(transform)

    def filter(self, predicate: Callable[[T], bool]) -> "Signal[T, E]":
        """Forward only values satisfying `predicate`."""

        def make_action(observer):
            def action(event):
                if not event.is_value or predicate(event.payload):
                    observer.send(event)

            return action

        return self._derive(make_action)

    def __and__(self, predicate: Callable[[T], bool]) -> "Signal[T, E]":
        """Filter operator: signal & predicate"""
        return self.filter(predicate)

    def filter_map(self, transform: Callable[[T], Optional[U]]) -> "Signal[U, E]":
        """Transform each value, dropping those that map to None."""

        def make_action(observer):
            def action(event):
                if event.is_value:
                    mapped = transform(event.payload)
                    if mapped is not None:
                        observer.send_value(mapped)
                else:
                    observer.send(event)

            return action

        return self._derive(make_action)

    def map_error(self, transform: Callable[[E], F]) -> "Signal[T, F]":
        """Transform the error of a failure event."""

        def make_action(observer):
            return lambda event: observer.send(event.map_error(transform))

        return self._derive(make_action)

    def flat_map_error(
        self, handler: Callable[[E], "SignalProducer[T, F]"]
    ) -> "Signal[T, F]":
        """
        Replace a failure with the events of the producer `handler` returns.

        Values, completion and interruption are forwarded unchanged.
        """

        def generator(observer: Observer) -> Disposable:
            resources = CompositeDisposable()

            def action(event: Event) -> None:
                if event.kind is EventKind.FAILED:
                    resources.add(handler(event.payload).start(observer))
                else:
                    observer.send(event)

            resources.add(self.observe(action))
            return resources

        return Signal(generator)

    def flat_map(
        self,
        strategy: FlattenStrategy,
        transform: Callable[[T], "SignalProducer[U, E]"],
    ) -> "Signal[U, E]":
        """Map each value to a producer and flatten them with `strategy`."""

        def generator(observer: Observer) -> Disposable:
            return Flattener(strategy, transform, observer).attach(self.observe)

        return Signal(generator)

    def take(self, count: int) -> "Signal[T, E]":
        """Forward the first `count` values, then complete."""
        if count <= 0:

            def complete_at_once(observer: Observer) -> None:
                observer.send_completed()

            return Signal(complete_at_once)

        def make_action(observer):
            taken = [0]

            def action(event):
                observer.send(event)
                if event.is_value:
                    taken[0] += 1
                    if taken[0] >= count:
                        observer.send_completed()

            return action

        return self._derive(make_action)

    def skip(self, count: int) -> "Signal[T, E]":
        """Drop the first `count` values."""
        if count <= 0:
            return self

        def make_action(observer):
            skipped = [0]

            def action(event):
                if event.is_value and skipped[0] < count:
                    skipped[0] += 1
                    return
                observer.send(event)

            return action

        return self._derive(make_action)

    def collect(self) -> "Signal[List[T], E]":
        """Emit all values as one list once the signal completes."""

        def make_action(observer):
            values: List[T] = []

            def action(event):
                if event.is_value:
                    values.append(event.payload)
                elif event.kind is EventKind.COMPLETED:
                    observer.send_value(list(values))
                    observer.send_completed()
                else:
                    observer.send(event)

            return action

        return self._derive(make_action)

    def materialize(self) -> "Signal[Event[T, E], NoReturn]":
        """Turn every event, terminals included, into a value; then complete."""

        def make_action(observer):
            def action(event):
                observer.send_value(event)
                if event.is_terminating:
                    observer.send_completed()

            return action

        return self._derive(make_action)

    def dematerialize(self) -> "Signal[Any, Any]":
        """
        Inverse of `materialize`: each value must be an `Event`, or expose one
        through an `event` attribute (as `Outcome` does).
        """

        def make_action(observer):
            def action(event):
                if event.is_value:
                    inner = event.payload
                    observer.send(inner if isinstance(inner, Event) else inner.event)
                else:
                    observer.send(event)

            return action

        return self._derive(make_action)

    # ------------------------------------------------------------------------
    # Side effects
    # ------------------------------------------------------------------------

    def on(
        self,
        event: Optional[Callable[[Event], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
        failed: Optional[Callable[[E], Any]] = None,
        completed: Optional[Callable[[], Any]] = None,
        interrupted: Optional[Callable[[], Any]] = None,
        terminated: Optional[Callable[[], Any]] = None,
        disposed: Optional[Callable[[], Any]] = None,
    ) -> "Signal[T, E]":
        """
        Inject side effects without altering the stream.

        Handlers run synchronously, before the event reaches downstream
        observers. A value handler that raises fails the derived signal
        with `HandlerError`, and that failure goes through the `failed`
        and `terminated` handlers like any other. A terminal handler that
        raises still lets the terminal through and then raises
        `HandlerError` to the sender.
        """
        terminal_handlers = {
            EventKind.FAILED: failed,
            EventKind.COMPLETED: completed,
            EventKind.INTERRUPTED: interrupted,
        }

        def generator(observer: Observer) -> Disposable:
            def terminate(e: Event) -> None:
                args = (e.payload,) if e.kind is EventKind.FAILED else ()
                errors = [
                    _invoke(event, (e,), e.kind),
                    _invoke(terminal_handlers[e.kind], args, e.kind),
                    _invoke(terminated, (), e.kind),
                ]
                observer.send(e)
                for error in errors:
                    if error is not None:
                        raise error

            def action(e: Event) -> None:
                if not e.is_value:
                    terminate(e)
                    return

                error = _invoke(event, (e,), e.kind) or _invoke(
                    value, (e.payload,), e.kind
                )
                if error is not None:
                    terminate(Event.of_failure(error))
                else:
                    observer.send(e)

            resources = CompositeDisposable()
            if disposed is not None:
                resources.add(_disposal_tap(disposed))
            resources.add(self.observe(action))
            return resources

        return Signal(generator)

    def __repr__(self) -> str:
        if self._terminal is not None:
            state = f"terminated:{self._terminal.kind.value}"
        elif self._disposed:
            state = "disposed"
        else:
            state = f"observers={len(self._observers)}"
        return f"Signal({state})"


def _invoke(
    handler: Optional[Callable[..., Any]], args: tuple, kind: EventKind
) -> Optional[HandlerError]:
    if handler is None:
        return None
    try:
        handler(*args)
    except Exception as exc:
        logger.error("Side-effect handler for %s events raised %r", kind.value, exc)
        return HandlerError(kind.value, exc)
    return None


def _disposal_tap(handler: Callable[[], Any]) -> Callable[[], None]:
    def run() -> None:
        try:
            handler()
        except Exception as exc:
            logger.error("Disposal handler raised %r", exc)
            raise HandlerError("disposed", exc) from exc

    return run


def _broadcast(observers, event: Event) -> None:
    # Every observer gets the event even if an earlier one raises
    first_error: Optional[BaseException] = None
    for observer in observers:
        try:
            observer.send(event)
        except Exception as exc:
            if first_error is None:
                first_error = exc
    if first_error is not None:
        raise first_error


__all__ = ["Signal", "HandlerError"]
