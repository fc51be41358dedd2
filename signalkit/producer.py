"""
signalkit SignalProducer - Cold Event Streams
=============================================

A `SignalProducer` describes work that has not happened yet. Every
`start()` runs the start handler afresh and produces an independent stream,
so producers are the natural wrapper for callback-style operations such as
an asynchronous load or a seek.

Each run owns a `lifetime` (a CompositeDisposable). The lifetime is released
when the run terminates or when the handle returned by `start()` is
disposed; disposing the handle also interrupts the observer if the run has
not terminated yet.

Every Signal combinator is available on producers through `lift`: the
operator is applied to a fresh signal on each start.

Example:
    ```python
    producer = SignalProducer.from_values([1, 2, 3]) >> (lambda x: x * 10)
    producer.collect().start_with_values(print)   # [10, 20, 30]
    ```
"""

from typing import (
    Any,
    Callable,
    Generic,
    Iterable,
    List,
    NoReturn,
    Optional,
    TypeVar,
    Union,
)

from .disposable import CompositeDisposable, Disposable, SerialDisposable
from .event import Event
from .flatten import FlattenStrategy
from .observer import Observer, as_observer
from .operations import ResultOperationsMixin
from .outcome import Err, Ok, Outcome
from .signal import Signal

T = TypeVar("T")
E = TypeVar("E")
U = TypeVar("U")
F = TypeVar("F")

StartHandler = Callable[[Observer, CompositeDisposable], Any]


class SignalProducer(ResultOperationsMixin, Generic[T, E]):
    """
    Cold stream of `Event[T, E]`.

    Args:
        start_handler: Called on every start with the run's observer and its
            lifetime. Resources added to the lifetime are released when the
            run ends.
    """

    __slots__ = ("_start_handler",)

    def __init__(self, start_handler: StartHandler) -> None:
        self._start_handler = start_handler

    # ------------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------------

    @classmethod
    def empty(cls) -> "SignalProducer[T, E]":
        """Completes immediately without values."""
        return cls(lambda observer, lifetime: observer.send_completed())

    @classmethod
    def never(cls) -> "SignalProducer[T, E]":
        """Never sends any event."""
        return cls(lambda observer, lifetime: None)

    @classmethod
    def of(cls, value: T) -> "SignalProducer[T, E]":
        """Sends `value`, then completes."""

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            observer.send_value(value)
            observer.send_completed()

        return cls(start_handler)

    @classmethod
    def failure(cls, error: E) -> "SignalProducer[T, E]":
        """Fails immediately with `error`."""
        return cls(lambda observer, lifetime: observer.send_failed(error))

    @classmethod
    def from_values(cls, values: Iterable[T]) -> "SignalProducer[T, E]":
        """Sends every element of `values` in order, then completes."""

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            if lifetime.is_disposed:
                return
            for value in values:
                observer.send_value(value)
                # Interrupted from downstream; stop pulling
                if lifetime.is_disposed:
                    return
            observer.send_completed()

        return cls(start_handler)

    @classmethod
    def from_signal(cls, signal: Signal[T, E]) -> "SignalProducer[T, E]":
        """Each start observes `signal` from that point on."""

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            lifetime.add(signal.observe(observer))

        return cls(start_handler)

    # ------------------------------------------------------------------------
    # Starting
    # ------------------------------------------------------------------------

    def start(
        self, observer: Union[Observer[T, E], Callable[[Event], Any], None] = None
    ) -> Disposable:
        """Run the producer; dispose the returned handle to interrupt it."""
        return self._start(as_observer(observer))

    def _start(
        self,
        observer: Observer[T, E],
        attach: Optional[Callable[[Disposable], Any]] = None,
    ) -> Disposable:
        # `attach` receives the handle before the start handler runs, so a
        # synchronous run can still be interrupted from downstream
        lifetime = CompositeDisposable()

        def forward(event: Event) -> None:
            try:
                observer.send(event)
            finally:
                if event.is_terminating:
                    lifetime.dispose()

        run = Observer(forward)

        def interrupt() -> None:
            try:
                lifetime.dispose()
            finally:
                run.send_interrupted()

        handle = Disposable(interrupt)
        if attach is not None:
            attach(handle)
        self._start_handler(run, lifetime)
        return handle

    def start_with_signal(
        self, setup: Callable[[Signal[T, E], Disposable], Any]
    ) -> Disposable:
        """
        Create the run's signal, hand it to `setup` together with an
        interrupt handle, then start.

        Observers attached in `setup` see every event of the run.
        """
        signal, observer = Signal.pipe()
        interrupter = SerialDisposable()
        setup(signal, interrupter)
        if not interrupter.is_disposed:

            def attach(handle: Disposable) -> None:
                interrupter.inner = handle

            self._start(observer, attach)
        return interrupter

    def start_with_values(self, handler: Callable[[T], Any]) -> Disposable:
        return self.start(Observer(value=handler))

    def start_with_failed(self, handler: Callable[[E], Any]) -> Disposable:
        return self.start(Observer(failed=handler))

    def start_with_completed(self, handler: Callable[[], Any]) -> Disposable:
        return self.start(Observer(completed=handler))

    def start_with_interrupted(self, handler: Callable[[], Any]) -> Disposable:
        return self.start(Observer(interrupted=handler))

    def start_with_result(self, handler: Callable[[Outcome[T, E]], Any]) -> Disposable:
        """Start, receiving values as `Ok` and a failure as `Err`."""
        return self.start(
            Observer(value=lambda v: handler(Ok(v)), failed=lambda e: handler(Err(e)))
        )

    # ------------------------------------------------------------------------
    # Lifting
    # ------------------------------------------------------------------------

    def lift(self, operator: Callable[[Signal], Signal]) -> "SignalProducer":
        """Apply a Signal operator to every run of this producer."""

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            signal, upstream = Signal.pipe()
            lifetime.add(operator(signal).observe(observer))
            self._start(upstream, lifetime.add)

        return SignalProducer(start_handler)

    def map(self, transform: Callable[[T], U]) -> "SignalProducer[U, E]":
        return self.lift(lambda signal: signal.map(transform))

    def __rshift__(self, transform: Callable[[T], U]) -> "SignalProducer[U, E]":
        """Map operator: producer >> f"""
        return self.map(transform)

    def filter(self, predicate: Callable[[T], bool]) -> "SignalProducer[T, E]":
        return self.lift(lambda signal: signal.filter(predicate))

    def __and__(self, predicate: Callable[[T], bool]) -> "SignalProducer[T, E]":
        """Filter operator: producer & predicate"""
        return self.filter(predicate)

    def filter_map(self, transform: Callable[[T], Optional[U]]) -> "SignalProducer[U, E]":
        return self.lift(lambda signal: signal.filter_map(transform))

    def map_error(self, transform: Callable[[E], F]) -> "SignalProducer[T, F]":
        return self.lift(lambda signal: signal.map_error(transform))

    def flat_map_error(
        self, handler: Callable[[E], "SignalProducer[T, F]"]
    ) -> "SignalProducer[T, F]":
        return self.lift(lambda signal: signal.flat_map_error(handler))

    def flat_map(
        self,
        strategy: FlattenStrategy,
        transform: Callable[[T], "SignalProducer[U, E]"],
    ) -> "SignalProducer[U, E]":
        return self.lift(lambda signal: signal.flat_map(strategy, transform))

    def take(self, count: int) -> "SignalProducer[T, E]":
        if count <= 0:
            return SignalProducer.empty()
        return self.lift(lambda signal: signal.take(count))

    def skip(self, count: int) -> "SignalProducer[T, E]":
        return self.lift(lambda signal: signal.skip(count))

    def collect(self) -> "SignalProducer[List[T], E]":
        return self.lift(lambda signal: signal.collect())

    def materialize(self) -> "SignalProducer[Event[T, E], NoReturn]":
        return self.lift(lambda signal: signal.materialize())

    def dematerialize(self) -> "SignalProducer[Any, Any]":
        return self.lift(lambda signal: signal.dematerialize())

    def on(
        self,
        event: Optional[Callable[[Event], Any]] = None,
        value: Optional[Callable[[T], Any]] = None,
        failed: Optional[Callable[[E], Any]] = None,
        completed: Optional[Callable[[], Any]] = None,
        interrupted: Optional[Callable[[], Any]] = None,
        terminated: Optional[Callable[[], Any]] = None,
        disposed: Optional[Callable[[], Any]] = None,
    ) -> "SignalProducer[T, E]":
        """Inject side effects into every run; see `Signal.on`."""
        return self.lift(
            lambda signal: signal.on(
                event=event,
                value=value,
                failed=failed,
                completed=completed,
                interrupted=interrupted,
                terminated=terminated,
                disposed=disposed,
            )
        )

    def __repr__(self) -> str:
        return f"SignalProducer({getattr(self._start_handler, '__qualname__', 'handler')})"


__all__ = ["SignalProducer"]
