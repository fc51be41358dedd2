"""
signalkit Flattening - Streams of Producers
===========================================

`flat_map` maps every outer value to a producer and flattens the resulting
inner streams into one:

- MERGE:  start every inner at once, interleave their values
- CONCAT: queue inners, run one at a time in arrival order
- LATEST: start each inner immediately, disposing the previous one

Any inner failure fails the result. An inner interruption interrupts the
result, except for the inner LATEST replaced on purpose. The result
completes once the outer stream and every started or queued inner has
completed.
"""

import logging
import threading
from collections import deque
from enum import Enum
from typing import Any, Callable, Deque, List

from .disposable import CompositeDisposable, Disposable, SerialDisposable
from .event import Event, EventKind
from .observer import Observer

logger = logging.getLogger(__name__)


class FlattenStrategy(Enum):
    """How inner producers are combined."""

    MERGE = "merge"
    CONCAT = "concat"
    LATEST = "latest"


class Flattener:
    """Flattening state for a single subscription."""

    __slots__ = (
        "_strategy",
        "_transform",
        "_observer",
        "_lock",
        "_resources",
        "_latest",
        "_queue",
        "_active",
        "_generation",
        "_outer_completed",
    )

    def __init__(
        self,
        strategy: FlattenStrategy,
        transform: Callable[[Any], Any],
        observer: Observer,
    ) -> None:
        self._strategy = strategy
        self._transform = transform
        self._observer = observer
        self._lock = threading.RLock()
        self._resources = CompositeDisposable()
        self._latest = SerialDisposable()
        self._queue: Deque[Any] = deque()
        self._active = 0
        self._generation = 0
        self._outer_completed = False

    def attach(self, subscribe: Callable[[Callable[[Event], None]], Disposable]) -> Disposable:
        """Subscribe to the outer stream; returns the disposable owning everything."""
        self._resources.add(self._latest)
        self._resources.add(subscribe(self._on_outer))
        return self._resources

    # ------------------------------------------------------------------------
    # Outer stream
    # ------------------------------------------------------------------------

    def _on_outer(self, event: Event) -> None:
        kind = event.kind
        if kind is EventKind.VALUE:
            self._dispatch(self._transform(event.payload))
        elif kind is EventKind.COMPLETED:
            with self._lock:
                self._outer_completed = True
                finished = self._active == 0 and not self._queue
            if finished:
                self._observer.send_completed()
        else:
            self._observer.send(event)

    def _dispatch(self, producer: Any) -> None:
        if self._strategy is FlattenStrategy.CONCAT:
            with self._lock:
                if self._active > 0:
                    self._queue.append(producer)
                    return
                # Claim the single slot before releasing the lock
                self._active = 1
            self._start(producer, reserved=True)
            return
        self._start(producer)

    # ------------------------------------------------------------------------
    # Inner streams
    # ------------------------------------------------------------------------

    def _start(self, producer: Any, reserved: bool = False) -> None:
        """Start an inner producer; `reserved` means its slot is already counted."""
        with self._lock:
            if self._strategy is FlattenStrategy.LATEST:
                self._generation += 1
                self._active = 1
            elif not reserved:
                self._active += 1
            token = self._generation

        # [finished, handle] for this inner
        state: List[Any] = [False, None]

        def on_inner(event: Event) -> None:
            if event.is_terminating:
                state[0] = True
                if state[1] is not None:
                    state[1].dispose()
            self._on_inner(event, token)

        disposable = producer.start(Observer(on_inner))

        if self._strategy is FlattenStrategy.LATEST:
            if self._latest.inner is not None:
                logger.debug("Replacing latest inner producer")
            # Releases the previous inner either way
            self._latest.inner = None if state[0] else disposable
        elif not state[0]:
            state[1] = self._resources.add(disposable)

    def _on_inner(self, event: Event, token: int) -> None:
        if self._strategy is FlattenStrategy.LATEST and token != self._generation:
            # Replaced by a newer inner
            return

        kind = event.kind
        if kind is not EventKind.COMPLETED:
            self._observer.send(event)
            return

        next_producer = None
        with self._lock:
            if self._strategy is FlattenStrategy.CONCAT and self._queue:
                # The finished inner hands its slot straight to the next one
                next_producer = self._queue.popleft()
            else:
                self._active -= 1
            finished = (
                next_producer is None
                and self._active == 0
                and self._outer_completed
                and not self._queue
            )

        if next_producer is not None:
            self._start(next_producer, reserved=True)
        elif finished:
            self._observer.send_completed()


__all__ = ["FlattenStrategy", "Flattener"]
