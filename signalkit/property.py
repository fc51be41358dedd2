"""
signalkit Property - Observable Values
======================================

A property always has a current value and announces every change:

- `signal`   - hot stream of changes only
- `producer` - cold stream of the current value followed by every change

`MutableProperty` is the writable variant; `Property` follows another
property's changes through `map` (or `>>`).

Example:
    ```python
    name = MutableProperty("")
    greeting = name >> (lambda n: f"Hello, {n}")

    greeting.subscribe(print)
    name.value = "Ada"        # prints "Hello, Ada"
    ```
"""

import threading
from typing import Any, Callable, Generic, NoReturn, Optional, TypeVar

from .disposable import CompositeDisposable, Disposable
from .observer import Observer
from .producer import SignalProducer
from .signal import Signal

T = TypeVar("T")
U = TypeVar("U")


class Property(Generic[T]):
    """
    Read-only observable value.

    Args:
        initial_value: The value before any change arrives.
        changes: Optional signal whose values become this property's value;
            its termination completes the property.
        key: Name used in reprs and log messages.
    """

    __slots__ = ("_key", "_value", "_lock", "_signal", "_input", "_upstream")

    def __init__(
        self,
        initial_value: T,
        changes: Optional[Signal[T, Any]] = None,
        key: Optional[str] = None,
    ) -> None:
        self._key = key or "<unnamed>"
        self._value = initial_value
        self._lock = threading.RLock()
        self._signal, self._input = Signal.pipe()
        self._upstream: Optional[Disposable] = None
        if changes is not None:
            self._upstream = changes.observe(
                Observer(
                    value=self._update,
                    failed=lambda error: self._input.send_completed(),
                    completed=self._input.send_completed,
                    interrupted=self._input.send_completed,
                )
            )

    @property
    def key(self) -> str:
        return self._key

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    @property
    def signal(self) -> Signal[T, NoReturn]:
        """Changes from now on, without the current value."""
        return self._signal

    @property
    def producer(self) -> SignalProducer[T, NoReturn]:
        """The current value, then every change."""

        def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
            # Held so no change slips in between the snapshot and the observation
            with self._lock:
                observer.send_value(self._value)
                if self._signal.is_terminated:
                    observer.send_completed()
                else:
                    lifetime.add(self._signal.observe(observer))

        return SignalProducer(start_handler)

    def _update(self, value: T) -> None:
        with self._lock:
            self._value = value
            self._input.send_value(value)

    def subscribe(
        self, callback: Callable[[T], Any], call_immediately: bool = False
    ) -> Disposable:
        """Call `callback` with every new value; dispose the result to stop."""
        if call_immediately:
            return self.producer.start_with_values(callback)
        return self._signal.observe_values(callback)

    def map(self, transform: Callable[[T], U]) -> "Property[U]":
        """Derived read-only property: transform(value), kept in sync."""
        with self._lock:
            return Property(
                transform(self._value),
                changes=self._signal.map(transform),
                key=f"mapped_from_{self._key}",
            )

    def __rshift__(self, transform: Callable[[T], U]) -> "Property[U]":
        """Map operator: property >> f"""
        return self.map(transform)

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self._key!r}, {self.value!r})"


class MutableProperty(Property[T]):
    """Writable observable value."""

    __slots__ = ()

    def __init__(self, initial_value: T, key: Optional[str] = None) -> None:
        super().__init__(initial_value, key=key)

    @property
    def value(self) -> T:
        with self._lock:
            return self._value

    @value.setter
    def value(self, new_value: T) -> None:
        self._update(new_value)

    def set(self, new_value: T) -> "MutableProperty[T]":
        """Explicit setter; returns self for chaining."""
        self._update(new_value)
        return self

    def modify(self, transform: Callable[[T], T]) -> T:
        """Atomically replace the value with transform(value); returns the new value."""
        with self._lock:
            new_value = transform(self._value)
            self._update(new_value)
            return new_value

    def close(self) -> None:
        """Complete the change stream; later writes are no longer announced."""
        self._input.send_completed()


__all__ = ["Property", "MutableProperty"]
