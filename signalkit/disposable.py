"""
signalkit Disposables - Idempotent Teardown
===========================================

A disposable is a single-shot release action: the first `dispose()` runs it,
every later call is a no-op. Subscriptions, producer lifetimes and bindings
all hand one back so callers can end them deterministically.

- `Disposable`          - wraps one release action
- `CompositeDisposable` - owns many children, released last-in first-out
- `SerialDisposable`    - owns one replaceable child
"""

import threading
from typing import Callable, Iterable, List, Optional, Union

DisposableLike = Union["Disposable", Callable[[], None], None]


class Disposable:
    """
    Single-shot teardown guarded by a lock.

    Also usable as a context manager:

        with producer.start(observer):
            ...
    """

    __slots__ = ("_action", "_lock", "_disposed")

    def __init__(self, action: Optional[Callable[[], None]] = None) -> None:
        self._action = action
        self._lock = threading.Lock()
        self._disposed = False

    @property
    def is_disposed(self) -> bool:
        return self._disposed

    def dispose(self) -> None:
        with self._lock:
            if self._disposed:
                return
            self._disposed = True
            action, self._action = self._action, None

        # Run outside the lock so the action may dispose related resources
        if action is not None:
            action()

    def __enter__(self) -> "Disposable":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.dispose()

    def __repr__(self) -> str:
        state = "disposed" if self._disposed else "active"
        return f"{type(self).__name__}({state})"


def as_disposable(candidate: DisposableLike) -> Optional[Disposable]:
    """Coerce a callable (or None) into a Disposable."""
    if candidate is None or isinstance(candidate, Disposable):
        return candidate
    if callable(candidate):
        return Disposable(candidate)
    raise TypeError(f"Cannot use {type(candidate).__name__} as a disposable")


class CompositeDisposable(Disposable):
    """
    Aggregate of child disposables.

    Children are released in reverse order of addition, mirroring scoped
    acquisition: the resource acquired last is released first.
    """

    __slots__ = ("_children",)

    def __init__(self) -> None:
        super().__init__(self._dispose_children)
        self._children: List[Disposable] = []

    def add(self, candidate: DisposableLike) -> Disposable:
        """
        Add a child and return a handle that detaches it again.

        Adding to an already-disposed composite disposes the child at once.
        """
        child = as_disposable(candidate)
        if child is None:
            return Disposable()

        with self._lock:
            if not self._disposed:
                self._children.append(child)
                return Disposable(lambda: self._remove(child))

        child.dispose()
        return Disposable()

    def __iadd__(self, candidate: DisposableLike) -> "CompositeDisposable":
        self.add(candidate)
        return self

    def __len__(self) -> int:
        with self._lock:
            return len(self._children)

    def _remove(self, child: Disposable) -> None:
        with self._lock:
            try:
                self._children.remove(child)
            except ValueError:
                pass

    def _dispose_children(self) -> None:
        with self._lock:
            children, self._children = self._children, []
        _dispose_all(reversed(children))


class SerialDisposable(Disposable):
    """Holds a single inner disposable; assigning a new one releases the old."""

    __slots__ = ("_inner",)

    def __init__(self, inner: DisposableLike = None) -> None:
        super().__init__(self._dispose_inner)
        self._inner: Optional[Disposable] = as_disposable(inner)

    @property
    def inner(self) -> Optional[Disposable]:
        return self._inner

    @inner.setter
    def inner(self, candidate: DisposableLike) -> None:
        new_inner = as_disposable(candidate)
        with self._lock:
            if not self._disposed:
                previous, self._inner = self._inner, new_inner
                new_inner = None
            else:
                previous = None

        # new_inner is still set only when assigned after disposal
        _dispose_all([previous, new_inner])

    def _dispose_inner(self) -> None:
        with self._lock:
            inner, self._inner = self._inner, None
        _dispose_all([inner])


def _dispose_all(disposables: Iterable[Optional[Disposable]]) -> None:
    # Every disposable is released even if an earlier one raises
    first_error: Optional[Exception] = None
    for disposable in disposables:
        if disposable is None:
            continue
        try:
            disposable.dispose()
        except Exception as exc:
            if first_error is None:
                first_error = exc
    if first_error is not None:
        raise first_error
