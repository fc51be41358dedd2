"""
Media Wrappers
==============

Signal-producer wrappers over callback-style media APIs:

- `load_values(asset, keys)` - asynchronous multi-key metadata loading
- `seek(item, time)`         - seeking a player item

Nothing happens until the returned producer is started, and every start
issues a fresh request.
"""

from enum import Enum
from typing import (
    Any,
    Callable,
    Dict,
    NoReturn,
    Optional,
    Protocol,
    Sequence,
    Tuple,
    runtime_checkable,
)

from ..disposable import CompositeDisposable
from ..observer import Observer
from ..outcome import Err, Ok, Outcome
from ..producer import SignalProducer


class KeyValueStatus(Enum):
    """Loading status of one key of an asset."""

    UNKNOWN = 0
    LOADING = 1
    LOADED = 2
    FAILED = 3
    CANCELLED = 4


@runtime_checkable
class AsynchronousKeyValueLoading(Protocol):
    """An asset whose keys load asynchronously."""

    def load_values_asynchronously(
        self, keys: Sequence[str], completion_handler: Callable[[], None]
    ) -> None: ...

    def status_of_value(self, key: str) -> Tuple[KeyValueStatus, Optional[Exception]]: ...


@runtime_checkable
class Seekable(Protocol):
    """A player item that can move its playback cursor."""

    def seek(self, time: Any, completion_handler: Callable[[bool], None]) -> None: ...


KeysStatus = Dict[str, Outcome[KeyValueStatus, Exception]]


def load_values(
    asset: AsynchronousKeyValueLoading, keys: Sequence[str]
) -> SignalProducer[KeysStatus, NoReturn]:
    """
    Load any of `keys` not loaded yet.

    Sends one dict mapping every key to `Ok(status)`, or to `Err(error)`
    when its status is FAILED and the asset reports the error, then
    completes.
    """
    keys = list(keys)

    def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
        def on_loaded() -> None:
            keys_status: KeysStatus = {}
            for key in keys:
                status, error = asset.status_of_value(key)
                if status is KeyValueStatus.FAILED and error is not None:
                    keys_status[key] = Err(error)
                else:
                    keys_status[key] = Ok(status)
            observer.send_value(keys_status)
            observer.send_completed()

        asset.load_values_asynchronously(keys, on_loaded)

    return SignalProducer(start_handler)


def seek(item: Seekable, time: Any) -> SignalProducer[bool, NoReturn]:
    """
    Move the playback cursor to `time`.

    Sends whether the seek finished (False when a later seek cut it short),
    then completes.
    """

    def start_handler(observer: Observer, lifetime: CompositeDisposable) -> None:
        def on_finished(finished: bool) -> None:
            observer.send_value(finished)
            observer.send_completed()

        item.seek(time, on_finished)

    return SignalProducer(start_handler)


__all__ = [
    "KeyValueStatus",
    "AsynchronousKeyValueLoading",
    "Seekable",
    "load_values",
    "seek",
]
