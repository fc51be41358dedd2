"""
signalkit Operations - Result Adaptation for Signals and Producers
==================================================================

This module provides `ResultOperationsMixin`, mixed into both `Signal` and
`SignalProducer`. Every method is written purely in terms of the host's base
combinators (`map`, `filter`, `flat_map_error`, `on`), so the same code
serves hot and cold streams alike.

Error-channel transforms:
- `drop_error()`  - a failure becomes a clean completion
- `lift_error()`  - same as `drop_error`, for a stream typed with another error

Outcome tagging and projection:
- `to_outcomes()`    - values become `Ok`, a failure becomes a final `Err`
- `filter_values()`  - payloads of `Ok` elements only
- `filter_errors()`  - payloads of `Err` elements only

Filters:
- `filter_type(target)` - values that are instances of `target`
- `skip_not_none()`     - `None` values only; every present value is dropped

Side-effect taps:
- `on_value`, `on_error`, `on_completed`, `on_interrupted`, `on_disposed`,
  `on_terminated`

WARNING: `drop_error()` and `lift_error()` discard the error. Observers of the
resulting stream see a normal completion where the source actually failed.
Use `to_outcomes()` when the failure must stay observable.
"""

from typing import Any, Callable, TypeVar

from .outcome import Err, Ok, as_outcome
from .type_check import instance_predicate

T = TypeVar("T")
E = TypeVar("E")


class ResultOperationsMixin:
    """
    Result-adaptation combinators shared by Signal and SignalProducer.

    Hosts must provide `map`, `filter`, `flat_map_error` and `on`.
    """

    __slots__ = ()

    # ------------------------------------------------------------------------
    # Error-channel transforms
    # ------------------------------------------------------------------------

    def drop_error(self):
        """
        Ignore errors: a failure is turned into a clean completion.

        Values, completion and interruption are forwarded unchanged. If the
        source fails before sending anything, the result completes with no
        values. The error itself is lost.

        Typical use is bringing an inner stream that can fail in line with an
        outer stream that cannot, before flattening them together.
        """
        from .producer import SignalProducer

        return self.flat_map_error(lambda error: SignalProducer.empty())

    def lift_error(self):
        """
        Re-type the error channel by discarding errors.

        Behaves exactly like `drop_error()`: any failure becomes a clean
        completion of the result. The original error is never translated
        into the new error type, it is dropped. Saves a
        `drop_error()`-then-re-type chain when the outer and inner streams
        declare different error types.
        """
        from .producer import SignalProducer

        return self.flat_map_error(lambda error: SignalProducer.empty())

    # ------------------------------------------------------------------------
    # Outcome tagging
    # ------------------------------------------------------------------------

    def to_outcomes(self):
        """
        Carry failures on the value channel.

        Every value `v` becomes `Ok(v)`. A failure `e` becomes a final
        `Err(e)` value followed by completion, so the result never fails.
        Completion and interruption pass through with no trailing value.

        Useful inside `flat_map`, where a failing inner producer would
        otherwise fail the whole outer stream:

            ```python
            logins.flat_map(
                FlattenStrategy.LATEST,
                lambda credentials: auth.login(credentials).to_outcomes(),
            )
            ```
        """
        from .producer import SignalProducer

        return self.map(Ok).flat_map_error(lambda error: SignalProducer.of(Err(error)))

    def filter_values(self):
        """
        Project the `Ok` payloads of a stream of outcomes; `Err`s are dropped.

        Elements may be `Outcome`s or anything exposing one as `.outcome`.
        """
        return self.filter(lambda element: as_outcome(element).is_ok).map(
            lambda element: as_outcome(element).value
        )

    def filter_errors(self):
        """
        Project the `Err` payloads of a stream of outcomes; `Ok`s are dropped.

        Elements may be `Outcome`s or anything exposing one as `.outcome`.
        """
        return self.filter(lambda element: as_outcome(element).is_err).map(
            lambda element: as_outcome(element).error
        )

    # ------------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------------

    def filter_type(self, target: Any):
        """
        Forward only values that are instances of `target`.

        `target` may be a class, a tuple of classes, a typing union or
        optional, `Any`, a parameterized generic (checked on its origin), a
        `Literal[...]` or a runtime-checkable protocol. Non-matching values
        are dropped silently; terminal events pass through.

        Raises:
            TypeError: `target` cannot be checked at runtime. Raised here,
                never while values flow.
        """
        return self.filter(instance_predicate(target))

    def skip_not_none(self):
        """
        Skip every value that is not None, sending only the None values through.
        """
        return self.filter(lambda value: value is None)

    # ------------------------------------------------------------------------
    # Side-effect taps
    # ------------------------------------------------------------------------

    def on_value(self, handler: Callable[[Any], Any]):
        """Run `handler` for every value."""
        return self.on(value=handler)

    def on_error(self, handler: Callable[[Any], Any]):
        """Run `handler` with the error of a failure."""
        return self.on(failed=handler)

    def on_completed(self, handler: Callable[[], Any]):
        """Run `handler` on completion."""
        return self.on(completed=handler)

    def on_interrupted(self, handler: Callable[[], Any]):
        """Run `handler` on interruption."""
        return self.on(interrupted=handler)

    def on_terminated(self, handler: Callable[[], Any]):
        """Run `handler` once on whichever terminal event comes first."""
        return self.on(terminated=handler)

    def on_disposed(self, handler: Callable[[], Any]):
        """Run `handler` once when the stream is torn down."""
        return self.on(disposed=handler)


__all__ = ["ResultOperationsMixin"]
