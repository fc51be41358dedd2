"""
signalkit Outcome - Failures as Ordinary Values
===============================================

An `Outcome` is the value-level twin of a stream's error channel:

    Ok(v)   ~ Value(v)
    Err(e)  ~ Failed(e)

Carrying failures as `Err` values lets an individual failed attempt travel
on the happy path without terminating the enclosing stream. The `event`
property converts an outcome back into the matching stream event, which is
what `dematerialize()` relies on.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Generic, Optional, Protocol, TypeVar, Union, runtime_checkable

from .event import Event

T = TypeVar("T")
E = TypeVar("E")


class Outcome(ABC, Generic[T, E]):
    """Common base of `Ok` and `Err`."""

    __slots__ = ()

    @property
    def is_ok(self) -> bool:
        return isinstance(self, Ok)

    @property
    def is_err(self) -> bool:
        return isinstance(self, Err)

    @property
    def value(self) -> Optional[T]:
        """The success payload, or None for an `Err`."""
        return None

    @property
    def error(self) -> Optional[E]:
        """The failure payload, or None for an `Ok`."""
        return None

    @property
    def outcome(self) -> "Outcome[T, E]":
        return self

    @property
    @abstractmethod
    def event(self) -> Event:
        """The stream event this outcome stands for."""

    @abstractmethod
    def unwrap(self) -> T:
        """Return the value, or raise the carried error."""


@dataclass(frozen=True)
class Ok(Outcome[T, E]):
    """A successful outcome."""

    payload: T

    @property
    def value(self) -> T:
        return self.payload

    @property
    def event(self) -> Event:
        return Event.of_value(self.payload)

    def unwrap(self) -> T:
        return self.payload

    def __repr__(self) -> str:
        return f"Ok({self.payload!r})"


@dataclass(frozen=True)
class Err(Outcome[T, E]):
    """A failed outcome."""

    payload: E

    @property
    def error(self) -> E:
        return self.payload

    @property
    def event(self) -> Event:
        return Event.of_failure(self.payload)

    def unwrap(self) -> T:
        if isinstance(self.payload, BaseException):
            raise self.payload
        raise ValueError(f"unwrap() called on {self!r}")

    def __repr__(self) -> str:
        return f"Err({self.payload!r})"


@runtime_checkable
class OutcomeLike(Protocol[T, E]):
    """Anything that can present itself as an `Outcome`."""

    @property
    def outcome(self) -> Outcome[T, E]: ...


def as_outcome(candidate: Union[Outcome[T, E], OutcomeLike[T, E]]) -> Outcome[T, E]:
    """Resolve an `Outcome` or `OutcomeLike` element to its `Outcome`."""
    if isinstance(candidate, Outcome):
        return candidate
    try:
        resolved: Any = candidate.outcome
    except AttributeError:
        raise TypeError(
            f"Expected an Outcome or OutcomeLike element, got {type(candidate).__name__}"
        ) from None
    if not isinstance(resolved, Outcome):
        raise TypeError(
            f"{type(candidate).__name__}.outcome must be an Outcome, got {type(resolved).__name__}"
        )
    return resolved


__all__ = ["Outcome", "Ok", "Err", "OutcomeLike", "as_outcome"]
