"""
Runtime Type Narrowing
======================

Resolves a type target into an `isinstance`-style predicate for
`filter_type`. Targets can be plain classes or `typing` constructs, so the
resolution walks unions, optionals, `Literal`s and parameterized generics
once and caches the result with cachetools' LRU cache.

    instance_predicate(Optional[int])(None)        # True
    instance_predicate(List[int])([1, "a"])        # True (origin check only)
    instance_predicate(Literal["a", "b"])("c")     # False
"""

import threading
import types
from typing import Any, Callable, Literal, Tuple, Union, get_args, get_origin

from cachetools import LRUCache, cached

# Number of resolved targets kept around
TYPE_CHECK_CACHE_SIZE = 256

Predicate = Callable[[Any], bool]


def _accept_all(value: Any) -> bool:
    return True


def _resolve(target: Any) -> Tuple[Tuple[type, ...], Tuple[Any, ...], bool]:
    """
    Flatten `target` into (classes, literal values, accepts anything).
    """
    if target is Any:
        return (), (), True
    if target is None or target is type(None):
        return (type(None),), (), False

    if isinstance(target, tuple):
        classes, literals, anything = [], [], False
        for member in target:
            member_classes, member_literals, member_any = _resolve(member)
            classes.extend(member_classes)
            literals.extend(member_literals)
            anything = anything or member_any
        return tuple(classes), tuple(literals), anything

    origin = get_origin(target)
    if origin is Union or _is_union_type(target):
        return _resolve(get_args(target))
    if origin is Literal:
        return (), get_args(target), False
    if origin is not None:
        # List[int], Dict[str, int], ... are checked on their origin only
        return _resolve(origin)

    if isinstance(target, type):
        _check_usable(target)
        return (target,), (), False

    raise TypeError(f"filter_type() cannot check against {target!r} at runtime")


def _is_union_type(target: Any) -> bool:
    # `int | None` on Python 3.10+
    union_type = getattr(types, "UnionType", None)
    return union_type is not None and isinstance(target, union_type)


def _check_usable(target: type) -> None:
    # Protocols that are not runtime_checkable refuse isinstance()
    try:
        isinstance(None, target)
    except TypeError as exc:
        raise TypeError(
            f"filter_type() cannot check against {target.__name__}: {exc}"
        ) from exc


@cached(cache=LRUCache(maxsize=TYPE_CHECK_CACHE_SIZE), lock=threading.Lock())
def instance_predicate(target: Any) -> Predicate:
    """
    Build (and cache) the membership predicate for `target`.

    Raises:
        TypeError: `target` cannot be checked at runtime.
    """
    classes, literals, anything = _resolve(target)
    if anything:
        return _accept_all

    def predicate(value: Any) -> bool:
        if classes and isinstance(value, classes):
            return True
        return any(value == literal and type(value) is type(literal) for literal in literals)

    return predicate


__all__ = ["instance_predicate", "TYPE_CHECK_CACHE_SIZE"]
