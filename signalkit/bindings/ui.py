"""
UI Bindings for Actions
=======================

Binds an `Action`'s state to widgets of whatever UI toolkit hosts it. Widgets
only need to satisfy the small protocols below; the toolkit's main-thread
hop is passed in as `dispatch` (a callable taking a zero-argument function).
Without one, updates run inline on the thread that produced them.
"""

from typing import TYPE_CHECKING, Any, Callable, Optional, Protocol, runtime_checkable

from ..disposable import Disposable

if TYPE_CHECKING:
    from ..action import Action

# Background alpha of a control whose action is enabled / disabled
ENABLED_ALPHA = 1.0
DISABLED_ALPHA = 0.5

Dispatch = Callable[[Callable[[], Any]], Any]


@runtime_checkable
class BusyIndicator(Protocol):
    """A loading indicator that can be shown and hidden."""

    def show(self, animated: bool = True) -> None: ...

    def hide(self, animated: bool = True) -> None: ...


@runtime_checkable
class AlphaControl(Protocol):
    """A clickable control with an adjustable background alpha."""

    background_alpha: float


def _inline(work: Callable[[], Any]) -> None:
    work()


def bind_loading(
    action: "Action", indicator: BusyIndicator, dispatch: Optional[Dispatch] = None
) -> Disposable:
    """
    Show `indicator` whenever `action` starts executing and hide it when the
    execution ends. Only changes are bound, not the current state.
    """
    dispatch = dispatch or _inline

    def on_executing(is_executing: bool) -> None:
        if is_executing:
            dispatch(lambda: indicator.show(animated=True))
        else:
            dispatch(lambda: indicator.hide(animated=True))

    return action.is_executing.signal.observe_values(on_executing)


def bind_disabled(
    action: "Action", control: AlphaControl, dispatch: Optional[Dispatch] = None
) -> Disposable:
    """
    Keep `control.background_alpha` at ENABLED_ALPHA while `action` is
    enabled and DISABLED_ALPHA otherwise, starting with the current state.
    """
    dispatch = dispatch or _inline

    def on_enabled(is_enabled: bool) -> None:
        alpha = ENABLED_ALPHA if is_enabled else DISABLED_ALPHA

        def apply() -> None:
            control.background_alpha = alpha

        dispatch(apply)

    return action.is_enabled.producer.start_with_values(on_enabled)


__all__ = [
    "BusyIndicator",
    "AlphaControl",
    "bind_loading",
    "bind_disabled",
    "ENABLED_ALPHA",
    "DISABLED_ALPHA",
]
