"""
signalkit Bindings - Adapters to UI and Media Toolkits
"""

from .media import (
    AsynchronousKeyValueLoading,
    KeyValueStatus,
    Seekable,
    load_values,
    seek,
)
from .ui import (
    DISABLED_ALPHA,
    ENABLED_ALPHA,
    AlphaControl,
    BusyIndicator,
    bind_disabled,
    bind_loading,
)

__all__ = [
    "AlphaControl",
    "AsynchronousKeyValueLoading",
    "BusyIndicator",
    "DISABLED_ALPHA",
    "ENABLED_ALPHA",
    "KeyValueStatus",
    "Seekable",
    "bind_disabled",
    "bind_loading",
    "load_values",
    "seek",
]
