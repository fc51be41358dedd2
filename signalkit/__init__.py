"""
signalkit - Signals, Producers and Result Adaptation

Hot signals and cold signal producers delivering value, failed, completed and
interrupted events, plus combinators that turn a stream's failures into
silent completion or into ordinary `Ok`/`Err` values.
"""

__version__ = "0.1.0"

# Event algebra and failures-as-values
from .event import Event, EventKind
from .outcome import Err, Ok, Outcome, OutcomeLike, as_outcome

# Resource management
from .disposable import CompositeDisposable, Disposable, SerialDisposable

# Streams
from .observer import Observer
from .flatten import FlattenStrategy
from .signal import HandlerError, Signal
from .producer import SignalProducer
from .operations import ResultOperationsMixin

# Observable values and actions
from .property import MutableProperty, Property
from .action import Action, ActionDisabledError, ActionError, ActionProducerFailed

__all__ = [
    # Events
    "Event",
    "EventKind",
    # Outcomes
    "Outcome",
    "Ok",
    "Err",
    "OutcomeLike",
    "as_outcome",
    # Disposables
    "Disposable",
    "CompositeDisposable",
    "SerialDisposable",
    # Streams
    "Observer",
    "Signal",
    "SignalProducer",
    "FlattenStrategy",
    "ResultOperationsMixin",
    # Properties and actions
    "Property",
    "MutableProperty",
    "Action",
    # Exceptions
    "HandlerError",
    "ActionError",
    "ActionDisabledError",
    "ActionProducerFailed",
]
