from .signal import ObservableProperty, ReadOnlyProperty, Signal
from .base import BaseViewModel

__all__ = [
    "BaseViewModel",
    "ObservableProperty",
    "ReadOnlyProperty",
    "Signal",
]
