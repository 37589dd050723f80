"""
View-state binding for the presentation layer.

The presentation layer renders the observable values exposed here and calls
the intent methods; it never talks to the store directly.
"""

from .state import StateValue
from .view_model import DinnerViewModel

__all__ = ["DinnerViewModel", "StateValue"]
