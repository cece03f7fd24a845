from .debouncer import TypingState, TypingDebouncer
from .reconciler import Alignment, RenderedItem, ChatReconciler

__all__ = ["Alignment", "ChatReconciler", "RenderedItem", "TypingDebouncer", "TypingState"]
