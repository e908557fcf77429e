from .manager import ConversationContextManager, Summarizer
from .store import ConversationState

__all__ = [
    "ConversationContextManager",
    "ConversationState",
    "Summarizer",
]
