from .events import EventTypes
from .bus import EventBus
from .objects import ChatUiState, DisplayMessage, UserRequest

__all__ = ["EventTypes", "EventBus", "ChatUiState", "DisplayMessage", "UserRequest"]
