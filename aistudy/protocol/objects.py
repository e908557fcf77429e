import time
from dataclasses import dataclass, field
from typing import Optional, Tuple

from aistudy.agent.structs import ConversationPhase


@dataclass(frozen=True)
class UserRequest:
    """
    Payload for USER_INPUT_SUBMITTED.
    """

    text: str
    mode: str  # "chat", "temperatures", "consult"
    timestamp: float = field(default_factory=time.time)


@dataclass(frozen=True)
class DisplayMessage:
    """One rendered chat bubble. Labels mark temperature and persona variants."""

    text: str
    is_from_user: bool
    timestamp: float = field(default_factory=time.time)
    label: Optional[str] = None


@dataclass(frozen=True)
class ChatUiState:
    """
    Payload for STATE_CHANGED: an immutable snapshot for the front-end.
    """

    messages: Tuple[DisplayMessage, ...] = ()
    is_loading: bool = False
    error: Optional[str] = None
    phase: ConversationPhase = ConversationPhase.IDLE

    @property
    def input_enabled(self) -> bool:
        return not self.is_loading and self.phase is ConversationPhase.IDLE
