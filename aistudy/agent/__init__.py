"""
Chat core: structured replies, the agent facade, the conversation context
manager and the chat session. Import the submodules directly; this package
only re-exports the plain data types.
"""

from .structs import (
    ConversationPhase,
    Persona,
    PersonaReply,
    Result,
    Role,
    StructuredReply,
    TemperatureReply,
    Turn,
)

__all__ = [
    "ConversationPhase",
    "Persona",
    "PersonaReply",
    "Result",
    "Role",
    "StructuredReply",
    "TemperatureReply",
    "Turn",
]
