import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

from aistudy.exceptions.base import AiStudyError, ErrorKind
from aistudy.providers.models import Usage

T = TypeVar("T")


# --- 1. Conversation ---


class Role(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class ConversationPhase(str, Enum):
    """Per-conversation state machine."""

    IDLE = "idle"
    AWAITING_REPLY = "awaiting_reply"
    AWAITING_SUMMARY = "awaiting_summary"


@dataclass(frozen=True)
class Turn:
    """
    One role-tagged message. Immutable once created.

    Attributes:
        role: user, assistant or system.
        content: The text. Assistant turns hold the canonical reply JSON.
        timestamp: Creation time; informational, not part of equality.
    """

    role: Role
    content: str
    timestamp: float = field(default_factory=time.time, compare=False)

    def to_dict(self) -> Dict[str, str]:
        """Wire form for the chat-completion API."""
        return {"role": self.role.value, "content": self.content}

    @classmethod
    def user(cls, content: str) -> "Turn":
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> "Turn":
        return cls(Role.ASSISTANT, content)

    @classmethod
    def system(cls, content: str) -> "Turn":
        return cls(Role.SYSTEM, content)


# --- 2. Structured Reply ---


class StructuredReply(BaseModel):
    """The model's output decoded against the fixed single-field schema."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    agent_message: str = Field(alias="agentMessage")
    usage: Optional[Usage] = Field(default=None, exclude=True)

    def to_json(self) -> str:
        """Canonical serialization stored in assistant turns."""
        return self.model_dump_json(by_alias=True)


# --- 3. Results ---


@dataclass(frozen=True)
class Result(Generic[T]):
    """
    Tagged outcome of a safe call: exactly one of value / error is set.
    """

    value: Optional[T] = None
    error: Optional[AiStudyError] = None

    @classmethod
    def success(cls, value: T) -> "Result[T]":
        return cls(value=value)

    @classmethod
    def failure(cls, error: AiStudyError) -> "Result[T]":
        return cls(error=error)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def kind(self) -> Optional[ErrorKind]:
        return self.error.kind if self.error is not None else None

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value


# --- 4. Fan-out ---


@dataclass(frozen=True)
class Persona:
    """A named system-prompt variant."""

    name: str
    prompt: str


@dataclass(frozen=True)
class PersonaReply:
    persona: Persona
    result: Result[StructuredReply]


@dataclass(frozen=True)
class TemperatureReply:
    temperature: float
    result: Result[StructuredReply]


def error_summary(error: Optional[AiStudyError]) -> Dict[str, Any]:
    """Flatten an error for events and logs."""
    if error is None:
        return {}
    return error.to_dict()
