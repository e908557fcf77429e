"""Shared fixtures: a scripted transport and a wired-up agent."""

import json
from typing import Dict, List, Optional, Union

import pytest

from aistudy.agent.facade import AiAgent
from aistudy.config.keys import StaticApiKeyProvider
from aistudy.config.settings import ChatSettings
from aistudy.providers.base import ChatTransport
from aistudy.providers.models import ApiMessage, ChatCompletion, Choice, Usage


def reply_json(text: str) -> str:
    """What a well-behaved model sends back."""
    return json.dumps({"agentMessage": text})


class FakeTransport(ChatTransport):
    """
    Plays back a script, one entry per request. A string becomes the
    completion content; an exception is raised instead.
    """

    def __init__(self, script: Optional[List[Union[str, Exception]]] = None):
        self.script = list(script or [])
        self.calls: List[Dict] = []
        self.closed = False

    def push(self, *entries: Union[str, Exception]) -> None:
        self.script.extend(entries)

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatCompletion:
        self.calls.append({"messages": messages, "temperature": temperature})
        if not self.script:
            raise AssertionError("FakeTransport script exhausted")
        entry = self.script.pop(0)
        if isinstance(entry, Exception):
            raise entry
        return ChatCompletion(
            id=f"call-{len(self.calls)}",
            choices=[Choice(message=ApiMessage(role="assistant", content=entry))],
            usage=Usage(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )

    async def close(self) -> None:
        self.closed = True


@pytest.fixture
def settings(tmp_path):
    return ChatSettings(
        _env_file=None,
        deepseek_api_key="sk-test",
        database_path=tmp_path / "chat.db",
    )


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def agent(settings, transport):
    return AiAgent(settings, transport, StaticApiKeyProvider("sk-test"))
