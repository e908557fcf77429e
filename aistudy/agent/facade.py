#!/usr/bin/env python3
"""
AI Agent Facade
===============

Validates inputs, prepends the system instruction and delegates to the
transport and the Response Parser. Every operation comes in two flavours:
the plain one raises, the ``*_safe`` one returns a Result and never raises.
"""

import logging
from typing import Awaitable, Callable, List, Optional, Sequence

from aistudy.agent.parser import ResponseParser
from aistudy.agent.prompts import (
    DEFAULT_SYSTEM_PROMPT,
    SYNTHESIS_PROMPT,
    SYNTHESIS_TEMPLATE,
)
from aistudy.agent.structs import (
    Persona,
    PersonaReply,
    Result,
    Role,
    StructuredReply,
    TemperatureReply,
    Turn,
)
from aistudy.config.keys import ApiKeyProvider
from aistudy.config.settings import ChatSettings
from aistudy.exceptions import (
    AgentError,
    AiStudyError,
    InvalidArgumentError,
    NotConfiguredError,
)
from aistudy.providers.base import ChatTransport

MIN_TEMPERATURE = 0.0
MAX_TEMPERATURE = 2.0

TemperatureReplyHandler = Callable[[TemperatureReply], Awaitable[None]]
PersonaReplyHandler = Callable[[PersonaReply], Awaitable[None]]


class AiAgent:
    """
    Single entry point for talking to the chat-completion endpoint.
    Holds no conversation state: history is passed in by the caller.
    """

    def __init__(
        self,
        settings: ChatSettings,
        transport: ChatTransport,
        key_provider: ApiKeyProvider,
        parser: Optional[ResponseParser] = None,
        system_prompt: str = DEFAULT_SYSTEM_PROMPT,
    ):
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.transport = transport
        self.key_provider = key_provider
        self.parser = parser or ResponseParser()
        self.system_prompt = system_prompt

    def is_configured(self) -> bool:
        return self.key_provider.is_configured()

    # --- Single turn ---

    async def ask(self, question: str) -> StructuredReply:
        """Send one question with no history."""
        if not question or not question.strip():
            raise InvalidArgumentError("Question must not be blank", argument="question")
        return await self._request([Turn.user(question)], self.system_prompt)

    async def ask_safe(self, question: str) -> Result[StructuredReply]:
        return await self._run_safe(self.ask(question))

    # --- Multi turn ---

    async def ask_with_history(self, turns: Sequence[Turn]) -> StructuredReply:
        """Send the conversation with the default system prompt prepended."""
        self._validate_turns(turns)
        return await self._request(turns, self.system_prompt)

    async def ask_with_history_safe(self, turns: Sequence[Turn]) -> Result[StructuredReply]:
        return await self._run_safe(self.ask_with_history(turns))

    async def ask_with_temperature(
        self, turns: Sequence[Turn], temperature: float
    ) -> StructuredReply:
        """Same as ask_with_history with a per-call sampling temperature."""
        self._validate_turns(turns)
        self._validate_temperature(temperature)
        return await self._request(turns, self.system_prompt, temperature=temperature)

    async def ask_with_temperature_safe(
        self, turns: Sequence[Turn], temperature: float
    ) -> Result[StructuredReply]:
        return await self._run_safe(self.ask_with_temperature(turns, temperature))

    async def ask_at_temperatures(
        self,
        turns: Sequence[Turn],
        temperatures: Sequence[float],
        on_reply: Optional[TemperatureReplyHandler] = None,
    ) -> List[TemperatureReply]:
        """
        Sequential fan-out: one completion per temperature, in order.
        A failure is recorded for its temperature and does not stop the rest.
        ``on_reply`` is awaited with each reply as soon as it arrives.
        """
        self._validate_turns(turns)
        if not temperatures:
            raise InvalidArgumentError(
                "At least one temperature is required", argument="temperatures"
            )
        for temperature in temperatures:
            self._validate_temperature(temperature)

        replies = []
        for temperature in temperatures:
            result = await self.ask_with_temperature_safe(turns, temperature)
            if not result.ok:
                self.logger.warning(
                    "Completion at temperature %.1f failed: %s", temperature, result.error
                )
            reply = TemperatureReply(temperature=temperature, result=result)
            replies.append(reply)
            if on_reply is not None:
                await on_reply(reply)
        return replies

    async def ask_with_custom_prompt(
        self, turns: Sequence[Turn], prompt: str
    ) -> StructuredReply:
        """Send the conversation with ``prompt`` instead of the default system prompt."""
        self._validate_turns(turns)
        if not prompt or not prompt.strip():
            raise InvalidArgumentError("System prompt must not be blank", argument="prompt")
        return await self._request(turns, prompt)

    async def ask_with_custom_prompt_safe(
        self, turns: Sequence[Turn], prompt: str
    ) -> Result[StructuredReply]:
        return await self._run_safe(self.ask_with_custom_prompt(turns, prompt))

    # --- Personas ---

    async def consult_multiple(
        self,
        turns: Sequence[Turn],
        personas: Sequence[Persona],
        on_reply: Optional[PersonaReplyHandler] = None,
    ) -> List[PersonaReply]:
        """
        Ask every persona in order. Failures are collected next to the
        persona that produced them; a later failure never discards an
        earlier success.
        """
        self._validate_turns(turns)
        if not personas:
            raise InvalidArgumentError("At least one persona is required", argument="personas")

        replies = []
        for persona in personas:
            self.logger.debug("Consulting persona %s", persona.name)
            result = await self.ask_with_custom_prompt_safe(turns, persona.prompt)
            if not result.ok:
                self.logger.warning("Persona %s failed: %s", persona.name, result.error)
            reply = PersonaReply(persona=persona, result=result)
            replies.append(reply)
            if on_reply is not None:
                await on_reply(reply)
        return replies

    async def synthesize(
        self, turns: Sequence[Turn], persona_replies: Sequence[PersonaReply]
    ) -> StructuredReply:
        """
        Build one consolidated answer from the latest user question and a
        digest of the successful persona replies.
        """
        question = self._latest_user_question(turns)
        if question is None:
            raise InvalidArgumentError(
                "Cannot synthesize without a prior user question", argument="turns"
            )

        digest = self._build_digest(persona_replies)
        if not digest:
            raise InvalidArgumentError(
                "Cannot synthesize from an empty persona digest", argument="persona_replies"
            )

        request = [Turn.user(SYNTHESIS_TEMPLATE.format(question=question, digest=digest))]
        return await self._request(request, SYNTHESIS_PROMPT)

    async def synthesize_safe(
        self, turns: Sequence[Turn], persona_replies: Sequence[PersonaReply]
    ) -> Result[StructuredReply]:
        return await self._run_safe(self.synthesize(turns, persona_replies))

    # --- Compaction ---

    async def summarize(self, turns: Sequence[Turn]) -> str:
        """Summarization goes through the same path as a normal turn."""
        reply = await self.ask_with_history(turns)
        return reply.agent_message

    async def close(self) -> None:
        await self.transport.close()

    # --- Internals ---

    async def _request(
        self,
        turns: Sequence[Turn],
        system_prompt: str,
        temperature: Optional[float] = None,
    ) -> StructuredReply:
        if not self.is_configured():
            raise NotConfiguredError()

        messages = [Turn.system(system_prompt).to_dict()]
        messages.extend(turn.to_dict() for turn in turns)

        completion = await self.transport.complete(messages, temperature=temperature)
        return self.parser.parse(completion.first_content(), usage=completion.usage)

    async def _run_safe(self, call: Awaitable[StructuredReply]) -> Result[StructuredReply]:
        try:
            return Result.success(await call)
        except AiStudyError as e:
            return Result.failure(e)
        except Exception as e:
            self.logger.exception("Unexpected error in agent call")
            return Result.failure(AgentError(f"Unexpected error: {e}", original_error=e))

    @staticmethod
    def _validate_turns(turns: Sequence[Turn]) -> None:
        if not turns:
            raise InvalidArgumentError("Message history must not be empty", argument="turns")

    @staticmethod
    def _validate_temperature(temperature: float) -> None:
        if not MIN_TEMPERATURE <= temperature <= MAX_TEMPERATURE:
            raise InvalidArgumentError(
                f"Temperature must be between {MIN_TEMPERATURE} and {MAX_TEMPERATURE}, "
                f"got {temperature}",
                argument="temperature",
            )

    @staticmethod
    def _latest_user_question(turns: Sequence[Turn]) -> Optional[str]:
        for turn in reversed(turns):
            if turn.role is Role.USER:
                return turn.content
        return None

    @staticmethod
    def _build_digest(persona_replies: Sequence[PersonaReply]) -> str:
        sections = [
            f"[{reply.persona.name}]\n{reply.result.value.agent_message}"
            for reply in persona_replies
            if reply.result.ok
        ]
        return "\n\n".join(sections)
