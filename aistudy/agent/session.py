#!/usr/bin/env python3
"""
Chat Session
============

Glue between a front-end and the chat core. Drives the Context Manager
through each flow (plain send, temperature comparison, persona
consultation), keeps the display transcript and publishes an immutable
ChatUiState on every change.
"""

import logging
from typing import List, Optional, Sequence

from aistudy.agent.context import ConversationContextManager
from aistudy.agent.facade import AiAgent
from aistudy.agent.parser import ResponseParser
from aistudy.agent.prompts import (
    CANONICAL_TEMPERATURE,
    DEFAULT_PERSONAS,
    DEFAULT_TEMPERATURES,
)
from aistudy.agent.structs import (
    Persona,
    PersonaReply,
    Result,
    Role,
    StructuredReply,
    TemperatureReply,
    Turn,
    error_summary,
)
from aistudy.exceptions import (
    AiStudyError,
    InvalidArgumentError,
    PersonaConsultationError,
)
from aistudy.protocol.bus import EventBus, EventHandler
from aistudy.protocol.events import EventTypes
from aistudy.protocol.objects import ChatUiState, DisplayMessage, UserRequest

SYNTHESIS_LABEL = "Synthesis"


class ChatSession:
    """
    Owns one conversation. Every public flow returns a Result and never
    raises for expected failures; the failure is also reflected in the
    published state.
    """

    def __init__(
        self,
        agent: AiAgent,
        manager: ConversationContextManager,
        event_bus: EventBus,
        parser: Optional[ResponseParser] = None,
        personas: Sequence[Persona] = DEFAULT_PERSONAS,
    ):
        self.logger = logging.getLogger(__name__)
        self._agent = agent
        self._manager = manager
        self._bus = event_bus
        self._parser = parser or ResponseParser()
        self._personas = tuple(personas)

        self._messages: List[DisplayMessage] = []
        self._is_loading = False
        self._error: Optional[str] = None
        self._turn_start = 0

    @property
    def state(self) -> ChatUiState:
        return ChatUiState(
            messages=tuple(self._messages),
            is_loading=self._is_loading,
            error=self._error,
            phase=self._manager.phase,
        )

    @property
    def manager(self) -> ConversationContextManager:
        return self._manager

    async def subscribe(self, handler: EventHandler) -> None:
        """Receive a ChatUiState after every change."""
        await self._bus.subscribe(EventTypes.STATE_CHANGED, handler)

    async def unsubscribe(self, handler: EventHandler) -> None:
        await self._bus.unsubscribe(EventTypes.STATE_CHANGED, handler)

    async def start(self) -> None:
        """Rehydrate the conversation from the message log."""
        await self._bus.subscribe(EventTypes.SUMMARY_UPDATED, self._on_summary_finished)
        await self._bus.subscribe(EventTypes.SUMMARY_FAILED, self._on_summary_finished)

        self._is_loading = True
        await self._publish()
        try:
            logged = await self._manager.load()
        except AiStudyError as e:
            await self._bus.emit(
                EventTypes.ERROR, {"message": f"Could not load chat history: {e.message}"}
            )
            self._error = e.user_hint
            logged = []
        finally:
            self._is_loading = False

        self._messages = [
            self._to_display(turn) for turn in logged if turn.role is not Role.SYSTEM
        ]
        await self._publish()

    # --- Flows ---

    async def send(self, text: str) -> Result[StructuredReply]:
        """One turn with the default instruction."""
        opened = await self._open_turn(text, mode="chat")
        if not opened.ok:
            return Result.failure(opened.error)

        result = await self._agent.ask_with_history_safe(self._manager.compose_outbound())
        return await self._close_turn(result)

    async def send_at_temperatures(
        self,
        text: str,
        temperatures: Sequence[float] = DEFAULT_TEMPERATURES,
        canonical: float = CANONICAL_TEMPERATURE,
    ) -> Result[List[TemperatureReply]]:
        """
        Ask the same question at several temperatures. Every reply is shown,
        only the canonical one is kept in history.
        """
        if canonical not in temperatures:
            return await self._reject(
                InvalidArgumentError(
                    f"Canonical temperature {canonical} is not among {list(temperatures)}",
                    argument="canonical",
                )
            )

        opened = await self._open_turn(text, mode="temperatures")
        if not opened.ok:
            return Result.failure(opened.error)

        try:
            replies = await self._agent.ask_at_temperatures(
                self._manager.compose_outbound(),
                temperatures,
                on_reply=self._show_temperature_reply,
            )
        except AiStudyError as e:
            await self._close_turn(Result.failure(e))
            return Result.failure(e)

        canonical_reply = next(r for r in replies if r.temperature == canonical)
        committed = await self._close_turn(canonical_reply.result, display=False)
        if not committed.ok:
            return Result.failure(committed.error)
        return Result.success(replies)

    async def consult(
        self, text: str, personas: Optional[Sequence[Persona]] = None
    ) -> Result[StructuredReply]:
        """
        Ask every persona, then synthesize one answer from those that
        replied. The synthesized answer is what enters history.
        """
        personas = tuple(personas) if personas is not None else self._personas
        if not personas:
            return await self._reject(
                InvalidArgumentError("At least one persona is required", argument="personas")
            )

        opened = await self._open_turn(text, mode="consult")
        if not opened.ok:
            return Result.failure(opened.error)

        outbound = self._manager.compose_outbound()
        try:
            replies = await self._agent.consult_multiple(
                outbound, personas, on_reply=self._show_persona_reply
            )
        except AiStudyError as e:
            return await self._close_turn(Result.failure(e))

        failures = [r.result.error for r in replies if not r.result.ok]
        if len(failures) == len(replies):
            self.logger.warning("All %d personas failed, skipping synthesis", len(replies))
            aggregate = PersonaConsultationError(
                f"All {len(replies)} personas failed", errors=failures
            )
            return await self._close_turn(Result.failure(aggregate))

        await self._bus.emit(
            EventTypes.INFO,
            {"message": f"{len(replies) - len(failures)} of {len(replies)} personas replied"},
        )
        synthesis = await self._agent.synthesize_safe(outbound, replies)
        return await self._close_turn(synthesis, label=SYNTHESIS_LABEL)

    async def clear(self) -> Result[None]:
        """Wipe history, the message log and the transcript."""
        try:
            await self._manager.clear()
        except AiStudyError as e:
            return await self._reject(e)
        self._messages = []
        self._error = None
        await self._publish()
        return Result.success(None)

    async def wait_until_idle(self) -> None:
        """Returns once no reply or summary is pending."""
        await self._manager.wait_for_compaction()

    async def close(self) -> None:
        await self.wait_until_idle()
        await self._agent.close()

    # --- Turn plumbing ---

    async def _open_turn(self, text: str, mode: str) -> Result[Turn]:
        try:
            user_turn = self._manager.append_user_turn(text)
        except AiStudyError as e:
            return await self._reject(e)

        await self._bus.emit(
            EventTypes.USER_INPUT_SUBMITTED, UserRequest(text=user_turn.content, mode=mode)
        )
        self._turn_start = len(self._messages)
        self._messages.append(self._to_display(user_turn))
        self._is_loading = True
        self._error = None
        await self._publish()
        return Result.success(user_turn)

    async def _close_turn(
        self,
        result: Result[StructuredReply],
        label: Optional[str] = None,
        display: bool = True,
    ) -> Result[StructuredReply]:
        """Commit or roll back the pending user turn according to ``result``."""
        if result.ok:
            try:
                await self._manager.on_success(result.value.agent_message)
            except AiStudyError as e:
                await self._bus.emit(
                    EventTypes.ERROR, {"message": f"Could not store the reply: {e.message}"}
                )
                result = Result.failure(e)

        if result.ok:
            if display:
                self._messages.append(
                    DisplayMessage(text=result.value.agent_message, is_from_user=False, label=label)
                )
            await self._bus.emit(
                EventTypes.TURN_COMPLETED,
                {"text": result.value.agent_message, "usage": result.value.usage},
            )
        else:
            self._manager.on_failure()
            del self._messages[self._turn_start:]
            self._error = result.error.user_hint
            await self._bus.emit(EventTypes.TURN_FAILED, error_summary(result.error))

        self._is_loading = False
        await self._publish()
        return result

    async def _reject(self, error: AiStudyError) -> Result:
        """Report a failure that never touched history."""
        self._error = error.user_hint
        await self._bus.emit(EventTypes.WARNING, {"message": error.message})
        await self._publish()
        return Result.failure(error)

    async def _show_temperature_reply(self, reply: TemperatureReply) -> None:
        self._messages.append(
            self._variant_message(f"T={reply.temperature:.1f}", reply.result)
        )
        await self._bus.emit(EventTypes.TEMPERATURE_REPLY, reply)
        await self._publish()

    async def _show_persona_reply(self, reply: PersonaReply) -> None:
        self._messages.append(self._variant_message(reply.persona.name, reply.result))
        await self._bus.emit(EventTypes.PERSONA_REPLY, reply)
        await self._publish()

    @staticmethod
    def _variant_message(label: str, result: Result[StructuredReply]) -> DisplayMessage:
        if result.ok:
            text = result.value.agent_message
        else:
            text = f"Error: {result.error.message}"
        return DisplayMessage(text=text, is_from_user=False, label=label)

    def _to_display(self, turn: Turn) -> DisplayMessage:
        if turn.role is Role.USER:
            return DisplayMessage(text=turn.content, is_from_user=True, timestamp=turn.timestamp)
        return DisplayMessage(
            text=self._parser.decode_turn_content(turn.content),
            is_from_user=False,
            timestamp=turn.timestamp,
        )

    async def _on_summary_finished(self, data) -> None:
        await self._publish()

    async def _publish(self) -> None:
        await self._bus.emit(EventTypes.STATE_CHANGED, self.state)
