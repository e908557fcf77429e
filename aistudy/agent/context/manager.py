#!/usr/bin/env python3
"""
Conversation Context Manager
============================
Owns the rolling message history, decides what to transmit on each turn,
folds old turns into a summary every ``threshold`` exchanges and reconciles
the history after a reply succeeds or fails.

State machine (per conversation):

    Idle --append_user_turn--> AwaitingReply
    AwaitingReply --on_success / on_failure--> Idle
    Idle --threshold crossed--> AwaitingSummary
    AwaitingSummary --summary ok / failed--> Idle
"""

import asyncio
import logging
from typing import Any, Awaitable, Callable, List, Optional, Sequence, Tuple

from aistudy.agent.parser import ResponseParser
from aistudy.agent.prompts import SUMMARY_INSTRUCTION, SUMMARY_PREFIX
from aistudy.agent.structs import ConversationPhase, Role, Turn
from aistudy.exceptions import (
    AiStudyError,
    ContextStateError,
    ConversationBusyError,
    ErrorKind,
    InvalidArgumentError,
    MalformedResponseError,
)
from aistudy.protocol.bus import EventBus
from aistudy.protocol.events import EventTypes
from aistudy.storage.base import MessageLog

from .store import ConversationState

# Receives the full summarization request, returns the summary text.
Summarizer = Callable[[List[Turn]], Awaitable[str]]

DEFAULT_SUMMARY_THRESHOLD = 10


class ConversationContextManager:
    """
    Single writer of the ConversationState.
    The front-end only ever reads snapshots derived from it.
    """

    def __init__(
        self,
        summarizer: Summarizer,
        threshold: int = DEFAULT_SUMMARY_THRESHOLD,
        message_log: Optional[MessageLog] = None,
        event_bus: Optional[EventBus] = None,
        parser: Optional[ResponseParser] = None,
    ):
        if threshold < 1:
            raise InvalidArgumentError(
                f"Summary threshold must be at least 1, got {threshold}",
                argument="threshold",
            )
        self.logger = logging.getLogger(__name__)
        self._summarizer = summarizer
        self._threshold = threshold
        self._log = message_log
        self._bus = event_bus
        self._parser = parser or ResponseParser()

        self._state = ConversationState()
        self._phase = ConversationPhase.IDLE
        self._pending_user_turn: Optional[Turn] = None
        self._length_before_send = 0
        self._compaction_task: Optional[asyncio.Task] = None

    # --- Read-only view ---

    @property
    def phase(self) -> ConversationPhase:
        return self._phase

    @property
    def is_idle(self) -> bool:
        return self._phase is ConversationPhase.IDLE

    @property
    def turns(self) -> Tuple[Turn, ...]:
        return tuple(self._state.turns)

    @property
    def summary_turn(self) -> Optional[Turn]:
        return self._state.summary_turn

    @property
    def counter(self) -> int:
        return self._state.exchanges_since_summary

    @property
    def threshold(self) -> int:
        return self._threshold

    # --- Turn lifecycle ---

    def append_user_turn(self, text: str) -> Turn:
        """Record the user's message. No network call."""
        if not text or not text.strip():
            raise InvalidArgumentError("Message must not be blank", argument="text")
        self._require_idle("send a message")

        turn = Turn.user(text.strip())
        self._length_before_send = len(self._state.turns)
        self._state.turns.append(turn)
        self._pending_user_turn = turn
        self._phase = ConversationPhase.AWAITING_REPLY
        return turn

    def compose_outbound(self) -> List[Turn]:
        """
        The turns to transmit: live summary first, then the unsummarized
        turns in append order. Pure; the system instruction is added by the
        agent at send time.
        """
        return self._state.outbound()

    async def on_success(self, reply_text: str) -> Turn:
        """
        Commit the reply. Starts background compaction once the threshold
        is reached; the caller does not wait for it.

        Raises:
            ContextStateError: no user turn is awaiting a reply.
            StorageError: the log write failed; history is left untouched.
        """
        if self._phase is not ConversationPhase.AWAITING_REPLY or self._pending_user_turn is None:
            raise ContextStateError(
                "No user turn is awaiting a reply", phase=self._phase.value
            )

        assistant_turn = Turn.assistant(self._parser.serialize(reply_text))
        if self._log is not None:
            await self._log.insert_many([self._pending_user_turn, assistant_turn])

        self._state.turns.append(assistant_turn)
        self._state.exchanges_since_summary += 1
        self._pending_user_turn = None
        self._phase = ConversationPhase.IDLE

        if self._state.exchanges_since_summary >= self._threshold:
            self.logger.info(
                "Exchange %d reached summary threshold %d, compacting",
                self._state.exchanges_since_summary,
                self._threshold,
            )
            self._schedule_compaction()

        return assistant_turn

    def on_failure(self) -> None:
        """Roll back to the history as it was before the failed send."""
        if self._phase is not ConversationPhase.AWAITING_REPLY:
            raise ContextStateError(
                "No user turn is awaiting a reply", phase=self._phase.value
            )

        removed = len(self._state.turns) - self._length_before_send
        self._state.truncate(self._length_before_send)
        self._pending_user_turn = None
        self._phase = ConversationPhase.IDLE
        self.logger.debug("Rolled back %d turn(s) after a failed reply", removed)

    # --- Compaction ---

    async def compact(self) -> bool:
        """
        Fold the summary and all unsummarized turns into a new summary.

        Best-effort: on failure the old summary and turns are kept and the
        error is logged, never raised. Returns True when a new summary was
        installed.
        """
        if not self._state.turns:
            return False
        self._require_idle("compact the history")

        self._phase = ConversationPhase.AWAITING_SUMMARY
        try:
            return await self._compact()
        finally:
            self._phase = ConversationPhase.IDLE

    async def wait_for_compaction(self) -> None:
        """Wait for a background compaction started by on_success, if any."""
        task = self._compaction_task
        if task is not None and not task.done():
            await task

    def _schedule_compaction(self) -> None:
        self._phase = ConversationPhase.AWAITING_SUMMARY
        self._compaction_task = asyncio.create_task(self._run_compaction())

    async def _run_compaction(self) -> None:
        try:
            await self._compact()
        except Exception:
            self.logger.exception("Background compaction crashed")
        finally:
            self._phase = ConversationPhase.IDLE
            self._compaction_task = None

    async def _compact(self) -> bool:
        summarized_count = len(self._state.turns)
        if summarized_count == 0:
            return False

        request = self._state.outbound() + [Turn.user(SUMMARY_INSTRUCTION)]
        try:
            summary_text = (await self._summarizer(request)).strip()
            if not summary_text:
                raise MalformedResponseError("Summarizer returned an empty summary")
            summary_turn = Turn.system(SUMMARY_PREFIX + summary_text)
            if self._log is not None:
                await self._log.insert(summary_turn)
        except AiStudyError as e:
            self.logger.warning(
                "Summarization failed, keeping %d unsummarized turns: %s",
                summarized_count,
                e.message,
            )
            return await self._summary_failed(e.message, e.kind, summarized_count)
        except Exception as e:
            self.logger.exception(
                "Summarizer crashed, keeping %d unsummarized turns", summarized_count
            )
            return await self._summary_failed(str(e), ErrorKind.INTERNAL, summarized_count)

        self._state.replace_summary(summary_turn, summarized_count)
        self._phase = ConversationPhase.IDLE
        self.logger.info("Compacted %d turns into a summary", summarized_count)
        await self._emit(
            EventTypes.SUMMARY_UPDATED,
            {"summary": summary_text, "turns": summarized_count},
        )
        return True

    async def _summary_failed(self, message: str, kind: ErrorKind, count: int) -> bool:
        self._phase = ConversationPhase.IDLE
        await self._emit(
            EventTypes.SUMMARY_FAILED,
            {"message": message, "kind": kind.value, "turns": count},
        )
        return False

    # --- Session lifecycle ---

    async def load(self) -> List[Turn]:
        """
        Rehydrate from the message log.

        The last summary in the log becomes the live summary, the turns
        after it become the unsummarized history. Returns every logged turn.
        """
        self._require_idle("load history")
        if self._log is None:
            return []

        logged = await self._log.get_all()
        summary_index = self._find_last_summary(logged)

        self._state.reset()
        remaining: Sequence[Turn] = logged
        if summary_index is not None:
            self._state.summary_turn = logged[summary_index]
            remaining = logged[summary_index + 1:]

        self._state.turns = [t for t in remaining if t.role is not Role.SYSTEM]
        self._state.exchanges_since_summary = sum(
            1 for t in self._state.turns if t.role is Role.ASSISTANT
        )
        self.logger.info(
            "Loaded %d logged turns (%d unsummarized, summary=%s)",
            len(logged),
            len(self._state.turns),
            summary_index is not None,
        )
        await self._emit(EventTypes.HISTORY_LOADED, {"turns": len(logged)})
        return logged

    async def clear(self) -> None:
        """Reset to an empty conversation and wipe the log in the same step."""
        self._require_idle("clear the history")
        if self._log is not None:
            await self._log.delete_all()
        self._state.reset()
        self.logger.info("Conversation cleared")
        await self._emit(EventTypes.HISTORY_CLEARED, {})

    # --- Internals ---

    def _require_idle(self, action: str) -> None:
        if self._phase is not ConversationPhase.IDLE:
            raise ConversationBusyError(
                f"Cannot {action} while {self._phase.value}", phase=self._phase.value
            )

    @staticmethod
    def _find_last_summary(turns: Sequence[Turn]) -> Optional[int]:
        for index in range(len(turns) - 1, -1, -1):
            turn = turns[index]
            if turn.role is Role.SYSTEM and turn.content.startswith(SUMMARY_PREFIX):
                return index
        return None

    async def _emit(self, event_type: EventTypes, data: Any) -> None:
        if self._bus is not None:
            await self._bus.emit(event_type, data)
