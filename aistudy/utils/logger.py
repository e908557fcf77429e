import logging
import sys
from typing import Any, Dict

from aistudy.config.settings import ChatSettings
from aistudy.protocol.bus import EventBus
from aistudy.protocol.events import EventTypes

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def setup_logging(settings: ChatSettings) -> None:
    """
    Configure the root logger once at start-up.

    Stderr gets everything at ``log_level``; ``log_file``, when set, gets the
    same records so a session can be inspected after the terminal is gone.
    """
    root = logging.getLogger()
    root.setLevel(settings.log_level)
    for handler in list(root.handlers):
        root.removeHandler(handler)

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(logging.Formatter(LOG_FORMAT))
    root.addHandler(console)

    if settings.log_file is not None:
        file_handler = logging.FileHandler(settings.log_file, encoding="utf-8")
        file_handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(file_handler)

    # aiohttp access chatter is noise at INFO.
    logging.getLogger("aiohttp").setLevel(logging.WARNING)


class EventLogger:
    """
    Mirrors conversation events into the log.

    Reply text is logged at DEBUG only; INFO lines carry sizes and kinds.
    """

    def __init__(self, bus: EventBus):
        self._bus = bus
        self._logger = logging.getLogger("aistudy.events")

    async def start(self):
        """Subscribe to the bus."""
        # Operational events
        await self._bus.subscribe(EventTypes.INFO, self._log_info)
        await self._bus.subscribe(EventTypes.WARNING, self._log_warning)
        await self._bus.subscribe(EventTypes.ERROR, self._log_error)

        # Conversation events
        await self._bus.subscribe(EventTypes.USER_INPUT_SUBMITTED, self._log_user_input)
        await self._bus.subscribe(EventTypes.TURN_COMPLETED, self._log_turn_completed)
        await self._bus.subscribe(EventTypes.TURN_FAILED, self._log_turn_failed)

        # Context events
        await self._bus.subscribe(EventTypes.SUMMARY_UPDATED, self._log_summary)
        await self._bus.subscribe(EventTypes.SUMMARY_FAILED, self._log_summary_failed)
        await self._bus.subscribe(EventTypes.HISTORY_CLEARED, self._log_context_event)
        await self._bus.subscribe(EventTypes.HISTORY_LOADED, self._log_context_event)

    # --- Handlers ---

    async def _log_info(self, data: Dict[str, Any]):
        self._logger.info("%s", data.get("message", data))

    async def _log_warning(self, data: Dict[str, Any]):
        self._logger.warning("%s", data.get("message", data))

    async def _log_error(self, data: Dict[str, Any]):
        self._logger.error("%s", data.get("message", data))

    async def _log_user_input(self, data: Any):
        text = getattr(data, "text", str(data))
        mode = getattr(data, "mode", "chat")
        self._logger.info("USER (%s): %d chars", mode, len(text))
        self._logger.debug("USER: %s", text)

    async def _log_turn_completed(self, data: Dict[str, Any]):
        usage = data.get("usage")
        if usage is not None:
            self._logger.info("MODEL: reply received (%d tokens)", usage.total_tokens)
        else:
            self._logger.info("MODEL: reply received")
        self._logger.debug("MODEL: %s", data.get("text", ""))

    async def _log_turn_failed(self, data: Dict[str, Any]):
        self._logger.warning(
            "TURN FAILED [%s]: %s", data.get("kind", "unknown"), data.get("message", "")
        )

    async def _log_summary(self, data: Dict[str, Any]):
        self._logger.info("CONTEXT: %s turns folded into the summary", data.get("turns"))
        self._logger.debug("SUMMARY: %s", data.get("summary", ""))

    async def _log_summary_failed(self, data: Dict[str, Any]):
        self._logger.warning("CONTEXT: summary failed, history kept: %s", data.get("message"))

    async def _log_context_event(self, data: Any):
        self._logger.info("CONTEXT: %s", data)
