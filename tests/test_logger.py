"""Tests for logging setup and the event-to-log bridge."""

import logging

import pytest

from aistudy.config.settings import ChatSettings
from aistudy.protocol.bus import EventBus
from aistudy.protocol.events import EventTypes
from aistudy.protocol.objects import UserRequest
from aistudy.providers.models import Usage
from aistudy.utils.logger import EventLogger, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield root
    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()
    for handler in handlers:
        root.addHandler(handler)
    root.setLevel(level)


def test_setup_logging_writes_to_file(tmp_path, restore_root_logger):
    log_file = tmp_path / "chat.log"
    setup_logging(ChatSettings(_env_file=None, log_level="debug", log_file=log_file))

    logging.getLogger("aistudy.test").debug("hello %s", "file")
    for handler in restore_root_logger.handlers:
        handler.flush()

    assert restore_root_logger.level == logging.DEBUG
    assert "hello file" in log_file.read_text(encoding="utf-8")


class TestEventLogger:
    @pytest.mark.asyncio
    async def test_logs_conversation_events(self, caplog):
        bus = EventBus()
        await EventLogger(bus).start()

        with caplog.at_level(logging.DEBUG, logger="aistudy.events"):
            await bus.emit(EventTypes.USER_INPUT_SUBMITTED, UserRequest(text="hi", mode="chat"))
            await bus.emit(
                EventTypes.TURN_COMPLETED,
                {"text": "hello", "usage": Usage(total_tokens=12)},
            )
            await bus.emit(EventTypes.TURN_FAILED, {"kind": "timeout", "message": "slow"})
            await bus.emit(EventTypes.SUMMARY_UPDATED, {"summary": "gist", "turns": 6})

        text = caplog.text
        assert "USER (chat): 2 chars" in text
        assert "12 tokens" in text
        assert "TURN FAILED [timeout]: slow" in text
        assert "6 turns folded" in text

    @pytest.mark.asyncio
    async def test_reply_text_stays_out_of_info_logs(self, caplog):
        bus = EventBus()
        await EventLogger(bus).start()

        with caplog.at_level(logging.INFO, logger="aistudy.events"):
            await bus.emit(EventTypes.TURN_COMPLETED, {"text": "private answer", "usage": None})

        assert "private answer" not in caplog.text

    @pytest.mark.asyncio
    async def test_operational_events_keep_their_level(self, caplog):
        bus = EventBus()
        await EventLogger(bus).start()

        with caplog.at_level(logging.INFO, logger="aistudy.events"):
            await bus.emit(EventTypes.INFO, {"message": "2 of 3 personas replied"})
            await bus.emit(EventTypes.ERROR, {"message": "Could not store the reply: disk full"})

        levels = {record.getMessage(): record.levelno for record in caplog.records}
        assert levels["2 of 3 personas replied"] == logging.INFO
        assert levels["Could not store the reply: disk full"] == logging.ERROR
