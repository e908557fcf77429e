#!/usr/bin/env python3
"""
Application Starter for AI Study Chat
=====================================

Wires settings, transport, agent, message log, context manager and chat
session together, then hands control to the CLI.
"""

import asyncio
import sys
from typing import Optional

from aistudy.agent.context import ConversationContextManager
from aistudy.agent.facade import AiAgent
from aistudy.agent.parser import ResponseParser
from aistudy.agent.session import ChatSession
from aistudy.config import ChatSettings, create_key_provider, load_settings
from aistudy.exceptions import AiStudyError, ConfigError
from aistudy.protocol.bus import EventBus
from aistudy.providers.factory import create_transport
from aistudy.storage import SqliteMessageLog
from aistudy.ui.cli import ChatCLI
from aistudy.utils.logger import EventLogger, setup_logging


class Application:
    """Main application container."""

    def __init__(self, settings: ChatSettings):
        self.settings = settings
        self.bus = EventBus()
        self.session: Optional[ChatSession] = None
        self.cli: Optional[ChatCLI] = None

    def build(self) -> ChatSession:
        parser = ResponseParser()
        key_provider = create_key_provider(self.settings)
        transport = create_transport(self.settings, key_provider)
        agent = AiAgent(self.settings, transport, key_provider, parser=parser)
        manager = ConversationContextManager(
            summarizer=agent.summarize,
            threshold=self.settings.summary_threshold,
            message_log=SqliteMessageLog(self.settings.database_path),
            event_bus=self.bus,
            parser=parser,
        )
        self.session = ChatSession(agent, manager, self.bus, parser=parser)
        return self.session

    async def start(self) -> None:
        session = self.build()
        await EventLogger(self.bus).start()

        self.cli = ChatCLI(session)
        await self.cli.start()
        await session.start()
        try:
            await self.cli.run()
        finally:
            await self.stop()

    async def stop(self) -> None:
        """Let a pending summary finish, then release the HTTP session."""
        if self.cli is not None:
            await self.cli.stop()
            self.cli = None
        if self.session is not None:
            await self.session.close()
            self.session = None


async def run() -> None:
    settings = load_settings()
    setup_logging(settings)
    app = Application(settings)
    await app.start()


def main() -> None:
    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        print("\n[AI Study Chat] Interrupted by user")
        sys.exit(0)
    except ConfigError as e:
        print(f"Configuration error: {e.message}", file=sys.stderr)
        sys.exit(2)
    except AiStudyError as e:
        print(f"\n[AI Study Chat] Fatal error: {e.message}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
