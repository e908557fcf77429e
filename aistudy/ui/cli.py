"""CLI implementation using prompt_toolkit and rich for AI Study Chat."""

import logging
from typing import Optional

from prompt_toolkit import PromptSession
from prompt_toolkit.patch_stdout import patch_stdout
from rich.markdown import Markdown

from aistudy.agent.session import ChatSession
from aistudy.protocol.objects import ChatUiState, DisplayMessage

from .styles import console, create_reply_panel

logger = logging.getLogger("ChatCLI")

HELP_TEXT = """\
Type a message and press Enter to send it.
  /temps <text>    ask at temperatures 0.0, 0.7 and 1.0
  /consult <text>  ask every expert persona, then synthesize
  /clear           forget the conversation
  /quit            exit"""


class ChatCLI:
    """
    Line-oriented REPL.

    - Renders each new DisplayMessage from the published ChatUiState.
    - Blocks input until the session is idle again.
    """

    def __init__(self, session: ChatSession):
        self._chat = session
        self._running = False
        self._rendered = 0
        self._last_error: Optional[str] = None
        self._prompt = PromptSession(multiline=False)

    async def start(self) -> None:
        """Subscribe to state snapshots."""
        await self._chat.subscribe(self._handle_state_changed)
        logger.info("ChatCLI started and listening")

    async def run(self) -> None:
        """Main REPL loop."""
        self._running = True
        console.print(create_reply_panel(HELP_TEXT, title="AI Study Chat", border_style="dim"))

        while self._running:
            # Input stays closed while a reply or summary is pending
            await self._chat.wait_until_idle()

            try:
                with patch_stdout():
                    user_text = await self._prompt.prompt_async("> ")
            except (EOFError, KeyboardInterrupt):
                self._running = False
                break

            await self._dispatch(user_text.strip())

        console.print("[dim]Goodbye![/]")

    async def stop(self) -> None:
        self._running = False
        await self._chat.unsubscribe(self._handle_state_changed)
        logger.info("ChatCLI stopped")

    async def _dispatch(self, text: str) -> None:
        if not text:
            return

        command, _, argument = text.partition(" ")
        command = command.lower()

        if command in ("/quit", "/exit"):
            self._running = False
        elif command == "/clear":
            result = await self._chat.clear()
            if result.ok:
                console.print("[success]Conversation cleared.[/]")
        elif command == "/help":
            console.print(HELP_TEXT)
        elif command == "/temps":
            with console.status("[dim]comparing temperatures...[/]"):
                await self._chat.send_at_temperatures(argument)
        elif command == "/consult":
            with console.status("[dim]consulting experts...[/]"):
                await self._chat.consult(argument)
        elif command.startswith("/"):
            console.print(f"[warning]Unknown command: {command}[/]")
        else:
            with console.status("[dim]thinking...[/]"):
                await self._chat.send(text)

    # --- Rendering ---

    async def _handle_state_changed(self, state: ChatUiState) -> None:
        if len(state.messages) < self._rendered:
            # Rolled back or cleared
            self._rendered = len(state.messages)

        for message in state.messages[self._rendered:]:
            self._render_message(message)
        self._rendered = len(state.messages)

        if state.error and state.error != self._last_error:
            console.print(state.error, style="error", markup=False)
        self._last_error = state.error

    def _render_message(self, message: DisplayMessage) -> None:
        if message.is_from_user:
            # Echo only history loaded at start-up; typed input is already on screen
            if not self._running:
                console.print(f"> {message.text}", style="user.text", markup=False)
            return

        if message.label:
            console.print(
                create_reply_panel(
                    Markdown(message.text), title=message.label, border_style="chat.variant"
                )
            )
        else:
            console.print(create_reply_panel(Markdown(message.text)))
