"""
Console theme for the chat front-end.
"""

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.style import Style
from rich.theme import Theme

CHAT_THEME = Theme(
    {
        "chat.text": "bright_white",
        "chat.border": "medium_purple3",
        "chat.variant": "turquoise2",
        "user.text": "bright_black",
        "success": "bright_green",
        "error": Style(color="red3", bold=True),
        "warning": Style(color="gold1", bold=True),
        "dim": "grey50",
    }
)

console = Console(theme=CHAT_THEME)


def create_reply_panel(content, title="Assistant", border_style="chat.border"):
    """Standard frame around one assistant reply."""
    return Panel(
        content,
        title=f"[{border_style}]{title}[/]",
        title_align="left",
        border_style=border_style,
        box=box.ROUNDED,
        padding=(0, 1),
    )
