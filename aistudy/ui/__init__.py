"""
ui - Terminal front-end for AI Study Chat

- styles.py: rich theme and panel factory
- cli.py: prompt_toolkit REPL driven by ChatUiState snapshots
"""

from .cli import ChatCLI

__all__ = ["ChatCLI"]
