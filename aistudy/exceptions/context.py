#!/usr/bin/env python3
"""
Context Exception Definitions for AI Study Chat

All conversation-context exceptions inherit from AiStudyError.
"""

from .base import AiStudyError, ErrorKind


class ContextError(AiStudyError):
    """Base exception for conversation context errors."""

    pass


class ConversationBusyError(ContextError):
    """Raised when a turn is submitted while a reply or summary is pending."""

    kind = ErrorKind.BUSY

    def __init__(self, message, phase=None):
        super().__init__(message)
        self.phase = phase
        self.user_hint = "Please wait for the current reply to finish."


class ContextStateError(ContextError):
    """Raised when a reply is reconciled without a pending user turn."""

    def __init__(self, message, phase=None):
        super().__init__(message)
        self.phase = phase
