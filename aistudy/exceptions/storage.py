#!/usr/bin/env python3
"""
Storage Exception Definitions for AI Study Chat
"""

from .base import AiStudyError, ErrorKind


class StorageError(AiStudyError):
    """Raised when the message log cannot be read or written."""

    kind = ErrorKind.STORAGE

    def __init__(self, message, original_error=None, user_hint=None):
        super().__init__(
            message,
            original_error=original_error,
            user_hint=user_hint or "The chat history could not be saved or loaded.",
        )
