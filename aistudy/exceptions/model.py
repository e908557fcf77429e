#!/usr/bin/env python3
"""
Model Exception Definitions for AI Study Chat

Errors about what the model said, as opposed to how the request went.
"""

from .base import AiStudyError, ErrorKind


class MalformedResponseError(AiStudyError):
    """Raised when model response cannot be parsed as the structured reply."""

    kind = ErrorKind.MALFORMED_RESPONSE

    def __init__(self, message, raw_response=None, original_error=None, details=None):
        super().__init__(message, original_error=original_error, details=details)
        self.raw_response = raw_response
        self.user_hint = "The model returned invalid data. Please try again."
