#!/usr/bin/env python3
"""
Agent Exception Definitions for AI Study Chat

Agent-level exceptions that don't fit in other categories.
"""

from typing import List, Optional

from .base import AiStudyError, ErrorKind


class AgentError(AiStudyError):
    """Base exception for agent-level errors."""

    pass


class InvalidArgumentError(AgentError):
    """Raised by local validation, before anything reaches the network."""

    kind = ErrorKind.INVALID_ARGUMENT

    def __init__(self, message, argument=None):
        super().__init__(message)
        self.argument = argument
        self.user_hint = message


class PersonaConsultationError(AgentError):
    """Raised when every persona in a consultation failed."""

    kind = ErrorKind.AGGREGATE

    def __init__(self, message, errors: Optional[List[AiStudyError]] = None):
        super().__init__(message)
        self.errors = errors or []
        self.details["failed_personas"] = len(self.errors)
        self.user_hint = "None of the experts could answer. Please try again."
