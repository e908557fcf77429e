#!/usr/bin/env python3
"""
Base Exception Contract for AI Study Chat

Provides the single source of truth for the error contract.
All domain-specific exceptions must inherit from AiStudyError.
"""

import functools
from enum import Enum
from typing import Any, Dict, Optional


class ErrorKind(str, Enum):
    """
    Stable error categories surfaced to callers of the safe API.
    Lets a front-end tell "the model said something unparseable"
    apart from "the network failed".
    """

    INVALID_ARGUMENT = "invalid_argument"
    NOT_CONFIGURED = "not_configured"
    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    API_ERROR = "api_error"
    MALFORMED_RESPONSE = "malformed_response"
    BUSY = "busy"
    AGGREGATE = "aggregate"
    STORAGE = "storage"
    CONFIG = "config"
    INTERNAL = "internal"


class AiStudyError(Exception):
    """
    The Base Contract for all AI Study Chat errors.
    """

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(
        self,
        message: str,
        original_error: Optional[Exception] = None,
        user_hint: Optional[str] = None,
        details: Optional[dict] = None,
    ):
        super().__init__(message)
        self.message = message
        self.original_error = original_error
        self.user_hint = user_hint or "An internal error occurred."
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Flat form for events and structured logs. Never includes the cause."""
        return {
            **self.details,
            "kind": self.kind.value,
            "message": self.message,
            "user_hint": self.user_hint,
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(kind={self.kind.value!r}, message={self.message!r})"


def wrap_exception(exception_class, user_hint=None):
    """
    Decorator for blocking helpers: any non-AiStudyError escaping ``func``
    is re-raised as ``exception_class`` with the original chained.
    """

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except AiStudyError:
                raise
            except Exception as e:
                raise exception_class(
                    message=str(e), original_error=e, user_hint=user_hint
                ) from e

        return wrapper

    return decorator
