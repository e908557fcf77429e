#!/usr/bin/env python3
"""
Configuration Exception Definitions for AI Study Chat

All configuration-related exceptions inherit from AiStudyError.
"""

from .base import AiStudyError, ErrorKind


class ConfigError(AiStudyError):
    """Raised when settings fail validation."""

    kind = ErrorKind.CONFIG

    def __init__(self, message, field_name=None, invalid_value=None):
        super().__init__(message)
        self.field_name = field_name
        self.invalid_value = invalid_value


class NotConfiguredError(AiStudyError):
    """Raised when a network call is attempted without an API key."""

    kind = ErrorKind.NOT_CONFIGURED

    def __init__(self, message="API key is not configured.", **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = (
            "Set DEEPSEEK_API_KEY in the environment or .env file, "
            "or point API_KEY_FILE at a properties file with deepseek.api.key."
        )
