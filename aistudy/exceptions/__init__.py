#!/usr/bin/env python3
"""
AI Study Chat Exceptions Package

Unified exception hierarchy for the chat client.
"""

# Base exceptions
from .base import AiStudyError, ErrorKind, wrap_exception

# Model exceptions
from .model import MalformedResponseError

# Provider exceptions
from .provider import (
    EmptyResponseError,
    ProviderApiError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)

# Context exceptions
from .context import ContextError, ContextStateError, ConversationBusyError

# Config exceptions
from .config import ConfigError, NotConfiguredError

# Agent exceptions
from .agent import AgentError, InvalidArgumentError, PersonaConsultationError

# Storage exceptions
from .storage import StorageError


__all__ = [
    # Base
    "AiStudyError",
    "ErrorKind",
    "wrap_exception",
    # Model
    "MalformedResponseError",
    # Provider
    "ProviderError",
    "ProviderTimeoutError",
    "ProviderConnectionError",
    "ProviderApiError",
    "ProviderAuthenticationError",
    "ProviderRateLimitError",
    "ProviderResponseError",
    "EmptyResponseError",
    # Context
    "ContextError",
    "ContextStateError",
    "ConversationBusyError",
    # Config
    "ConfigError",
    "NotConfiguredError",
    # Agent
    "AgentError",
    "InvalidArgumentError",
    "PersonaConsultationError",
    # Storage
    "StorageError",
]
