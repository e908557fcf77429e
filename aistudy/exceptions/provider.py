#!/usr/bin/env python3
"""
Provider Exception Classes
==========================

Errors raised by the chat-completion transport. Each class carries the
ErrorKind the safe API reports for it.
"""

from typing import Optional

from .base import AiStudyError, ErrorKind


class ProviderError(AiStudyError):
    """
    Base exception for all provider-related errors.
    """

    kind = ErrorKind.NETWORK_ERROR

    def __init__(
        self,
        message: str,
        provider_name: Optional[str] = None,
        model_name: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)

        if "provider_name" not in self.details and provider_name:
            self.details["provider_name"] = provider_name
        if "model_name" not in self.details and model_name:
            self.details["model_name"] = model_name


class ProviderTimeoutError(ProviderError):
    """Raised when the chat-completion request times out."""

    kind = ErrorKind.TIMEOUT

    def __init__(self, message: str, timeout_seconds: Optional[float] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.timeout_seconds = timeout_seconds
        if timeout_seconds is not None:
            self.details["timeout_seconds"] = timeout_seconds
        self.user_hint = (
            "The request timed out. Check your internet connection and try again."
        )


class ProviderConnectionError(ProviderError):
    """
    Raised when provider connection fails.

    This exception is used for network-related issues: DNS failures,
    refused connections, dropped sockets.
    """

    kind = ErrorKind.NETWORK_ERROR

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = (
            "Failed to connect to the provider. "
            "Please check your internet connection and provider status."
        )


class ProviderApiError(ProviderError):
    """
    Raised when the endpoint answers with a non-2xx status.

    The message is the provider-supplied error message when the body
    carries one, otherwise a status-derived description.
    """

    kind = ErrorKind.API_ERROR

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        error_type: Optional[str] = None,
        error_code: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, **kwargs)
        self.status_code = status_code
        self.error_type = error_type
        self.error_code = error_code
        if status_code is not None:
            self.details["status_code"] = status_code
        if error_type:
            self.details["error_type"] = error_type
        if error_code:
            self.details["error_code"] = error_code
        self.user_hint = "The provider rejected the request: " + message


class ProviderAuthenticationError(ProviderApiError):
    """
    Raised when provider authentication fails (HTTP 401/403).
    """

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = (
            "Authentication with the provider failed. "
            "Please check your API key."
        )


class ProviderRateLimitError(ProviderApiError):
    """
    Raised when provider rate limits are exceeded (HTTP 429).
    """

    def __init__(self, message: str, retry_after: Optional[int] = None, **kwargs):
        super().__init__(message, **kwargs)
        self.retry_after = retry_after

        if retry_after is not None:
            self.details["retry_after_seconds"] = retry_after
            self.user_hint = (
                f"Rate limit exceeded. Please wait {retry_after} seconds before trying again."
            )
        else:
            self.user_hint = (
                "Rate limit exceeded. Please wait before making additional requests."
            )


class ProviderResponseError(ProviderApiError):
    """
    Raised when a 200 response does not carry a valid completion envelope.
    """

    def __init__(self, message: str, response_data: Optional[str] = None, **kwargs):
        super().__init__(message, **kwargs)

        if response_data:
            self.details["response_data"] = response_data[:600]

        self.user_hint = (
            "The provider returned an invalid response. "
            "This may be a temporary issue or provider API change."
        )


class EmptyResponseError(ProviderApiError):
    """Raised when the completion has no choices or no message content."""

    def __init__(self, message: str, **kwargs):
        super().__init__(message, **kwargs)
        self.user_hint = "The model returned an empty response. Please try again."
