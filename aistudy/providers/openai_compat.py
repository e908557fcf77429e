#!/usr/bin/env python3
"""
OpenAI-Compatible Chat Transport
================================

Single request/response client for ``POST /v1/chat/completions``.
DeepSeek is the default endpoint; any OpenAI-compatible server works.
"""

import asyncio
import json
import logging
from typing import Any, Dict, List, Optional

import aiohttp
from pydantic import ValidationError

from aistudy.config.keys import ApiKeyProvider
from aistudy.config.settings import ChatSettings
from aistudy.exceptions import (
    AiStudyError,
    EmptyResponseError,
    NotConfiguredError,
    ProviderApiError,
    ProviderAuthenticationError,
    ProviderConnectionError,
    ProviderError,
    ProviderRateLimitError,
    ProviderResponseError,
    ProviderTimeoutError,
)
from aistudy.providers.base import ChatTransport
from aistudy.providers.models import (
    ApiErrorBody,
    ApiMessage,
    ChatCompletion,
    ChatCompletionRequest,
)
from aistudy.utils.retry import retry_on_transient_errors

PROVIDER_NAME = "openai-compatible"


class OpenAICompatibleTransport(ChatTransport):
    """
    aiohttp implementation of the chat-completion contract with timeout,
    transient-error retry and structured error mapping.
    """

    def __init__(
        self,
        settings: ChatSettings,
        key_provider: ApiKeyProvider,
        retry_max_wait: float = 10,
    ):
        self.logger = logging.getLogger(__name__)
        self.settings = settings
        self.key_provider = key_provider
        self.chat_url = settings.chat_completions_url
        self.model_name = settings.deepseek_model
        self.timeout = settings.request_timeout
        self.retry_attempts = settings.retry_attempts
        self.retry_max_wait = retry_max_wait

        self._session: Optional[aiohttp.ClientSession] = None

    async def _get_session(self) -> aiohttp.ClientSession:
        """
        Get or create the aiohttp session.
        """
        if self._session is None or self._session.closed:
            timeout = aiohttp.ClientTimeout(total=self.timeout)
            headers = {"Content-Type": "application/json"}
            self._session = aiohttp.ClientSession(timeout=timeout, headers=headers)
        return self._session

    async def complete(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
    ) -> ChatCompletion:
        api_key = self.key_provider.get_api_key().strip()
        if not api_key:
            raise NotConfiguredError()

        payload = self._prepare_payload(messages, temperature, max_tokens)

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Chat request headers: %s", {"Authorization": "Bearer ***REDACTED***"}
            )
            self.logger.debug(
                "Chat request payload: %s",
                json.dumps(payload, ensure_ascii=False, default=str),
            )

        send = retry_on_transient_errors(
            max_attempts=self.retry_attempts, max_wait=self.retry_max_wait
        )(self._post)
        return await send(payload, api_key)

    def _prepare_payload(
        self,
        messages: List[Dict[str, str]],
        temperature: Optional[float],
        max_tokens: Optional[int],
    ) -> Dict[str, Any]:
        """
        Prepare request payload (OpenAI-compatible format).
        """
        request = ChatCompletionRequest(
            model=self.model_name,
            messages=[ApiMessage(role=m["role"], content=m["content"]) for m in messages],
            temperature=self.settings.temperature if temperature is None else temperature,
            max_tokens=self.settings.max_tokens if max_tokens is None else max_tokens,
        )
        return request.model_dump()

    async def _post(self, payload: Dict[str, Any], api_key: str) -> ChatCompletion:
        session = await self._get_session()
        headers = {"Authorization": f"Bearer {api_key}"}

        try:
            async with session.post(self.chat_url, json=payload, headers=headers) as response:
                body = await response.text()
                if not 200 <= response.status < 300:
                    raise self._error_from_response(response, body)
                return self._parse_completion(body)

        except AiStudyError:
            raise
        except asyncio.TimeoutError as exc:
            self.logger.warning("Chat request timed out after %ss", self.timeout)
            raise ProviderTimeoutError(
                "Request timed out. Check your internet connection.",
                timeout_seconds=self.timeout,
                provider_name=PROVIDER_NAME,
                model_name=self.model_name,
                original_error=exc,
            ) from exc
        except aiohttp.ClientError as exc:
            self.logger.warning("Chat request failed: %s", exc)
            raise ProviderConnectionError(
                f"Network error: {exc}",
                provider_name=PROVIDER_NAME,
                model_name=self.model_name,
                original_error=exc,
            ) from exc
        except Exception as exc:
            # Safety net for any other unexpected errors
            self.logger.exception("Unexpected error communicating with the chat endpoint")
            raise ProviderError(
                f"Unexpected transport error: {exc}",
                provider_name=PROVIDER_NAME,
                model_name=self.model_name,
                original_error=exc,
            ) from exc

    def _error_from_response(
        self, response: aiohttp.ClientResponse, body: str
    ) -> ProviderApiError:
        """
        Map a non-2xx response to the matching exception.

        The provider's ``{"error": {"message": ...}}`` wins; otherwise the
        message is derived from the status line.
        """
        status = response.status
        error_type = None
        error_code = None
        try:
            parsed = ApiErrorBody.model_validate_json(body)
            message = parsed.error.message
            error_type = parsed.error.type
            if parsed.error.code is not None:
                error_code = str(parsed.error.code)
        except ValidationError:
            reason = response.reason or "Unknown"
            message = f"API error: {status} {reason}"

        self.logger.error("Chat endpoint returned %d: %s", status, message)

        kwargs = {
            "status_code": status,
            "error_type": error_type,
            "error_code": error_code,
            "provider_name": PROVIDER_NAME,
            "model_name": self.model_name,
        }
        if status in (401, 403):
            return ProviderAuthenticationError(message, **kwargs)
        if status == 429:
            return ProviderRateLimitError(
                message,
                retry_after=self._parse_retry_after(response.headers.get("Retry-After")),
                **kwargs,
            )
        return ProviderApiError(message, **kwargs)

    @staticmethod
    def _parse_retry_after(value: Optional[str]) -> Optional[int]:
        if not value:
            return None
        try:
            return int(value)
        except ValueError:
            return None

    def _parse_completion(self, body: str) -> ChatCompletion:
        try:
            completion = ChatCompletion.model_validate_json(body)
        except ValidationError as exc:
            raise ProviderResponseError(
                "Invalid completion envelope from the chat endpoint",
                response_data=body,
                provider_name=PROVIDER_NAME,
                model_name=self.model_name,
                original_error=exc,
            ) from exc

        if completion.first_content() is None:
            raise EmptyResponseError(
                "Model returned an empty response",
                provider_name=PROVIDER_NAME,
                model_name=self.model_name,
            )

        if self.logger.isEnabledFor(logging.DEBUG):
            self.logger.debug(
                "Completion %s usage=%s", completion.id, completion.usage
            )
        return completion

    async def close(self) -> None:
        """
        Close the HTTP session.
        """
        if self._session and not self._session.closed:
            await self._session.close()
