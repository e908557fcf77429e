"""Transport factory helpers."""

from __future__ import annotations

from aistudy.config.keys import ApiKeyProvider
from aistudy.config.settings import ChatSettings
from aistudy.providers.base import ChatTransport


def create_transport(settings: ChatSettings, key_provider: ApiKeyProvider) -> ChatTransport:
    """Instantiate the configured transport implementation."""
    from aistudy.providers.openai_compat import OpenAICompatibleTransport

    return OpenAICompatibleTransport(settings, key_provider)
