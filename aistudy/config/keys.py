"""API key providers.

Key acquisition is a capability injected at composition time: the agent only
ever asks a provider for the key and never knows where it came from.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from pathlib import Path

from aistudy.config.settings import ChatSettings
from aistudy.exceptions.config import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_PROPERTY_NAME = "deepseek.api.key"


class ApiKeyProvider(ABC):
    """
    The Abstract Base Class (Contract) for API key sources.
    """

    @abstractmethod
    def get_api_key(self) -> str:
        """Return the key, or an empty string when none is available."""
        pass

    def is_configured(self) -> bool:
        return bool(self.get_api_key().strip())


class StaticApiKeyProvider(ApiKeyProvider):
    """Holds a key supplied directly by the caller."""

    def __init__(self, api_key: str = ""):
        self._api_key = api_key

    def get_api_key(self) -> str:
        return self._api_key

    def __repr__(self) -> str:
        return "StaticApiKeyProvider(***REDACTED***)"


class SettingsApiKeyProvider(ApiKeyProvider):
    """Reads DEEPSEEK_API_KEY through the validated settings object."""

    def __init__(self, settings: ChatSettings):
        self._settings = settings

    def get_api_key(self) -> str:
        return self._settings.api_key


class PropertiesFileApiKeyProvider(ApiKeyProvider):
    """
    Reads the key from a ``local.properties`` style file::

        deepseek.api.key=sk-...

    The file is read on every call so a key added while the app is running
    is picked up on the next turn.
    """

    def __init__(self, path: Path, property_name: str = DEFAULT_PROPERTY_NAME):
        self.path = Path(path)
        self.property_name = property_name

    def get_api_key(self) -> str:
        if not self.path.exists():
            logger.debug("Key file %s does not exist", self.path)
            return ""
        try:
            text = self.path.read_text(encoding="utf-8")
        except OSError as e:
            raise ConfigError(
                f"Failed to read API key file {self.path}: {e}",
                field_name="api_key_file",
                invalid_value=str(self.path),
            ) from e

        for raw_line in text.splitlines():
            line = raw_line.strip()
            if not line or line.startswith(("#", "!")):
                continue
            name, sep, value = line.partition("=")
            if sep and name.strip() == self.property_name:
                return value.strip()
        return ""


def create_key_provider(settings: ChatSettings) -> ApiKeyProvider:
    """Pick the key source for the configured environment."""
    if settings.api_key_file is not None:
        return PropertiesFileApiKeyProvider(settings.api_key_file)
    return SettingsApiKeyProvider(settings)
