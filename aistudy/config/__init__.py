"""
Configuration Module.
Exposes the Settings object, the loader and the key providers.
"""

from .settings import ChatSettings, load_settings
from .keys import (
    ApiKeyProvider,
    PropertiesFileApiKeyProvider,
    SettingsApiKeyProvider,
    StaticApiKeyProvider,
    create_key_provider,
)

__all__ = [
    "ChatSettings",
    "load_settings",
    "ApiKeyProvider",
    "PropertiesFileApiKeyProvider",
    "SettingsApiKeyProvider",
    "StaticApiKeyProvider",
    "create_key_provider",
]
