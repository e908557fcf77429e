# aistudy/config/settings.py
import logging
from pathlib import Path
from typing import Optional

from pydantic import SecretStr, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from aistudy.exceptions.config import ConfigError

logger = logging.getLogger("Settings")


class ChatSettings(BaseSettings):
    # === Environment Variables (CLEAN NAMES) ===
    deepseek_api_key: Optional[SecretStr] = None
    api_key_file: Optional[Path] = None
    deepseek_base_url: str = "https://api.deepseek.com"
    deepseek_model: str = "deepseek-chat"
    temperature: float = 0.7
    max_tokens: int = 2048
    request_timeout: float = 60.0
    retry_attempts: int = 2

    # Completed exchanges before the history is folded into a summary.
    summary_threshold: int = 10

    database_path: Path = Path("aistudy_chat.db")
    log_level: str = "INFO"
    log_file: Optional[Path] = None

    # === Pydantic V2 Configuration ===
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        # NO prefix - clean names match exactly
        extra="ignore",
        case_sensitive=False,
    )

    # === Model Validator ===

    @model_validator(mode="after")
    def validate_and_compute(self) -> "ChatSettings":
        """Validate ranges and normalize derived fields."""

        # 1. Validate log level
        if self.log_level.upper() not in logging._nameToLevel:
            raise ConfigError(
                f"Invalid log level: {self.log_level}",
                field_name="log_level",
                invalid_value=self.log_level,
            )
        self.log_level = self.log_level.upper()

        # 2. Sampling parameters
        if not 0.0 <= self.temperature <= 2.0:
            raise ConfigError(
                f"temperature must be between 0.0 and 2.0, got {self.temperature}",
                field_name="temperature",
                invalid_value=self.temperature,
            )
        if self.max_tokens <= 0:
            raise ConfigError(
                f"max_tokens must be positive, got {self.max_tokens}",
                field_name="max_tokens",
                invalid_value=self.max_tokens,
            )

        # 3. Transport
        if self.request_timeout <= 0:
            raise ConfigError(
                f"request_timeout must be positive, got {self.request_timeout}",
                field_name="request_timeout",
                invalid_value=self.request_timeout,
            )
        if self.retry_attempts < 1:
            raise ConfigError(
                f"retry_attempts must be at least 1, got {self.retry_attempts}",
                field_name="retry_attempts",
                invalid_value=self.retry_attempts,
            )
        if not self.deepseek_base_url.strip():
            raise ConfigError("deepseek_base_url must not be empty", field_name="deepseek_base_url")
        self.deepseek_base_url = self.deepseek_base_url.strip().rstrip("/")

        # 4. Compaction
        if self.summary_threshold < 1:
            raise ConfigError(
                f"summary_threshold must be at least 1, got {self.summary_threshold}",
                field_name="summary_threshold",
                invalid_value=self.summary_threshold,
            )

        return self

    # === Convenience Properties ===

    @property
    def chat_completions_url(self) -> str:
        return f"{self.deepseek_base_url}/v1/chat/completions"

    @property
    def api_key(self) -> str:
        """The configured key, or an empty string."""
        if self.deepseek_api_key is None:
            return ""
        return self.deepseek_api_key.get_secret_value().strip()


def load_settings(env_file: Optional[Path] = None, **overrides) -> ChatSettings:
    """
    Build and validate the settings once, before first use.

    Explicit keyword overrides win over the environment and the .env file.
    """
    if env_file is not None:
        settings = ChatSettings(_env_file=env_file, **overrides)
    else:
        settings = ChatSettings(**overrides)
    logger.debug(
        "Settings loaded: model=%s base_url=%s threshold=%d",
        settings.deepseek_model,
        settings.deepseek_base_url,
        settings.summary_threshold,
    )
    return settings
