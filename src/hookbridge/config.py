"""Configuration management for hookbridge."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from hookbridge.channels.telegram import TelegramConfig
from hookbridge.errors import ConfigurationError

DEFAULT_TIMEOUT_SECONDS = 3600
SETUP_HINT = "Run 'hookbridge --setup' to configure."


class Settings(BaseSettings):
    """Process-level settings read from the environment."""

    model_config = SettingsConfigDict(env_prefix="HOOKBRIDGE_", case_sensitive=False, extra="ignore")

    config_dir: Path = Field(default_factory=lambda: Path.home() / ".claude-telegram")
    log_level: str = Field(default="WARNING", description="Log level")
    poll_slice_seconds: int = Field(default=5, ge=1, description="Long-poll wait per request")

    @property
    def config_path(self) -> Path:
        return self.config_dir / "config.json"


class StoredConfig(BaseModel):
    """On-disk shape of ``config.json``."""

    model_config = ConfigDict(populate_by_name=True)

    bot_token: str = Field(default="", alias="botToken")
    chat_id: str = Field(default="", alias="chatId")
    timeout: int = Field(default=DEFAULT_TIMEOUT_SECONDS, gt=0)

    def to_telegram(self) -> TelegramConfig:
        return TelegramConfig(token=self.bot_token, chat_id=self.chat_id, timeout=self.timeout)


def config_path(settings: Settings | None = None) -> Path:
    return (settings or Settings()).config_path


def config_exists(path: Path | None = None) -> bool:
    return (path or config_path()).is_file()


def load_stored_config(path: Path | None = None) -> StoredConfig:
    path = path or config_path()
    if not path.is_file():
        raise ConfigurationError(f"Config not found at {path}\n{SETUP_HINT}")
    try:
        return StoredConfig.model_validate_json(path.read_text(encoding="utf-8"))
    except OSError as exc:
        raise ConfigurationError(f"Cannot read config at {path}: {exc}\n{SETUP_HINT}") from exc
    except ValidationError as exc:
        raise ConfigurationError(f"Invalid config at {path}: {exc.error_count()} error(s)\n{SETUP_HINT}") from exc


def load_config(path: Path | None = None) -> TelegramConfig:
    """Load the Telegram credentials and timeout from disk.

    Raises:
        ConfigurationError: if the file is missing, unreadable, malformed, or
            lacks the bot token or chat id.
    """
    stored = load_stored_config(path)
    if not stored.bot_token or not stored.chat_id:
        raise ConfigurationError(f"Invalid config: missing botToken or chatId.\n{SETUP_HINT}")
    return stored.to_telegram()


def save_config(stored: StoredConfig, path: Path | None = None) -> Path:
    path = path or config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(stored.model_dump_json(by_alias=True, indent=2), encoding="utf-8")
    return path
