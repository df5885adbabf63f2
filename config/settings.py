"""
Centralized configuration for Prompt Desk Bot.

All settings are loaded from environment variables via .env file.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings
from dotenv import load_dotenv

load_dotenv()


class Settings(BaseSettings):
    """Application settings."""

    # Brand
    bot_name: str = Field(default="Prompt Desk", env="BOT_NAME")

    # Telegram
    telegram_api_token: Optional[str] = Field(default=None, env="TELEGRAM_API_TOKEN")
    telegram_api_base: str = Field(default="https://api.telegram.org", env="TELEGRAM_API_BASE")
    webhook_secret: Optional[str] = Field(default=None, env="WEBHOOK_SECRET")
    send_timeout: float = Field(default=10.0, env="SEND_TIMEOUT")

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///./prompt_desk.db", env="DATABASE_URL"
    )

    # Roles
    default_admin_id: str = Field(default="6473677687", env="DEFAULT_ADMIN_ID")

    # Menus
    keyboard_width_operator: int = Field(default=3, env="KEYBOARD_WIDTH_OPERATOR")
    keyboard_width_participant: int = Field(default=2, env="KEYBOARD_WIDTH_PARTICIPANT")
    label_max_chars: int = Field(default=100, env="LABEL_MAX_CHARS")

    # API
    api_host: str = Field(default="0.0.0.0", env="API_HOST")
    port: int = Field(default=3000, env="PORT")
    api_title: str = Field(default="Prompt Desk Bot", env="API_TITLE")
    api_version: str = Field(default="1.0.0", env="API_VERSION")

    # Logging
    log_level: str = Field(default="INFO", env="LOG_LEVEL")
    debug: bool = Field(default=False, env="DEBUG")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "ignore"

    @property
    def has_telegram(self) -> bool:
        return bool(self.telegram_api_token)

    @property
    def is_sqlite(self) -> bool:
        return self.database_url.startswith("sqlite")


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
