# app_radio/config.py
from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class RadioConfig(BaseSettings):
    """
    Settings for the channel tree engine.
    Pydantic loads these from a .env file and then from APP_RADIO_* environment variables.
    """
    model_config = SettingsConfigDict(
        env_prefix="APP_RADIO_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    # Delivery
    delivery_delay_seconds: float = Field(
        default=0.0, ge=0.0, description="Delay before a scheduled delivery runs; 0 means the next loop turn."
    )
    log_deliveries: bool = Field(default=False, description="Log every scheduled delivery at DEBUG level.")

    # Path resolution
    collapse_empty_segments: bool = Field(
        default=False, description="Skip empty path segments ('a//b' -> 'a/b') instead of stopping at them."
    )


_config_instance: Optional[RadioConfig] = None


def get_config() -> RadioConfig:
    """Returns a singleton instance of the RadioConfig."""
    global _config_instance
    if _config_instance is None:
        _config_instance = RadioConfig()
    return _config_instance
