"""Configuration management for column encryption."""

import base64
import binascii
import os
from functools import lru_cache
from typing import Optional

from pydantic import Field, SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings."""

    model_config = SettingsConfigDict(
        env_file=".env" if os.getenv("ENVIRONMENT") != "test" else None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(default="development")
    log_level: str = Field(default="INFO")

    # Base64 of a 16, 24 or 32-byte AES key. Length is checked by the provider.
    column_encryption_key: Optional[SecretStr] = Field(
        default=None,
        description="Base64-encoded AES key used for column encryption",
    )

    @field_validator("column_encryption_key", mode="before")
    @classmethod
    def validate_column_encryption_key(cls, v):
        if v is None or v == "":
            return None
        raw = v.get_secret_value() if isinstance(v, SecretStr) else str(v)
        try:
            base64.b64decode(raw, validate=True)
        except (binascii.Error, ValueError):
            raise ValueError("COLUMN_ENCRYPTION_KEY must be base64-encoded")
        return raw

    def get_column_encryption_key(self) -> Optional[bytes]:
        """Decode the configured key, or None when unset."""
        if self.column_encryption_key is None:
            return None
        return base64.b64decode(self.column_encryption_key.get_secret_value())


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings."""
    return Settings()
