"""Configuration management for xls text extraction.

This module provides centralized configuration using pydantic-settings.
All configuration options can be set via environment variables with the
XLS2TXT_ prefix, or via a .env file in the working directory.

Environment Variables:
    XLS2TXT_DEFAULT_MAX_BYTES: Text output budget when none is given (default: 10 MiB)
    XLS2TXT_ENCODING_OVERRIDE: Encoding for 8-bit strings in old BIFF files (default: unset)
    XLS2TXT_MAX_FILE_SIZE_MB: Optional source size limit in MB (default: unset)
    XLS2TXT_LOG_LEVEL: Level of the package logger (default: INFO)
"""

import codecs
import logging
from typing import Any

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

class Settings(BaseSettings):
    """Library settings loaded from environment variables.

    Example .env file:
        XLS2TXT_DEFAULT_MAX_BYTES=65536
        XLS2TXT_ENCODING_OVERRIDE=cp1252
        XLS2TXT_LOG_LEVEL=DEBUG
    """

    model_config = SettingsConfigDict(
        env_prefix="XLS2TXT_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # =========================================================================
    # Extraction Settings
    # =========================================================================

    default_max_bytes: int = 10 * 1024 * 1024
    """Byte budget for text extraction when the caller passes none."""

    encoding_override: str | None = None
    """Encoding handed to the parser for 8-bit strings (pre-BIFF8 workbooks)."""

    max_file_size_mb: int | None = None
    """Reject sources larger than this many megabytes. None disables the check."""

    # =========================================================================
    # Logging Settings
    # =========================================================================

    log_level: str = "INFO"
    """Package logger level: DEBUG, INFO, WARNING, ERROR or CRITICAL."""

    # =========================================================================
    # Validators
    # =========================================================================

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is a valid Python logging level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(
                f"Invalid log level: {v}. Must be one of: {', '.join(valid_levels)}"
            )
        return upper_v

    @field_validator("default_max_bytes")
    @classmethod
    def validate_default_max_bytes(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"default_max_bytes must be at least 1, got {v}")
        return v

    @field_validator("max_file_size_mb")
    @classmethod
    def validate_file_size(cls, v: int | None) -> int | None:
        if v is not None and v < 1:
            raise ValueError(f"max_file_size_mb must be at least 1, got {v}")
        return v

    @field_validator("encoding_override")
    @classmethod
    def validate_encoding(cls, v: str | None) -> str | None:
        """Validate the encoding name is known to the codecs registry."""
        if v is None or not v.strip():
            return None
        try:
            codecs.lookup(v.strip())
        except LookupError as e:
            raise ValueError(f"Unknown encoding: {v}") from e
        return v.strip()

    # =========================================================================
    # Computed Properties
    # =========================================================================

    @property
    def max_file_size_bytes(self) -> int | None:
        """Get the source size limit in bytes, or None when unlimited."""
        if self.max_file_size_mb is None:
            return None
        return self.max_file_size_mb * 1024 * 1024

    @property
    def log_level_int(self) -> int:
        """Get log level as integer for logging module."""
        level: int = getattr(logging, self.log_level)
        return level

    def to_safe_dict(self) -> dict[str, Any]:
        """Convert settings to a dictionary suitable for logging."""
        return {
            "default_max_bytes": self.default_max_bytes,
            "encoding_override": self.encoding_override,
            "max_file_size_mb": self.max_file_size_mb,
            "log_level": self.log_level,
        }


# Create the global settings instance
settings = Settings()
