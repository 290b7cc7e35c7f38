# SPDX-License-Identifier: Apache-2.0
# Copyright (C) 2024-2026 The Birthmark Standard Foundation

"""Configuration management for the FDO owner tool."""

from typing import Literal

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import PROTOCOL_VERSION, HashType
from .errors import ConfigurationError


class Settings(BaseSettings):
    """Tool settings loaded from environment variables (OWNER_TOOL_*)."""

    model_config = SettingsConfigDict(
        env_prefix="OWNER_TOOL_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging
    log_level: str = "WARNING"

    # Provisioning
    protocol_version: int = PROTOCOL_VERSION
    device_key_curve: Literal["secp256r1", "secp384r1"] = "secp256r1"
    cert_validity_days: int = Field(default=3650, gt=0, description="Device certificate lifetime")
    hmac_key_length: int = Field(default=32, ge=16, description="Bytes of device HMAC secret")
    header_hmac_type: Literal["hmac-sha256", "hmac-sha384"] = "hmac-sha384"

    # Ownership transfer
    strict_owner_key_check: bool = True

    @property
    def header_hmac_hash_type(self) -> HashType:
        """HashType for the header integrity tag."""
        if self.header_hmac_type == "hmac-sha256":
            return HashType.HMAC_SHA256
        return HashType.HMAC_SHA384


def load_settings() -> Settings:
    """
    Read settings from the environment (and .env, if present).

    Raises:
        ConfigurationError: A setting has an invalid value
    """
    try:
        return Settings()
    except ValidationError as e:
        raise ConfigurationError(f"Invalid settings: {e}") from e
