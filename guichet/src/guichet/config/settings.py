"""
Guichet settings.

Values come from GUICHET_* environment variables, then
guichet/config/<env>.yaml over guichet/config/default.yaml, then the
defaults below.
"""

from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.config import LayeredConfig, check_log_level

ENV_PREFIX = "GUICHET_"


class Settings(BaseSettings):
    """Credential issuer configuration."""

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Guichet"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")

    # Connection
    server_url: str = Field(default="nats://127.0.0.1:4222")
    creds_file: Optional[str] = Field(
        default=None, description="Credentials the issuer itself connects with"
    )
    reconnect_wait: float = Field(default=5.0, gt=0)
    reconnect_total: float = Field(default=600.0, gt=0)

    # Account that signs the issued users
    account_file: Optional[str] = Field(
        default=None, description="Operator-signed account document"
    )
    signing_key_file: Optional[str] = Field(
        default=None, description="Seed of the delegated account signing key"
    )

    request_subject: str = Field(default="chat.req.access")
    queue_group: str = Field(default="oscon")
    subject_prefix: str = Field(default="chat.OSCON2019")
    usage_subject: str = Field(default="ngs.usage")

    # Limits stamped into every user claim
    validity_hours: int = Field(default=24, ge=1)
    max_payload: int = Field(default=1024, ge=1)
    max_name_length: int = Field(default=8, ge=1)

    shutdown_timeout: int = Field(
        default=30,
        ge=1,
        description="Seconds allowed for draining the connection on stop",
    )

    log_level: str = Field(default="info")
    log_dir: Optional[str] = Field(default=None)
    verbose: int = Field(default=1, ge=0, le=3)

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return check_log_level(v)


# guichet/src/guichet/config/settings.py -> guichet/
_layers = LayeredConfig(Settings, Path(__file__).resolve().parents[3], ENV_PREFIX)

load_config = _layers.load
get_settings = _layers.get
override_settings = _layers.override
reset_settings = _layers.reset
