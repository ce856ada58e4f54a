"""
Causerie settings.

CAUSERIE_* environment variables beat causerie/config/<env>.yaml, which
beats causerie/config/default.yaml, which beats the defaults below.
"""

from pathlib import Path
from typing import List, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from shared.config import LayeredConfig, check_log_level
from shared.identity.subjects import is_valid_token

ENV_PREFIX = "CAUSERIE_"


class Settings(BaseSettings):
    """
    Chat client configuration.

    ``channels`` is the fixed room list; the first entry is the view
    selected at startup. Presence timing is expressed as a heartbeat
    interval and a TTL factor; a heartbeat claim lives
    ``heartbeat_interval * heartbeat_ttl_factor`` seconds.
    """

    model_config = SettingsConfigDict(
        env_prefix=ENV_PREFIX,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    APP_NAME: str = "Causerie"
    APP_VERSION: str = "0.1.0"
    ENV: str = Field(default="production", description="Environment name")

    server_url: str = Field(default="nats://127.0.0.1:4222")
    creds_file: Optional[str] = Field(
        default=None, description="Credentials document issued by guichet"
    )
    reconnect_wait: float = Field(default=1.0, gt=0)
    reconnect_total: float = Field(default=600.0, gt=0)

    name: Optional[str] = Field(
        default=None, description="Display name override (canonicalised)"
    )

    channels: List[str] = Field(default_factory=lambda: ["OSCON", "NATS", "General"])
    subject_prefix: str = Field(default="chat.OSCON2019")

    heartbeat_interval: float = Field(default=30.0, gt=0)
    heartbeat_ttl_factor: float = Field(default=2.0, ge=1)
    presence_eviction_seconds: Optional[float] = Field(
        default=None,
        gt=0,
        description="Forget peers silent for longer than this (None = never)",
    )

    dedup_direct_messages: bool = Field(default=True)
    seen_tokens_max: Optional[int] = Field(
        default=None,
        ge=1,
        description="Most token ids remembered for replay checks (None = all)",
    )

    # The terminal belongs to the chat UI, so logs go to a file
    log_level: str = Field(default="info")
    log_dir: Optional[str] = Field(default="logs")
    verbose: int = Field(default=1, ge=0, le=3)

    @field_validator("channels")
    @classmethod
    def validate_channels(cls, v: List[str]) -> List[str]:
        """Channel names must be distinct single subject tokens."""
        if not v:
            raise ValueError("At least one channel is required")
        for channel in v:
            if not is_valid_token(channel):
                raise ValueError(f"Invalid channel name: {channel!r}")
        if len(set(v)) != len(v):
            raise ValueError("Channel names must be unique")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        return check_log_level(v)

    @property
    def heartbeat_ttl(self) -> float:
        return self.heartbeat_interval * self.heartbeat_ttl_factor


# causerie/src/causerie/config/settings.py -> causerie/
_layers = LayeredConfig(Settings, Path(__file__).resolve().parents[3], ENV_PREFIX)

load_config = _layers.load
get_settings = _layers.get
override_settings = _layers.override
reset_settings = _layers.reset
