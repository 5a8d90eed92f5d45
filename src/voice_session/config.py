"""Configuration schema for the voice session client.

Defines Pydantic models for loading and validating client configuration
from YAML files and environment variables.
"""

from pathlib import Path
from typing import Literal

from pydantic import BaseModel, Field, field_validator


class SessionConfig(BaseModel):
    """User-facing session options applied at startup."""

    start_muted: bool = Field(
        default=False,
        description="Keep the microphone off once the bot is ready",
    )


class MockClientConfig(BaseModel):
    """Behaviour of the in-process mock session client."""

    device_init_delay_s: float = Field(
        default=0.0,
        ge=0.0,
        description="Delay before devices report initialized (0 = synchronous)",
    )
    auth_delay_s: float = Field(
        default=0.2,
        ge=0.0,
        description="Simulated authentication round trip",
    )
    connect_delay_s: float = Field(
        default=0.3,
        ge=0.0,
        description="Simulated transport connect time",
    )
    bot_ready_delay_s: float = Field(
        default=0.2,
        ge=0.0,
        description="Delay between transport connected and bot ready",
    )
    disconnect_delay_s: float = Field(
        default=0.1,
        ge=0.0,
        description="Simulated disconnect time",
    )
    fail_with: Literal["auth", "timeout", "other"] | None = Field(
        default=None,
        description="Make start() fail with this fault kind",
    )
    fail_message: str | None = Field(
        default=None,
        description="Message carried by the injected fault",
    )


class ClientConfig(BaseModel):
    """Root client configuration."""

    session: SessionConfig = Field(default_factory=SessionConfig)
    mock: MockClientConfig = Field(default_factory=MockClientConfig)

    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR)",
    )
    log_json: bool = Field(
        default=False,
        description="Emit one JSON object per log line",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize the logging level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got '{v}'")
        return v.upper()

    @classmethod
    def from_yaml(cls, path: Path) -> "ClientConfig":
        """Load configuration from YAML file with environment variable overrides.

        Args:
            path: Path to YAML configuration file

        Returns:
            Loaded configuration

        Raises:
            FileNotFoundError: If configuration file doesn't exist
            ValueError: If YAML is invalid or validation fails
        """
        import os

        import yaml  # type: ignore[import-untyped]

        if not path.exists():
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}

        if not isinstance(data, dict):
            raise ValueError(f"Configuration root must be a mapping: {path}")

        if log_level := os.getenv("VOICE_SESSION_LOG_LEVEL"):
            data["log_level"] = log_level

        if start_muted := os.getenv("VOICE_SESSION_START_MUTED"):
            if "session" not in data:
                data["session"] = {}
            data["session"]["start_muted"] = start_muted.lower() in ("true", "1", "yes")

        if fail_with := os.getenv("VOICE_SESSION_FAIL_WITH"):
            if "mock" not in data:
                data["mock"] = {}
            data["mock"]["fail_with"] = fail_with.lower()

        return cls.model_validate(data)

    @classmethod
    def from_yaml_with_defaults(cls, path: Path | None = None) -> "ClientConfig":
        """Load configuration from YAML or use defaults if file doesn't exist.

        Args:
            path: Optional path to YAML configuration file

        Returns:
            Loaded configuration or defaults
        """
        if path is not None and path.exists():
            return cls.from_yaml(path)

        return cls()
