"""
Configuration management for record webhooks.

Handles loading, validation, and management of configuration
from files and environment variables.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..webhooks.subscriptions import validate_destination


class ServerConfig(BaseModel):
    """Configuration for process behavior."""

    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Log renderer: json or console")

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return v_upper

    @field_validator("log_format")
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Validate log format."""
        if v not in ("json", "console"):
            raise ValueError(f"Invalid log format: {v}. Must be json or console")
        return v


class WebhookConfig(BaseModel):
    """Configuration for webhook delivery."""

    enabled: bool = Field(default=True, description="Enable webhook notifications")
    timeout_seconds: Optional[float] = Field(
        default=None, description="HTTP request timeout (client default if unset)"
    )
    max_concurrent_deliveries: Optional[int] = Field(
        default=None, description="Max concurrent deliveries (unbounded if unset)"
    )
    user_agent: str = Field(default="record-webhooks/0.1", description="User-Agent header")

    @field_validator("timeout_seconds", "max_concurrent_deliveries")
    @classmethod
    def validate_positive(cls, v: Optional[float]) -> Optional[float]:
        """Reject zero or negative limits."""
        if v is not None and v <= 0:
            raise ValueError("Must be greater than zero")
        return v


class SubscriptionConfig(BaseModel):
    """A subscriber declared in the configuration file."""

    id: Optional[str] = Field(default=None, description="Subscriber id (generated if unset)")
    name: str = Field(min_length=1, description="Human readable name")
    collection: str = Field(min_length=1, description="Source collection name")
    destination: str = Field(description="Absolute webhook URL")

    @field_validator("destination")
    @classmethod
    def check_destination(cls, v: str) -> str:
        """Validate destination URL."""
        return validate_destination(v)


class Config(BaseModel):
    """Main configuration object."""

    model_config = ConfigDict(extra="forbid")

    version: str = Field(default="0.1.0", description="Configuration version")
    server: ServerConfig = Field(default_factory=ServerConfig)
    webhooks: WebhookConfig = Field(default_factory=WebhookConfig)
    subscriptions: List[SubscriptionConfig] = Field(default_factory=list)


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from file and environment variables.

    Args:
        config_path: Path to configuration file. If None, looks for
                    RECORD_WEBHOOKS_CONFIG_PATH environment variable.

    Returns:
        Loaded and validated configuration

    Raises:
        FileNotFoundError: If config file specified but not found
        ValueError: If configuration is invalid
    """
    if config_path is None:
        env_path = os.getenv("RECORD_WEBHOOKS_CONFIG_PATH")
        if env_path:
            config_path = Path(env_path)

    config_data: Dict[str, Any] = {}
    if config_path and config_path.exists():
        with open(config_path, "r") as f:
            config_data = json.load(f)
    elif config_path:
        raise FileNotFoundError(f"Configuration file not found: {config_path}")

    env_overrides: Dict[str, Any] = {}

    log_level = os.getenv("RECORD_WEBHOOKS_LOG_LEVEL")
    if log_level:
        env_overrides.setdefault("server", {})["log_level"] = log_level

    if env_overrides:
        config_data = _deep_merge(config_data, env_overrides)

    return Config(**config_data)


def create_default_config(config_path: Path) -> None:
    """
    Create a default configuration file.

    Args:
        config_path: Path where to create the configuration file
    """
    default_config = {
        "version": "0.1.0",
        "server": {
            "log_level": "INFO",
            "log_format": "json",
        },
        "webhooks": {
            "enabled": True,
            "timeout_seconds": None,
            "max_concurrent_deliveries": None,
            "user_agent": "record-webhooks/0.1",
        },
        "subscriptions": [
            {
                "name": "example",
                "collection": "orders",
                "destination": "https://example.com/hook",
            }
        ],
    }

    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, "w") as f:
        json.dump(default_config, f, indent=2)


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    """
    Deep merge two dictionaries.

    Args:
        base: Base dictionary
        override: Override dictionary

    Returns:
        Merged dictionary
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result
