"""
Configuration management using Pydantic models loaded from YAML.
"""

import os
from pathlib import Path
from typing import List, Literal, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator


class StorageConfig(BaseModel):
    """Where bookings are read from and written to."""
    backend: Literal["supabase", "memory"] = "supabase"
    url: str = ""
    service_role_key: str = ""
    timeout_seconds: float = 30
    seed_file: Optional[Path] = None  # memory backend only

    @field_validator("timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        """Ensure the request timeout is positive."""
        if value <= 0:
            raise ValueError("timeout_seconds must be greater than zero")
        return value

    @model_validator(mode="after")
    def validate_credentials(self) -> "StorageConfig":
        """The hosted backend cannot work without a project URL and key."""
        if self.backend == "supabase" and not (self.url and self.service_role_key):
            raise ValueError(
                "storage.url and storage.service_role_key are required for the supabase backend "
                "(or set SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY)"
            )
        return self


class ServerConfig(BaseModel):
    """HTTP server settings."""
    host: str = "127.0.0.1"
    port: int = 8000
    cors_origins: List[str] = Field(default_factory=lambda: ["*"])

    @field_validator("port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is between 1 and 65535."""
        if not 1 <= v <= 65535:
            raise ValueError(f"Port must be between 1 and 65535, got {v}")
        return v


class AppConfig(BaseModel):
    """Application configuration."""
    storage: StorageConfig = Field(default_factory=lambda: StorageConfig(backend="memory"))
    server: ServerConfig = Field(default_factory=ServerConfig)
    timezone: str = "UTC"
    log_level: str = "INFO"

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Values from ``SUPABASE_URL`` and ``SUPABASE_SERVICE_ROLE_KEY`` take
        precedence over the file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**apply_env_overrides(data))


def apply_env_overrides(data: dict) -> dict:
    """Merge storage credentials from the environment into raw config data."""
    storage = dict(data.get("storage") or {})

    url = os.environ.get("SUPABASE_URL")
    key = os.environ.get("SUPABASE_SERVICE_ROLE_KEY")
    if url:
        storage["url"] = url
    if key:
        storage["service_role_key"] = key
    if (url or key) and "backend" not in storage:
        storage["backend"] = "supabase"

    if storage:
        data = {**data, "storage": storage}
    return data


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of repeatbooker/)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path


def load_config(config_path: Optional[Path] = None) -> AppConfig:
    """
    Load the configuration for the CLI and the HTTP server.

    An explicit path must exist. Without one, the default location is used
    when present, otherwise defaults plus environment overrides apply.
    """
    if config_path is not None:
        return AppConfig.load_from_yaml(config_path)

    default_path = get_default_config_path()
    if default_path.exists():
        return AppConfig.load_from_yaml(default_path)

    return AppConfig(**apply_env_overrides({}))
