"""Application configuration with support for config files and environment variables.

Configuration loading precedence (highest to lowest):
1. Environment variables (highest priority)
2. Config file (config.toml or config.yaml)
3. Default values (lowest priority)
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal, Optional

import tomli
import yaml
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


def load_config_file(config_path: Optional[Path] = None) -> dict[str, Any]:
    """Load configuration from TOML or YAML file.

    Args:
        config_path: Optional path to config file. If None, searches for
                    config.toml or config.yaml in current directory.

    Returns:
        Dictionary with configuration values
    """
    config_data: dict[str, Any] = {}

    if config_path is None:
        possible_files = [
            Path("config.toml"),
            Path("config.yaml"),
            Path("config.yml"),
            Path("/etc/storefront-cache/config.toml"),
            Path("/etc/storefront-cache/config.yaml"),
        ]

        for file_path in possible_files:
            if file_path.exists():
                config_path = file_path
                logger.info(f"Found configuration file: {config_path}")
                break

    if config_path and config_path.exists():
        try:
            with open(config_path, "rb" if config_path.suffix == ".toml" else "r") as f:
                if config_path.suffix == ".toml":
                    config_data = tomli.load(f)
                    logger.info(f"Loaded configuration from TOML: {config_path}")
                elif config_path.suffix in [".yaml", ".yml"]:
                    config_data = yaml.safe_load(f) or {}
                    logger.info(f"Loaded configuration from YAML: {config_path}")
        except Exception as e:
            logger.error(f"Error loading config file {config_path}: {e}")
            raise

    return config_data


class Settings(BaseSettings):
    """Application settings with support for config files and environment variables.

    Configuration loading order (highest to lowest priority):
    1. Environment variables (e.g. STOREFRONT_CACHE_CACHE_BACKEND=valkey)
    2. Config file (config.toml or config.yaml)
    3. Default values
    """

    app_name: str = Field(
        default="Storefront Cache",
        description="Application name",
    )

    # Cache medium
    cache_backend: Literal["memory", "valkey"] = Field(
        default="memory",
        description="Cache medium to use (memory or valkey)",
    )
    cache_max_entries: int = Field(
        default=10000,
        description="Maximum entries held by the in-memory cache",
        ge=1,
    )
    ttl_overrides: dict[str, int] = Field(
        default_factory=dict,
        description="Per-category TTL overrides in seconds, e.g. {'product-search': 60}",
    )

    # Valkey Configuration
    valkey_host: str = Field(
        default="localhost",
        description="Valkey server host",
    )
    valkey_port: int = Field(
        default=6379,
        description="Valkey server port",
        ge=1,
        le=65535,
    )
    valkey_password: str = Field(
        default="",
        description="Valkey password (empty for no auth)",
    )
    valkey_use_tls: bool = Field(
        default=False,
        description="Use TLS for Valkey connection",
    )
    valkey_request_timeout_ms: int = Field(
        default=5000,
        description="Valkey request timeout in milliseconds",
        ge=1,
    )
    valkey_key_prefix: str = Field(
        default="",
        description="Namespace prepended to every cache key in Valkey",
    )

    # Backing store
    backing_store: Literal["memory", "supabase"] = Field(
        default="memory",
        description="Backing store to read from (memory or supabase)",
    )
    supabase_url: str = Field(
        default="",
        description="Supabase project URL",
    )
    supabase_key: str = Field(
        default="",
        description="Supabase API key",
    )
    supabase_timeout: float = Field(
        default=10.0,
        description="Supabase request timeout in seconds",
        gt=0,
    )
    supabase_max_attempts: int = Field(
        default=3,
        description="Attempts per Supabase request, including the first",
        ge=1,
    )

    # Logging
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate and normalize log level."""
        if isinstance(v, str):
            v = v.upper()
        return v

    model_config = SettingsConfigDict(
        env_prefix="STOREFRONT_CACHE_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        env_nested_delimiter="__",
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        """Customize settings sources priority.

        Priority order (highest to lowest):
        1. Environment variables
        2. .env file
        3. Init settings (config file values)
        4. Default values
        """
        return (
            env_settings,
            dotenv_settings,
            init_settings,
            file_secret_settings,
        )

    @classmethod
    def from_config_file(cls, config_path: Optional[Path] = None) -> "Settings":
        """Create Settings instance from config file.

        Args:
            config_path: Optional path to config file

        Returns:
            Settings instance with values from config file and environment
        """
        config_data = load_config_file(config_path)
        return cls(**config_data)


def load_settings(config_path: Optional[str] = None) -> Settings:
    """Load application settings from config file and environment.

    Args:
        config_path: Optional path to config file

    Returns:
        Settings instance with all configuration loaded
    """
    if config_path is None:
        config_path = os.getenv("STOREFRONT_CACHE_CONFIG_FILE")

    path_obj = Path(config_path) if config_path else None

    settings = Settings.from_config_file(path_obj)

    logger.info("Configuration loaded successfully")
    logger.info(f"  Cache backend: {settings.cache_backend}")
    logger.info(f"  Backing store: {settings.backing_store}")
    logger.info(f"  Log level: {settings.log_level}")

    if settings.backing_store == "supabase" and not (settings.supabase_url and settings.supabase_key):
        logger.warning(
            "Supabase backing store selected without STOREFRONT_CACHE_SUPABASE_URL / "
            "STOREFRONT_CACHE_SUPABASE_KEY; every lookup will fall back to empty results"
        )

    return settings


# Global settings instance
# This will be loaded when the module is imported
try:
    settings = load_settings()
except Exception as e:
    logger.warning(f"Error loading config file, using defaults: {e}")
    settings = Settings()
