"""
PDF Gateway Configuration Module

Centralized configuration management with Pydantic validation.
All environment variables are validated at startup so a missing API key
or a bad setting stops the process before it starts serving.
"""

import logging
from functools import lru_cache
from typing import List, Optional

from pydantic import Field, ValidationError, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# Chromium flags for running as an unprivileged container process.
DEFAULT_CHROMIUM_ARGS = ",".join([
    "--no-sandbox",
    "--disable-setuid-sandbox",
    "--disable-dev-shm-usage",
    "--disable-accelerated-2d-canvas",
    "--no-first-run",
    "--no-zygote",
    "--single-process",
    "--disable-gpu",
])


class GatewaySettings(BaseSettings):
    """
    PDF gateway configuration with validation.

    All settings can be overridden via environment variables
    (case-insensitive, no prefix) or a local .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
    )

    # === Security ===
    api_key: str = Field(
        ...,
        min_length=1,
        description="Shared secret every caller must present (API_KEY)"
    )
    environment: str = Field(
        default="production",
        description="Environment: development, staging, production"
    )
    debug_endpoint_enabled: bool = Field(
        default=True,
        description="Expose the /debug diagnostic endpoint"
    )

    # === Server ===
    host: str = Field(default="0.0.0.0", description="Bind address")
    port: int = Field(default=3000, ge=1, le=65535, description="Listening port")
    log_level: str = Field(default="INFO", description="Root log level")

    # === CORS ===
    cors_origins: str = Field(
        default="*",
        description="Comma-separated list of allowed CORS origins"
    )

    # === Browser ===
    chromium_executable_path: Optional[str] = Field(
        default=None,
        description="Chromium binary to launch (defaults to Playwright's bundled build)"
    )
    chromium_args: str = Field(
        default=DEFAULT_CHROMIUM_ARGS,
        description="Comma-separated Chromium command line flags"
    )
    browser_headless: bool = Field(
        default=True,
        description="Run Chromium headless"
    )

    @field_validator("environment")
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Validate environment is a known value."""
        allowed = {"development", "staging", "production"}
        v_lower = v.lower()
        if v_lower not in allowed:
            raise ValueError(f"environment must be one of: {', '.join(sorted(allowed))}")
        return v_lower

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is one the logging module knows."""
        v_upper = v.upper()
        if v_upper not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Invalid log level: {v}")
        return v_upper

    @field_validator("chromium_executable_path")
    @classmethod
    def blank_path_is_unset(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins into a list."""
        return [origin.strip() for origin in self.cors_origins.split(",") if origin.strip()]

    @property
    def chromium_args_list(self) -> List[str]:
        """Parse Chromium flags into a list."""
        return [arg.strip() for arg in self.chromium_args.split(",") if arg.strip()]

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.environment == "production"

    @property
    def include_stack_traces(self) -> bool:
        """Stack traces are only returned to callers outside production."""
        return not self.is_production


@lru_cache()
def get_settings() -> GatewaySettings:
    """
    Get cached settings instance.

    Settings are loaded once per process and treated as immutable.
    """
    return GatewaySettings()


def validate_config_on_startup() -> GatewaySettings:
    """
    Validate configuration at process startup.

    Raises ValueError with details if config is invalid.
    """
    logger = logging.getLogger(__name__)

    try:
        settings = get_settings()
    except ValidationError as e:
        if any(err["loc"] == ("api_key",) for err in e.errors()):
            raise ValueError("API_KEY environment variable is required") from e
        raise ValueError(f"Configuration validation failed: {e}") from e

    # Log loaded configuration (redact secrets)
    logger.info(f"Configuration loaded: environment={settings.environment}")
    logger.info(f"  listen={settings.host}:{settings.port}")
    logger.info(f"  chromium_executable_path={settings.chromium_executable_path or '<bundled>'}")
    logger.info(f"  debug_endpoint_enabled={settings.debug_endpoint_enabled}")

    return settings
