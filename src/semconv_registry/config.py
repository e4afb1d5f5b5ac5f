"""
Centralized configuration for the semantic convention registry resolver.

Uses Pydantic BaseSettings for environment variable integration
and validation.

Configuration sources (in order of precedence):
1. Explicit constructor arguments
2. Environment variables (SEMCONV_REGISTRY_*)
3. .env file
4. Default values

Example:
    from semconv_registry.config import get_config

    config = get_config()
    print(config.max_workers)  # From SEMCONV_REGISTRY_MAX_WORKERS or 1

    # Override at runtime
    config = get_config(max_workers=4, fail_fast=True)
"""

from __future__ import annotations

from typing import Literal, Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class RegistryConfig(BaseSettings):
    """
    Resolution settings.

    All settings can be overridden via environment variables
    prefixed with SEMCONV_REGISTRY_.

    Example:
        export SEMCONV_REGISTRY_MAX_WORKERS=8
        export SEMCONV_REGISTRY_DECLARED_NAMESPACES='["db", "http"]'
    """

    model_config = SettingsConfigDict(
        env_prefix="SEMCONV_REGISTRY_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Service identification
    service_name: str = Field(
        default="semconv-registry",
        description="Service name attached to structured resolution events",
    )

    # Resolution
    max_workers: int = Field(
        default=1,
        ge=1,
        description="Worker threads for the inheritance merge (1 = sequential)",
    )
    fail_fast: bool = Field(
        default=False,
        description="Stop at the first error instead of collecting a phase's errors",
    )
    check_override_examples: bool = Field(
        default=True,
        description="Reject reference example overrides that do not fit the attribute type",
    )

    # Namespace organization
    other_family: str = Field(
        default="other",
        min_length=1,
        description="Bucket for groups without a family of their own",
    )
    declared_namespaces: Optional[list[str]] = Field(
        default=None,
        description="Root namespaces shown as their own attribute families",
    )

    # Logging
    log_level: Literal["debug", "info", "warning", "error"] = Field(
        default="info",
        description="Level of the structured resolution event logger",
    )
    log_format: Literal["json", "text"] = Field(
        default="json",
        description="Event output format (json for log shippers, text for console)",
    )

    @field_validator("declared_namespaces")
    @classmethod
    def strip_namespaces(cls, v: Optional[list[str]]) -> Optional[list[str]]:
        """Drop blanks and surrounding whitespace."""
        if v is None:
            return v
        return [ns.strip() for ns in v if ns.strip()]


# Global singleton
_config: Optional[RegistryConfig] = None


def get_config(**overrides) -> RegistryConfig:
    """
    Get the global configuration instance.

    Creates a singleton on first call. Subsequent calls return
    the same instance unless overrides are provided.

    Args:
        **overrides: Override any config values

    Returns:
        RegistryConfig instance
    """
    global _config

    if overrides or _config is None:
        _config = RegistryConfig(**overrides)

    return _config


def reset_config() -> None:
    """Reset the global configuration (for testing)."""
    global _config
    _config = None


def get_log_level() -> str:
    """Get the configured log level."""
    return get_config().log_level
