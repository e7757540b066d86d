"""Configuration management - loads environment variables into typed settings."""

import re
from functools import lru_cache
from typing import Literal
from urllib.parse import urlparse

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from oembed_provider import HttpMetadataBackend, MetadataBackend, PatternMetadataBackend, ProviderConfig

_DOMAIN_LABEL_RE = re.compile(r"^[a-z0-9]([a-z0-9-]*[a-z0-9])?$")


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Server Configuration
    server_host: str = Field(default="127.0.0.1", description="Host for the provider to listen on")
    server_port: int = Field(default=8080, description="Port for the provider to listen on")
    environment: Literal["dev", "stage", "prod", "test"] = Field(
        default="dev",
        description="Deployment environment name",
    )

    # Provider Identity
    provider_name: str = Field(
        default="oEmbed Provider",
        description="Name emitted as provider_name on every oEmbed response",
    )
    provider_url: str = Field(
        default="https://example.com",
        description="URL emitted as provider_url on every oEmbed response",
    )
    provider_domain: str | None = Field(
        default=None,
        description="Domain content URLs must belong to (subdomains allowed). Requests fail with 500 when unset",
    )

    # Metadata Backend
    backend_base_url: str | None = Field(
        default=None,
        description="Base URL of the content metadata service (optional; if empty, metadata is derived from URL patterns)",
    )
    backend_timeout_s: float = Field(
        default=5.0,
        description="Total timeout for metadata backend requests (seconds)",
    )
    backend_connect_timeout_s: float = Field(
        default=2.0,
        description="Connection timeout for metadata backend requests (seconds)",
    )
    backend_max_retries: int = Field(
        default=2,
        description="Retries for unreachable or timed-out metadata backend requests",
    )

    # Logging Configuration
    log_level: str = Field(
        default="INFO",
        description="Log level: DEBUG, INFO, WARNING, ERROR, CRITICAL",
    )

    @field_validator("server_port")
    @classmethod
    def validate_port(cls, v: int) -> int:
        """Validate port is in valid range."""
        if not (1 <= v <= 65535):
            raise ValueError(f"server_port must be between 1 and 65535, got {v}")
        return v

    @field_validator("backend_timeout_s", "backend_connect_timeout_s")
    @classmethod
    def validate_timeout(cls, v: float) -> float:
        """Validate timeout is positive."""
        if v <= 0:
            raise ValueError(f"Timeout must be positive, got {v}")
        return v

    @field_validator("backend_max_retries")
    @classmethod
    def validate_retries(cls, v: int) -> int:
        if v < 0:
            raise ValueError(f"backend_max_retries must not be negative, got {v}")
        return v

    @field_validator("provider_url", "backend_base_url")
    @classmethod
    def validate_url(cls, v: str | None) -> str | None:
        """Validate URL format if provided."""
        if v is None or v == "":
            return None
        parsed = urlparse(v)
        if parsed.scheme not in ("http", "https"):
            raise ValueError(f"URL must use http or https scheme, got {v}")
        if not parsed.netloc:
            raise ValueError(f"URL must have a valid host, got {v}")
        return v

    @field_validator("provider_domain")
    @classmethod
    def validate_domain(cls, v: str | None) -> str | None:
        """Validate the provider domain is a DNS name; normalized to lower case."""
        if v is None or not v.strip():
            return None
        domain = v.strip().lower()
        labels = domain.split(".")
        if len(domain) > 253 or len(labels) < 2:
            raise ValueError(f"provider_domain must be a valid domain name, got {v}")
        if not all(len(label) <= 63 and _DOMAIN_LABEL_RE.match(label) for label in labels):
            raise ValueError(f"provider_domain must be a valid domain name, got {v}")
        return domain

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level is valid."""
        valid_levels = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
        if v.upper() not in valid_levels:
            raise ValueError(f"log_level must be one of {valid_levels}, got {v}")
        return v.upper()

    def to_provider_config(self) -> ProviderConfig:
        """Build the immutable provider configuration used by the core library."""
        return ProviderConfig(
            provider_name=self.provider_name,
            provider_url=self.provider_url or "https://example.com",
            provider_domain=self.provider_domain,
        )

    def build_backend(self) -> MetadataBackend:
        """Select the metadata backend: HTTP when a backend URL is configured, URL patterns otherwise."""
        if self.backend_base_url:
            return HttpMetadataBackend(
                self.backend_base_url,
                timeout_s=self.backend_timeout_s,
                connect_timeout_s=self.backend_connect_timeout_s,
                max_retries=self.backend_max_retries,
            )
        return PatternMetadataBackend()


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Get the application settings singleton.

    Settings are loaded from environment variables and .env file on first call.
    Subsequent calls return the cached instance.

    Raises:
        ValueError: If settings are invalid.

    Returns:
        Settings: The validated settings instance.
    """
    try:
        return Settings()
    except Exception as e:
        raise ValueError(
            f"Failed to load configuration: {e}\n"
            "Please check your .env file and ensure all settings are valid."
        ) from e
