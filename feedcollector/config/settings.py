"""
FeedCollector Configuration
===========================

Configuration management with environment variables and Pydantic models.
Environment variables (prefix ``FEEDCOLLECTOR_``, nested delimiter ``__``)
override Field defaults.
"""

from pathlib import Path
from typing import Optional
from enum import Enum

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings

from ..utils.exceptions import ConfigurationError, ErrorCode


class LogLevel(str, Enum):
    """Available log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class HttpSettings(BaseModel):
    """Transport configuration for the fetcher."""
    user_agent: str = Field(
        default="FeedCollector/1.0 (+https://github.com/feedcollector/feedcollector)",
        description="User-Agent header sent with every request",
    )
    accept: str = Field(
        default="application/rss+xml, application/atom+xml, application/xml, text/xml, text/html, */*",
        description="Accept header sent with every request",
    )
    request_timeout: int = Field(default=30, ge=1, le=300, description="Total transport timeout in seconds")
    connection_limit: int = Field(default=100, ge=0, description="Connection pool size (0 means unlimited)")
    limit_per_host: int = Field(default=5, ge=0, description="Connections per host (0 means unlimited)")
    verify_ssl: bool = Field(default=True, description="Verify TLS certificates against the certifi bundle")


class ProcessingSettings(BaseModel):
    """Fan-out configuration."""
    max_concurrent_fetches: Optional[int] = Field(
        default=None,
        ge=1,
        description="Bound on in-flight sources per batch or discovery call; unset means unbounded",
    )


class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: LogLevel = Field(default=LogLevel.INFO, description="Global log level")
    file_path: Optional[str] = Field(default=None, description="Log file path")
    max_file_size_mb: int = Field(default=10, ge=1, le=100, description="Max log file size in MB")
    backup_count: int = Field(default=5, ge=1, le=20, description="Number of log backup files")
    structured_logging: bool = Field(default=False, description="Use structured JSON logging")
    console_logging: bool = Field(default=True, description="Enable console logging")

    @field_validator("file_path")
    @classmethod
    def empty_path_is_none(cls, v):
        if v is not None and not v.strip():
            return None
        return v


class CollectorSettings(BaseSettings):
    """Main collector settings."""

    http: HttpSettings = Field(default_factory=HttpSettings)
    processing: ProcessingSettings = Field(default_factory=ProcessingSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)

    app_name: str = Field(default="FeedCollector", description="Application name")
    version: str = Field(default="1.0.0", description="Application version")
    debug: bool = Field(default=False, description="Enable debug mode")

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "env_nested_delimiter": "__",
        "env_prefix": "FEEDCOLLECTOR_",
        "extra": "ignore",
    }

    def validate_configuration(self) -> None:
        """Validate settings that depend on the environment."""
        errors = []

        if self.logging.file_path:
            try:
                log_path = Path(self.logging.file_path)
                log_path.parent.mkdir(parents=True, exist_ok=True)
            except OSError as e:
                errors.append(f"Invalid log file path: {e}")

        if errors:
            raise ConfigurationError(
                f"Configuration validation failed: {'; '.join(errors)}",
                error_code=ErrorCode.CONFIG_INVALID,
            )

    def get_effective_log_level(self) -> str:
        """Get effective log level considering debug mode."""
        if self.debug:
            return "DEBUG"
        return self.logging.level.value

    def configure_logging(self) -> None:
        """Apply the logging section to the ``feedcollector`` logger tree."""
        from ..utils.logging import configure_application_logging

        configure_application_logging(
            log_level=self.get_effective_log_level(),
            log_file=self.logging.file_path,
            enable_console=self.logging.console_logging,
            structured_logging=self.logging.structured_logging,
            max_file_size_mb=self.logging.max_file_size_mb,
            backup_count=self.logging.backup_count,
        )


def load_settings() -> CollectorSettings:
    """Load settings from environment variables and defaults.

    Returns:
        Loaded and validated settings

    Raises:
        ConfigurationError: If configuration is invalid
    """
    from dotenv import load_dotenv
    load_dotenv()

    try:
        settings = CollectorSettings()
        settings.validate_configuration()
        return settings

    except ConfigurationError:
        raise
    except Exception as e:
        raise ConfigurationError(
            f"Failed to initialize settings: {e}",
            error_code=ErrorCode.CONFIG_INVALID,
        ) from e


_settings: Optional[CollectorSettings] = None


def get_settings(reload: bool = False) -> CollectorSettings:
    """Get global settings instance (singleton pattern).

    Args:
        reload: Force reload of settings

    Returns:
        Global settings instance
    """
    global _settings

    if _settings is None or reload:
        _settings = load_settings()

    return _settings
