"""Configuration loading for the logslack notification system.

This module provides centralized configuration management:
- Load settings from environment variables and .env files
- Validate configuration using pydantic
- Provide typed access to all settings

List and mapping settings (CLASS_PACKAGES, EXCEPTION_PACKAGES,
PACKAGE_TO_MODULE_MAPPING, EXCLUDE_FILTERS) are JSON encoded in the
environment, e.g.

    CLASS_PACKAGES='["com.awesome.project"]'
    PACKAGE_TO_MODULE_MAPPING='{"com.awesome.project.(\\\\w+).(\\\\w+)": "$1-$2"}'
"""

import re
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from logslack.core.models import FormattingRules, ModuleMapping


def _validate_patterns(patterns: list[str], setting: str) -> None:
    for pattern in patterns:
        try:
            re.compile(pattern)
        except re.error as e:
            raise ValueError(f"{setting} contains an invalid pattern {pattern!r}: {e}")


class Settings(BaseSettings):
    """Application configuration loaded from environment.

    Uses pydantic-settings for environment variable handling with
    .env file support via python-dotenv.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Slack delivery
    channel_name: str = Field(
        default="",
        description="Slack channel to post to (e.g. my-awesome-project-logs)",
    )
    slack_path: str = Field(
        default="",
        description="Incoming webhook path (e.g. /services/aaaa/bbbb/cccc)",
    )
    slack_host: str = Field(
        default="hooks.slack.com",
        description="Incoming webhook host",
    )
    application_name: str = Field(
        default="",
        description="Project name displayed in the notification title",
    )
    notification_backend: Literal["slack", "stdout"] = Field(
        default="slack",
        description="Notification backend type",
    )
    dispatch_timeout_seconds: float = Field(
        default=10.0,
        description="Timeout for a single notification request",
    )

    # Source control links
    vcs_search_url: str = Field(
        default="",
        description="Prefix of the VCS search URL used when a frame cannot be mapped",
    )
    vcs_file_url: str = Field(
        default="",
        description="Prefix of the VCS file URL (revision and path are appended)",
    )
    vcs_tree_url: str = Field(
        default="",
        description="Prefix of the VCS tree URL used for version links",
    )

    # Formatting rules
    class_packages: list[str] = Field(
        default_factory=list,
        description="Application package patterns, used to shorten frames",
    )
    exception_packages: list[str] = Field(
        default_factory=list,
        description="Exception package patterns stripped from exception names",
    )
    package_to_module_mapping: dict[str, str] = Field(
        default_factory=dict,
        description="Ordered package pattern to module path template mapping",
    )
    exclude_filters: list[dict[str, str]] = Field(
        default_factory=list,
        description="Exclusion rules; a record matching every field of one rule is dropped",
    )

    # Log search UI
    log_search_url: str = Field(
        default="",
        description="Log search UI URL prefix; the record id is appended",
    )
    log_search_context_url: str = Field(
        default="",
        description="Log search UI context view URL prefix, preferred when set",
    )

    # Logging configuration
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Log level",
    )
    log_format: Literal["json", "text"] = Field(
        default="text",
        description="Log format",
    )

    # Run mode
    run_mode: Literal["cli", "webhook"] = Field(
        default="cli",
        description="Run mode",
    )
    event_file: str = Field(
        default="",
        description="Invocation event JSON file for CLI mode (stdin when empty)",
    )

    # Webhook configuration
    webhook_host: str = Field(
        default="0.0.0.0",
        description="Host to listen on for webhook server",
    )
    webhook_port: int = Field(
        default=8080,
        description="Port to listen on for webhook server",
    )
    webhook_api_key: str = Field(
        default="",
        description="API key for webhook authentication (required for production)",
    )
    webhook_require_auth: bool = Field(
        default=False,
        description="Require API key authentication for webhook endpoints",
    )

    # Development
    debug: bool = Field(
        default=False,
        description="Enable debug mode with verbose output",
    )

    @field_validator("class_packages", "exception_packages")
    @classmethod
    def validate_package_patterns(cls, v: list[str]) -> list[str]:
        """Ensure every package pattern is a valid regex."""
        _validate_patterns(v, "package list")
        return v

    @field_validator("package_to_module_mapping")
    @classmethod
    def validate_module_mapping(cls, v: dict[str, str]) -> dict[str, str]:
        """Ensure every mapping key is a valid regex."""
        _validate_patterns(list(v), "package_to_module_mapping")
        return v

    @field_validator("exclude_filters")
    @classmethod
    def validate_exclude_filters(
        cls, v: list[dict[str, str]]
    ) -> list[dict[str, str]]:
        """Ensure every exclusion pattern is a valid regex."""
        for rule in v:
            _validate_patterns(list(rule.values()), "exclude_filters")
        return v

    @field_validator("slack_path")
    @classmethod
    def validate_slack_path(cls, v: str) -> str:
        """Ensure the webhook path is absolute."""
        if v and not v.startswith("/"):
            raise ValueError("slack_path must start with '/'")
        return v

    @field_validator("dispatch_timeout_seconds")
    @classmethod
    def validate_dispatch_timeout(cls, v: float) -> float:
        """Ensure dispatch timeout is positive."""
        if v <= 0:
            raise ValueError("dispatch_timeout_seconds must be positive")
        return v

    @field_validator("webhook_port")
    @classmethod
    def validate_webhook_port(cls, v: int) -> int:
        """Ensure webhook port is in valid range."""
        if v <= 0 or v > 65535:
            raise ValueError("webhook_port must be between 1 and 65535")
        return v

    def formatting_rules(self) -> FormattingRules:
        """Freeze the formatting-related settings into core rules."""
        return FormattingRules(
            application_packages=tuple(self.class_packages),
            exception_packages=tuple(self.exception_packages),
            module_mapping=tuple(
                ModuleMapping(pattern=pattern, template=template)
                for pattern, template in self.package_to_module_mapping.items()
            ),
            exclusion_rules=tuple(self.exclude_filters),
            vcs_file_url=self.vcs_file_url,
            vcs_search_url=self.vcs_search_url,
            vcs_tree_url=self.vcs_tree_url,
        )

    @property
    def deep_link_prefix(self) -> str | None:
        """Log search URL prefix for per-record deep links, if configured."""
        return self.log_search_context_url or self.log_search_url or None


def load_settings(env_file: str | None = None) -> Settings:
    """Load application settings from environment.

    Args:
        env_file: Optional path to .env file. If not provided,
                 uses the default .env in the current directory.

    Returns:
        Validated Settings instance.

    Raises:
        ValidationError: If settings validation fails.
    """
    if env_file:
        return Settings(_env_file=env_file)  # type: ignore[call-arg]
    return Settings()


__all__ = ["Settings", "load_settings"]
