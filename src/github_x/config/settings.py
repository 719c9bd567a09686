"""
Configuration settings for github-x.

This module provides configuration management using Pydantic settings
with support for environment variables, ``.env`` files and command-line
overrides.
"""

from typing import Optional, Dict, Any
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ACCESS_TOKEN_ENV = "GITHUB_AT"
URL_ENV = "GITHUB_URL"


class GitHubXSettings(BaseSettings):
    """
    Main configuration settings for github-x.

    Settings are loaded from multiple sources in order of preference:
    1. Command-line options (passed as overrides)
    2. Environment variables (GITHUB_AT, GITHUB_URL, GITHUB_X_*)
    3. A discovered .env file (see EnvFileLoader)
    4. Default values
    """

    model_config = SettingsConfigDict(
        env_prefix="GITHUB_X_",
        case_sensitive=False,
        extra="ignore",
        populate_by_name=True,
    )

    # API Configuration
    access_token: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(ACCESS_TOKEN_ENV, "GITHUB_X_ACCESS_TOKEN"),
        description="Personal access token"
    )

    url: Optional[str] = Field(
        default=None,
        validation_alias=AliasChoices(URL_ENV, "GITHUB_X_URL"),
        description="Base URL of the GitHub API"
    )

    timeout: float = Field(
        default=30.0,
        description="Request timeout in seconds",
        gt=0
    )

    # Output Configuration
    verbose: bool = Field(
        default=False,
        description="Log every request and the parsed arguments"
    )

    json_output: bool = Field(
        default=False,
        description="Always print results as JSON, even single values"
    )

    # Logging Configuration
    log_level: str = Field(
        default="WARNING",
        description="Logging level"
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        v_upper = v.upper()
        if v_upper not in valid_levels:
            raise ValueError(f"Invalid log level '{v}'. Valid levels: {', '.join(sorted(valid_levels))}")
        return v_upper

    @field_validator("access_token", "url")
    @classmethod
    def blank_to_none(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.strip():
            return None
        return v

    @property
    def effective_log_level(self) -> str:
        return "DEBUG" if self.verbose else self.log_level

    def to_dict(self) -> Dict[str, Any]:
        """Convert settings to dictionary, excluding sensitive data."""
        data = self.model_dump()
        # Mask sensitive data
        if data.get("access_token"):
            data["access_token"] = "***masked***"
        return data


def get_settings(**overrides: Any) -> GitHubXSettings:
    """
    Get settings with command-line overrides applied.

    Overrides whose value is None are ignored so that an unset option falls
    back to the environment.
    """
    return GitHubXSettings(**{k: v for k, v in overrides.items() if v is not None})
