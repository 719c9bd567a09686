"""
GitHub REST API client for github-x.

This package provides the HTTP request layer, project identifier
resolution, commit payload models and the structured error types.
"""

from typing import Optional

import httpx

from ...config.settings import ACCESS_TOKEN_ENV, URL_ENV, GitHubXSettings
from .driver import GitHubApiDriver, API_PATH
from .errors import (
    GitHubApiError,
    AuthenticationError,
    AuthorizationError,
    NotFoundError,
    ConflictError,
    InvalidRequestError,
    ServerError,
    NetworkError,
    TimeoutError,
    ConfigurationError,
    InvalidProjectIdentifierError,
    BranchNotFoundError,
    CommitError,
    classify_http_error,
    create_user_friendly_message,
)
from .identifiers import ResolvedIdentifier, resolve_project_identifier, normalize_base_url
from .models import (
    CommitAction,
    CommitActionType,
    CommitObject,
    CommitResult,
    ContentEncoding,
)


def require_credentials(settings: GitHubXSettings) -> None:
    """
    Fail before any network call when the token or URL is missing.

    Raises:
        ConfigurationError: If the access token or the URL is not configured
    """
    if settings.access_token is None:
        raise ConfigurationError(
            "no access token specified. Either set it as ENV variable "
            f"'{ACCESS_TOKEN_ENV}' or pass it with [-t | --access-token]",
            config_field="access_token",
        )
    if settings.url is None:
        raise ConfigurationError(
            "no GitHub URL specified. Either set it as ENV variable "
            f"'{URL_ENV}' or pass it with [-u | --url]",
            config_field="url",
        )


def create_api_driver(
    settings: GitHubXSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> GitHubApiDriver:
    """Create an API driver from resolved settings."""
    require_credentials(settings)
    return GitHubApiDriver(
        base_url=settings.url,
        access_token=settings.access_token,
        verbose=settings.verbose,
        timeout=settings.timeout,
        transport=transport,
    )


__all__ = [
    "GitHubApiDriver",
    "API_PATH",
    "create_api_driver",
    "require_credentials",
    # Errors
    "GitHubApiError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "InvalidRequestError",
    "ServerError",
    "NetworkError",
    "TimeoutError",
    "ConfigurationError",
    "InvalidProjectIdentifierError",
    "BranchNotFoundError",
    "CommitError",
    "classify_http_error",
    "create_user_friendly_message",
    # Identifiers
    "ResolvedIdentifier",
    "resolve_project_identifier",
    "normalize_base_url",
    # Models
    "CommitAction",
    "CommitActionType",
    "CommitObject",
    "CommitResult",
    "ContentEncoding",
]
