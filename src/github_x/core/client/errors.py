"""
Structured error system for the github-x API client.

This module provides the exception hierarchy raised by the API driver and
the commit helper, plus helpers to classify httpx failures and render them
for the console.
"""

from typing import Any, Dict, Optional
import logging

import httpx

logger = logging.getLogger(__name__)


class GitHubApiError(Exception):
    """Base exception for all GitHub API related errors."""

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        original_error: Optional[Exception] = None
    ):
        super().__init__(message)
        self.message = message
        self.status = status
        self.code = code
        self.details = details or {}
        self.original_error = original_error

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        return {
            "message": self.message,
            "status": self.status,
            "code": self.code,
            "details": self.details,
            "type": self.__class__.__name__
        }

    def __str__(self) -> str:
        parts = [self.message]
        if self.status:
            parts.append(f"(Status: {self.status})")
        if self.code:
            parts.append(f"(Code: {self.code})")
        return " ".join(parts)


class AuthenticationError(GitHubApiError):
    """Error related to authentication issues."""

    def __init__(self, message: str = "Authentication failed", **kwargs):
        super().__init__(message, status=401, code="AUTHENTICATION_ERROR", **kwargs)


class AuthorizationError(GitHubApiError):
    """Error related to authorization/permission issues."""

    def __init__(
        self,
        message: str = "Authorization failed",
        resource: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, status=403, code="AUTHORIZATION_ERROR", **kwargs)
        if resource:
            self.details["resource"] = resource


class NotFoundError(GitHubApiError):
    """Error when the requested resource does not exist."""

    def __init__(
        self,
        message: str = "Resource not found",
        resource: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, status=404, code="NOT_FOUND", **kwargs)
        if resource:
            self.details["resource"] = resource


class ConflictError(GitHubApiError):
    """Error when the remote state conflicts with the request."""

    def __init__(self, message: str = "Conflict", **kwargs):
        super().__init__(message, status=409, code="CONFLICT", **kwargs)


class InvalidRequestError(GitHubApiError):
    """Error for invalid API requests (400 and 422)."""

    def __init__(
        self,
        message: str = "Invalid request",
        status: int = 400,
        **kwargs
    ):
        super().__init__(message, status=status, code="INVALID_REQUEST", **kwargs)


class ServerError(GitHubApiError):
    """Error for server-side issues."""

    def __init__(self, message: str = "Server error", **kwargs):
        super().__init__(message, code="SERVER_ERROR", **kwargs)
        if not kwargs.get("status"):
            self.status = 500


class NetworkError(GitHubApiError):
    """Error for network-related issues."""

    def __init__(self, message: str = "Network error", **kwargs):
        super().__init__(message, code="NETWORK_ERROR", **kwargs)


class TimeoutError(GitHubApiError):
    """Error for request timeouts."""

    def __init__(
        self,
        message: str = "Request timeout",
        timeout_seconds: Optional[float] = None,
        **kwargs
    ):
        super().__init__(message, code="TIMEOUT_ERROR", **kwargs)
        if timeout_seconds:
            self.details["timeout_seconds"] = timeout_seconds


class ConfigurationError(GitHubApiError):
    """Error related to missing or invalid client configuration."""

    def __init__(
        self,
        message: str = "Configuration error",
        config_field: Optional[str] = None,
        **kwargs
    ):
        super().__init__(message, code="CONFIGURATION_ERROR", **kwargs)
        if config_field:
            self.details["config_field"] = config_field


class InvalidProjectIdentifierError(GitHubApiError):
    """Error when a project identifier cannot be mapped to an API path."""

    def __init__(self, identifier: str, **kwargs):
        super().__init__(
            f"'{identifier}' is an invalid identifier for a project",
            code="INVALID_IDENTIFIER",
            **kwargs
        )
        self.details["identifier"] = identifier


class BranchNotFoundError(GitHubApiError):
    """Error when a commit targets a branch that does not exist."""

    def __init__(self, branch: str, project: str, **kwargs):
        super().__init__(
            f"Branch '{branch}' does not exist for project '{project}'",
            code="BRANCH_NOT_FOUND",
            **kwargs
        )
        self.details["branch"] = branch
        self.details["project"] = project


class CommitError(GitHubApiError):
    """Error raised while preparing a commit from local files."""

    def __init__(self, message: str = "Commit failed", **kwargs):
        super().__init__(message, code="COMMIT_ERROR", **kwargs)


def classify_http_error(error: Exception, message: Optional[str] = None) -> GitHubApiError:
    """
    Classify an httpx exception into a structured GitHubApiError.

    Args:
        error: The original exception
        message: Context message; the original error is appended to it

    Returns:
        Classified GitHubApiError instance with the original error attached
    """
    if isinstance(error, GitHubApiError):
        return error

    if message:
        full_message = f"{message}\n\nOriginal Error:\n{error}"
    else:
        full_message = str(error)

    if isinstance(error, httpx.TimeoutException):
        return TimeoutError(full_message, original_error=error)
    if isinstance(error, httpx.HTTPStatusError):
        status = error.response.status_code
        if status == 401:
            return AuthenticationError(full_message, original_error=error)
        elif status == 403:
            return AuthorizationError(full_message, original_error=error)
        elif status == 404:
            return NotFoundError(full_message, original_error=error)
        elif status == 409:
            return ConflictError(full_message, original_error=error)
        elif status in (400, 422):
            return InvalidRequestError(full_message, status=status, original_error=error)
        elif 500 <= status < 600:
            return ServerError(full_message, status=status, original_error=error)
        return GitHubApiError(full_message, status=status, original_error=error)
    if isinstance(error, httpx.RequestError):
        return NetworkError(full_message, original_error=error)

    return GitHubApiError(full_message, original_error=error)


def is_not_found(error: Exception) -> bool:
    """Check whether an error is an HTTP 404 response."""
    if isinstance(error, httpx.HTTPStatusError):
        return error.response.status_code == 404
    return isinstance(error, NotFoundError)


def create_user_friendly_message(error: GitHubApiError) -> str:
    """
    Create a user-friendly error message.

    Args:
        error: The GitHubApiError to convert

    Returns:
        User-friendly error message
    """
    if isinstance(error, AuthenticationError):
        return "Authentication failed. Please check the access token (GITHUB_AT or --access-token)."

    elif isinstance(error, AuthorizationError):
        return "The access token does not grant permission for this resource."

    elif isinstance(error, NotFoundError):
        resource = error.details.get("resource")
        if resource:
            return f"'{resource}' was not found."
        return "The requested resource was not found. Check the project identifier and branch."

    elif isinstance(error, NetworkError):
        return "Network error occurred. Please check the API URL and your connection."

    elif isinstance(error, TimeoutError):
        return "The request timed out. Please try again."

    elif isinstance(error, ServerError):
        return "The GitHub server reported an error. Please try again later."

    else:
        return error.message
