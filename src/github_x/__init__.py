"""
github-x - GitHub Executor API Interface.

This package provides a command-line interface for querying and committing
to a single GitHub repository through the REST API, without a web UI.
"""

__version__ = "0.1.0"
__author__ = "github-x Team"
__license__ = "Apache-2.0"

from typing import Final

# Package metadata
VERSION: Final[str] = __version__
PACKAGE_NAME: Final[str] = "github-x"
USER_AGENT: Final[str] = f"{PACKAGE_NAME}/{VERSION}"

# Re-export commonly used items
__all__ = [
    "__version__",
    "VERSION",
    "PACKAGE_NAME",
    "USER_AGENT",
]
