"""
Core components for github-x.

This package provides the API client and the helper that turns local file
changes into a single remote commit.
"""

__all__ = ["client", "commit"]
