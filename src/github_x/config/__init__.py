"""
Configuration package for github-x.

This package contains configuration management: settings resolved from the
environment and command line, and hierarchical .env file loading.
"""

__all__ = ["settings", "env_loader"]
