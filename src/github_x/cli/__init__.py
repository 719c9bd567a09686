"""
CLI interface package for github-x.

This package contains the command-line interface components: the Typer
application and the output helpers.
"""

__all__ = ["app", "output"]
