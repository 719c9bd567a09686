"""
Entry point for running github-x as a module.

This allows users to run the CLI using:
    python -m github_x [command] [options]
"""

from github_x.cli.app import main

if __name__ == "__main__":
    main()
