"""
Hierarchical .env file loading for github-x.

GITHUB_AT and GITHUB_URL can live in a ``.env`` file next to the project a
script runs in instead of the shell environment.
"""

from pathlib import Path
from typing import Optional
import logging

from dotenv import load_dotenv

logger = logging.getLogger(__name__)


class EnvFileLoader:
    """
    .env file loader with hierarchical search.

    Search order (stops at first file found):
    1. Current directory: .github-x/.env → .env
    2. Parent directories (up to git root or home): .github-x/.env → .env
    3. Home directory: ~/.github-x/.env → ~/.env
    """

    CONFIG_DIR_NAME = ".github-x"
    ENV_FILE_NAME = ".env"

    def __init__(self, working_directory: Optional[Path] = None, home_directory: Optional[Path] = None):
        """Initialize env file loader.

        Args:
            working_directory: Starting directory for search
            home_directory: Home directory used as the final fallback
        """
        self.working_directory = Path(working_directory or Path.cwd()).resolve()
        self.home_directory = Path(home_directory or Path.home()).resolve()

    def load_env_file(self) -> Optional[Path]:
        """Load environment variables from the first .env file found.

        Variables already present in the environment are not overridden.

        Returns:
            Path to loaded .env file or None if none found
        """
        env_file_path = self._find_env_file()

        if env_file_path is None:
            logger.debug("No .env file found in search path")
            return None

        load_dotenv(env_file_path, override=False)
        logger.debug(f"Loaded environment variables from: {env_file_path}")
        return env_file_path

    def _find_env_file(self) -> Optional[Path]:
        for candidate in self.get_search_paths():
            if candidate.is_file():
                return candidate
        return None

    def _should_stop_search(self, directory: Path) -> bool:
        """Stop at the git repository root or the home directory."""
        if (directory / ".git").exists():
            return True
        return directory == self.home_directory

    def get_search_paths(self) -> list[Path]:
        """Get list of all paths that would be searched for .env files.

        Returns:
            List of search paths in order
        """
        search_paths = []

        current_dir = self.working_directory
        while True:
            search_paths.append(current_dir / self.CONFIG_DIR_NAME / self.ENV_FILE_NAME)
            search_paths.append(current_dir / self.ENV_FILE_NAME)

            if self._should_stop_search(current_dir) or current_dir == current_dir.parent:
                break
            current_dir = current_dir.parent

        home_paths = [
            self.home_directory / self.CONFIG_DIR_NAME / self.ENV_FILE_NAME,
            self.home_directory / self.ENV_FILE_NAME,
        ]
        for path in home_paths:
            if path not in search_paths:
                search_paths.append(path)

        return search_paths

