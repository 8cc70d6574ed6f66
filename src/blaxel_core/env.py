"""Layered environment variable lookup.

Values are looked up in three places, first non-empty wins:

1. ``.env`` file in the working directory (python-dotenv)
2. ``[env]`` table of ``blaxel.toml`` in the working directory
3. ``os.environ``

Both files are optional and read lazily, once per ``Environment`` instance.
"""

import logging
import os
import tomllib
from pathlib import Path
from threading import Lock

from dotenv import dotenv_values

logger = logging.getLogger(__name__)


class Environment:
    """Read-mostly view over ``.env``, ``blaxel.toml`` and the process environment.

    Example:
        ```python
        env = Environment()
        workspace = env.get("BL_WORKSPACE")

        # Skip file loading entirely (process environment only)
        env = Environment(load_files=False)
        ```
    """

    def __init__(
        self,
        dotenv_path: str | Path | None = ".env",
        toml_path: str | Path | None = "blaxel.toml",
        load_files: bool = True,
    ):
        self._dotenv_path = dotenv_path
        self._toml_path = toml_path
        self._load_files_enabled = load_files
        self._files_loaded = False
        self._files_lock = Lock()
        self._secret_env: dict[str, str] = {}
        self._config_env: dict[str, str] = {}

    def _ensure_files_loaded(self) -> None:
        if self._files_loaded or not self._load_files_enabled:
            return

        with self._files_lock:
            # Double-check pattern for thread safety
            if self._files_loaded:
                return

            self._secret_env = self._read_dotenv()
            self._config_env = self._read_toml()
            self._files_loaded = True

    def _read_dotenv(self) -> dict[str, str]:
        if self._dotenv_path is None or not Path(self._dotenv_path).is_file():
            return {}
        try:
            values = dotenv_values(self._dotenv_path)
        except Exception as e:
            logger.warning(f"Failed to load .env file {self._dotenv_path}: {e}")
            return {}
        logger.debug(f"Loaded {len(values)} variables from {self._dotenv_path}")
        return {key: value for key, value in values.items() if value is not None}

    def _read_toml(self) -> dict[str, str]:
        if self._toml_path is None:
            return {}
        path = Path(self._toml_path)
        if not path.is_file():
            return {}
        try:
            with path.open("rb") as file:
                data = tomllib.load(file)
        except (OSError, ValueError) as e:
            logger.warning(f"Failed to load {path}: {e}")
            return {}
        table = data.get("env") or {}
        if not isinstance(table, dict):
            return {}
        return {str(key): str(value) for key, value in table.items()}

    def get(self, name: str, default: str | None = None) -> str | None:
        """Return the first non-empty value for ``name`` across all layers."""
        self._ensure_files_loaded()
        for layer in (self._secret_env, self._config_env, os.environ):
            value = layer.get(name)
            if value:
                return value
        return default

    def setdefault(self, name: str, value: str) -> bool:
        """Set ``name`` in the process environment unless it is already visible.

        Returns:
            True if the variable was written.
        """
        if self.get(name):
            return False
        os.environ[name] = value
        return True
