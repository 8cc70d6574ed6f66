"""Configuration sources consulted during credential resolution.

A ``ConfigSource`` answers two questions: "what is environment variable X?"
and "what does the local workspace config file contain?". The concrete source
is chosen once when settings are built:

- ``FileConfigSource``: environment plus ``~/.blaxel/config.yaml``
- ``EnvironmentConfigSource``: environment only (no home directory access)
- ``NullConfigSource``: nothing but an in-memory mapping, for embedding
  contexts where neither the process environment nor a filesystem is available
"""

import logging
from pathlib import Path
from typing import Any, Protocol

import yaml

from blaxel_core.env import Environment

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_PATH = Path("~/.blaxel/config.yaml")


class ConfigSource(Protocol):
    """Capability interface used by ``CredentialResolver``."""

    def getenv(self, name: str) -> str | None: ...

    def setenv_default(self, name: str, value: str) -> bool: ...

    def read_config(self) -> dict[str, Any] | None: ...


class EnvironmentConfigSource:
    """Environment variables only; there is never a config file."""

    def __init__(self, environment: Environment | None = None):
        self.environment = environment or Environment()

    def getenv(self, name: str) -> str | None:
        return self.environment.get(name)

    def setenv_default(self, name: str, value: str) -> bool:
        return self.environment.setdefault(name, value)

    def read_config(self) -> dict[str, Any] | None:
        return None


class FileConfigSource(EnvironmentConfigSource):
    """Environment variables plus the YAML workspace config file.

    Args:
        path: Location of the config file. ``~`` is expanded at read time.
        environment: Environment lookup to use for variables.
    """

    def __init__(
        self,
        path: str | Path = DEFAULT_CONFIG_PATH,
        environment: Environment | None = None,
    ):
        super().__init__(environment)
        self.path = Path(path)

    def read_config(self) -> dict[str, Any] | None:
        """Parse the config file.

        Returns:
            The parsed mapping, or None when the file is missing, unreadable,
            or not a YAML mapping.
        """
        path = self.path.expanduser()
        try:
            with path.open("r", encoding="utf-8") as file:
                data = yaml.safe_load(file)
        except FileNotFoundError:
            logger.debug(f"No workspace config file at {path}")
            return None
        except (OSError, yaml.YAMLError) as e:
            logger.warning(f"Ignoring unreadable workspace config {path}: {e}")
            return None

        if not isinstance(data, dict):
            logger.warning(f"Ignoring workspace config {path}: not a mapping")
            return None
        return data


class NullConfigSource:
    """No environment access and no files.

    Variables may be seeded explicitly, which is handy for tests and for
    hosts that pass configuration in by other means.
    """

    def __init__(self, values: dict[str, str] | None = None):
        self.values = dict(values or {})

    def getenv(self, name: str) -> str | None:
        return self.values.get(name) or None

    def setenv_default(self, name: str, value: str) -> bool:
        if self.values.get(name):
            return False
        self.values[name] = value
        return True

    def read_config(self) -> dict[str, Any] | None:
        return None


def default_config_source() -> ConfigSource:
    """Pick the source for this process.

    The filesystem-backed source is used when a home directory can be
    resolved, otherwise environment only.
    """
    try:
        Path.home()
    except RuntimeError:
        logger.debug("No home directory available, using environment-only config")
        return EnvironmentConfigSource()
    return FileConfigSource()
