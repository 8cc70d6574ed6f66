"""Credential resolution for the Blaxel platform.

This module decides which kind of credential is in effect for the current
process. It performs no network I/O.

Resolution order (first match wins):
1. ``BL_API_KEY`` environment variable
2. ``BL_CLIENT_CREDENTIALS`` environment variable
3. Workspace entry in ``~/.blaxel/config.yaml`` matching ``BL_WORKSPACE``
   (or the config file's ``context.workspace`` when unset)
4. Nothing: the caller falls back to anonymous credentials

Example:
    ```python
    from blaxel_core.auth import CredentialResolver

    resolver = CredentialResolver()
    credentials = resolver.resolve()
    if credentials is None:
        print("No credentials configured, running anonymously")
    ```

Security Considerations:
    - Credentials are never logged in full (masked with ***)
    - Only source information is logged (env var name, file path, etc.)
    - A broken config file is logged and ignored, never raised
"""

import logging
from typing import Any

from blaxel_core.auth.models import CredentialsType
from blaxel_core.auth.sources import ConfigSource, default_config_source

logger = logging.getLogger(__name__)

API_KEY_ENV = "BL_API_KEY"
CLIENT_CREDENTIALS_ENV = "BL_CLIENT_CREDENTIALS"
WORKSPACE_ENV = "BL_WORKSPACE"
ENV_NAME_ENV = "BL_ENV"


class CredentialResolver:
    """Resolve the active credentials from environment and local config.

    Attributes:
        source: Where environment variables and the config file come from.

    Example:
        ```python
        # Environment only, no home directory access
        resolver = CredentialResolver(source=EnvironmentConfigSource())
        credentials = resolver.resolve()
        ```
    """

    def __init__(self, source: ConfigSource | None = None):
        """Initialize credential resolver.

        Args:
            source: Config source to read from. Defaults to the
                filesystem-backed source when a home directory exists.
        """
        self.source = source if source is not None else default_config_source()

    def _mask_credential(self, value: str | None) -> str:
        """Mask a credential value for safe logging."""
        if value is None:
            return "None"
        return "***"

    def resolve(self) -> CredentialsType | None:
        """Resolve credentials, first match wins.

        If the matched config-file workspace declares an ``env`` and
        ``BL_ENV`` is not already set, ``BL_ENV`` is set as a side effect.

        Returns:
            The resolved credentials, or None when nothing is configured.
        """
        workspace = self.source.getenv(WORKSPACE_ENV)

        api_key = self.source.getenv(API_KEY_ENV)
        if api_key:
            logger.debug(
                f"Resolved API key from environment variable '{API_KEY_ENV}': "
                f"{self._mask_credential(api_key)}"
            )
            return CredentialsType(api_key=api_key, workspace=workspace)

        client_credentials = self.source.getenv(CLIENT_CREDENTIALS_ENV)
        if client_credentials:
            logger.debug(
                f"Resolved client credentials from environment variable "
                f"'{CLIENT_CREDENTIALS_ENV}': {self._mask_credential(client_credentials)}"
            )
            return CredentialsType(client_credentials=client_credentials, workspace=workspace)

        try:
            credentials = self._resolve_from_config(workspace)
            if credentials is not None and credentials.env:
                if self.source.setenv_default(ENV_NAME_ENV, credentials.env):
                    logger.debug(f"Set {ENV_NAME_ENV}={credentials.env} from workspace '{credentials.workspace}'")
        except Exception as e:
            logger.warning(f"Ignoring workspace config: {e}")
            return None

        if credentials is None:
            logger.debug("No credentials found, falling back to anonymous access")
        return credentials

    def _resolve_from_config(self, workspace: str | None) -> CredentialsType | None:
        config = self.source.read_config()
        if not config:
            return None

        context = config.get("context") or {}
        workspace_name = workspace or context.get("workspace")
        if not workspace_name:
            return None

        entry = self._find_workspace(config.get("workspaces") or [], workspace_name)
        if entry is None:
            logger.debug(f"Workspace '{workspace_name}' not found in workspace config")
            return None

        raw = entry.get("credentials")
        if not isinstance(raw, dict):
            return None

        credentials = CredentialsType.from_mapping(raw, workspace=workspace_name)
        env = entry.get("env")
        credentials.env = env if isinstance(env, str) and env else None
        logger.debug(
            f"Resolved {credentials.kind or 'empty'} credentials for workspace "
            f"'{workspace_name}' from workspace config"
        )
        return credentials

    @staticmethod
    def _find_workspace(workspaces: list[Any], name: str) -> dict[str, Any] | None:
        for entry in workspaces:
            if isinstance(entry, dict) and entry.get("name") == name:
                return entry
        return None
