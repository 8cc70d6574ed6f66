"""Credential and token data models."""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class CredentialsType:
    """Credentials for one workspace.

    Exactly one credential kind is expected to be populated: ``api_key``,
    ``client_credentials``, or the device-mode triple (``device_code``,
    ``refresh_token``, ``access_token``).
    """

    workspace: str | None = None
    api_key: str | None = None
    client_credentials: str | None = None
    device_code: str | None = None
    refresh_token: str | None = None
    access_token: str | None = None

    # Default environment name declared by the workspace config entry
    env: str | None = None

    @classmethod
    def from_mapping(cls, data: dict[str, Any], workspace: str | None = None) -> "CredentialsType":
        """Build credentials from a config-file mapping.

        Accepts both the camelCase keys written by the CLI (``apiKey``,
        ``clientCredentials``) and snake_case keys.

        Args:
            data: The ``credentials`` mapping of a workspace entry.
            workspace: Workspace name to inject.
        """

        def pick(*keys: str) -> str | None:
            for key in keys:
                value = data.get(key)
                if value:
                    return str(value)
            return None

        return cls(
            workspace=workspace or pick("workspace"),
            api_key=pick("apiKey", "api_key"),
            client_credentials=pick("clientCredentials", "client_credentials"),
            device_code=pick("device_code", "deviceCode"),
            refresh_token=pick("refresh_token", "refreshToken"),
            access_token=pick("access_token", "accessToken"),
        )

    @property
    def kind(self) -> str | None:
        """Name of the populated credential kind, or None if none is."""
        if self.api_key:
            return "api_key"
        if self.client_credentials:
            return "client_credentials"
        if self.device_code:
            return "device_code"
        return None


@dataclass
class TokenResponse:
    """Successful response from the OAuth token endpoint."""

    access_token: str = ""
    token_type: str | None = None
    expires_in: int | None = None
    refresh_token: str | None = None

    # Any additional fields returned by the server
    extra: dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "TokenResponse":
        known = {"access_token", "token_type", "expires_in", "refresh_token"}
        return cls(
            access_token=data.get("access_token") or "",
            token_type=data.get("token_type"),
            expires_in=data.get("expires_in"),
            refresh_token=data.get("refresh_token"),
            extra={k: v for k, v in data.items() if k not in known},
        )
