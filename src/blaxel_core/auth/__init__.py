"""Authentication components for the Blaxel SDK.

This module provides:
- Credential resolution (API key → client credentials → workspace config)
- Credential strategies that keep a bearer token fresh
- A single-flight primitive so concurrent refreshes share one request

Example:
    ```python
    from blaxel_core.auth import CredentialResolver, TokenEndpoint, authentication

    credentials = CredentialResolver().resolve()
    strategy = authentication(credentials, TokenEndpoint("https://api.blaxel.ai/v0"))
    await strategy.authenticate()
    print(strategy.authorization)
    ```
"""

from blaxel_core.auth.credentials import CredentialResolver
from blaxel_core.auth.exceptions import CredentialError, TokenExchangeError
from blaxel_core.auth.models import CredentialsType, TokenResponse
from blaxel_core.auth.oauth import TokenEndpoint
from blaxel_core.auth.singleflight import SingleFlight
from blaxel_core.auth.sources import (
    ConfigSource,
    EnvironmentConfigSource,
    FileConfigSource,
    NullConfigSource,
)
from blaxel_core.auth.strategies import (
    ApiKey,
    ClientCredentials,
    Credentials,
    DeviceMode,
    RefreshingCredentials,
    authentication,
)

__all__ = [
    "ApiKey",
    "ClientCredentials",
    "ConfigSource",
    "CredentialError",
    "CredentialResolver",
    "Credentials",
    "CredentialsType",
    "DeviceMode",
    "EnvironmentConfigSource",
    "FileConfigSource",
    "NullConfigSource",
    "RefreshingCredentials",
    "SingleFlight",
    "TokenEndpoint",
    "TokenExchangeError",
    "TokenResponse",
    "authentication",
]
