"""Credential strategies.

Every strategy offers the same capability set:

- ``authenticate()``: make sure ``authorization`` is usable, refreshing if needed
- ``authorization``: value for the authorization header (empty when anonymous)
- ``token``: the raw bearer token
- ``workspace``: the workspace the credentials belong to

``ClientCredentials`` and ``DeviceMode`` share the refresh state machine in
``RefreshingCredentials`` and differ only in the token request they send.
"""

import logging

from blaxel_core.auth.credentials import WORKSPACE_ENV
from blaxel_core.auth.models import CredentialsType
from blaxel_core.auth.oauth import TokenEndpoint
from blaxel_core.auth.singleflight import SingleFlight
from blaxel_core.auth.sources import ConfigSource
from blaxel_core.auth.tokens import DEFAULT_REFRESH_RATIO, token_needs_refresh

logger = logging.getLogger(__name__)


class Credentials:
    """Anonymous credentials: no authorization header, nothing to refresh."""

    def __init__(
        self,
        credentials: CredentialsType | None = None,
        source: ConfigSource | None = None,
    ) -> None:
        self.credentials = credentials or CredentialsType()
        self._source = source

    async def authenticate(self) -> None:
        return None

    @property
    def workspace(self) -> str:
        if self.credentials.workspace:
            return self.credentials.workspace
        if self._source is not None:
            return self._source.getenv(WORKSPACE_ENV) or ""
        return ""

    @property
    def token(self) -> str:
        return ""

    @property
    def authorization(self) -> str:
        return ""


class ApiKey(Credentials):
    """Static API key sent as a bearer token."""

    @property
    def token(self) -> str:
        return self.credentials.api_key or ""

    @property
    def authorization(self) -> str:
        return f"Bearer {self.token}"


class RefreshingCredentials(Credentials):
    """OAuth-backed credentials with a cached, self-renewing access token.

    States: no usable token (refresh needed), refresh in flight, valid token.
    A refresh is needed once less than ``refresh_ratio`` of the token's
    lifetime remains. Concurrent ``authenticate()`` calls share one refresh.

    Args:
        credentials: Resolved credentials.
        token_endpoint: Token endpoint client.
        source: Source used for the ``BL_WORKSPACE`` fallback.
        refresh_ratio: Remaining-lifetime fraction below which to refresh.
    """

    grant_type: str = ""

    def __init__(
        self,
        credentials: CredentialsType,
        token_endpoint: TokenEndpoint,
        source: ConfigSource | None = None,
        refresh_ratio: float = DEFAULT_REFRESH_RATIO,
    ) -> None:
        super().__init__(credentials, source)
        self.token_endpoint = token_endpoint
        self.refresh_ratio = refresh_ratio
        self.access_token = ""
        self._flight: SingleFlight[None] = SingleFlight()

    @property
    def refreshing(self) -> bool:
        return self._flight.in_flight(self)

    def need_refresh(self) -> bool:
        if self.refreshing:
            return False
        return token_needs_refresh(self.access_token, self.refresh_ratio)

    async def authenticate(self) -> None:
        if not self.need_refresh():
            await self._flight.wait(self)
            return
        await self._flight.do(self, self.process)

    async def process(self) -> None:
        """Run one token exchange and cache the result.

        Raises:
            TokenExchangeError: The endpoint rejected the grant. The cached
                token is left unchanged.
        """
        logger.debug(f"Refreshing access token ({self.grant_type}) for workspace '{self.workspace}'")
        response = await self.token_endpoint.request_token(
            self.token_request_body(), headers=self.token_request_headers()
        )
        self.access_token = response.access_token or ""

    def token_request_body(self) -> dict[str, str]:
        return {"grant_type": self.grant_type}

    def token_request_headers(self) -> dict[str, str]:
        return {}

    @property
    def token(self) -> str:
        return self.access_token

    @property
    def authorization(self) -> str:
        return f"Bearer {self.access_token}"


class ClientCredentials(RefreshingCredentials):
    """OAuth2 client-credentials grant.

    ``BL_CLIENT_CREDENTIALS`` already holds ``base64(client_id:client_secret)``
    and is sent verbatim as Basic authorization.
    """

    grant_type = "client_credentials"

    def token_request_headers(self) -> dict[str, str]:
        return {"Authorization": f"Basic {self.credentials.client_credentials or ''}"}


class DeviceMode(RefreshingCredentials):
    """Refresh-token grant for credentials obtained through the device flow.

    The access token stored alongside the device code is used until it
    enters the refresh window.
    """

    grant_type = "refresh_token"

    def __init__(
        self,
        credentials: CredentialsType,
        token_endpoint: TokenEndpoint,
        source: ConfigSource | None = None,
        refresh_ratio: float = DEFAULT_REFRESH_RATIO,
    ) -> None:
        super().__init__(credentials, token_endpoint, source, refresh_ratio)
        self.access_token = credentials.access_token or ""

    def token_request_body(self) -> dict[str, str]:
        return {
            "grant_type": self.grant_type,
            "device_code": self.credentials.device_code or "",
            "refresh_token": self.credentials.refresh_token or "",
        }


def authentication(
    credentials: CredentialsType | None,
    token_endpoint: TokenEndpoint,
    source: ConfigSource | None = None,
    refresh_ratio: float = DEFAULT_REFRESH_RATIO,
) -> Credentials:
    """Build the strategy matching resolved credentials.

    Priority: API key, client credentials, device code, anonymous.
    """
    if credentials is None:
        return Credentials(source=source)
    if credentials.api_key:
        return ApiKey(credentials, source)
    if credentials.client_credentials:
        return ClientCredentials(credentials, token_endpoint, source, refresh_ratio)
    if credentials.device_code:
        return DeviceMode(credentials, token_endpoint, source, refresh_ratio)
    return Credentials(source=source)
