"""Client for the platform's OAuth token endpoint."""

import logging
from typing import Any

import httpx

from blaxel_core.auth.exceptions import TokenExchangeError
from blaxel_core.auth.models import TokenResponse

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 30.0


class TokenEndpoint:
    """Issues ``POST {base_url}/oauth/token`` requests.

    The endpoint is called without the authentication interceptor: it is
    how tokens are obtained in the first place.

    Args:
        base_url: API base URL, e.g. ``https://api.blaxel.ai/v0``.
        transport: Optional httpx transport (``httpx.MockTransport`` in tests).
        timeout: Request timeout in seconds.
        headers: Extra headers sent with every token request.

    Example:
        ```python
        endpoint = TokenEndpoint("https://api.blaxel.ai/v0")
        token = await endpoint.request_token(
            {"grant_type": "client_credentials"},
            headers={"Authorization": f"Basic {blob}"},
        )
        ```
    """

    def __init__(
        self,
        base_url: str,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = DEFAULT_TIMEOUT,
        headers: dict[str, str] | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._transport = transport
        self.timeout = timeout
        self.headers = dict(headers or {})

    @property
    def url(self) -> str:
        return f"{self.base_url}/oauth/token"

    async def request_token(
        self,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> TokenResponse:
        """Exchange a grant for an access token.

        Args:
            body: JSON body, including ``grant_type``.
            headers: Per-call headers (e.g. Basic authorization).

        Returns:
            The parsed token response.

        Raises:
            TokenExchangeError: The server answered with an error.
            httpx.HTTPError: The request itself failed.
        """
        request_headers = {**self.headers, **(headers or {})}
        logger.debug(f"Requesting token from {self.url} (grant_type={body.get('grant_type')})")

        async with httpx.AsyncClient(transport=self._transport, timeout=self.timeout) as client:
            response = await client.post(self.url, json=body, headers=request_headers)

        data = self._parse_body(response)
        if response.is_error or data.get("error"):
            error = data.get("error") or f"HTTP {response.status_code}"
            raise TokenExchangeError(
                str(error),
                description=data.get("error_description"),
                status_code=response.status_code,
            )
        return TokenResponse.from_dict(data)

    @staticmethod
    def _parse_body(response: httpx.Response) -> dict[str, Any]:
        try:
            data = response.json()
        except ValueError:
            return {}
        return data if isinstance(data, dict) else {}
