"""Testing utilities for code built on blaxel-core.

Example:
    ```python
    from blaxel_core.testing import StubTokenEndpoint, make_jwt


    async def test_refresh():
        endpoint = StubTokenEndpoint([{"access_token": make_jwt()}])
        strategy = ClientCredentials(CredentialsType(client_credentials="abc"), endpoint)
        await strategy.authenticate()
        assert len(endpoint.calls) == 1
    ```
"""

import asyncio
import time
from typing import Any

import jwt

from blaxel_core.auth.exceptions import TokenExchangeError
from blaxel_core.auth.models import TokenResponse
from blaxel_core.auth.oauth import TokenEndpoint


def make_jwt(lifetime: int = 3600, issued_at: float | None = None, **claims: Any) -> str:
    """Build an unsigned JWT with ``iat``/``exp`` claims.

    Args:
        lifetime: Seconds between ``iat`` and ``exp``.
        issued_at: ``iat`` as a Unix timestamp. Defaults to now.
        **claims: Extra claims; ``iat=None``/``exp=None`` drop that claim.
    """
    iat = int(time.time() if issued_at is None else issued_at)
    payload: dict[str, Any] = {"iat": iat, "exp": iat + lifetime}
    payload.update(claims)
    payload = {key: value for key, value in payload.items() if value is not None}
    return jwt.encode(payload, None, algorithm="none")


class StubTokenEndpoint(TokenEndpoint):
    """In-memory token endpoint returning canned responses in order.

    A response dict containing ``error`` raises ``TokenExchangeError``. The
    last response is repeated once the list is exhausted.

    Attributes:
        calls: ``(body, headers)`` of every token request received.
    """

    def __init__(self, responses: list[dict[str, Any]], delay: float = 0.0) -> None:
        super().__init__("https://api.blaxel.test/v0")
        self.responses = list(responses)
        self.delay = delay
        self.calls: list[tuple[dict[str, Any], dict[str, str]]] = []

    async def request_token(
        self,
        body: dict[str, Any],
        headers: dict[str, str] | None = None,
    ) -> TokenResponse:
        self.calls.append((dict(body), dict(headers or {})))
        if self.delay:
            await asyncio.sleep(self.delay)
        else:
            await asyncio.sleep(0)

        index = min(len(self.calls), len(self.responses)) - 1
        data = self.responses[index]
        if data.get("error"):
            raise TokenExchangeError(data["error"], description=data.get("error_description"), status_code=400)
        return TokenResponse.from_dict(data)


__all__ = ["StubTokenEndpoint", "make_jwt"]
