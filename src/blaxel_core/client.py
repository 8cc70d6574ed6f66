"""Base client classes for the Blaxel platform.

Every client sends through the standard interceptor pipeline, so requests
are authenticated at send time and 401/403 bodies carry documentation.

Example:
    ```python
    from blaxel_core.client import ControlPlaneClient
    from blaxel_core.settings import Settings

    async with ControlPlaneClient(Settings()) as client:
        response = await client.request("GET", "/agents")
        agents = response.json()
    ```
"""

from typing import Any

import httpx

from blaxel_core.errors.handler import raise_for_status
from blaxel_core.settings import Settings
from blaxel_core.transport.interceptors import create_transport_stack


class BaseClient:
    """Shared plumbing for platform clients.

    Subclasses only decide which base URL they talk to.

    Args:
        settings: Settings supplying authentication and URLs.
        transport: Transport to send through beneath the interceptors
            (``httpx.MockTransport`` in tests).
        timeout: Request timeout in seconds.
    """

    def __init__(
        self,
        settings: Settings,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout: float = 30.0,
    ) -> None:
        self.settings = settings
        self._http = httpx.AsyncClient(
            transport=create_transport_stack(settings, wrapped_transport=transport),
            timeout=timeout,
        )

    @property
    def base_url(self) -> str:
        raise NotImplementedError

    async def __aenter__(self):
        await self._http.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self._http.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def request(
        self,
        method: str,
        path: str,
        *,
        authenticated: bool = True,
        **kwargs: Any,
    ) -> httpx.Response:
        """Send a request relative to ``base_url`` and raise on error status.

        Args:
            method: HTTP method.
            path: Path appended to ``base_url``.
            authenticated: Set to False to skip authentication for this call.
            **kwargs: Passed through to ``httpx.AsyncClient.request``.

        Raises:
            APIError subclass for non-2xx responses.
        """
        extensions = dict(kwargs.pop("extensions", None) or {})
        extensions["authenticated"] = authenticated
        url = f"{self.base_url.rstrip('/')}/{path.lstrip('/')}"

        response = await self._http.request(method, url, extensions=extensions, **kwargs)
        raise_for_status(response)
        return response


class ControlPlaneClient(BaseClient):
    """Client for the platform API (``settings.base_url``).

    The base URL is read on every request, so ``settings.configure()`` takes
    effect without rebuilding the client.
    """

    @property
    def base_url(self) -> str:
        return self.settings.base_url


class SandboxClient(BaseClient):
    """Client for a single sandbox's own HTTP API."""

    def __init__(self, settings: Settings, url: str, **kwargs: Any) -> None:
        super().__init__(settings, **kwargs)
        self.url = url

    @property
    def base_url(self) -> str:
        return self.url
