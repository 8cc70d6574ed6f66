"""Request/response interceptors applied by every Blaxel HTTP client.

Request interceptors run in order before the request is sent; response
interceptors run in order on the response coming back. The standard stack is:

- ``AuthenticationInterceptor``: authenticate, then stamp the current auth
  headers onto the request
- ``authentication_error_interceptor``: add a documentation link to 401/403
  response bodies

## Opting out of authentication

```python
response = await client.get(url, extensions={"authenticated": False})
```

## Building a transport

```python
from blaxel_core.transport import create_transport_stack
import httpx

transport = create_transport_stack(settings)

async with httpx.AsyncClient(transport=transport, base_url=settings.base_url) as client:
    response = await client.get("/agents")
```
"""

import json
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from blaxel_core.settings import Settings

logger = logging.getLogger(__name__)

AUTHENTICATION_DOCUMENTATION = (
    "For more information on authentication, visit: "
    "https://docs.blaxel.ai/sdk-reference/introduction#how-authentication-works"
)

# Headers describing the wire encoding of a body we are about to replace
_BODY_HEADERS = ("content-length", "content-encoding", "transfer-encoding")

RequestInterceptor = Callable[[httpx.Request], Awaitable[httpx.Request]]
ResponseInterceptor = Callable[[httpx.Response], Awaitable[httpx.Response]]


class AuthenticationInterceptor:
    """Authenticate before sending and copy the auth headers onto the request.

    Headers are read from ``settings.headers`` at send time, so a request
    built before a token refresh still goes out with the fresh token.
    Existing headers of the same name are overwritten.
    """

    def __init__(self, settings: "Settings") -> None:
        self.settings = settings

    async def __call__(self, request: httpx.Request) -> httpx.Request:
        if request.extensions.get("authenticated") is False:
            return request

        await self.settings.authenticate()
        for name, value in self.settings.headers.items():
            request.headers[name] = value
        return request


async def authentication_error_interceptor(response: httpx.Response) -> httpx.Response:
    """Attach authentication help to 401/403 responses.

    A JSON object body gains a ``documentation`` key; any other body gets the
    help text appended on a new line. If the body cannot be read or rebuilt
    the original response is returned.
    """
    if response.status_code not in (401, 403):
        return response

    try:
        await response.aread()
        text = response.text
        try:
            original = json.loads(text)
        except ValueError:
            original = None

        if isinstance(original, dict):
            enhanced = json.dumps({**original, "documentation": AUTHENTICATION_DOCUMENTATION})
        else:
            enhanced = f"{text}\n{AUTHENTICATION_DOCUMENTATION}"

        headers = [(k, v) for k, v in response.headers.multi_items() if k.lower() not in _BODY_HEADERS]
        return httpx.Response(
            status_code=response.status_code,
            headers=headers,
            content=enhanced.encode("utf-8"),
            request=_request_of(response),
            extensions=response.extensions,
        )
    except Exception as e:
        logger.error(f"Error processing authentication error response: {e}")
        return response


def _request_of(response: httpx.Response) -> httpx.Request | None:
    try:
        return response.request
    except RuntimeError:
        return None


class InterceptorTransport(httpx.AsyncBaseTransport):
    """Transport applying request and response interceptors around another transport.

    Args:
        wrapped_transport: The underlying transport to wrap
        request_interceptors: Applied in order to each outgoing request
        response_interceptors: Applied in order to each incoming response

    Example:
        ```python
        transport = InterceptorTransport(
            wrapped_transport=httpx.AsyncHTTPTransport(),
            request_interceptors=[AuthenticationInterceptor(settings)],
            response_interceptors=[authentication_error_interceptor],
        )
        ```
    """

    def __init__(
        self,
        *,
        wrapped_transport: httpx.AsyncBaseTransport,
        request_interceptors: Sequence[RequestInterceptor] = (),
        response_interceptors: Sequence[ResponseInterceptor] = (),
    ) -> None:
        self._wrapped_transport = wrapped_transport
        self.request_interceptors = list(request_interceptors)
        self.response_interceptors = list(response_interceptors)

    async def __aenter__(self):
        """Enter async context, delegating to wrapped transport."""
        await self._wrapped_transport.__aenter__()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Exit async context, delegating to wrapped transport."""
        return await self._wrapped_transport.__aexit__(exc_type, exc_val, exc_tb)

    async def aclose(self) -> None:
        await self._wrapped_transport.aclose()

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        for interceptor in self.request_interceptors:
            request = await interceptor(request)

        response = await self._wrapped_transport.handle_async_request(request)

        for interceptor in self.response_interceptors:
            response = await interceptor(response)
        return response


def create_transport_stack(
    settings: "Settings",
    *,
    wrapped_transport: httpx.AsyncBaseTransport | None = None,
) -> InterceptorTransport:
    """Build the standard interceptor pipeline shared by all Blaxel clients.

    Args:
        settings: Settings supplying authentication and headers.
        wrapped_transport: Transport to send through. Defaults to
            ``httpx.AsyncHTTPTransport()``.
    """
    return InterceptorTransport(
        wrapped_transport=wrapped_transport or httpx.AsyncHTTPTransport(),
        request_interceptors=[AuthenticationInterceptor(settings)],
        response_interceptors=[authentication_error_interceptor],
    )
