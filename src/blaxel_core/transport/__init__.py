"""Transport layer components for Blaxel HTTP clients.

Transport layers wrap an httpx transport to run interceptors around every
request: authentication on the way out, error enrichment on the way back.

Example:
    ```python
    from blaxel_core.transport import create_transport_stack

    transport = create_transport_stack(settings)
    ```
"""

from blaxel_core.transport.interceptors import (
    AUTHENTICATION_DOCUMENTATION,
    AuthenticationInterceptor,
    InterceptorTransport,
    authentication_error_interceptor,
    create_transport_stack,
)

__all__ = [
    "AUTHENTICATION_DOCUMENTATION",
    "AuthenticationInterceptor",
    "InterceptorTransport",
    "authentication_error_interceptor",
    "create_transport_stack",
]
