"""Error handling utilities for HTTP responses."""

from typing import Any

import httpx

from blaxel_core.errors.exceptions import (
    APIError,
    BadRequestError,
    ClientError,
    ConflictError,
    ForbiddenError,
    NotFoundError,
    RateLimitError,
    ServerError,
    UnauthorizedError,
)

EXCEPTION_MAP: dict[int, type[APIError]] = {
    400: BadRequestError,
    401: UnauthorizedError,
    403: ForbiddenError,
    404: NotFoundError,
    409: ConflictError,
    429: RateLimitError,
}


def _error_body(response: httpx.Response) -> dict[str, Any]:
    try:
        data = response.json()
    except (ValueError, TypeError):
        return {}
    return data if isinstance(data, dict) else {}


def raise_for_status(response: httpx.Response) -> None:
    """Raise appropriate exception for HTTP error responses.

    The platform answers errors with a JSON body such as
    ``{"error": "...", "message": "..."}``; on 401/403 the authentication
    interceptor adds a ``documentation`` link, which is carried on the
    exception.

    Args:
        response: HTTP response object

    Raises:
        APIError subclass based on status code
    """
    if response.is_success:
        return

    status_code = response.status_code
    if status_code in EXCEPTION_MAP:
        exc_class = EXCEPTION_MAP[status_code]
    elif 400 <= status_code < 500:
        exc_class = ClientError
    elif 500 <= status_code < 600:
        exc_class = ServerError
    else:
        exc_class = APIError

    body = _error_body(response)
    code = body.get("code") or body.get("error")
    detail = body.get("message") or body.get("error")
    if detail:
        message = f"HTTP {status_code}: {detail}"
    else:
        # Fallback to simple message with response text
        response_text = response.text[:200]
        message = f"HTTP {status_code}: {response_text}" if response_text else f"HTTP {status_code}"

    kwargs: dict[str, Any] = {
        "status_code": status_code,
        "response": response,
        "code": str(code) if code is not None else None,
        "documentation": body.get("documentation"),
    }

    if exc_class is RateLimitError:
        retry_after = None
        if "retry-after" in response.headers:
            try:
                retry_after = int(response.headers["retry-after"])
            except (ValueError, TypeError):
                retry_after = None
        raise RateLimitError(message, retry_after=retry_after, **kwargs)

    raise exc_class(message, **kwargs)
