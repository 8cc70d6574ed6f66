"""Custom exceptions for credential resolution and token exchange.

Resolution itself never raises: missing or malformed configuration falls back
to anonymous credentials. These exceptions cover the cases that must reach the
caller, chiefly a failed OAuth token exchange.

Example:
    ```python
    from blaxel_core.auth.exceptions import TokenExchangeError

    try:
        await settings.authenticate()
    except TokenExchangeError as e:
        print(f"Token refresh rejected: {e.error}")
    ```
"""


class CredentialError(Exception):
    """Base exception for credential-related errors.

    All credential-specific exceptions inherit from this class,
    making it easy to catch any credential-related error.
    """

    pass


class TokenExchangeError(CredentialError):
    """Raised when the token endpoint answers with an error body.

    The strategy's cached access token is left untouched when this is raised,
    so the next ``authenticate()`` call attempts a fresh exchange.

    Attributes:
        error: OAuth error code returned by the server (e.g. ``invalid_grant``).
        description: Optional ``error_description`` from the server.
        status_code: HTTP status of the token response, if known.
    """

    def __init__(
        self,
        error: str,
        description: str | None = None,
        status_code: int | None = None,
    ):
        """Initialize TokenExchangeError.

        Args:
            error: OAuth error code from the response body.
            description: Human readable description, if provided.
            status_code: HTTP status code of the token response.
        """
        message = error if not description else f"{error}: {description}"
        super().__init__(message)
        self.error = error
        self.description = description
        self.status_code = status_code
