"""Blaxel Core - authentication and transport runtime for the Blaxel SDK.

This library keeps platform requests authenticated:
- Credential resolution (API key, client credentials, workspace config file)
- Self-refreshing OAuth tokens with concurrent refreshes coalesced
- An interceptor transport that stamps auth headers on every request
- Error enrichment and structured API exceptions

Example:
    ```python
    from blaxel_core.client import ControlPlaneClient
    from blaxel_core.settings import Settings

    settings = Settings()

    async with ControlPlaneClient(settings) as client:
        response = await client.request("GET", "/agents")
    ```
"""

__version__ = "0.1.0"

__all__ = ["__version__"]
