"""Settings and authentication façade.

``Settings`` is the object every client is handed. It owns the active
credential strategy and derives URLs and request headers from it. Headers are
rebuilt on every access so a refresh finished by another coroutine is picked
up by the very next request.

Example:
    ```python
    from blaxel_core.settings import Config, Settings

    settings = Settings()
    await settings.authenticate()
    print(settings.headers)

    # Embedding context: explicit configuration instead of env/config file
    settings.configure(Config(api_key="sk_...", workspace="my-workspace"))
    ```
"""

import logging
import platform
from dataclasses import dataclass

from blaxel_core import __version__
from blaxel_core.auth.credentials import CredentialResolver
from blaxel_core.auth.models import CredentialsType
from blaxel_core.auth.oauth import TokenEndpoint
from blaxel_core.auth.sources import ConfigSource, default_config_source
from blaxel_core.auth.strategies import Credentials, authentication
from blaxel_core.auth.tokens import DEFAULT_REFRESH_RATIO

logger = logging.getLogger(__name__)

AUTHORIZATION_HEADER = "X-Blaxel-Authorization"
WORKSPACE_HEADER = "X-Blaxel-Workspace"


@dataclass
class Config:
    """Explicit configuration for hosts that cannot rely on env or files.

    Attributes:
        proxy: Base URL of a proxy serving both ``/api`` and ``/run``.
        api_key: API key overriding resolved credentials.
        workspace: Workspace overriding the resolved one.
    """

    proxy: str = ""
    api_key: str = ""
    workspace: str = ""


def _os_arch() -> str:
    system = platform.system().lower() or "unknown"
    machine = platform.machine().lower() or "unknown"
    return f"{system}/{machine}"


class Settings:
    """Holds the credential strategy and derived connection settings.

    The strategy is selected on first use. ``configure()`` replaces the
    configuration and selects again.

    Args:
        config: Explicit configuration. Defaults to an empty ``Config``.
        source: Where environment variables and the workspace config come from.
        token_endpoint: Token endpoint to use; built from ``base_url`` if omitted.
        refresh_ratio: Remaining-lifetime fraction below which tokens refresh.
    """

    def __init__(
        self,
        config: Config | None = None,
        *,
        source: ConfigSource | None = None,
        token_endpoint: TokenEndpoint | None = None,
        refresh_ratio: float = DEFAULT_REFRESH_RATIO,
    ) -> None:
        self.config = config or Config()
        self.source = source if source is not None else default_config_source()
        self.refresh_ratio = refresh_ratio
        self._token_endpoint = token_endpoint
        self._credentials: Credentials | None = None

    def configure(self, config: Config) -> None:
        """Replace the configuration and re-run strategy selection."""
        self.config = config
        self._credentials = None
        logger.debug("Settings reconfigured, credential strategy will be selected again")

    @property
    def credentials(self) -> Credentials:
        if self._credentials is None:
            self._credentials = self._select_credentials()
        return self._credentials

    def _select_credentials(self) -> Credentials:
        if self.config.api_key:
            resolved: CredentialsType | None = CredentialsType(
                api_key=self.config.api_key, workspace=self.config.workspace or None
            )
        else:
            # May set BL_ENV, which base_url depends on, so resolve first
            resolved = CredentialResolver(self.source).resolve()

        endpoint = self._token_endpoint or TokenEndpoint(
            self.base_url, headers={"User-Agent": self.user_agent}
        )
        strategy = authentication(resolved, endpoint, self.source, self.refresh_ratio)
        logger.debug(f"Using {type(strategy).__name__} credentials")
        return strategy

    async def authenticate(self) -> None:
        await self.credentials.authenticate()

    @property
    def env(self) -> str:
        return self.source.getenv("BL_ENV") or "prod"

    @property
    def base_url(self) -> str:
        if self.config.proxy:
            return f"{self.config.proxy}/api"
        api_url = self.source.getenv("BL_API_URL")
        if api_url:
            return api_url
        if self.env == "prod":
            return "https://api.blaxel.ai/v0"
        return "https://api.blaxel.dev/v0"

    @property
    def run_url(self) -> str:
        if self.config.proxy:
            return f"{self.config.proxy}/run"
        run_url = self.source.getenv("BL_RUN_URL")
        if run_url:
            return run_url
        if self.env == "prod":
            return "https://run.blaxel.ai"
        return "https://run.blaxel.dev"

    @property
    def workspace(self) -> str:
        return self.config.workspace or self.credentials.workspace or ""

    @property
    def token(self) -> str:
        if self.config.api_key:
            return self.config.api_key
        return self.credentials.token

    @property
    def authorization(self) -> str:
        if self.config.api_key:
            return f"Bearer {self.config.api_key}"
        return self.credentials.authorization

    @property
    def version(self) -> str:
        return __version__

    @property
    def user_agent(self) -> str:
        return f"blaxel/sdk/python/{self.version} ({_os_arch()})"

    @property
    def headers(self) -> dict[str, str]:
        """Headers for an outbound platform request, rebuilt on every access."""
        headers = {
            WORKSPACE_HEADER: self.workspace,
            "User-Agent": self.user_agent,
        }
        authorization = self.authorization
        if authorization:
            headers[AUTHORIZATION_HEADER] = authorization
        return headers


_default_settings: Settings | None = None


def get_settings() -> Settings:
    """Return the process default ``Settings``, creating it on first call."""
    global _default_settings
    if _default_settings is None:
        _default_settings = Settings()
    return _default_settings


def initialize(config: Config) -> Settings:
    """Apply explicit configuration to the process default ``Settings``."""
    settings = get_settings()
    settings.configure(config)
    return settings
