"""Tests for credential resolution.

This module tests the CredentialResolver class which picks the active
credentials from environment variables or the workspace config file.
"""

import os

import pytest

from blaxel_core.auth import CredentialResolver, CredentialsType
from blaxel_core.auth.sources import EnvironmentConfigSource, FileConfigSource, NullConfigSource

CONFIG = """
context:
  workspace: main
workspaces:
  - name: main
    credentials:
      apiKey: sk_from_config
  - name: staging
    env: dev
    credentials:
      clientCredentials: Y2xpZW50OnNlY3JldA==
  - name: laptop
    credentials:
      device_code: dev-code
      refresh_token: refresh-1
      access_token: access-1
"""


class TestCredentialResolverEnvironment:
    """Test resolution from environment variables."""

    def test_resolve_api_key(self, monkeypatch):
        """Test that BL_API_KEY yields API key credentials."""
        monkeypatch.setenv("BL_API_KEY", "sk_test")
        monkeypatch.setenv("BL_WORKSPACE", "ws1")

        result = CredentialResolver(EnvironmentConfigSource()).resolve()

        assert result == CredentialsType(api_key="sk_test", workspace="ws1")

    def test_resolve_client_credentials(self, monkeypatch):
        """Test that BL_CLIENT_CREDENTIALS yields client credentials."""
        monkeypatch.setenv("BL_CLIENT_CREDENTIALS", "abc")
        monkeypatch.setenv("BL_WORKSPACE", "ws1")

        result = CredentialResolver(EnvironmentConfigSource()).resolve()

        assert result == CredentialsType(client_credentials="abc", workspace="ws1")

    def test_api_key_wins_over_client_credentials(self):
        """Test that the API key takes priority over client credentials."""
        source = NullConfigSource({"BL_API_KEY": "sk", "BL_CLIENT_CREDENTIALS": "abc"})

        result = CredentialResolver(source).resolve()

        assert result.kind == "api_key"
        assert result.client_credentials is None

    def test_workspace_is_optional(self):
        """Test that credentials resolve without BL_WORKSPACE."""
        result = CredentialResolver(NullConfigSource({"BL_API_KEY": "sk"})).resolve()

        assert result.api_key == "sk"
        assert result.workspace is None

    def test_returns_none_when_nothing_configured(self):
        """Test that resolve returns None with no credentials anywhere."""
        assert CredentialResolver(NullConfigSource()).resolve() is None


class TestCredentialResolverConfigFile:
    """Test resolution from ~/.blaxel/config.yaml."""

    def test_uses_context_workspace(self, home_config):
        """Test that context.workspace selects the entry when BL_WORKSPACE is unset."""
        path = home_config(CONFIG)

        result = CredentialResolver(FileConfigSource(path)).resolve()

        assert result == CredentialsType(api_key="sk_from_config", workspace="main")

    def test_bl_workspace_overrides_context(self, home_config, monkeypatch):
        """Test that BL_WORKSPACE picks a different entry."""
        path = home_config(CONFIG)
        monkeypatch.setenv("BL_WORKSPACE", "laptop")

        result = CredentialResolver(FileConfigSource(path)).resolve()

        assert result.kind == "device_code"
        assert result.workspace == "laptop"
        assert result.device_code == "dev-code"
        assert result.refresh_token == "refresh-1"
        assert result.access_token == "access-1"

    def test_environment_wins_over_config_file(self, home_config, monkeypatch):
        """Test that BL_CLIENT_CREDENTIALS beats the config file."""
        path = home_config(CONFIG)
        monkeypatch.setenv("BL_CLIENT_CREDENTIALS", "from-env")

        result = CredentialResolver(FileConfigSource(path)).resolve()

        assert result.client_credentials == "from-env"
        assert result.api_key is None

    def test_unknown_workspace_returns_none(self, home_config, monkeypatch):
        """Test that a workspace missing from the file resolves to nothing."""
        path = home_config(CONFIG)
        monkeypatch.setenv("BL_WORKSPACE", "missing")

        assert CredentialResolver(FileConfigSource(path)).resolve() is None

    def test_workspace_env_sets_bl_env(self, home_config, monkeypatch):
        """Test that a workspace's env is exported when BL_ENV is unset."""
        path = home_config(CONFIG)
        monkeypatch.setenv("BL_WORKSPACE", "staging")
        monkeypatch.setenv("BL_ENV", "")  # restored to unset on teardown

        result = CredentialResolver(FileConfigSource(path)).resolve()

        assert result.client_credentials == "Y2xpZW50OnNlY3JldA=="
        assert os.environ["BL_ENV"] == "dev"

    def test_workspace_env_does_not_override_bl_env(self, home_config, monkeypatch):
        """Test that an explicit BL_ENV is left alone."""
        path = home_config(CONFIG)
        monkeypatch.setenv("BL_WORKSPACE", "staging")
        monkeypatch.setenv("BL_ENV", "prod")

        CredentialResolver(FileConfigSource(path)).resolve()

        assert os.environ["BL_ENV"] == "prod"

    def test_default_source_reads_home_config(self, home_config):
        """Test that the default source finds the config under HOME."""
        home_config(CONFIG)

        result = CredentialResolver().resolve()

        assert result.api_key == "sk_from_config"

    @pytest.mark.parametrize(
        "content",
        [
            "context: [unterminated",
            "just a string",
            "context:\n  workspace: main\nworkspaces: 12\n",
            "context: 5\n",
            "workspaces:\n  - name: main\n    credentials: nope\ncontext:\n  workspace: main\n",
        ],
    )
    def test_malformed_config_never_raises(self, home_config, content):
        """Test that broken config files are treated as absent."""
        path = home_config(content)

        assert CredentialResolver(FileConfigSource(path)).resolve() is None

    @pytest.mark.parametrize("env_value", ["[1]", "5", "{stage: dev}", "null"])
    def test_non_string_workspace_env_is_ignored(self, home_config, env_value):
        """Test that a malformed workspace env neither raises nor sets BL_ENV."""
        path = home_config(
            "workspaces:\n"
            "  - name: ws\n"
            "    credentials:\n"
            "      apiKey: k\n"
            f"    env: {env_value}\n"
            "context:\n"
            "  workspace: ws\n"
        )

        result = CredentialResolver(FileConfigSource(path)).resolve()

        assert result.api_key == "k"
        assert result.env is None
        assert "BL_ENV" not in os.environ

    def test_missing_config_file(self, tmp_path):
        """Test that a missing file is treated as absent."""
        source = FileConfigSource(tmp_path / "nope.yaml")

        assert CredentialResolver(source).resolve() is None


class TestCredentialResolverMasking:
    """Test that secrets never reach the logs."""

    def test_mask_credential(self):
        resolver = CredentialResolver(NullConfigSource())

        assert resolver._mask_credential("secret") == "***"
        assert resolver._mask_credential(None) == "None"

    def test_api_key_not_logged(self, caplog):
        """Test that the resolved key is masked in debug logs."""
        caplog.set_level("DEBUG", logger="blaxel_core.auth.credentials")

        CredentialResolver(NullConfigSource({"BL_API_KEY": "sk_super_secret"})).resolve()

        assert "sk_super_secret" not in caplog.text
        assert "BL_API_KEY" in caplog.text
