"""Pytest configuration and shared fixtures for blaxel-core tests."""

import pytest


@pytest.fixture(autouse=True)
def clear_env(monkeypatch, tmp_path):
    """Auto-cleanup: isolate each test from the developer's real configuration.

    Clears Blaxel environment variables, points HOME at an empty directory so
    ``~/.blaxel/config.yaml`` is never the real one, and runs the test from an
    empty working directory so no ``.env``/``blaxel.toml`` is picked up.
    """
    import os

    for key in list(os.environ.keys()):
        if key.startswith("BL_"):
            monkeypatch.delenv(key, raising=False)

    home = tmp_path / "home"
    home.mkdir()
    workdir = tmp_path / "work"
    workdir.mkdir()
    monkeypatch.setenv("HOME", str(home))
    monkeypatch.chdir(workdir)

    yield


@pytest.fixture
def home_config(tmp_path):
    """Write ``~/.blaxel/config.yaml`` under the isolated HOME and return its path."""

    def write(content: str):
        config_dir = tmp_path / "home" / ".blaxel"
        config_dir.mkdir(parents=True, exist_ok=True)
        path = config_dir / "config.yaml"
        path.write_text(content)
        return path

    return write
