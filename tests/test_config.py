"""
Unit tests for the process-wide endpoint configuration.
"""

import pytest

from ee_do import config, configure, configure_from_env, get_config


@pytest.fixture(autouse=True)
def restore_config():
    saved = dict(config._global_config)
    yield
    config._global_config.clear()
    config._global_config.update(saved)


class TestConfig:
    def test_defaults(self, monkeypatch):
        monkeypatch.setitem(config._global_config, "api_url", None)
        monkeypatch.setitem(config._global_config, "tile_url", None)
        monkeypatch.setitem(config._global_config, "timeout", None)

        cfg = get_config()

        assert cfg.api_url == config.DEFAULT_API_URL
        assert cfg.tile_url == config.DEFAULT_TILE_URL
        assert cfg.timeout == config.DEFAULT_TIMEOUT

    def test_configure(self):
        configure(api_url="http://local.test/api", timeout=5)

        cfg = get_config()

        assert cfg.api_url == "http://local.test/api"
        assert cfg.timeout == 5.0

    def test_configure_ignores_none(self):
        configure(api_url="http://local.test/api")
        configure(tile_url="http://local.test/map")

        assert get_config().api_url == "http://local.test/api"

    def test_configure_from_env(self, monkeypatch):
        monkeypatch.setenv("EE_API_URL", "http://env.test/api")
        monkeypatch.setenv("EE_TIMEOUT", "7.5")
        monkeypatch.delenv("EE_TILE_URL", raising=False)

        configure_from_env()

        cfg = get_config()
        assert cfg.api_url == "http://env.test/api"
        assert cfg.timeout == 7.5

    def test_invalid_timeout_is_ignored(self, monkeypatch):
        monkeypatch.setenv("EE_TIMEOUT", "soon")
        configure(timeout=9)

        configure_from_env()

        assert get_config().timeout == 9.0
