"""Tests for configuration loading, env overrides and validation."""

import json

import pytest

from ewelink_panel.models.exceptions import ConfigError
from ewelink_panel.services.config import (
    DEFAULT_BACKEND_URL,
    ENV_BACKEND_URL,
    ENV_SESSION_COOKIE,
    ConfigManager,
    PanelConfig,
)


class TestPanelConfig:
    """Tests for the config dataclass."""

    def test_defaults(self):
        config = PanelConfig()
        assert config.backend_url == DEFAULT_BACKEND_URL
        assert config.session_cookie == ""
        assert config.http_timeout is None
        assert config.open_timeout is None

    def test_endpoint_joins_paths(self):
        config = PanelConfig(backend_url="https://b.test/")
        assert config.endpoint("/api/status") == "https://b.test/api/status"
        assert config.endpoint("login") == "https://b.test/login"

    def test_channel_url_derived_from_https(self):
        config = PanelConfig(backend_url="https://b.test")
        assert config.effective_channel_url == "wss://b.test/ws"

    def test_channel_url_derived_from_http_with_prefix(self):
        config = PanelConfig(backend_url="http://localhost:8000/panel/")
        assert config.effective_channel_url == "ws://localhost:8000/panel/ws"

    def test_explicit_channel_url_wins(self):
        config = PanelConfig(backend_url="https://b.test", channel_url="wss://push.test/feed")
        assert config.effective_channel_url == "wss://push.test/feed"

    def test_default_channel_url(self):
        assert PanelConfig().effective_channel_url == (
            "wss://aedesign-sonoff-backend.onrender.com/ws"
        )


class TestValidation:
    """Tests for PanelConfig.validate()."""

    def test_valid_defaults(self):
        PanelConfig().validate()

    @pytest.mark.parametrize("url", ["ftp://b.test", "b.test", "https://"])
    def test_bad_backend_url(self, url):
        with pytest.raises(ConfigError):
            PanelConfig(backend_url=url).validate()

    def test_bad_channel_url(self):
        with pytest.raises(ConfigError) as exc_info:
            PanelConfig(channel_url="https://b.test/ws").validate()
        assert exc_info.value.suggestion is not None

    def test_non_positive_timeout(self):
        with pytest.raises(ConfigError):
            PanelConfig(http_timeout=0).validate()
        with pytest.raises(ConfigError):
            PanelConfig(open_timeout=-1).validate()


class TestFromDict:
    """Tests for building a config from file data."""

    def test_all_fields(self):
        config = PanelConfig.from_dict(
            {
                "backend_url": "https://b.test",
                "channel_url": "wss://push.test/ws",
                "session_cookie": "s=1",
                "http_timeout": 5.0,
                "open_timeout": 2.5,
            }
        )
        assert config == PanelConfig(
            backend_url="https://b.test",
            channel_url="wss://push.test/ws",
            session_cookie="s=1",
            http_timeout=5.0,
            open_timeout=2.5,
        )

    def test_empty_dict_gives_defaults(self):
        assert PanelConfig.from_dict({}) == PanelConfig()

    def test_from_dict_empty_backend_uses_default(self):
        assert PanelConfig.from_dict({"backend_url": ""}).backend_url == DEFAULT_BACKEND_URL


class TestEnvOverrides:
    """Environment variables take precedence over the file."""

    def test_env_overrides(self):
        config = PanelConfig(backend_url="https://file.test", session_cookie="file")
        env = {ENV_BACKEND_URL: "https://env.test", ENV_SESSION_COOKIE: "env"}

        resolved = config.with_env(env)

        assert resolved.backend_url == "https://env.test"
        assert resolved.session_cookie == "env"
        assert config.backend_url == "https://file.test"

    def test_empty_env_ignored(self):
        config = PanelConfig(session_cookie="file")
        assert config.with_env({ENV_SESSION_COOKIE: ""}).session_cookie == "file"


class TestConfigManager:
    """Tests for loading the config file."""

    def test_missing_file_gives_defaults(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path / "cfg")
        assert manager.config == PanelConfig()

    def test_loads_file(self, tmp_path):
        config_dir = tmp_path / "cfg"
        config_dir.mkdir()
        (config_dir / "config.json").write_text(
            json.dumps({"backend_url": "https://b.test", "session_cookie": "s=1"})
        )

        manager = ConfigManager(config_dir=config_dir)

        assert manager.config.backend_url == "https://b.test"
        assert manager.config.session_cookie == "s=1"

    def test_corrupt_file_gives_defaults(self, tmp_path):
        (tmp_path / "config.json").write_text("{broken")
        manager = ConfigManager(config_dir=tmp_path)
        assert manager.config == PanelConfig()

    def test_resolve_applies_env_and_validates(self, tmp_path):
        (tmp_path / "config.json").write_text(json.dumps({"backend_url": "https://file.test"}))
        manager = ConfigManager(config_dir=tmp_path)

        resolved = manager.resolve({ENV_SESSION_COOKIE: "s=2"})

        assert resolved.backend_url == "https://file.test"
        assert resolved.session_cookie == "s=2"

    def test_resolve_rejects_bad_url(self, tmp_path):
        manager = ConfigManager(config_dir=tmp_path)
        with pytest.raises(ConfigError):
            manager.resolve({ENV_BACKEND_URL: "not-a-url"})
