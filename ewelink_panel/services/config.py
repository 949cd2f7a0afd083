"""Configuration management for ewelink-panel.

Single JSON file at ~/.config/ewelink-panel/config.json, with environment
variables taking precedence:

- EWELINK_PANEL_BACKEND_URL: backend base URL
- EWELINK_PANEL_SESSION_COOKIE: session cookie issued after login

The file is only read. It may hold the session cookie, so keep it
private (mode 0600) or prefer the environment variable on shared machines.
"""

import json
import logging
import os
from dataclasses import dataclass, replace
from pathlib import Path
from urllib.parse import urlparse, urlunparse

from ..models.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_BACKEND_URL = "https://aedesign-sonoff-backend.onrender.com"

ENV_BACKEND_URL = "EWELINK_PANEL_BACKEND_URL"
ENV_SESSION_COOKIE = "EWELINK_PANEL_SESSION_COOKIE"



def _validate_http_url(url: str, field_name: str) -> None:
    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ConfigError(
            f"invalid {field_name}: {url!r}",
            suggestion="expected an http:// or https:// URL",
        )


@dataclass
class PanelConfig:
    """Settings for talking to the backend.

    Timeouts are in seconds; None means wait indefinitely.
    """

    backend_url: str = DEFAULT_BACKEND_URL
    # Push channel URL (derived from backend_url when empty)
    channel_url: str = ""
    # Value of the Cookie header sent on every request and the handshake
    session_cookie: str = ""
    http_timeout: float | None = None
    open_timeout: float | None = None

    @property
    def base_url(self) -> str:
        """Backend URL without trailing slash."""
        return self.backend_url.rstrip("/")

    @property
    def effective_channel_url(self) -> str:
        """Push channel URL: configured, or backend URL with ws(s) scheme and /ws path."""
        if self.channel_url:
            return self.channel_url
        parsed = urlparse(self.base_url)
        scheme = "wss" if parsed.scheme == "https" else "ws"
        return urlunparse((scheme, parsed.netloc, parsed.path + "/ws", "", "", ""))

    def endpoint(self, path: str) -> str:
        """Absolute URL for a backend path such as '/api/status'."""
        return f"{self.base_url}/{path.lstrip('/')}"

    def validate(self) -> None:
        """Raise ConfigError if the URLs cannot be used."""
        _validate_http_url(self.backend_url, "backend_url")
        if self.channel_url:
            parsed = urlparse(self.channel_url)
            if parsed.scheme not in ("ws", "wss") or not parsed.netloc:
                raise ConfigError(
                    f"invalid channel_url: {self.channel_url!r}",
                    suggestion="expected a ws:// or wss:// URL",
                )
        for name in ("http_timeout", "open_timeout"):
            value = getattr(self, name)
            if value is not None and value <= 0:
                raise ConfigError(f"{name} must be positive, got {value}")

    @classmethod
    def from_dict(cls, data: dict) -> "PanelConfig":
        return cls(
            backend_url=data.get("backend_url") or DEFAULT_BACKEND_URL,
            channel_url=data.get("channel_url", ""),
            session_cookie=data.get("session_cookie", ""),
            http_timeout=data.get("http_timeout"),
            open_timeout=data.get("open_timeout"),
        )

    def with_env(self, environ: dict | None = None) -> "PanelConfig":
        """Return a copy with environment overrides applied."""
        env = os.environ if environ is None else environ
        overrides = {}
        if env.get(ENV_BACKEND_URL):
            overrides["backend_url"] = env[ENV_BACKEND_URL]
        if env.get(ENV_SESSION_COOKIE):
            overrides["session_cookie"] = env[ENV_SESSION_COOKIE]
        return replace(self, **overrides)


class ConfigManager:
    """Loads the panel configuration."""

    def __init__(self, config_dir: Path | None = None):
        if config_dir is None:
            config_dir = Path.home() / ".config" / "ewelink-panel"
        self._config_file = config_dir / "config.json"
        self._config: PanelConfig | None = None

    @property
    def config(self) -> PanelConfig:
        """File config, without environment overrides."""
        if self._config is None:
            self._config = self._load_config()
        return self._config

    def _load_config(self) -> PanelConfig:
        """Load config from disk."""
        if self._config_file.exists():
            try:
                data = json.loads(self._config_file.read_text())
                return PanelConfig.from_dict(data)
            except (json.JSONDecodeError, AttributeError) as e:
                logger.warning(f"Failed to load config file, using defaults: {e}")
        return PanelConfig()

    def resolve(self, environ: dict | None = None) -> PanelConfig:
        """Resolve file config plus environment overrides, validated.

        Raises:
            ConfigError: If the resolved URLs or timeouts are invalid
        """
        resolved = self.config.with_env(environ)
        resolved.validate()
        return resolved
