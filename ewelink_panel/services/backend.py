"""Credentialed HTTP access to the backend.

Blocking urllib calls run in a worker thread so the event loop keeps
delivering channel events while a request is in flight.
"""

import asyncio
import http.client
import json
import logging
from dataclasses import dataclass
from typing import Any, Callable
from urllib.error import HTTPError
from urllib.request import Request, urlopen

from .config import PanelConfig

logger = logging.getLogger(__name__)

STATUS_PATH = "/api/status"
GET_DATA_PATH = "/api/get-data"
LOGIN_PATH = "/login"
LOGOUT_PATH = "/logout"


@dataclass
class BackendResponse:
    """Status and raw body of a completed HTTP exchange."""

    status: int
    body: bytes = b""

    @property
    def ok(self) -> bool:
        return 200 <= self.status < 300

    def json(self) -> Any:
        """Decode the body as JSON.

        Raises:
            ValueError: If the body is not valid JSON
        """
        return json.loads(self.body.decode("utf-8"))


class BackendClient:
    """GET requests against the backend with the session cookie attached.

    A non-success HTTP status is a normal BackendResponse. Anything that
    prevents a response (DNS, refused connection, timeout, broken reply)
    raises ConnectionError or another OSError.
    """

    def __init__(
        self,
        config: PanelConfig,
        opener: Callable[..., Any] | None = None,
    ):
        self._config = config
        self._urlopen = opener or urlopen

    @property
    def login_url(self) -> str:
        return self._config.endpoint(LOGIN_PATH)

    @property
    def logout_url(self) -> str:
        return self._config.endpoint(LOGOUT_PATH)

    def credential_headers(self) -> dict[str, str]:
        """Headers carrying the session credentials (shared with the channel handshake)."""
        if self._config.session_cookie:
            return {"Cookie": self._config.session_cookie}
        return {}

    def _build_request(self, path: str) -> Request:
        headers = {"Accept": "application/json", **self.credential_headers()}
        return Request(self._config.endpoint(path), headers=headers, method="GET")

    def get_sync(self, path: str) -> BackendResponse:
        """Perform a blocking GET."""
        request = self._build_request(path)
        kwargs = {}
        if self._config.http_timeout is not None:
            kwargs["timeout"] = self._config.http_timeout

        try:
            with self._urlopen(request, **kwargs) as resp:
                return BackendResponse(status=resp.status, body=resp.read())
        except HTTPError as e:
            body = e.read() or b""
            logger.debug(f"GET {path} returned {e.code}")
            return BackendResponse(status=e.code, body=body)
        except http.client.HTTPException as e:
            raise ConnectionError(f"malformed response: {e}") from e

    async def get(self, path: str) -> BackendResponse:
        """Perform a GET without blocking the event loop."""
        return await asyncio.to_thread(self.get_sync, path)
