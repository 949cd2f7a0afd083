"""One-shot authentication status check."""

import logging

from ..models.exceptions import BackendUnreachableError, StatusCheckFailedError
from .backend import STATUS_PATH, BackendClient

logger = logging.getLogger(__name__)


class SessionProbe:
    """Asks the backend whether the current session is authenticated."""

    def __init__(self, client: BackendClient):
        self._client = client

    async def check_status(self) -> bool:
        """Return the backend's view of our authentication state.

        Raises:
            StatusCheckFailedError: Non-success status or unreadable body
            BackendUnreachableError: The request never got a response
        """
        try:
            response = await self._client.get(STATUS_PATH)
        except OSError as e:
            logger.warning(f"Status check could not reach backend: {e}")
            raise BackendUnreachableError(str(e)) from e

        if not response.ok:
            logger.warning(f"Status check failed with HTTP {response.status}")
            raise StatusCheckFailedError(response.status)

        try:
            body = response.json()
        except ValueError as e:
            raise StatusCheckFailedError(response.status) from e

        if not isinstance(body, dict) or not isinstance(body.get("authenticated"), bool):
            logger.warning(f"Status check returned unexpected body: {body!r}")
            raise StatusCheckFailedError(response.status)

        return body["authenticated"]
