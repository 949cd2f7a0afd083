"""Data fetch trigger.

The HTTP response only confirms the backend accepted the request. The
data itself arrives later over the push channel.
"""

import logging
from typing import Any

from ..models.exceptions import TriggerRejectedError, TriggerUnreachableError
from .backend import GET_DATA_PATH, BackendClient, BackendResponse

logger = logging.getLogger(__name__)

REJECTED_FALLBACK = "failed to trigger data fetch"


def extract_rejection_message(body: Any) -> str:
    """Pick the most specific error text from a rejection body.

    Prefers detail.error, then a string detail, then a generic fallback.
    """
    if not isinstance(body, dict):
        return REJECTED_FALLBACK
    detail = body.get("detail")
    if isinstance(detail, dict):
        nested = detail.get("error")
        if isinstance(nested, str) and nested:
            return nested
    elif isinstance(detail, str) and detail:
        return detail
    return REJECTED_FALLBACK


class TriggerRequester:
    """Asks the backend to start pushing data over the channel."""

    def __init__(self, client: BackendClient):
        self._client = client

    async def trigger(self) -> None:
        """Send the trigger request.

        Raises:
            TriggerRejectedError: Backend answered with a non-success status
            TriggerUnreachableError: The request never got a response
        """
        try:
            response = await self._client.get(GET_DATA_PATH)
        except OSError as e:
            logger.warning(f"Trigger request could not reach backend: {e}")
            raise TriggerUnreachableError(str(e)) from e

        if not response.ok:
            message = self._rejection_message(response)
            logger.info(f"Trigger rejected with HTTP {response.status}: {message}")
            raise TriggerRejectedError(message, status=response.status)

        logger.debug("Trigger accepted, waiting for push")

    def _rejection_message(self, response: BackendResponse) -> str:
        try:
            body = response.json()
        except ValueError:
            logger.debug("Rejection body is not JSON")
            return REJECTED_FALLBACK
        return extract_rejection_message(body)
