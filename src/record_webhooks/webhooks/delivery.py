"""
Webhook delivery for record change notifications.

Performs a single best-effort HTTP POST per destination and
classifies the outcome. There are no retries.
"""

import asyncio
from typing import Dict, Optional

import aiohttp
import structlog

from .errors import RemoteRejectedError, TransportError

logger = structlog.get_logger(__name__)

DEFAULT_USER_AGENT = "record-webhooks/0.1"


class WebhookDelivery:
    """
    Delivers one payload to one destination.

    A session passed in is reused across deliveries and left open;
    otherwise a short-lived session is opened for each call.
    """

    def __init__(
        self,
        session: Optional[aiohttp.ClientSession] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: str = DEFAULT_USER_AGENT,
    ):
        """
        Initialize webhook delivery.

        Args:
            session: Shared aiohttp session, owned by the caller
            timeout_seconds: Total request timeout (aiohttp default if None)
            user_agent: User-Agent header sent with every request
        """
        self._session = session
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

    def _prepare_headers(self) -> Dict[str, str]:
        """Prepare HTTP headers for webhook delivery."""
        return {
            "Content-Type": "application/json",
            "User-Agent": self.user_agent,
        }

    async def deliver(self, destination_url: str, payload: bytes) -> int:
        """
        POST a serialized payload to a destination.

        Args:
            destination_url: Absolute URL of the webhook endpoint
            payload: Serialized JSON body

        Returns:
            HTTP status of the successful response

        Raises:
            TransportError: Connection, DNS, TLS or timeout failure
            RemoteRejectedError: Response status outside 200-299
        """
        try:
            if self._session is not None:
                return await self._post(self._session, destination_url, payload)

            async with aiohttp.ClientSession() as session:
                return await self._post(session, destination_url, payload)

        except asyncio.TimeoutError as e:
            raise TransportError(f"Request to {destination_url} timed out", cause=e) from e
        except aiohttp.ClientError as e:
            raise TransportError(f"Request to {destination_url} failed: {e}", cause=e) from e

    async def _post(self, session: aiohttp.ClientSession, url: str, payload: bytes) -> int:
        kwargs = {}
        if self.timeout_seconds is not None:
            kwargs["timeout"] = aiohttp.ClientTimeout(total=self.timeout_seconds)

        async with session.post(
            url, data=payload, headers=self._prepare_headers(), **kwargs
        ) as response:
            if 200 <= response.status < 300:
                logger.debug("Webhook delivery successful", url=url, status_code=response.status)
                return response.status

            try:
                body = await response.text(errors="replace")
            except (aiohttp.ClientError, asyncio.TimeoutError):
                body = ""

            logger.debug("Webhook delivery rejected", url=url, status_code=response.status)
            raise RemoteRejectedError(response.status, body)
