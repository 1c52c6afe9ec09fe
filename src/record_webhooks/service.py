"""
Record webhooks service.

Wires configuration, subscription store, delivery and notifier
together and attaches them to a record event source.
"""

from typing import Any, Dict, Optional

import aiohttp
import structlog

from .config.settings import Config
from .webhooks.delivery import WebhookDelivery
from .webhooks.hooks import RecordEventSource, attach_webhooks
from .webhooks.notifier import Notifier
from .webhooks.subscriptions import InMemorySubscriptionStore, SubscriptionStore

logger = structlog.get_logger(__name__)


class RecordWebhooksService:
    """
    Hosts the webhook notifier for a record storage engine.

    Subscribers declared in the configuration are loaded into the
    store on start. When webhooks are disabled nothing is attached
    to the event source.
    """

    def __init__(
        self,
        config: Config,
        source: Optional[RecordEventSource] = None,
        store: Optional[SubscriptionStore] = None,
        session: Optional[aiohttp.ClientSession] = None,
    ):
        """
        Initialize the service.

        Args:
            config: Service configuration
            source: Event source to attach to (creates one if None)
            store: Subscription store (in-memory store if None)
            session: Shared HTTP session for deliveries
        """
        self.config = config
        self.source = source or RecordEventSource()
        self.store = store or InMemorySubscriptionStore()
        self.delivery = WebhookDelivery(
            session=session,
            timeout_seconds=config.webhooks.timeout_seconds,
            user_agent=config.webhooks.user_agent,
        )
        self.notifier = Notifier(
            store=self.store,
            delivery=self.delivery,
            max_concurrent_deliveries=config.webhooks.max_concurrent_deliveries,
        )
        self._started = False

    async def start(self) -> None:
        """Load configured subscribers and attach to the event source."""
        if self._started:
            return

        if isinstance(self.store, InMemorySubscriptionStore):
            for sub in self.config.subscriptions:
                await self.store.create(
                    name=sub.name,
                    collection=sub.collection,
                    destination=sub.destination,
                    subscriber_id=sub.id,
                )
        elif self.config.subscriptions:
            logger.warning(
                "Ignoring configured subscriptions for external store",
                count=len(self.config.subscriptions),
            )

        if self.config.webhooks.enabled:
            attach_webhooks(self.source, self.notifier)
        else:
            logger.info("Webhook notifications disabled")

        self._started = True
        logger.info(
            "Record webhooks service started",
            version=self.config.version,
            subscriptions=len(self.config.subscriptions),
            enabled=self.config.webhooks.enabled,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get service statistics."""
        return {
            "started": self._started,
            "enabled": self.config.webhooks.enabled,
            "notifier": self.notifier.get_stats(),
        }
