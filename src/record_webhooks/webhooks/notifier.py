"""
Fan-out of record change events to webhook subscribers.

One payload is built per event and delivered independently to every
subscriber of the changed collection. Delivery failures are logged and
reported per subscriber, never raised.
"""

import asyncio
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Union

import structlog

from .delivery import WebhookDelivery
from .errors import StoreQueryError, TransportError, WebhookError
from .events import ActionKind, NotificationPayload
from .subscriptions import Subscriber, SubscriptionStore


class DeliveryStatus(str, Enum):
    """Outcome of a delivery attempt."""

    SUCCESS = "success"
    FAILED = "failed"


@dataclass
class DeliveryOutcome:
    """Result of delivering one event to one subscriber."""

    subscriber: Subscriber
    status: DeliveryStatus
    error: Optional[WebhookError] = None
    duration_ms: float = 0.0

    @property
    def is_successful(self) -> bool:
        """Whether delivery was successful."""
        return self.status == DeliveryStatus.SUCCESS

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "subscriber": self.subscriber.to_dict(),
            "status": self.status.value,
            "error": self.error.message if self.error else None,
            "duration_ms": self.duration_ms,
        }


class Notifier:
    """
    Notifies subscribers about committed record changes.

    The subscription store and logger are injected; the notifier holds
    no other state than delivery counters.
    """

    def __init__(
        self,
        store: SubscriptionStore,
        delivery: Optional[WebhookDelivery] = None,
        logger: Optional[Any] = None,
        max_concurrent_deliveries: Optional[int] = None,
    ):
        """
        Initialize notifier.

        Args:
            store: Subscription store queried for each event
            delivery: Delivery client (creates default if None)
            logger: Structured logger (module logger if None)
            max_concurrent_deliveries: Bound on parallel deliveries per
                notifier, unbounded if None
        """
        self.store = store
        self.delivery = delivery or WebhookDelivery()
        self.logger = logger or structlog.get_logger(__name__)
        self._semaphore = (
            asyncio.Semaphore(max_concurrent_deliveries) if max_concurrent_deliveries else None
        )

        # Statistics
        self._events_notified = 0
        self._events_aborted = 0
        self._deliveries_succeeded = 0
        self._deliveries_failed = 0

    async def notify(
        self,
        action: Union[ActionKind, str],
        collection: str,
        record: Mapping[str, Any],
        auth: Optional[Mapping[str, Any]] = None,
    ) -> List[DeliveryOutcome]:
        """
        Deliver a record change to every subscriber of its collection.

        Args:
            action: Committed action kind
            collection: Name of the changed record's collection
            record: Committed snapshot of the record
            auth: Optional principal that triggered the change

        Returns:
            One outcome per matched subscriber, empty if none matched

        Raises:
            ValueError: If action or collection is invalid
            StoreQueryError: Subscriber lookup failed, nothing was sent
            PayloadSerializationError: Payload could not be built, nothing was sent
        """
        action = ActionKind(action)
        if not collection:
            raise ValueError("Collection name is required")

        try:
            subscribers = await self.store.find_by_collection(collection)
        except StoreQueryError:
            self._events_aborted += 1
            raise
        except Exception as e:
            self._events_aborted += 1
            raise StoreQueryError(
                f"Failed to query subscribers: {e}", details={"collection": collection}
            ) from e

        if not subscribers:
            return []

        try:
            body = NotificationPayload(
                action=action, collection=collection, record=record, auth=auth
            ).to_json()
        except WebhookError:
            self._events_aborted += 1
            raise

        self._events_notified += 1

        outcomes = await asyncio.gather(
            *(self._deliver_to_subscriber(subscriber, action, body) for subscriber in subscribers)
        )
        return list(outcomes)

    async def _deliver_to_subscriber(
        self, subscriber: Subscriber, action: ActionKind, body: bytes
    ) -> DeliveryOutcome:
        start_time = time.time()
        try:
            if self._semaphore is not None:
                async with self._semaphore:
                    await self.delivery.deliver(subscriber.destination, body)
            else:
                await self.delivery.deliver(subscriber.destination, body)

        except WebhookError as e:
            return self._record_failure(subscriber, action, e, start_time)
        except Exception as e:
            error = TransportError(f"Delivery to {subscriber.destination} failed: {e}", cause=e)
            return self._record_failure(subscriber, action, error, start_time)

        self._deliveries_succeeded += 1
        self.logger.info(
            "webhook sent",
            action=action.value,
            name=subscriber.name,
            collection=subscriber.collection,
            destination=subscriber.destination,
        )
        return DeliveryOutcome(
            subscriber=subscriber,
            status=DeliveryStatus.SUCCESS,
            duration_ms=(time.time() - start_time) * 1000,
        )

    def _record_failure(
        self,
        subscriber: Subscriber,
        action: ActionKind,
        error: WebhookError,
        start_time: float,
    ) -> DeliveryOutcome:
        self._deliveries_failed += 1
        self.logger.error(
            "failed to send webhook",
            action=action.value,
            name=subscriber.name,
            collection=subscriber.collection,
            destination=subscriber.destination,
            error=error.message,
        )
        return DeliveryOutcome(
            subscriber=subscriber,
            status=DeliveryStatus.FAILED,
            error=error,
            duration_ms=(time.time() - start_time) * 1000,
        )

    def get_stats(self) -> Dict[str, Any]:
        """Get notifier statistics."""
        total_deliveries = self._deliveries_succeeded + self._deliveries_failed
        return {
            "events_notified": self._events_notified,
            "events_aborted": self._events_aborted,
            "deliveries_succeeded": self._deliveries_succeeded,
            "deliveries_failed": self._deliveries_failed,
            "success_rate": (
                (self._deliveries_succeeded / total_deliveries * 100) if total_deliveries else 100.0
            ),
        }
