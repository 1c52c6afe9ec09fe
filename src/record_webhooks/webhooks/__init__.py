"""
Webhook notifications for record changes.

Looks up subscribers of a changed collection and delivers the
change to each of them.
"""

from .delivery import WebhookDelivery
from .errors import (
    PayloadSerializationError,
    RemoteRejectedError,
    StoreQueryError,
    TransportError,
    WebhookError,
)
from .events import ActionKind, NotificationPayload
from .hooks import Hook, RecordEvent, RecordEventSource, attach_webhooks
from .notifier import DeliveryOutcome, DeliveryStatus, Notifier
from .subscriptions import InMemorySubscriptionStore, Subscriber, SubscriptionStore

__all__ = [
    "ActionKind",
    "NotificationPayload",
    "Subscriber",
    "SubscriptionStore",
    "InMemorySubscriptionStore",
    "WebhookDelivery",
    "Notifier",
    "DeliveryOutcome",
    "DeliveryStatus",
    "Hook",
    "RecordEvent",
    "RecordEventSource",
    "attach_webhooks",
    "WebhookError",
    "StoreQueryError",
    "PayloadSerializationError",
    "TransportError",
    "RemoteRejectedError",
]
