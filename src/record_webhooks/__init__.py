"""
Record Webhooks

Notifies external HTTP endpoints when records in a data store are
created, updated or deleted.
"""

__version__ = "0.1.0"
__license__ = "MIT"

from .config.settings import Config, load_config
from .service import RecordWebhooksService
from .webhooks import (
    ActionKind,
    InMemorySubscriptionStore,
    NotificationPayload,
    Notifier,
    RecordEventSource,
    Subscriber,
    WebhookDelivery,
    attach_webhooks,
)

__all__ = [
    "RecordWebhooksService",
    "Config",
    "load_config",
    "ActionKind",
    "NotificationPayload",
    "Subscriber",
    "InMemorySubscriptionStore",
    "WebhookDelivery",
    "Notifier",
    "RecordEventSource",
    "attach_webhooks",
    "__version__",
    "__license__",
]
