"""
Post-commit record hooks and the webhook binding.

A storage engine announces committed creates, updates and deletes by
triggering the hooks of a RecordEventSource. attach_webhooks() binds a
Notifier to those hooks so that notification problems are logged and
never interrupt the hook chain.
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, List, Mapping, Optional

import structlog

from .errors import WebhookError
from .events import ActionKind
from .notifier import Notifier

logger = structlog.get_logger(__name__)


@dataclass
class RecordEvent:
    """A committed record mutation."""

    collection: str
    record: Mapping[str, Any]
    auth: Optional[Mapping[str, Any]] = None


HookHandler = Callable[[RecordEvent], Awaitable[None]]


class Hook:
    """Ordered list of async handlers for one kind of record event."""

    def __init__(self, name: str):
        self.name = name
        self._handlers: List[HookHandler] = []

    def bind(self, handler: HookHandler) -> HookHandler:
        """Register a handler. Usable as a decorator."""
        self._handlers.append(handler)
        return handler

    def unbind(self, handler: HookHandler) -> bool:
        """Remove a previously bound handler."""
        try:
            self._handlers.remove(handler)
            return True
        except ValueError:
            return False

    @property
    def handlers(self) -> List[HookHandler]:
        return list(self._handlers)

    async def trigger(self, event: RecordEvent) -> None:
        """Run every handler in registration order."""
        for handler in list(self._handlers):
            await handler(event)


class RecordEventSource:
    """Post-commit hooks announced by a record storage engine."""

    def __init__(self) -> None:
        self.on_record_after_create_success = Hook("record_after_create_success")
        self.on_record_after_update_success = Hook("record_after_update_success")
        self.on_record_after_delete_success = Hook("record_after_delete_success")

    def hook_for(self, action: ActionKind) -> Hook:
        """Get the hook that announces an action kind."""
        return {
            ActionKind.CREATE: self.on_record_after_create_success,
            ActionKind.UPDATE: self.on_record_after_update_success,
            ActionKind.DELETE: self.on_record_after_delete_success,
        }[action]


def _webhook_handler(notifier: Notifier, action: ActionKind) -> HookHandler:
    async def handler(event: RecordEvent) -> None:
        try:
            await notifier.notify(action, event.collection, event.record, auth=event.auth)
        except WebhookError as e:
            logger.error(
                "Webhook notification aborted",
                action=action.value,
                collection=event.collection,
                error=e.message,
                code=e.code,
            )
        except Exception as e:
            logger.error(
                "Webhook notification failed with exception",
                action=action.value,
                collection=event.collection,
                error=str(e),
                exc_info=True,
            )

    return handler


def attach_webhooks(source: RecordEventSource, notifier: Notifier) -> List[HookHandler]:
    """
    Bind a notifier to the post-commit hooks of an event source.

    Only committed mutations are notified; there is no pre-commit
    variant and a notification can never veto the operation.

    Returns:
        The bound handlers, in create/update/delete order
    """
    handlers = []
    for action in ActionKind:
        handler = _webhook_handler(notifier, action)
        source.hook_for(action).bind(handler)
        handlers.append(handler)

    logger.info("Webhooks attached to record hooks", actions=[a.value for a in ActionKind])
    return handlers
