"""
Error types raised by the webhook notification path.

Store and serialization errors abort a whole notification; transport
and rejection errors are scoped to a single subscriber.
"""

from typing import Any, Dict, Optional


class WebhookError(Exception):
    """Base exception for webhook notification errors."""

    def __init__(
        self, message: str, code: str = "webhook_error", details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.details = details or {}


class StoreQueryError(WebhookError):
    """Subscriber lookup failed."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="store_query_error", details=details)


class PayloadSerializationError(WebhookError):
    """Notification payload could not be serialized."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="payload_serialization_error", details=details)


class TransportError(WebhookError):
    """Network-level failure while delivering a webhook."""

    def __init__(self, message: str, cause: Optional[BaseException] = None):
        super().__init__(
            message,
            code="transport_error",
            details={"cause": repr(cause)} if cause is not None else None,
        )
        self.cause = cause


class RemoteRejectedError(WebhookError):
    """Destination answered with a non-2xx status."""

    def __init__(self, status: int, body: str = ""):
        super().__init__(
            f"webhook rejected with status {status}: {body}",
            code="remote_rejected",
            details={"status": status, "body": body},
        )
        self.status = status
        self.body = body
