"""
Event definitions for record change notifications.

Defines the committed action kinds and the payload structure
sent to webhook destinations.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Union

from .errors import PayloadSerializationError


class ActionKind(str, Enum):
    """Record mutations that trigger a notification, after commit."""

    CREATE = "create-after-success"
    UPDATE = "update-after-success"
    DELETE = "delete-after-success"


@dataclass
class NotificationPayload:
    """Body of a webhook request for one record change."""

    action: ActionKind
    collection: str
    record: Mapping[str, Any]
    auth: Optional[Mapping[str, Any]] = None

    def to_dict(self) -> Dict[str, Any]:
        """Convert payload to its wire dictionary."""
        payload: Dict[str, Any] = {
            "action": self.action.value,
            "collection": self.collection,
            "record": dict(self.record),
        }
        if self.auth is not None:
            payload["auth"] = dict(self.auth)
        return payload

    def to_json(self) -> bytes:
        """Serialize payload to compact UTF-8 JSON."""
        try:
            payload = self.to_dict()
            return json.dumps(
                payload, separators=(",", ":"), ensure_ascii=False, allow_nan=False
            ).encode("utf-8")
        except (TypeError, ValueError) as e:
            raise PayloadSerializationError(
                f"Failed to serialize payload: {e}",
                details={"action": self.action.value, "collection": self.collection},
            ) from e

    @classmethod
    def from_json(cls, data: Union[bytes, str]) -> "NotificationPayload":
        """Parse a serialized payload."""
        raw = json.loads(data)
        return cls(
            action=ActionKind(raw["action"]),
            collection=raw["collection"],
            record=raw["record"],
            auth=raw.get("auth"),
        )
