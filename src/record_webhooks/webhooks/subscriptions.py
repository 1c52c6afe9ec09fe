"""
Webhook subscription records and storage.

Subscribers are bound to a source collection by name. Renaming a
collection leaves its subscriptions pointing at the old name; pass
``collection_exists`` to the store to reject unknown collections.
"""

import asyncio
import uuid
from abc import ABC, abstractmethod
from dataclasses import dataclass, field, replace
from typing import Any, Callable, Dict, List, Optional
from urllib.parse import urlparse

import structlog

logger = structlog.get_logger(__name__)


def validate_destination(url: str) -> str:
    """Check that a destination is an absolute http(s) URL."""
    if not url or not isinstance(url, str):
        raise ValueError("Destination is required")

    parsed = urlparse(url)
    if parsed.scheme not in ("http", "https") or not parsed.netloc:
        raise ValueError(f"Invalid destination URL - must be absolute http(s): {url}")
    return url


@dataclass(frozen=True)
class Subscriber:
    """A destination notified about changes to one collection."""

    name: str
    collection: str
    destination: str
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def __post_init__(self) -> None:
        if not self.name:
            raise ValueError("Subscriber name is required")
        if not self.collection:
            raise ValueError("Subscriber collection is required")
        validate_destination(self.destination)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            "id": self.id,
            "name": self.name,
            "collection": self.collection,
            "destination": self.destination,
        }


class SubscriptionStore(ABC):
    """Read side of subscriber persistence used by the notifier."""

    @abstractmethod
    async def find_by_collection(self, collection: str) -> List[Subscriber]:
        """
        Return all subscribers bound to a collection.

        Matching is exact and case-sensitive. Implementations raise
        StoreQueryError when the underlying storage is unavailable.
        """


class InMemorySubscriptionStore(SubscriptionStore):
    """
    Process-local subscription store with administrative CRUD.

    Subscribers are kept in insertion order, which is also the order
    returned by lookups.
    """

    def __init__(self, collection_exists: Optional[Callable[[str], bool]] = None):
        """
        Initialize subscription store.

        Args:
            collection_exists: Optional check used to reject subscriptions
                for collections that do not exist
        """
        self._collection_exists = collection_exists
        self._subscribers: Dict[str, Subscriber] = {}
        self._lock = asyncio.Lock()

    def _check_collection(self, collection: str) -> None:
        if self._collection_exists is not None and not self._collection_exists(collection):
            raise ValueError(f"Unknown collection: {collection}")

    async def create(
        self,
        name: str,
        collection: str,
        destination: str,
        subscriber_id: Optional[str] = None,
    ) -> Subscriber:
        """
        Register a new subscriber.

        Raises:
            ValueError: If a field is invalid or the id is already taken
        """
        kwargs: Dict[str, Any] = {}
        if subscriber_id:
            kwargs["id"] = subscriber_id
        subscriber = Subscriber(name=name, collection=collection, destination=destination, **kwargs)
        self._check_collection(subscriber.collection)

        async with self._lock:
            if subscriber.id in self._subscribers:
                raise ValueError(f"Subscriber already exists: {subscriber.id}")
            self._subscribers[subscriber.id] = subscriber

        logger.info(
            "Subscriber created",
            subscriber_id=subscriber.id,
            name=subscriber.name,
            collection=subscriber.collection,
            destination=subscriber.destination,
        )
        return subscriber

    async def update(
        self,
        subscriber_id: str,
        name: Optional[str] = None,
        collection: Optional[str] = None,
        destination: Optional[str] = None,
    ) -> Optional[Subscriber]:
        """Update an existing subscriber. Returns None if it does not exist."""
        async with self._lock:
            current = self._subscribers.get(subscriber_id)
            if current is None:
                return None

            changes: Dict[str, Any] = {}
            if name is not None:
                changes["name"] = name
            if collection is not None:
                self._check_collection(collection)
                changes["collection"] = collection
            if destination is not None:
                changes["destination"] = destination

            updated = replace(current, **changes)
            self._subscribers[subscriber_id] = updated

        logger.info(
            "Subscriber updated",
            subscriber_id=subscriber_id,
            collection=updated.collection,
            destination=updated.destination,
        )
        return updated

    async def delete(self, subscriber_id: str) -> bool:
        """Remove a subscriber."""
        async with self._lock:
            subscriber = self._subscribers.pop(subscriber_id, None)

        if subscriber:
            logger.info(
                "Subscriber deleted",
                subscriber_id=subscriber_id,
                collection=subscriber.collection,
            )
            return True
        return False

    def get(self, subscriber_id: str) -> Optional[Subscriber]:
        """Get a subscriber by id."""
        return self._subscribers.get(subscriber_id)

    def list_subscribers(self) -> List[Subscriber]:
        """Get all subscribers in insertion order."""
        return list(self._subscribers.values())

    async def find_by_collection(self, collection: str) -> List[Subscriber]:
        return [s for s in self._subscribers.values() if s.collection == collection]
