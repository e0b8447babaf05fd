import asyncio
import logging
from typing import Optional, Protocol, runtime_checkable

from pymongo import ReturnDocument

from backoffice.models import EVENT_ID_FIELD, EventDocument, EventPatch

logger = logging.getLogger(__name__)

# Client-side backstop past maxTimeMS so the server abort (nothing written) wins
DEADLINE_MARGIN_SECONDS = 1.0


@runtime_checkable
class EventStore(Protocol):
    """Anything that can atomically merge a patch into one Event."""

    async def merge(self, event_id: str, patch: EventPatch) -> Optional[EventDocument]:
        """Returns the post-update Event, or None when no Event matches."""
        ...


class MongoEventStore:
    def __init__(self, collection, timeout_ms: Optional[int] = None):
        self.collection = collection
        self.timeout_ms = timeout_ms

    @property
    def deadline_seconds(self) -> Optional[float]:
        if not self.timeout_ms:
            return None
        return self.timeout_ms / 1000 + DEADLINE_MARGIN_SECONDS

    async def merge(self, event_id: str, patch: EventPatch) -> Optional[EventDocument]:
        mongo_filter = {EVENT_ID_FIELD: event_id}
        # find() takes max_time_ms, command helpers take the raw maxTimeMS field
        find_opts, command_opts = {}, {}
        if self.timeout_ms:
            find_opts["max_time_ms"] = self.timeout_ms
            command_opts["maxTimeMS"] = self.timeout_ms

        if not patch:
            # MongoDB rejects an empty $set; nothing to write, lookup only
            op = self.collection.find_one(mongo_filter, **find_opts)
        else:
            op = self.collection.find_one_and_update(
                mongo_filter,
                {"$set": dict(patch)},
                return_document=ReturnDocument.AFTER,
                upsert=False,
                **command_opts,
            )

        if self.timeout_ms:
            return await asyncio.wait_for(op, timeout=self.deadline_seconds)
        return await op
