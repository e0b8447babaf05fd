import asyncio
import logging
from dataclasses import dataclass
from typing import Any, Mapping, Optional, Union

from bson import ObjectId

from backoffice.models import EventDocument
from backoffice.storage import EventStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class EventUpdated:
    event: EventDocument


@dataclass(frozen=True)
class EventNotFound:
    event_id: str


@dataclass(frozen=True)
class UpdateFailed:
    event_id: str
    cause: Optional[BaseException] = None
    reason: str = "store error"


# update_event never raises for store errors; it returns one of these
UpdateResult = Union[EventUpdated, EventNotFound, UpdateFailed]


def is_valid_event_id(event_id: Any) -> bool:
    """True for a non-empty string shaped like an ObjectId (24 hex chars)."""
    return isinstance(event_id, str) and bool(event_id) and ObjectId.is_valid(event_id)


async def update_event(
    store: EventStore,
    event_id: str,
    patch: Any,
    validate_id: bool = True,
) -> UpdateResult:
    if not isinstance(event_id, str) or not event_id:
        logger.warning("Rejected update: empty event id")
        return UpdateFailed(event_id=str(event_id), reason="empty event id")

    # The ObjectId form is only checked, never used: lookup is by eventId
    if validate_id and not is_valid_event_id(event_id):
        logger.warning("Rejected update for %r: not an ObjectId", event_id)
        return UpdateFailed(event_id=event_id, reason="malformed event id")

    if not isinstance(patch, Mapping):
        logger.warning("Rejected update for %s: body is %s, not an object", event_id, type(patch).__name__)
        return UpdateFailed(event_id=event_id, reason="patch is not an object")

    try:
        updated = await store.merge(event_id, dict(patch))
    except asyncio.TimeoutError as e:
        logger.error("Timed out updating event %s", event_id)
        return UpdateFailed(event_id=event_id, cause=e, reason="timeout")
    except Exception as e:
        logger.exception("Error updating event %s: %s", event_id, e)
        return UpdateFailed(event_id=event_id, cause=e)

    if updated is None:
        logger.warning("Event %s not found", event_id)
        return EventNotFound(event_id=event_id)

    logger.info("Updated event %s (%d fields)", event_id, len(patch))
    return EventUpdated(event=updated)
