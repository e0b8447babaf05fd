import base64
import datetime as dt
from typing import Any, Dict

from bson import Binary, Decimal128, ObjectId
from fastapi.encoders import jsonable_encoder
from pydantic import BaseModel

# Arbitrary field -> value mapping; no schema beyond `eventId`
EventDocument = Dict[str, Any]
EventPatch = Dict[str, Any]

EVENT_ID_FIELD = "eventId"


class ErrorResponse(BaseModel):
    error: str


def _utc_iso(value: dt.datetime) -> str:
    if value.tzinfo is None:
        value = value.replace(tzinfo=dt.timezone.utc)
    return value.astimezone(dt.timezone.utc).isoformat()


BSON_ENCODERS = {
    ObjectId: str,
    Decimal128: str,
    Binary: lambda b: base64.b64encode(bytes(b)).decode("ascii"),
    bytes: lambda b: base64.b64encode(b).decode("ascii"),
    dt.datetime: _utc_iso,
}


def serialize_event(doc: EventDocument) -> EventDocument:
    """Makes a stored Event JSON-safe (ObjectId/Decimal128 -> str, binary -> base64, datetime -> ISO8601 UTC)."""
    return jsonable_encoder(doc, custom_encoder=BSON_ENCODERS)
