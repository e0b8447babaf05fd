import datetime as dt
import json
import logging

from fastapi import Depends, FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from backoffice.auth import require_api_key
from backoffice.config import settings
from backoffice.database import db, ensure_indexes, get_event_collection
from backoffice.models import ErrorResponse, serialize_event
from backoffice.services.event_update import (
    EventNotFound,
    EventUpdated,
    update_event,
)
from backoffice.storage import EventStore, MongoEventStore

# ===== Logging =====
logging.basicConfig(
    level=settings.LOG_LEVEL,
    format="%(asctime)s %(levelname)s %(message)s",
)
logger = logging.getLogger(__name__)

EVENT_NOT_FOUND = "Event not found."
EVENT_UPDATE_FAILED = "Failed to update event."

# ===== App =====
app = FastAPI(title=settings.APP_NAME)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS.split(","),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

@app.on_event("startup")
async def startup_db_client():
    db.connect()
    await ensure_indexes(get_event_collection())

@app.on_event("shutdown")
async def shutdown_db_client():
    db.close()

# ===== Dependencies =====
def get_event_store() -> EventStore:
    return MongoEventStore(
        get_event_collection(),
        timeout_ms=settings.MONGO_OPERATION_TIMEOUT_MS,
    )

# ===== Utils =====
def now_iso() -> str:
    return dt.datetime.now(dt.timezone.utc).isoformat()

def _reject_constant(name: str):
    raise ValueError(f"non-finite number {name} is not valid JSON")

async def read_patch(request: Request):
    """Request body as parsed JSON; an empty body is an empty patch."""
    raw = await request.body()
    if not raw.strip():
        return {}
    return json.loads(raw, parse_constant=_reject_constant)

def error_response(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=ErrorResponse(error=message).model_dump())

# ===== Endpoints =====
@app.get("/health")
async def health():
    return {"ok": True, "ts": now_iso()}

@app.put(
    "/bo/event/{id}",
    responses={400: {"model": ErrorResponse}, 500: {"model": ErrorResponse}},
    openapi_extra={
        "requestBody": {
            "required": False,
            "content": {
                "application/json": {
                    "schema": {"type": "object", "additionalProperties": True},
                },
            },
        },
    },
)
async def put_event(
    id: str,
    request: Request,
    _: bool = Depends(require_api_key),
    store: EventStore = Depends(get_event_store),
):
    try:
        patch = await read_patch(request)
    except ValueError as e:
        logger.warning("Rejected update for %s: unreadable body (%s)", id, e)
        return error_response(500, EVENT_UPDATE_FAILED)

    result = await update_event(store, id, patch, validate_id=settings.VALIDATE_EVENT_ID_FORMAT)

    if isinstance(result, EventUpdated):
        try:
            return JSONResponse(status_code=200, content=serialize_event(result.event))
        except (TypeError, ValueError) as e:
            # write already applied; only the rendering failed
            logger.error("Updated event %s but could not render it: %s", id, e)
            return error_response(500, EVENT_UPDATE_FAILED)
    if isinstance(result, EventNotFound):
        return error_response(400, EVENT_NOT_FOUND)

    logger.error("Update of event %s failed (%s): %r", result.event_id, result.reason, result.cause)
    return error_response(500, EVENT_UPDATE_FAILED)


# ===== Main =====
if __name__ == "__main__":
    import uvicorn
    uvicorn.run("backoffice.main:app", host=settings.HOST, port=settings.PORT, reload=False)
