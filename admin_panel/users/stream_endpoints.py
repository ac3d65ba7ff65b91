# admin_panel/users/stream_endpoints.py
import asyncio
import json
import logging
from typing import Annotated, AsyncIterator

from fastapi import APIRouter, Path, Query
from fastapi.responses import PlainTextResponse, StreamingResponse

from ..responses import EnvelopeRoute, skip_envelope, utc_timestamp

logger = logging.getLogger(__name__)

stream_router = APIRouter(prefix="/users/stream", tags=["Users - Streaming"], route_class=EnvelopeRoute)

NDJSON_MEDIA_TYPE = "application/x-ndjson"


def format_sse(data: dict, event_id: int) -> str:
    return f"id: {event_id}\ndata: {json.dumps(data)}\n\n"


async def _event_source(count: int, interval: float) -> AsyncIterator[str]:
    for num in range(count):
        if num and interval:
            await asyncio.sleep(interval)
        yield format_sse({"message": f"Live message {num}", "timestamp": utc_timestamp()}, num)


@stream_router.get("/events")
async def stream_events(
    count: Annotated[int, Query(ge=1, le=1000, description="Number of events before the stream ends.")] = 10,
    interval: Annotated[float, Query(ge=0, le=60, description="Seconds between events.")] = 1.0,
):
    """Server-Sent Events: one message per ``interval`` seconds."""
    return StreamingResponse(
        _event_source(count, interval),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache"},
    )


@stream_router.get("/raw/{item_id}")
@skip_envelope
async def get_raw_data(item_id: Annotated[str, Path()]):
    """Returned exactly as written, without the response envelope."""
    return {
        "userId": item_id,
        "customFormat": True,
        "data": "Raw payload, not wrapped",
    }


@stream_router.get("/download/{filename}")
async def download_file(filename: Annotated[str, Path()]):
    async def _chunks() -> AsyncIterator[bytes]:
        for line_no in range(1, 101):
            yield f"line {line_no} of {filename}\n".encode("utf-8")

    return StreamingResponse(
        _chunks(),
        media_type="application/octet-stream",
        headers={"Content-Disposition": 'attachment; filename="example.txt"'},
    )


@stream_router.get("/stream-json")
@skip_envelope
async def stream_json(
    count: Annotated[int, Query(ge=1, le=10000)] = 10,
):
    """Newline-delimited JSON, one user object per line."""
    body = "".join(json.dumps({"id": i, "name": f"User {i}"}) + "\n" for i in range(count))
    return PlainTextResponse(body, media_type=NDJSON_MEDIA_TYPE)
