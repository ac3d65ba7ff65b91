# admin_panel/responses.py
"""
Uniform success envelope for JSON routes.

Routers built with ``route_class=EnvelopeRoute`` return
``{"data": ..., "statusCode": ..., "message": "OK", "timestamp": ...}``
instead of the bare payload. Streaming and file responses, empty bodies and
endpoints decorated with ``@skip_envelope`` pass through untouched.
"""
import json
import logging
from datetime import datetime, timezone
from typing import Any, Callable, Coroutine

from fastapi import Request, Response
from fastapi.responses import JSONResponse
from fastapi.routing import APIRoute

logger = logging.getLogger(__name__)

_SKIP_ENVELOPE_ATTR = "_admin_panel_skip_envelope"
_REPLACED_HEADERS = (b"content-length", b"content-type")


def utc_timestamp() -> str:
    return datetime.now(timezone.utc).isoformat()


def skip_envelope(func: Callable) -> Callable:
    """Mark an endpoint so its response is sent as-is. Apply below the route decorator."""
    setattr(func, _SKIP_ENVELOPE_ATTR, True)
    return func


def envelope(data: Any, status_code: int, message: str = "OK") -> dict:
    return {
        "data": data,
        "statusCode": status_code,
        "message": message,
        "timestamp": utc_timestamp(),
    }


def wrap_response(response: Response) -> Response:
    if not isinstance(response, JSONResponse):
        return response
    if response.status_code >= 400 or not response.body:
        return response

    payload = json.loads(response.body)
    wrapped = JSONResponse(
        envelope(payload, response.status_code),
        status_code=response.status_code,
        background=response.background,
    )
    # Keep cookies and custom headers the endpoint set
    wrapped.raw_headers.extend(
        (name, value) for name, value in response.raw_headers if name.lower() not in _REPLACED_HEADERS
    )
    return wrapped


class EnvelopeRoute(APIRoute):
    def get_route_handler(self) -> Callable[[Request], Coroutine[Any, Any, Response]]:
        original_handler = super().get_route_handler()
        if getattr(self.endpoint, _SKIP_ENVELOPE_ATTR, False):
            return original_handler

        async def envelope_handler(request: Request) -> Response:
            response = await original_handler(request)
            return wrap_response(response)

        return envelope_handler
