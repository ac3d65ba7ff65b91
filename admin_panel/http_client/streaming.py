# admin_panel/http_client/streaming.py
import inspect
import logging
from dataclasses import dataclass
from typing import Any, AsyncIterator, Callable, Optional

import httpx

logger = logging.getLogger(__name__)


@dataclass
class StreamOptions:
    """Observers invoked while a streamed response is consumed.

    Each callback may be a plain function or a coroutine function.
    """

    on_data: Optional[Callable[[bytes], Any]] = None
    on_end: Optional[Callable[[], Any]] = None
    on_error: Optional[Callable[[BaseException], Any]] = None


async def _notify(callback: Optional[Callable[..., Any]], *args: Any) -> None:
    if callback is None:
        return
    result = callback(*args)
    if inspect.isawaitable(result):
        await result


class ResponseStream:
    """
    Push-style view over a streamed httpx response.

    Iterating yields raw byte chunks. The ``on_data`` observer sees every
    chunk, ``on_end`` fires once the body is exhausted and ``on_error`` fires
    if the transport fails mid-body (the error is then re-raised). The
    underlying response is closed in every case.
    """

    def __init__(self, service_name: str, response: httpx.Response, options: Optional[StreamOptions] = None):
        self.service_name = service_name
        self.response = response
        self.options = options or StreamOptions()
        self._consumed = False

    @property
    def status_code(self) -> int:
        return self.response.status_code

    @property
    def headers(self) -> httpx.Headers:
        return self.response.headers

    async def __aiter__(self) -> AsyncIterator[bytes]:
        if self._consumed:
            raise RuntimeError(f"[{self.service_name}] stream has already been consumed.")
        self._consumed = True
        try:
            async for chunk in self.response.aiter_bytes():
                logger.debug(f"[{self.service_name}] stream chunk: {chunk[:200]!r}...")
                await _notify(self.options.on_data, chunk)
                yield chunk
        except httpx.HTTPError as e:
            logger.error(f"[{self.service_name}] stream error: {e}")
            await _notify(self.options.on_error, e)
            raise
        else:
            logger.debug(f"[{self.service_name}] stream ended.")
            await _notify(self.options.on_end)
        finally:
            await self.aclose()

    async def read_all(self) -> bytes:
        """Drain the stream, running the observers, and return the whole body."""
        chunks = [chunk async for chunk in self]
        return b"".join(chunks)

    async def aclose(self) -> None:
        if not self.response.is_closed:
            await self.response.aclose()

    async def __aenter__(self) -> "ResponseStream":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()
