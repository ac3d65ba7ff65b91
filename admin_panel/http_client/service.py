# admin_panel/http_client/service.py
import asyncio
import json
import logging
from typing import Any, Awaitable, Callable, Dict, IO, List, Optional, Sequence, TypeVar, Union

import httpx

from ..settings import settings
from .batch import run_all, run_with_limit
from .streaming import ResponseStream, StreamOptions

logger = logging.getLogger(__name__)
T = TypeVar("T")


class HttpClientService:
    """
    Outbound HTTP transport shared by every declarative client.

    Keeps one ``httpx.AsyncClient`` (and therefore one connection pool) per
    service name. Retries live here: a call is retried only on a network
    failure or a 5xx response, ``retries`` extra times, sleeping
    ``retry_delay`` seconds in between; the last error is re-raised.
    """

    def __init__(
        self,
        default_timeout: Optional[float] = None,
        default_retry_delay: Optional[float] = None,
        limits: Optional[httpx.Limits] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.default_timeout = default_timeout if default_timeout is not None else settings.http_client_default_timeout
        self.default_retry_delay = (
            default_retry_delay if default_retry_delay is not None else settings.http_client_retry_delay
        )
        self.limits = limits or httpx.Limits(
            max_connections=settings.http_client_max_connections,
            max_keepalive_connections=settings.http_client_max_keepalive_connections,
            keepalive_expiry=settings.http_client_keepalive_expiry,
        )
        # Only used by tests to route every client through a mock transport
        self._transport = transport
        self._clients: Dict[str, httpx.AsyncClient] = {}

    # Client cache

    def get_client(
        self,
        service_name: str,
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        headers: Optional[Dict[str, str]] = None,
    ) -> httpx.AsyncClient:
        """Return the cached client for ``service_name``, creating it on first use."""
        client = self._clients.get(service_name)
        if client is not None:
            return client

        client_kwargs: Dict[str, Any] = {
            "base_url": base_url or "",
            "timeout": httpx.Timeout(timeout or self.default_timeout),
            "headers": {"Accept": "application/json", **(headers or {})},
            "limits": self.limits,
        }
        if self._transport is not None:
            client_kwargs["transport"] = self._transport
        client = httpx.AsyncClient(**client_kwargs)
        self._clients[service_name] = client
        logger.info(f"[{service_name}] HTTP client created (base_url='{base_url or ''}').")
        return client

    async def clear_client(self, service_name: str) -> None:
        """Evict and close the client of ``service_name``; the next call recreates it."""
        client = self._clients.pop(service_name, None)
        if client is not None:
            await client.aclose()
            logger.info(f"[{service_name}] HTTP client evicted.")

    async def clear_all_clients(self) -> None:
        for service_name in list(self._clients):
            await self.clear_client(service_name)

    async def aclose(self) -> None:
        await self.clear_all_clients()

    # Core request with retry

    @staticmethod
    def should_retry(error: Exception) -> bool:
        """Network errors and 5xx responses are retried; everything else is not."""
        if isinstance(error, httpx.HTTPStatusError):
            return 500 <= error.response.status_code < 600
        return isinstance(error, httpx.TransportError)

    async def request(
        self,
        service_name: str,
        method: str,
        url: str,
        *,
        base_url: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
        json_body: Any = None,
        content: Any = None,
        files: Any = None,
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
        retries: int = 0,
        retry_delay: Optional[float] = None,
        stream: bool = False,
    ) -> httpx.Response:
        """
        Send a request, applying the retry policy, and return the response.

        Non-2xx responses raise ``httpx.HTTPStatusError``. With ``stream=True``
        the body is left unread and the caller owns closing the response.
        """
        client = self.get_client(service_name, base_url=base_url, timeout=timeout)
        delay = retry_delay if retry_delay is not None else self.default_retry_delay
        retries_left = max(retries, 0)

        request_kwargs: Dict[str, Any] = {"params": params, "headers": headers}
        if json_body is not None:
            request_kwargs["json"] = json_body
        if content is not None:
            request_kwargs["content"] = content
        if files is not None:
            request_kwargs["files"] = files
        if timeout is not None:
            request_kwargs["timeout"] = httpx.Timeout(timeout)

        while True:
            logger.debug(f"[{service_name}] {method.upper()} {url}")
            try:
                response = await self._send(client, method, url, request_kwargs, stream)
                logger.debug(f"[{service_name}] response: {response.status_code}")
                return response
            except (httpx.TransportError, httpx.HTTPStatusError) as e:
                if retries_left > 0 and self.should_retry(e):
                    retries_left -= 1
                    logger.warning(f"[{service_name}] retrying request, {retries_left} retries left: {e}")
                    await asyncio.sleep(delay)
                    continue
                logger.error(f"[{service_name}] response error: {e}")
                raise

    @staticmethod
    async def _send(
        client: httpx.AsyncClient, method: str, url: str, request_kwargs: Dict[str, Any], stream: bool
    ) -> httpx.Response:
        request = client.build_request(method.upper(), url, **request_kwargs)
        response = await client.send(request, stream=stream)
        if response.is_error:
            if stream:
                await response.aread()
                await response.aclose()
            response.raise_for_status()
        return response

    @staticmethod
    def parse_body(response: httpx.Response) -> Any:
        """JSON body when it decodes, raw text otherwise, None when empty."""
        if not response.content:
            return None
        try:
            return response.json()
        except (json.JSONDecodeError, UnicodeDecodeError):
            return response.text

    # Verb helpers

    async def get(self, service_name: str, url: str, **options: Any) -> Any:
        response = await self.request(service_name, "GET", url, **options)
        return self.parse_body(response)

    async def post(self, service_name: str, url: str, data: Any = None, **options: Any) -> Any:
        response = await self.request(service_name, "POST", url, json_body=data, **options)
        return self.parse_body(response)

    async def put(self, service_name: str, url: str, data: Any = None, **options: Any) -> Any:
        response = await self.request(service_name, "PUT", url, json_body=data, **options)
        return self.parse_body(response)

    async def delete(self, service_name: str, url: str, **options: Any) -> Any:
        response = await self.request(service_name, "DELETE", url, **options)
        return self.parse_body(response)

    async def patch(self, service_name: str, url: str, data: Any = None, **options: Any) -> Any:
        response = await self.request(service_name, "PATCH", url, json_body=data, **options)
        return self.parse_body(response)

    async def get_raw(self, service_name: str, url: str, **options: Any) -> httpx.Response:
        """GET returning the full response (status, headers and body)."""
        return await self.request(service_name, "GET", url, **options)

    # Streaming

    async def get_stream(
        self, service_name: str, url: str, stream_options: Optional[StreamOptions] = None, **options: Any
    ) -> ResponseStream:
        logger.debug(f"[{service_name}] starting streamed GET: {url}")
        response = await self.request(service_name, "GET", url, stream=True, **options)
        return ResponseStream(service_name, response, stream_options)

    async def post_stream(
        self,
        service_name: str,
        url: str,
        data: Any = None,
        stream_options: Optional[StreamOptions] = None,
        **options: Any,
    ) -> ResponseStream:
        logger.debug(f"[{service_name}] starting streamed POST: {url}")
        if isinstance(data, (bytes, str)):
            options["content"] = data
        else:
            options["json_body"] = data
        response = await self.request(service_name, "POST", url, stream=True, **options)
        return ResponseStream(service_name, response, stream_options)

    # Files

    async def download_file(self, service_name: str, url: str, **options: Any) -> bytes:
        response = await self.request(service_name, "GET", url, **options)
        return response.content

    async def upload_file(
        self,
        service_name: str,
        url: str,
        file: Union[bytes, IO[bytes]],
        filename: str,
        field_name: str = "file",
        **options: Any,
    ) -> Any:
        """POST ``file`` as multipart/form-data under ``field_name``."""
        response = await self.request(
            service_name, "POST", url, files={field_name: (filename, file)}, **options
        )
        return self.parse_body(response)

    # Fan-out

    async def batch(self, operations: Sequence[Callable[[], Awaitable[T]]]) -> List[T]:
        return await run_all(operations)

    async def batch_with_limit(self, operations: Sequence[Callable[[], Awaitable[T]]], limit: int = 5) -> List[T]:
        return await run_with_limit(operations, limit)
