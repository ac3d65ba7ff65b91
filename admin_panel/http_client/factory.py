# admin_panel/http_client/factory.py
import logging
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Sequence
from urllib.parse import quote

import httpx
from pydantic import BaseModel

from .descriptors import ClientDescriptor, HttpMethod, MethodDescriptor, ParamKind
from .errors import HttpClientError, MissingPathParameterError, UnsupportedStreamMethodError
from .service import HttpClientService
from .streaming import StreamOptions

logger = logging.getLogger(__name__)

# ":name" only counts as a placeholder at the start of a path segment so that
# literal colons such as "/documents/{id}:batchUpdate" survive.
_COLON_PLACEHOLDER = re.compile(r"(?<=/):([A-Za-z_][A-Za-z0-9_]*)")
_BRACE_PLACEHOLDER = re.compile(r"\{([A-Za-z_][A-Za-z0-9_]*)\}")


@dataclass
class RequestPlan:
    """Concrete request derived from a method descriptor and call arguments."""

    service_name: str
    http_method: HttpMethod
    url: str
    params: Dict[str, Any] = field(default_factory=dict)
    headers: Dict[str, str] = field(default_factory=dict)
    body: Any = None
    stream: bool = False


def path_placeholders(path: str) -> List[str]:
    """Names of every ``:name`` and ``{name}`` placeholder in ``path``."""
    return _COLON_PLACEHOLDER.findall(path) + _BRACE_PLACEHOLDER.findall(path)


def substitute_path(path: str, values: Dict[str, Any]) -> str:
    """
    Replace each placeholder occurrence with the URL-encoded bound value.

    Raises MissingPathParameterError when a placeholder has no value.
    """
    for name in path_placeholders(path):
        if values.get(name) is None:
            raise MissingPathParameterError(path, name)

    def _encoded(match: "re.Match[str]") -> str:
        return quote(str(values[match.group(1)]), safe="")

    url = _COLON_PLACEHOLDER.sub(_encoded, path)
    return _BRACE_PLACEHOLDER.sub(_encoded, url)


def _to_payload(value: Any) -> Any:
    if isinstance(value, BaseModel):
        return value.model_dump(mode="json", exclude_none=True)
    return value


def build_request(descriptor: ClientDescriptor, method_name: str, args: Sequence[Any]) -> RequestPlan:
    """Translate a call of ``method_name`` with positional ``args`` into a RequestPlan."""
    method: Optional[MethodDescriptor] = descriptor.methods.get(method_name)
    if method is None:
        raise AttributeError(f"{descriptor.service_name} has no method '{method_name}'.")
    if len(args) > len(method.params):
        raise TypeError(
            f"{descriptor.service_name}.{method_name}() takes {len(method.params)} "
            f"positional arguments but {len(args)} were given"
        )

    def arg(index: int) -> Any:
        return args[index] if index < len(args) else None

    path_values = {binding.name: arg(index) for index, binding in method.bindings_of(ParamKind.PATH)}
    url = substitute_path(method.path, path_values)

    params: Dict[str, Any] = {}
    for index, binding in method.bindings_of(ParamKind.QUERY):
        value = _to_payload(arg(index))
        if value is None:
            continue
        if binding.name:
            params[binding.name] = value
        elif isinstance(value, Mapping):
            params.update({key: item for key, item in value.items() if item is not None})

    headers: Dict[str, str] = dict(descriptor.headers)
    for index, binding in method.bindings_of(ParamKind.HEADER):
        value = arg(index)
        if value is not None:
            headers[binding.name] = str(value)
    for index, _ in method.bindings_of(ParamKind.HEADERS):
        bag = arg(index)
        if bag:
            headers.update({key: str(value) for key, value in bag.items()})

    body = None
    for index, _ in method.bindings_of(ParamKind.BODY):
        body = _to_payload(arg(index))

    return RequestPlan(
        service_name=descriptor.service_name,
        http_method=method.http_method,
        url=url,
        params=params,
        headers=headers,
        body=body,
        stream=method.stream,
    )


class DeclarativeClient:
    """Callable view of a ClientDescriptor; each described method is an attribute."""

    def __init__(self, descriptor: ClientDescriptor, factory: "HttpClientFactory"):
        self._descriptor = descriptor
        self._factory = factory

    @property
    def descriptor(self) -> ClientDescriptor:
        return self._descriptor

    def __getattr__(self, name: str):
        if name.startswith("_") or name not in self._descriptor.methods:
            raise AttributeError(f"{type(self).__name__} for '{self._descriptor.service_name}' has no method '{name}'")

        async def call(*args: Any, stream_options: Optional[StreamOptions] = None) -> Any:
            return await self._factory.invoke(self._descriptor, name, args, stream_options=stream_options)

        call.__name__ = name
        call.__qualname__ = f"{self._descriptor.service_name}.{name}"
        return call

    def __dir__(self) -> List[str]:
        return sorted(set(super().__dir__()) | set(self._descriptor.methods))

    def __repr__(self) -> str:
        return f"<DeclarativeClient {self._descriptor.service_name} {self._descriptor.base_url}>"


class HttpClientFactory:
    """Builds DeclarativeClient objects that dispatch through an HttpClientService."""

    def __init__(self, http_client: HttpClientService):
        self.http_client = http_client

    def build(self, descriptor: ClientDescriptor) -> DeclarativeClient:
        logger.info(
            f"Building client for '{descriptor.service_name}' "
            f"({len(descriptor.methods)} methods, base_url='{descriptor.base_url}')"
        )
        return DeclarativeClient(descriptor, self)

    async def invoke(
        self,
        descriptor: ClientDescriptor,
        method_name: str,
        args: Sequence[Any],
        stream_options: Optional[StreamOptions] = None,
    ) -> Any:
        plan = build_request(descriptor, method_name, args)
        verb = plan.http_method.value
        options: Dict[str, Any] = {
            "base_url": descriptor.base_url,
            "timeout": descriptor.timeout,
            "headers": plan.headers,
            "params": plan.params,
            "retries": descriptor.retries,
            "retry_delay": descriptor.retry_delay,
        }
        service_name = descriptor.service_name

        try:
            if plan.stream:
                if plan.http_method == HttpMethod.GET:
                    return await self.http_client.get_stream(
                        service_name, plan.url, stream_options=stream_options, **options
                    )
                if plan.http_method == HttpMethod.POST:
                    return await self.http_client.post_stream(
                        service_name, plan.url, plan.body, stream_options=stream_options, **options
                    )
                raise UnsupportedStreamMethodError(verb)

            if plan.http_method == HttpMethod.GET:
                return await self.http_client.get(service_name, plan.url, **options)
            if plan.http_method == HttpMethod.POST:
                return await self.http_client.post(service_name, plan.url, plan.body, **options)
            if plan.http_method == HttpMethod.PUT:
                return await self.http_client.put(service_name, plan.url, plan.body, **options)
            if plan.http_method == HttpMethod.DELETE:
                return await self.http_client.delete(service_name, plan.url, **options)
            return await self.http_client.patch(service_name, plan.url, plan.body, **options)
        except httpx.HTTPError as e:
            status_code = e.response.status_code if isinstance(e, httpx.HTTPStatusError) else None
            wrapped = HttpClientError(service_name, verb, plan.url, e, status_code=status_code)
            logger.error(str(wrapped))
            raise wrapped from e
