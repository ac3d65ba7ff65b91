# admin_panel/http_client/descriptors.py
"""
Declarative descriptions of remote HTTP services.

A ``ClientDescriptor`` is a plain value built once at import time, e.g.::

    USERS_API = ClientDescriptor(
        service_name="users-api",
        base_url="https://api.example.com",
        retries=2,
        methods={
            "get_user": get("/users/:id", path_param("id")),
            "search": get("/users", query_param("name"), query_param("email")),
            "create": post("/users", body_param()),
        },
    )

Parameter bindings are positional: the n-th binding describes the n-th
argument of the generated client method.
"""
from enum import Enum
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .errors import DescriptorError, UnsupportedStreamMethodError

STREAMABLE_METHODS = ("GET", "POST")


class HttpMethod(str, Enum):
    GET = "GET"
    POST = "POST"
    PUT = "PUT"
    DELETE = "DELETE"
    PATCH = "PATCH"


class ParamKind(str, Enum):
    PATH = "path"
    QUERY = "query"
    BODY = "body"
    HEADER = "header"
    HEADERS = "headers"


class ParamBinding(BaseModel):
    """Role of one positional argument of a client method."""

    model_config = ConfigDict(frozen=True)

    kind: ParamKind
    name: Optional[str] = None

    @model_validator(mode="after")
    def _check_name(self) -> "ParamBinding":
        if self.kind in (ParamKind.PATH, ParamKind.HEADER) and not self.name:
            raise DescriptorError(f"A {self.kind.value} binding needs a name.")
        return self


class MethodDescriptor(BaseModel):
    model_config = ConfigDict(frozen=True)

    http_method: HttpMethod
    path: str
    stream: bool = False
    params: Tuple[ParamBinding, ...] = ()

    @model_validator(mode="after")
    def _check_bindings(self) -> "MethodDescriptor":
        if self.stream and self.http_method.value not in STREAMABLE_METHODS:
            raise UnsupportedStreamMethodError(self.http_method.value)
        kinds = [binding.kind for binding in self.params]
        if kinds.count(ParamKind.BODY) > 1:
            raise DescriptorError(f"{self.http_method.value} {self.path}: more than one body binding.")
        if kinds.count(ParamKind.HEADERS) > 1:
            raise DescriptorError(f"{self.http_method.value} {self.path}: more than one header bag.")
        return self

    def bindings_of(self, kind: ParamKind):
        """Yield ``(position, binding)`` for every binding of ``kind``."""
        for index, binding in enumerate(self.params):
            if binding.kind == kind:
                yield index, binding


class ClientDescriptor(BaseModel):
    """Static description of a remote service and the methods it exposes."""

    model_config = ConfigDict(frozen=True)

    service_name: str
    base_url: str
    timeout: Optional[float] = Field(default=None, description="Seconds, applied per phase.")
    headers: Dict[str, str] = Field(default_factory=dict)
    retries: int = Field(default=0, ge=0)
    retry_delay: Optional[float] = Field(default=None, ge=0)
    methods: Dict[str, MethodDescriptor] = Field(default_factory=dict)


def path_param(name: str) -> ParamBinding:
    return ParamBinding(kind=ParamKind.PATH, name=name)


def query_param(name: Optional[str] = None) -> ParamBinding:
    """Bind an argument to query key ``name``; unnamed bindings merge a mapping."""
    return ParamBinding(kind=ParamKind.QUERY, name=name)


def body_param() -> ParamBinding:
    return ParamBinding(kind=ParamKind.BODY)


def header_param(name: str) -> ParamBinding:
    return ParamBinding(kind=ParamKind.HEADER, name=name)


def headers_param() -> ParamBinding:
    return ParamBinding(kind=ParamKind.HEADERS)


def _method(http_method: HttpMethod, path: str, params: Tuple[ParamBinding, ...], stream: bool) -> MethodDescriptor:
    if stream and http_method.value not in STREAMABLE_METHODS:
        raise UnsupportedStreamMethodError(http_method.value)
    return MethodDescriptor(http_method=http_method, path=path, params=params, stream=stream)


def get(path: str, *params: ParamBinding, stream: bool = False) -> MethodDescriptor:
    return _method(HttpMethod.GET, path, params, stream)


def post(path: str, *params: ParamBinding, stream: bool = False) -> MethodDescriptor:
    return _method(HttpMethod.POST, path, params, stream)


def put(path: str, *params: ParamBinding) -> MethodDescriptor:
    return _method(HttpMethod.PUT, path, params, False)


def delete(path: str, *params: ParamBinding) -> MethodDescriptor:
    return _method(HttpMethod.DELETE, path, params, False)


def patch(path: str, *params: ParamBinding) -> MethodDescriptor:
    return _method(HttpMethod.PATCH, path, params, False)
