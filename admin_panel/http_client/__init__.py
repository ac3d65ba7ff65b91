"""
Declarative outbound HTTP clients.

Describe a remote service once as a ClientDescriptor, build a client from it
with HttpClientFactory, and call its methods like ordinary coroutines.
"""

from .descriptors import (
    ClientDescriptor,
    HttpMethod,
    MethodDescriptor,
    ParamBinding,
    ParamKind,
    body_param,
    header_param,
    headers_param,
    path_param,
    query_param,
)
from .errors import (
    DescriptorError,
    HttpClientError,
    MissingPathParameterError,
    UnsupportedStreamMethodError,
)
from .factory import DeclarativeClient, HttpClientFactory, RequestPlan, build_request
from .service import HttpClientService
from .streaming import ResponseStream, StreamOptions

__all__ = [
    "ClientDescriptor",
    "HttpMethod",
    "MethodDescriptor",
    "ParamBinding",
    "ParamKind",
    "body_param",
    "header_param",
    "headers_param",
    "path_param",
    "query_param",
    "DescriptorError",
    "HttpClientError",
    "MissingPathParameterError",
    "UnsupportedStreamMethodError",
    "DeclarativeClient",
    "HttpClientFactory",
    "RequestPlan",
    "build_request",
    "HttpClientService",
    "ResponseStream",
    "StreamOptions",
]
