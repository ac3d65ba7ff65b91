# admin_panel/http_client/errors.py
from typing import Optional


class HttpClientError(Exception):
    """An outbound call failed after the retry budget was spent.

    Carries the service/verb/url context and keeps the transport exception
    as ``__cause__``.
    """

    def __init__(
        self,
        service_name: str,
        method: str,
        url: str,
        original: BaseException,
        status_code: Optional[int] = None,
    ):
        self.service_name = service_name
        self.method = method
        self.url = url
        self.status_code = status_code
        self.original = original
        super().__init__(f"[{service_name}] {method} {url} failed: {original}")


class DescriptorError(ValueError):
    """A client or method descriptor is inconsistent at definition time."""


class UnsupportedStreamMethodError(DescriptorError):
    """Streaming was requested for a verb other than GET or POST."""

    def __init__(self, method: str):
        super().__init__(f"Streaming is only supported for GET and POST, not {method}.")


class MissingPathParameterError(ValueError):
    """A path placeholder has no bound argument at call time."""

    def __init__(self, path: str, placeholder: str):
        self.path = path
        self.placeholder = placeholder
        super().__init__(f"Path '{path}' has no value for placeholder '{placeholder}'.")
