"""HTTP transport layer."""

from .http import (
    HttpClient,
    HttpError,
    HttpRequest,
    HttpResponse,
    MockHttpClient,
    RealHttpClient,
)

__all__ = [
    "HttpClient",
    "HttpError",
    "HttpRequest",
    "HttpResponse",
    "MockHttpClient",
    "RealHttpClient",
]
