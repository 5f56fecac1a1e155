"""
Fetch Builder - fluent HTTP request builder
"""

__version__ = "0.1.0"

from .config import BuilderConfig, TimeoutConfig, TransportConfig
from .types import AsyncDoer, DiagnosticsEvent, Doer, HttpMethod
from .headers import Header, basic_auth, canonical_header_key
from .encoding import encode_values, merge_query
from .errors import (
    BodyEncodingError,
    FetchBuilderError,
    QueryEncodingError,
    RequestConstructionError,
    ResponseReadError,
    URLParseError,
)
from .core.request import RequestBuilder
from .core.transport import create_async_client, create_client, get_default_client
from .middleware import AuthDoer, DiagnosticsDoer, DoerFunc, chain, create_auth_handler


def new() -> RequestBuilder:
    """Create a RequestBuilder with defaults: GET, no headers, default client."""
    return RequestBuilder()


__all__ = [
    "BuilderConfig", "TimeoutConfig", "TransportConfig",
    "AsyncDoer", "DiagnosticsEvent", "Doer", "HttpMethod",
    "Header", "basic_auth", "canonical_header_key",
    "encode_values", "merge_query",
    "FetchBuilderError", "URLParseError", "QueryEncodingError", "BodyEncodingError",
    "RequestConstructionError", "ResponseReadError",
    "RequestBuilder", "new",
    "create_client", "create_async_client", "get_default_client",
    "AuthDoer", "DiagnosticsDoer", "DoerFunc", "chain", "create_auth_handler",
]
