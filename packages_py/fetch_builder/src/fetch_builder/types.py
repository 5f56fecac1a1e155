"""
Core type definitions for fetch-builder.
"""
from dataclasses import dataclass
from typing import Any, Dict, Literal, Optional, Protocol, TypedDict, runtime_checkable

import httpx

# HTTP Methods
HttpMethod = Literal["HEAD", "GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS", "CONNECT", "TRACE"]

# Content types
CONTENT_TYPE_HEADER = "Content-Type"
JSON_CONTENT_TYPE = "application/json"
FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@runtime_checkable
class Doer(Protocol):
    """
    Executes a request and returns the response.

    Implemented by ``httpx.Client``. Doers can wrap other doers to form a
    stack of client-side middleware.
    """
    def send(self, request: httpx.Request) -> httpx.Response: ...


@runtime_checkable
class AsyncDoer(Protocol):
    """Async counterpart of Doer, implemented by ``httpx.AsyncClient``."""
    async def send(self, request: httpx.Request) -> httpx.Response: ...


@dataclass
class DiagnosticsEvent:
    """Event for diagnostics/observability."""
    name: str  # 'request:start', 'request:end', 'request:error'
    timestamp: float
    method: str
    url: str
    headers: Optional[Dict[str, str]] = None
    status: Optional[int] = None
    duration: Optional[float] = None
    error: Optional[Exception] = None


class RequestContext(TypedDict):
    """Context passed to auth callbacks."""
    method: str
    url: str
    headers: Dict[str, str]
    body: Any
