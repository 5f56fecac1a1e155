"""
Auth middleware for fetch_builder doers.

An AuthHandler turns a key into one header. The key is either computed per
request from a RequestContext or a static value; AuthDoer applies the header
to outgoing requests.
"""
import logging
from abc import ABC, abstractmethod
from typing import Callable, Dict, Optional

import httpx

from ..headers import basic_auth, canonical_header_key
from ..types import Doer, RequestContext

logger = logging.getLogger(__name__)
LOG_PREFIX = "[FetchBuilder:auth]"

KeyResolver = Callable[[RequestContext], Optional[str]]


def _masked(value: str) -> str:
    """Keep the first 4 chars of a secret for log lines."""
    if len(value) <= 4:
        return "*" * len(value)
    return value[:4] + "*" * (len(value) - 4)


def _request_context(request: httpx.Request) -> RequestContext:
    return {
        "method": request.method,
        "url": str(request.url),
        "headers": dict(request.headers),
        "body": request.content if isinstance(request.stream, httpx.ByteStream) else None,
    }


class AuthHandler(ABC):
    """Builds a single auth header from a static or per-request key."""

    header_name = "Authorization"

    def __init__(self, api_key: Optional[str] = None, get_api_key_for_request: Optional[KeyResolver] = None):
        self._api_key = api_key
        self._get_api_key_for_request = get_api_key_for_request

    def _resolve_key(self, context: RequestContext) -> Optional[str]:
        """Per-request key first, then the static key."""
        if self._get_api_key_for_request:
            key = self._get_api_key_for_request(context)
            if key:
                return key
        return self._api_key or None

    @abstractmethod
    def format_value(self, key: str) -> str:
        ...

    def get_header(self, context: RequestContext) -> Optional[Dict[str, str]]:
        key = self._resolve_key(context)
        if key is None:
            return None
        value = self.format_value(key)
        logger.debug(f"{LOG_PREFIX} {type(self).__name__}: {self.header_name}={_masked(value)}")
        return {self.header_name: value}


class BearerAuthHandler(AuthHandler):
    def format_value(self, key: str) -> str:
        return f"Bearer {key}"


class BasicAuthHandler(AuthHandler):
    """Static HTTP Basic credentials."""

    def __init__(self, username: str, password: str):
        super().__init__(api_key=basic_auth(username, password))

    def format_value(self, key: str) -> str:
        return f"Basic {key}"


class XApiKeyAuthHandler(AuthHandler):
    header_name = "X-Api-Key"

    def format_value(self, key: str) -> str:
        return key


class CustomAuthHandler(AuthHandler):
    """Raw key under a caller-chosen header."""

    def __init__(self, header_name: str, api_key: Optional[str] = None, get_api_key_for_request: Optional[KeyResolver] = None):
        super().__init__(api_key, get_api_key_for_request)
        self.header_name = canonical_header_key(header_name)

    def format_value(self, key: str) -> str:
        return key


def create_auth_handler(
    auth_type: str,
    api_key: Optional[str] = None,
    username: Optional[str] = None,
    password: Optional[str] = None,
    header_name: Optional[str] = None,
    get_api_key_for_request: Optional[KeyResolver] = None,
) -> AuthHandler:
    """Create auth handler for an auth type: basic, bearer, x-api-key or custom."""
    t = auth_type.lower()
    logger.debug(f"{LOG_PREFIX} create_auth_handler: type={t}")

    if t == "basic":
        if not username or password is None:
            raise ValueError("Basic auth requires 'username' and 'password'")
        return BasicAuthHandler(username, password)

    if t in ("bearer", "x-api-key"):
        if not api_key and not get_api_key_for_request:
            raise ValueError(f"{t} requires 'api_key' or 'get_api_key_for_request'")
        handler_cls = BearerAuthHandler if t == "bearer" else XApiKeyAuthHandler
        return handler_cls(api_key, get_api_key_for_request)

    if t in ("custom", "custom_header"):
        if not header_name:
            raise ValueError(f"{auth_type} requires 'header_name'")
        return CustomAuthHandler(header_name, api_key, get_api_key_for_request)

    raise ValueError(f"Unsupported auth type: {auth_type}")


class AuthDoer:
    """
    Doer that sends a copy of each request with the handler's auth header.

    The caller's request is not modified, and a header it already carries is
    left untouched.
    """

    def __init__(self, next_doer: Doer, handler: AuthHandler):
        self._next = next_doer
        self._handler = handler

    def send(self, request: httpx.Request) -> httpx.Response:
        auth_headers = self._handler.get_header(_request_context(request))
        missing = {
            name: value
            for name, value in (auth_headers or {}).items()
            if name not in request.headers
        }
        if missing:
            headers = request.headers.copy()
            headers.update(missing)
            request = httpx.Request(
                request.method,
                request.url,
                headers=headers,
                stream=request.stream,
                extensions=request.extensions,
            )
            if isinstance(request.stream, httpx.ByteStream):
                request.read()
        return self._next.send(request)
