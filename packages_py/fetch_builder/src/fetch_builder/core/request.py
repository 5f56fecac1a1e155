"""
Request builder and sender.
"""
import logging
from typing import Any, Iterator, List, Optional, Tuple, Union
from urllib.parse import urljoin, urlsplit, urlunsplit

import httpx

from ..config import BuilderConfig
from ..encoding import encode_body_form, encode_body_json, merge_query
from ..errors import RequestConstructionError, URLParseError
from ..headers import Header, basic_auth
from ..types import (
    CONTENT_TYPE_HEADER,
    FORM_CONTENT_TYPE,
    JSON_CONTENT_TYPE,
    AsyncDoer,
    Doer,
    HttpMethod,
)
from . import transport

logger = logging.getLogger(__name__)

LOG_PREFIX = "[FetchBuilder]"

RawBody = Union[bytes, str, Any]


class _NopCloser:
    """Wraps a reader that has no close() so closing the body is always safe."""

    CHUNK_SIZE = 65_536

    def __init__(self, reader: Any):
        self._reader = reader

    def read(self, size: int = -1) -> bytes:
        return self._reader.read(size)

    def close(self) -> None:
        pass

    def __iter__(self) -> Iterator[bytes]:
        chunk = self._reader.read(self.CHUNK_SIZE)
        while chunk:
            yield chunk
            chunk = self._reader.read(self.CHUNK_SIZE)


class RequestBuilder:
    """
    Fluent HTTP request builder and sender.

    Setters mutate the builder and return it, so calls can be chained.
    ``build()`` turns the accumulated state into an ``httpx.Request`` without
    changing the builder, so one builder may build many requests. Use
    ``clone()`` to derive independent builders from a shared parent:

        api = RequestBuilder().base("https://api.io/").set_header("Accept", "application/json")
        users = api.clone().get("users/")
        repos = api.clone().get("repos/")

    Header maps are copied on clone. Query structs and body values are shared
    by reference, so mutating such a value after cloning is visible to every
    builder holding it.

    Malformed URLs given to ``base()`` or ``path()`` are dropped without an
    error, keeping the chain composable. Only ``build()`` reports a URL error,
    and only when the combined URL cannot be parsed.
    """

    def __init__(self) -> None:
        self._doer: Optional[Doer] = None
        self._async_doer: Optional[AsyncDoer] = None
        self._method: str = "GET"
        self._base_url: Optional[httpx.URL] = None
        self._path_url: Optional[httpx.URL] = None
        self._header = Header()
        self._query_structs: List[Any] = []
        self._body_json: Any = None
        self._body_form: Any = None
        self._body: Optional[RawBody] = None

    @classmethod
    def from_config(cls, config: BuilderConfig) -> "RequestBuilder":
        """Create a builder seeded from validated configuration."""
        builder = cls()
        if config.base_url:
            builder.base(config.base_url)
        for key, value in config.headers.items():
            builder.set_header(key, value)
        if config.transport is not None:
            builder.client(transport.create_client(config.transport))
            builder.async_doer(transport.create_async_client(config.transport))
        return builder

    def clone(self) -> "RequestBuilder":
        """
        Copy this builder for creating a child with the parent's properties.

        The child gets its own header map and query list; query structs and
        body values themselves are shared.
        """
        child = type(self)()
        child._doer = self._doer
        child._async_doer = self._async_doer
        child._method = self._method
        child._base_url = self._base_url
        child._path_url = self._path_url
        child._header = self._header.copy()
        child._query_structs = list(self._query_structs)
        child._body_json = self._body_json
        child._body_form = self._body_form
        child._body = self._body
        return child

    # Transport

    def doer(self, doer: Optional[Doer]) -> "RequestBuilder":
        """Set the doer used to send requests. None restores the default client."""
        self._doer = doer
        return self

    def client(self, client: Optional[httpx.Client]) -> "RequestBuilder":
        """Set the httpx.Client used to send requests. None restores the default client."""
        return self.doer(client)

    def async_doer(self, doer: Optional[AsyncDoer]) -> "RequestBuilder":
        """Set the doer used by asend(). None restores the default async client."""
        self._async_doer = doer
        return self

    # Method

    @property
    def http_method(self) -> str:
        return self._method

    def method(self, method: HttpMethod) -> "RequestBuilder":
        self._method = method
        return self

    def head(self, path: str = "") -> "RequestBuilder":
        self._method = "HEAD"
        return self.path(path)

    def get(self, path: str = "") -> "RequestBuilder":
        self._method = "GET"
        return self.path(path)

    def post(self, path: str = "") -> "RequestBuilder":
        self._method = "POST"
        return self.path(path)

    def put(self, path: str = "") -> "RequestBuilder":
        self._method = "PUT"
        return self.path(path)

    def patch(self, path: str = "") -> "RequestBuilder":
        self._method = "PATCH"
        return self.path(path)

    def delete(self, path: str = "") -> "RequestBuilder":
        self._method = "DELETE"
        return self.path(path)

    # Header

    @property
    def header(self) -> Header:
        return self._header

    def add_header(self, key: str, value: str) -> "RequestBuilder":
        """Append value to the values of key. Keys are canonicalized."""
        self._header.add(key, value)
        return self

    def set_header(self, key: str, value: str) -> "RequestBuilder":
        """Replace the values of key with value. Keys are canonicalized."""
        self._header.set(key, value)
        return self

    def set_basic_auth(self, username: str, password: str) -> "RequestBuilder":
        """
        Set the Authorization header for HTTP Basic Authentication.

        The credentials are only base64 encoded, not encrypted.
        """
        return self.set_header("Authorization", "Basic " + basic_auth(username, password))

    # Url

    def base(self, base_url: str) -> "RequestBuilder":
        """
        Set the base URL. To extend it with path(), give it a trailing slash.

        An unparseable URL clears the base.
        """
        try:
            self._base_url = httpx.URL(base_url)
        except httpx.InvalidURL as e:
            logger.debug(f"{LOG_PREFIX} Ignoring invalid base URL {base_url!r}: {e}")
            self._base_url = None
        return self

    def path(self, path: str) -> "RequestBuilder":
        """
        Extend the accumulated path by resolving path as a URL reference.

        Relative references merge with the current path, absolute ones replace
        it. An unparseable path is ignored.
        """
        try:
            path_url = httpx.URL(path)
        except httpx.InvalidURL as e:
            logger.debug(f"{LOG_PREFIX} Ignoring invalid path {path!r}: {e}")
            return self
        if self._path_url is not None:
            self._path_url = httpx.URL(urljoin(str(self._path_url), str(path_url)))
        else:
            self._path_url = path_url
        return self

    def resolved_url(self) -> str:
        """The base URL resolved with the accumulated path."""
        if self._base_url is not None:
            if self._path_url is not None:
                return urljoin(str(self._base_url), str(self._path_url))
            return str(self._base_url)
        if self._path_url is not None:
            return str(self._path_url)
        return ""

    def query(self, query_struct: Any) -> "RequestBuilder":
        """
        Append a structured value to encode as url query parameters.

        Accepts mappings, pydantic models and dataclass instances. The value
        is encoded at build time, not now.
        """
        if query_struct is not None:
            self._query_structs.append(query_struct)
        return self

    # Body

    def json(self, body_json: Any) -> "RequestBuilder":
        """Set a value to JSON encode as the body and set the JSON Content-Type."""
        if body_json is not None:
            self._body_json = body_json
            self.set_header(CONTENT_TYPE_HEADER, JSON_CONTENT_TYPE)
        return self

    def form(self, body_form: Any) -> "RequestBuilder":
        """Set a structured value to url encode as the body and set the form Content-Type."""
        if body_form is not None:
            self._body_form = body_form
            self.set_header(CONTENT_TYPE_HEADER, FORM_CONTENT_TYPE)
        return self

    def body(self, body: Optional[RawBody]) -> "RequestBuilder":
        """
        Set the raw body: bytes, str, a binary file-like object or an
        iterable of bytes. Streams can only be sent once.
        """
        if body is None:
            return self
        if isinstance(body, bytearray):
            body = bytes(body)
        elif hasattr(body, "read") and not hasattr(body, "close"):
            body = _NopCloser(body)
        self._body = body
        return self

    # Requests

    def build(self) -> httpx.Request:
        """
        Create an httpx.Request from the builder state.

        Raises:
            URLParseError: If the resolved URL is malformed.
            QueryEncodingError: If a query struct or form body cannot be encoded.
            BodyEncodingError: If the JSON body cannot be encoded.
            RequestConstructionError: If the method or URL is rejected.
        """
        raw_url = self.resolved_url()
        try:
            req_url = httpx.URL(raw_url)
        except httpx.InvalidURL as e:
            raise URLParseError(raw_url, e) from e

        parts = urlsplit(str(req_url))
        query = merge_query(parts.query, self._query_structs)
        final_url = urlunsplit(parts._replace(query=query))

        content = self._request_body()

        if not self._method:
            raise RequestConstructionError(self._method, final_url, "method must not be empty")
        try:
            request = httpx.Request(
                self._method,
                final_url,
                headers=self._header.items(),
                content=content,
            )
        except (httpx.InvalidURL, TypeError, ValueError) as e:
            raise RequestConstructionError(self._method, final_url, str(e)) from e

        logger.debug(
            f"{LOG_PREFIX} Built request: {request.method} {request.url} "
            f"headers={list(self._header)} body={transport._format_body(content)}"
        )
        return request

    def _request_body(self) -> Optional[RawBody]:
        """Pick the body by the Content-Type header at build time."""
        content_type = self._header.get(CONTENT_TYPE_HEADER)
        if self._body_json is not None and content_type == JSON_CONTENT_TYPE:
            return encode_body_json(self._body_json)
        if self._body_form is not None and content_type == FORM_CONTENT_TYPE:
            return encode_body_form(self._body_form)
        return self._body

    # Sending

    def send(self) -> Tuple[bytes, httpx.Response]:
        """Build a request and send it. Build errors are raised before sending."""
        request = self.build()
        return self.send_via(request)

    def send_via(self, request: httpx.Request) -> Tuple[bytes, httpx.Response]:
        """Send request with the installed doer and return the body and response."""
        doer = self._doer if self._doer is not None else transport.get_default_client()
        return transport.send_via(doer, request)

    async def asend(self) -> Tuple[bytes, httpx.Response]:
        request = self.build()
        return await self.asend_via(request)

    async def asend_via(self, request: httpx.Request) -> Tuple[bytes, httpx.Response]:
        doer = self._async_doer if self._async_doer is not None else transport.get_default_async_client()
        return await transport.asend_via(doer, request)

    def __repr__(self) -> str:
        return f"<RequestBuilder {self._method} {self.resolved_url()!r}>"
