"""
Request execution over httpx transports.
"""
import json
import logging
import threading
from typing import Any, Optional, Tuple

import httpx

from ..config import TransportConfig
from ..errors import ResponseReadError
from ..types import AsyncDoer, Doer

logger = logging.getLogger(__name__)

# Constants
LOG_PREFIX = "[FetchBuilder]"

_READ_ERRORS = (httpx.HTTPError, httpx.StreamError, OSError)

_default_client: Optional[httpx.Client] = None
_default_async_client: Optional[httpx.AsyncClient] = None
_default_lock = threading.Lock()


def _format_body(body: Any) -> str:
    """
    Format body for logging safeguards against binary data.
    """
    if body is None:
        return "<empty>"
    if isinstance(body, (bytes, bytearray)):
        try:
            body = bytes(body).decode("utf-8")
        except UnicodeDecodeError:
            return f"<binary data: {len(body)} bytes>"
    if isinstance(body, str):
        try:
            # Try to pretty print if it looks like JSON
            if body.strip().startswith(("{", "[")):
                return json.dumps(json.loads(body), indent=2)
        except json.JSONDecodeError:
            pass
        # Truncate long strings
        if len(body) > 5000:
            return body[:5000] + "... (truncated)"
        return body
    return f"<stream: {type(body).__name__}>"


def create_client(config: Optional[TransportConfig] = None) -> httpx.Client:
    """Create an httpx.Client from transport config."""
    kwargs = (config or TransportConfig()).get_client_kwargs()
    logger.debug(f"{LOG_PREFIX} Creating httpx.Client with config: {kwargs}")
    return httpx.Client(**kwargs)


def create_async_client(config: Optional[TransportConfig] = None) -> httpx.AsyncClient:
    """Create an httpx.AsyncClient from transport config."""
    kwargs = (config or TransportConfig()).get_client_kwargs()
    logger.debug(f"{LOG_PREFIX} Creating httpx.AsyncClient with config: {kwargs}")
    return httpx.AsyncClient(**kwargs)


def get_default_client() -> httpx.Client:
    """Shared client used when no doer is installed."""
    global _default_client
    with _default_lock:
        if _default_client is None or _default_client.is_closed:
            _default_client = create_client()
        return _default_client


def get_default_async_client() -> httpx.AsyncClient:
    """Shared async client used when no async doer is installed."""
    global _default_async_client
    with _default_lock:
        if _default_async_client is None or _default_async_client.is_closed:
            _default_async_client = create_async_client()
        return _default_async_client


def send_via(doer: Doer, request: httpx.Request) -> Tuple[bytes, httpx.Response]:
    """
    Send request with doer and read the whole response body.

    The response is closed on every path once the transport returned it.

    Returns:
        The body bytes and the response.

    Raises:
        ResponseReadError: If the body could not be read. The error carries
            the response so status and headers remain available.
    """
    logger.debug(f"{LOG_PREFIX} Request: {request.method} {request.url}")
    try:
        # httpx clients read the body inside send() unless streaming
        if isinstance(doer, httpx.Client):
            response = doer.send(request, stream=True)
        else:
            response = doer.send(request)
    except httpx.HTTPError as e:
        logger.error(f"{LOG_PREFIX} Request failed: {e}")
        raise e

    try:
        content = response.read()
    except _READ_ERRORS as e:
        logger.error(f"{LOG_PREFIX} Reading response body failed: {e}")
        raise ResponseReadError(response, e) from e
    finally:
        response.close()

    logger.debug(f"{LOG_PREFIX} Response: {response.status_code} {_format_body(content)}")
    return content, response


async def asend_via(doer: AsyncDoer, request: httpx.Request) -> Tuple[bytes, httpx.Response]:
    """Async counterpart of send_via."""
    logger.debug(f"{LOG_PREFIX} Request: {request.method} {request.url}")
    try:
        if isinstance(doer, httpx.AsyncClient):
            response = await doer.send(request, stream=True)
        else:
            response = await doer.send(request)
    except httpx.HTTPError as e:
        logger.error(f"{LOG_PREFIX} Request failed: {e}")
        raise e

    try:
        content = await response.aread()
    except _READ_ERRORS as e:
        logger.error(f"{LOG_PREFIX} Reading response body failed: {e}")
        raise ResponseReadError(response, e) from e
    finally:
        await response.aclose()

    logger.debug(f"{LOG_PREFIX} Response: {response.status_code} {_format_body(content)}")
    return content, response
