from .request import RequestBuilder
from .transport import (
    asend_via,
    create_async_client,
    create_client,
    get_default_async_client,
    get_default_client,
    send_via,
)

__all__ = [
    "RequestBuilder",
    "asend_via",
    "create_async_client",
    "create_client",
    "get_default_async_client",
    "get_default_client",
    "send_via",
]
