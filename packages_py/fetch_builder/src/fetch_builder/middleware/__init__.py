"""
Doer middleware. Each middleware holds the next doer and delegates to it.
"""
from typing import Callable

import httpx

from ..types import Doer
from .auth import (
    AuthDoer,
    AuthHandler,
    BasicAuthHandler,
    BearerAuthHandler,
    CustomAuthHandler,
    XApiKeyAuthHandler,
    create_auth_handler,
)
from .diagnostics import DiagnosticsDoer


class DoerFunc:
    """Adapts a plain function to the Doer interface."""

    def __init__(self, fn: Callable[[httpx.Request], httpx.Response]):
        self._fn = fn

    def send(self, request: httpx.Request) -> httpx.Response:
        return self._fn(request)


def chain(doer: Doer, *wrappers: Callable[[Doer], Doer]) -> Doer:
    """
    Wrap doer with middleware factories. The first wrapper is outermost.

        chain(client, lambda d: AuthDoer(d, handler), DiagnosticsDoer)
    """
    for wrap in reversed(wrappers):
        doer = wrap(doer)
    return doer


__all__ = [
    "AuthDoer",
    "AuthHandler",
    "BasicAuthHandler",
    "BearerAuthHandler",
    "CustomAuthHandler",
    "XApiKeyAuthHandler",
    "create_auth_handler",
    "DiagnosticsDoer",
    "DoerFunc",
    "chain",
]
