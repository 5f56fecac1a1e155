"""
Diagnostics middleware: request lifecycle events with timing.
"""
import logging
import time
from typing import Callable, Optional

import httpx

from ..types import DiagnosticsEvent, Doer

logger = logging.getLogger(__name__)

LOG_PREFIX = "[FetchBuilder]"

_REDACTED_HEADERS = ("authorization", "x-api-key", "cookie", "proxy-authorization")


def _safe_headers(headers: httpx.Headers) -> dict:
    return {
        key: "<redacted>" if key.lower() in _REDACTED_HEADERS else value
        for key, value in headers.items()
    }


class DiagnosticsDoer:
    """Doer that reports 'request:start', 'request:end' and 'request:error' events."""

    def __init__(
        self,
        next_doer: Doer,
        on_event: Optional[Callable[[DiagnosticsEvent], None]] = None,
    ):
        self._next = next_doer
        self._on_event = on_event

    def _emit(self, event: DiagnosticsEvent) -> None:
        logger.debug(
            f"{LOG_PREFIX} {event.name}: {event.method} {event.url} "
            f"status={event.status} duration={event.duration}"
        )
        if self._on_event:
            self._on_event(event)

    def send(self, request: httpx.Request) -> httpx.Response:
        method = request.method
        url = str(request.url)
        start = time.perf_counter()
        self._emit(DiagnosticsEvent(
            name="request:start",
            timestamp=time.time(),
            method=method,
            url=url,
            headers=_safe_headers(request.headers),
        ))
        try:
            response = self._next.send(request)
        except Exception as e:
            self._emit(DiagnosticsEvent(
                name="request:error",
                timestamp=time.time(),
                method=method,
                url=url,
                duration=time.perf_counter() - start,
                error=e,
            ))
            raise
        self._emit(DiagnosticsEvent(
            name="request:end",
            timestamp=time.time(),
            method=method,
            url=url,
            status=response.status_code,
            duration=time.perf_counter() - start,
        ))
        return response
