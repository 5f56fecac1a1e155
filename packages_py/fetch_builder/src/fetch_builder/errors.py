"""
Errors raised while building and sending requests.
"""
import httpx


class FetchBuilderError(Exception):
    """Base exception for request building and sending errors."""
    pass


class URLParseError(FetchBuilderError):
    def __init__(self, url: str, cause: Exception):
        msg = f"Invalid request URL '{url}': {str(cause)}"
        super().__init__(msg)
        self.url = url
        self.cause = cause


class QueryEncodingError(FetchBuilderError):
    def __init__(self, value: object, reason: str):
        msg = f"Cannot encode {type(value).__name__} as url values: {reason}"
        super().__init__(msg)
        self.value = value
        self.reason = reason


class BodyEncodingError(FetchBuilderError):
    def __init__(self, value: object, cause: Exception):
        msg = f"Cannot JSON encode body of type {type(value).__name__}: {str(cause)}"
        super().__init__(msg)
        self.value = value
        self.cause = cause


class RequestConstructionError(FetchBuilderError):
    def __init__(self, method: str, url: str, reason: str):
        msg = f"Cannot create request {method or '<empty>'} {url or '<empty>'}: {reason}"
        super().__init__(msg)
        self.method = method
        self.url = url
        self.reason = reason


class ResponseReadError(FetchBuilderError):
    """
    Reading the response body failed after the transport succeeded.

    ``response`` still carries the status and headers.
    """
    def __init__(self, response: httpx.Response, cause: Exception):
        msg = f"Failed to read response body (status {response.status_code}): {str(cause)}"
        super().__init__(msg)
        self.response: httpx.Response = response
        self.cause = cause
