"""
Configuration models and validation for fetch-builder.
"""
import os
import logging
from typing import Any, Dict, Optional, Union

import httpx
from pydantic import BaseModel, Field, field_validator

logger = logging.getLogger(__name__)

# Constants
DEFAULT_TIMEOUT_CONNECT = 5.0
DEFAULT_TIMEOUT_READ = 30.0
DEFAULT_TIMEOUT_WRITE = 10.0


def is_ssl_verify_disabled_by_env() -> bool:
    """Check if SSL verification is disabled by environment variables."""
    # Node.js compatibility
    if os.getenv("NODE_TLS_REJECT_UNAUTHORIZED") == "0":
        return True

    # Python convention
    if os.getenv("SSL_CERT_VERIFY") == "0":
        return True

    return False


class TimeoutConfig(BaseModel):
    """Timeout configuration."""
    connect: float = DEFAULT_TIMEOUT_CONNECT
    read: float = DEFAULT_TIMEOUT_READ
    write: float = DEFAULT_TIMEOUT_WRITE
    pool: Optional[float] = None


def normalize_timeout(timeout: Optional[Union[float, TimeoutConfig]]) -> TimeoutConfig:
    """Normalize timeout to TimeoutConfig object."""
    if timeout is None:
        return TimeoutConfig()
    if isinstance(timeout, (int, float)):
        return TimeoutConfig(connect=float(timeout), read=float(timeout), write=float(timeout))
    return timeout


class TransportConfig(BaseModel):
    """Settings for the httpx clients used as transports."""
    timeout: Optional[Union[float, TimeoutConfig]] = None
    verify_ssl: bool = True
    proxy_url: Optional[str] = None
    trust_env: bool = True
    follow_redirects: bool = True

    def get_client_kwargs(self) -> Dict[str, Any]:
        """Build kwargs for httpx.Client / httpx.AsyncClient."""
        timeout = normalize_timeout(self.timeout)
        verify = self.verify_ssl
        if verify and is_ssl_verify_disabled_by_env():
            logger.debug("SSL verification disabled by environment")
            verify = False

        kwargs: Dict[str, Any] = {
            "timeout": httpx.Timeout(
                connect=timeout.connect,
                read=timeout.read,
                write=timeout.write,
                pool=timeout.pool,
            ),
            "verify": verify,
            "trust_env": self.trust_env,
            "follow_redirects": self.follow_redirects,
        }
        if self.proxy_url:
            kwargs["proxy"] = self.proxy_url
        return kwargs


class BuilderConfig(BaseModel):
    """Initial state for a RequestBuilder."""
    base_url: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    transport: Optional[TransportConfig] = None

    @field_validator("base_url")
    @classmethod
    def validate_url(cls, v: Optional[str]) -> Optional[str]:
        if v is not None and not v.startswith(("http://", "https://")):
            raise ValueError("base_url must start with http:// or https://")
        return v
