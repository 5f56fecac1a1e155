"""
Tests for config models and client creation.
"""
import httpx
import pytest

from fetch_builder.config import (
    TimeoutConfig,
    TransportConfig,
    is_ssl_verify_disabled_by_env,
    normalize_timeout,
)
from fetch_builder.core.transport import create_async_client, create_client


def test_normalize_timeout():
    assert normalize_timeout(None) == TimeoutConfig()
    assert normalize_timeout(10) == TimeoutConfig(connect=10.0, read=10.0, write=10.0)
    custom = TimeoutConfig(read=60.0)
    assert normalize_timeout(custom) is custom


def test_client_kwargs_defaults(monkeypatch):
    monkeypatch.delenv("SSL_CERT_VERIFY", raising=False)
    monkeypatch.delenv("NODE_TLS_REJECT_UNAUTHORIZED", raising=False)

    kwargs = TransportConfig().get_client_kwargs()

    assert kwargs["verify"] is True
    assert kwargs["follow_redirects"] is True
    assert kwargs["timeout"] == httpx.Timeout(connect=5.0, read=30.0, write=10.0, pool=None)
    assert "proxy" not in kwargs


def test_client_kwargs_proxy():
    kwargs = TransportConfig(proxy_url="http://proxy:8080").get_client_kwargs()
    assert kwargs["proxy"] == "http://proxy:8080"


@pytest.mark.parametrize("env_var", ["SSL_CERT_VERIFY", "NODE_TLS_REJECT_UNAUTHORIZED"])
def test_ssl_verify_disabled_by_env(monkeypatch, env_var):
    monkeypatch.setenv(env_var, "0")
    assert is_ssl_verify_disabled_by_env() is True
    assert TransportConfig().get_client_kwargs()["verify"] is False


def test_create_client():
    client = create_client(TransportConfig(timeout=2.0, follow_redirects=False))
    assert isinstance(client, httpx.Client)
    assert client.timeout.connect == 2.0
    assert client.follow_redirects is False
    client.close()


@pytest.mark.asyncio
async def test_create_async_client():
    client = create_async_client()
    assert isinstance(client, httpx.AsyncClient)
    assert client.follow_redirects is True
    await client.aclose()
