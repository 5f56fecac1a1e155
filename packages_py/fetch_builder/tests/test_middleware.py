"""
Tests for doer middleware.
"""
import httpx
import pytest

from fetch_builder.core.request import RequestBuilder
from fetch_builder.middleware import (
    AuthDoer,
    BasicAuthHandler,
    BearerAuthHandler,
    CustomAuthHandler,
    DiagnosticsDoer,
    DoerFunc,
    XApiKeyAuthHandler,
    chain,
    create_auth_handler,
)


def ok_doer(seen):
    def handle(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, content=b"ok")
    return DoerFunc(handle)


def test_create_auth_handler_types():
    assert isinstance(create_auth_handler("bearer", api_key="t"), BearerAuthHandler)
    assert isinstance(create_auth_handler("x-api-key", api_key="t"), XApiKeyAuthHandler)
    assert isinstance(create_auth_handler("custom", api_key="t", header_name="X-Token"), CustomAuthHandler)

    handler = create_auth_handler("basic", username="u", password="p")
    assert isinstance(handler, BasicAuthHandler)
    assert handler.get_header({}) == {"Authorization": "Basic dTpw"}


def test_create_auth_handler_validation():
    with pytest.raises(ValueError):
        create_auth_handler("basic", username="u")
    with pytest.raises(ValueError):
        create_auth_handler("bearer")
    with pytest.raises(ValueError):
        create_auth_handler("custom", api_key="t")
    with pytest.raises(ValueError) as exc:
        create_auth_handler("hmac", api_key="t")
    assert "Unsupported auth type: hmac" in str(exc.value)


def test_auth_doer_adds_header():
    seen = []
    doer = AuthDoer(ok_doer(seen), create_auth_handler("bearer", api_key="secret"))

    body, _ = RequestBuilder().doer(doer).base("https://api.io/").send()

    assert body == b"ok"
    assert seen[0].headers["Authorization"] == "Bearer secret"


def test_auth_doer_keeps_existing_header():
    seen = []
    doer = AuthDoer(ok_doer(seen), create_auth_handler("bearer", api_key="secret"))

    RequestBuilder().doer(doer).base("https://api.io/").set_basic_auth("u", "p").send()

    assert seen[0].headers.get_list("Authorization") == ["Basic dTpw"]


def test_auth_doer_per_request_key():
    seen = []

    def key_for(context):
        return "admin-key" if "/admin/" in context["url"] else None

    handler = create_auth_handler("x-api-key", api_key="default-key", get_api_key_for_request=key_for)
    api = RequestBuilder().doer(AuthDoer(ok_doer(seen), handler)).base("https://api.io/")

    api.clone().get("admin/users").send()
    api.clone().get("public/users").send()

    assert seen[0].headers["X-Api-Key"] == "admin-key"
    assert seen[1].headers["X-Api-Key"] == "default-key"


def test_per_request_key_falls_back_to_static_key():
    handler = BearerAuthHandler(api_key="static", get_api_key_for_request=lambda context: None)
    assert handler.get_header({"url": "https://api.io/"}) == {"Authorization": "Bearer static"}

    handler = BearerAuthHandler(get_api_key_for_request=lambda context: None)
    assert handler.get_header({"url": "https://api.io/"}) is None


def test_custom_handler_canonicalizes_header_name():
    handler = CustomAuthHandler("x-service-token", api_key="t")
    assert handler.get_header({}) == {"X-Service-Token": "t"}


def test_auth_doer_leaves_caller_request_unchanged():
    seen = []
    builder = RequestBuilder().base("https://api.io/").post("items").json({"name": "x"})
    request = builder.build()

    bearer = AuthDoer(ok_doer(seen), create_auth_handler("bearer", api_key="secret"))
    api_key = AuthDoer(ok_doer(seen), create_auth_handler("x-api-key", api_key="key"))
    builder.doer(bearer).send_via(request)
    builder.doer(api_key).send_via(request)

    assert "Authorization" not in request.headers
    assert "X-Api-Key" not in request.headers
    assert seen[0].headers["Authorization"] == "Bearer secret"
    assert "X-Api-Key" not in seen[0].headers
    assert seen[1].headers["X-Api-Key"] == "key"
    assert "Authorization" not in seen[1].headers
    assert seen[1].content == b'{"name":"x"}\n'


def test_diagnostics_doer_events():
    events = []
    seen = []
    doer = DiagnosticsDoer(ok_doer(seen), on_event=events.append)

    RequestBuilder().doer(doer).base("https://api.io/").set_basic_auth("u", "p").post("items").send()

    assert [e.name for e in events] == ["request:start", "request:end"]
    assert events[0].method == "POST"
    assert events[0].url == "https://api.io/items"
    assert events[0].headers["authorization"] == "<redacted>"
    assert events[1].status == 200
    assert events[1].duration >= 0


def test_diagnostics_doer_error_event():
    events = []

    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    doer = DiagnosticsDoer(DoerFunc(refuse), on_event=events.append)
    with pytest.raises(httpx.ConnectError):
        RequestBuilder().doer(doer).base("https://api.io/").send()

    assert [e.name for e in events] == ["request:start", "request:error"]
    assert isinstance(events[1].error, httpx.ConnectError)


def test_chain_order():
    order = []

    def tag(name):
        def wrap(next_doer):
            def handle(request):
                order.append(name)
                return next_doer.send(request)
            return DoerFunc(handle)
        return wrap

    seen = []
    doer = chain(ok_doer(seen), tag("outer"), tag("inner"))
    RequestBuilder().doer(doer).base("https://api.io/").send()

    assert order == ["outer", "inner"]
    assert len(seen) == 1
