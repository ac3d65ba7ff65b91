import httpx
import pytest
from pydantic import BaseModel

from admin_panel.http_client import (
    ClientDescriptor,
    HttpClientError,
    HttpClientFactory,
    HttpClientService,
    MethodDescriptor,
    MissingPathParameterError,
    ParamBinding,
    ParamKind,
    UnsupportedStreamMethodError,
    body_param,
    build_request,
    header_param,
    headers_param,
    path_param,
    query_param,
)
from admin_panel.http_client import descriptors as d
from admin_panel.http_client.factory import substitute_path

DEMO = ClientDescriptor(
    service_name="demo",
    base_url="https://api.example.com",
    headers={"X-Client": "admin-panel"},
    methods={
        "get_user": d.get("/users/:id", path_param("id")),
        "get_order": d.get("/users/{user_id}/orders/{order_id}", path_param("user_id"), path_param("order_id")),
        "search": d.get("/users", query_param("name"), query_param("email")),
        "filter": d.get("/users", query_param()),
        "create": d.post("/users", body_param()),
        "with_auth": d.get("/users/:id", path_param("id"), header_param("Authorization")),
        "with_bag": d.get("/ping", headers_param()),
        "batch_update": d.post("/documents/{id}:batchUpdate", path_param("id"), body_param()),
        "tail": d.get("/logs", stream=True),
    },
)


class NewUser(BaseModel):
    name: str
    email: str


def test_path_placeholder_is_substituted():
    plan = build_request(DEMO, "get_user", [42])
    assert plan.url == "/users/42"
    assert plan.http_method.value == "GET"


def test_brace_placeholders_are_substituted_and_encoded():
    plan = build_request(DEMO, "get_order", ["a b", "x/y"])
    assert plan.url == "/users/a%20b/orders/x%2Fy"


def test_literal_colon_after_placeholder_survives():
    plan = build_request(DEMO, "batch_update", ["doc1", {"ops": []}])
    assert plan.url == "/documents/doc1:batchUpdate"


def test_absent_query_arguments_are_omitted():
    plan = build_request(DEMO, "search", ["a"])
    assert plan.params == {"name": "a"}


def test_unnamed_query_binding_merges_mapping():
    plan = build_request(DEMO, "filter", [{"role": "admin", "active": None}])
    assert plan.params == {"role": "admin"}


def test_body_models_are_dumped():
    plan = build_request(DEMO, "create", [NewUser(name="n", email="e@example.com")])
    assert plan.body == {"name": "n", "email": "e@example.com"}


def test_header_precedence_defaults_then_named_then_bag():
    plan = build_request(DEMO, "with_auth", [1, "Bearer t"])
    assert plan.headers == {"X-Client": "admin-panel", "Authorization": "Bearer t"}
    plan = build_request(DEMO, "with_bag", [{"X-Client": "override", "X-Trace": 5}])
    assert plan.headers == {"X-Client": "override", "X-Trace": "5"}


def test_missing_path_argument_fails_fast():
    with pytest.raises(MissingPathParameterError) as exc_info:
        build_request(DEMO, "get_user", [])
    assert exc_info.value.placeholder == "id"


def test_substitute_path_rejects_none():
    with pytest.raises(MissingPathParameterError):
        substitute_path("/users/:id", {"id": None})


def test_unknown_method_and_extra_arguments():
    with pytest.raises(AttributeError):
        build_request(DEMO, "nope", [])
    with pytest.raises(TypeError):
        build_request(DEMO, "get_user", [1, 2])


def test_streaming_only_allowed_for_get_and_post():
    with pytest.raises(UnsupportedStreamMethodError):
        d._method(d.HttpMethod.PUT, "/x", (), True)
    with pytest.raises(ValueError):
        MethodDescriptor(http_method="DELETE", path="/x", stream=True)


def test_descriptor_validation():
    with pytest.raises(ValueError):
        ParamBinding(kind=ParamKind.PATH)
    with pytest.raises(ValueError):
        d.post("/x", body_param(), body_param())
    with pytest.raises(ValueError):
        ClientDescriptor(service_name="s", base_url="http://x", retries=-1)


def test_client_exposes_described_methods_only():
    client = HttpClientFactory(HttpClientService()).build(DEMO)
    assert "get_user" in dir(client)
    with pytest.raises(AttributeError):
        client.not_described


async def test_client_call_goes_through_transport():
    seen = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json={"id": 42, "name": "Leanne"})

    service = HttpClientService(transport=httpx.MockTransport(handler))
    client = HttpClientFactory(service).build(DEMO)
    result = await client.search("a", None)

    assert result == {"id": 42, "name": "Leanne"}
    assert str(seen[0].url) == "https://api.example.com/users?name=a"
    assert seen[0].headers["X-Client"] == "admin-panel"
    assert seen[0].headers["Accept"] == "application/json"
    await service.aclose()


async def test_transport_failure_is_wrapped_with_context():
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(404, json={"message": "nope"})

    service = HttpClientService(transport=httpx.MockTransport(handler))
    client = HttpClientFactory(service).build(DEMO)
    with pytest.raises(HttpClientError) as exc_info:
        await client.get_user(9)

    error = exc_info.value
    assert error.status_code == 404
    assert str(error).startswith("[demo] GET /users/9 failed:")
    assert isinstance(error.__cause__, httpx.HTTPStatusError)
    await service.aclose()
