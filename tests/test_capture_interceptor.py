import asyncio

import httpx
import pytest
import requests

from clitestpack.capture import (
    ANY_BODY,
    CallDescriptor,
    HttpInterceptor,
    HttpRequest,
    InterceptorStateError,
    UnmatchedRequestError,
)


@pytest.fixture()
def interceptor():
    active = HttpInterceptor()
    yield active
    active.deactivate()


def test_activate_patches_and_deactivate_restores_clients(interceptor: HttpInterceptor) -> None:
    original_requests = requests.sessions.Session.request
    original_httpx_client = httpx.Client.request
    original_httpx_async = httpx.AsyncClient.request

    interceptor.activate()
    assert requests.sessions.Session.request is not original_requests
    assert interceptor.is_active is True

    interceptor.deactivate()
    assert requests.sessions.Session.request is original_requests
    assert httpx.Client.request is original_httpx_client
    assert httpx.AsyncClient.request is original_httpx_async
    assert interceptor.is_active is False


def test_activate_twice_is_an_error(interceptor: HttpInterceptor) -> None:
    interceptor.activate()

    with pytest.raises(InterceptorStateError, match="already active"):
        interceptor.activate()


def test_recording_requires_activation(interceptor: HttpInterceptor) -> None:
    with pytest.raises(InterceptorStateError):
        interceptor.start_recording()


def test_expectation_serves_requests_once(interceptor: HttpInterceptor) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.expect(
        "get",
        "https://management.example.test/sub1/services?detail=true",
        status=200,
        headers={"Content-Type": "application/json"},
        response='[{"name": "web1"}]',
    )

    response = requests.get(
        "https://management.example.test/sub1/services",
        params={"detail": "true"},
        timeout=5,
    )

    assert response.status_code == 200
    assert response.json() == [{"name": "web1"}]
    assert response.headers["content-type"] == "application/json"
    assert interceptor.pending() == []

    with pytest.raises(UnmatchedRequestError, match="GET https://management.example.test"):
        requests.get("https://management.example.test/sub1/services?detail=true", timeout=5)


def test_httpx_clients_are_served_from_expectations(interceptor: HttpInterceptor) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.expect("POST", "https://api.example.test/items", status=201, response='{"id": 1}')
    interceptor.expect("GET", "https://api.example.test/items/1", response='{"id": 1}')

    with httpx.Client() as client:
        created = client.post("https://api.example.test/items", json={"name": "a"})

    async def fetch() -> httpx.Response:
        async with httpx.AsyncClient() as client:
            return await client.get("https://api.example.test/items/1")

    fetched = asyncio.run(fetch())

    assert created.status_code == 201
    assert created.json() == {"id": 1}
    assert fetched.json() == {"id": 1}


def test_exact_body_matching_ignores_json_formatting(interceptor: HttpInterceptor) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.expect(
        "PUT",
        "https://api.example.test/items/1",
        body='{"b": 2, "a": 1}',
        response="ok",
    )

    with pytest.raises(UnmatchedRequestError):
        requests.put("https://api.example.test/items/1", json={"a": 1, "b": 3}, timeout=5)

    response = requests.put("https://api.example.test/items/1", json={"a": 1, "b": 2}, timeout=5)
    assert response.text == "ok"


def test_any_body_matches_changed_payloads() -> None:
    descriptor = CallDescriptor("post", "https://api.example.test/items", body=ANY_BODY)

    assert descriptor.method == "POST"
    assert descriptor.matches(
        HttpRequest(method="POST", url="https://api.example.test/items", body='{"at":1}')
    )
    assert descriptor.matches(
        HttpRequest(method="post", url="https://api.example.test/items", body='{"at":2}')
    )
    assert not descriptor.matches(
        HttpRequest(method="POST", url="https://api.example.test/other", body=None)
    )


def test_passthrough_when_network_allowed(interceptor: HttpInterceptor, management_server) -> None:
    interceptor.activate(allow_net_connect=True)

    response = requests.get(f"{management_server.base_url}/ping", timeout=5)

    assert response.json() == {"ok": True, "path": "/ping"}
    assert interceptor.play() == []


def test_recording_captures_exchanges(interceptor: HttpInterceptor, management_server) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.start_recording()

    requests.post(f"{management_server.base_url}/sub1/services/vms", json={"name": "web1"}, timeout=5)
    with httpx.Client() as client:
        client.get(f"{management_server.base_url}/sub1/services/vms", params={"top": 5})

    exchanges = interceptor.play()

    assert [exchange.request.method for exchange in exchanges] == ["POST", "GET"]
    assert exchanges[0].request.body == '{"name":"web1"}'
    assert exchanges[0].response.status_code == 201
    assert exchanges[1].request.url.endswith("/sub1/services/vms?top=5")
    assert exchanges[1].response.body == '[{"name": "web1"}]'

    descriptor = exchanges[0].to_descriptor()
    assert descriptor.status == 201
    assert "Content-Length" not in descriptor.headers
    assert descriptor.headers["Content-Type"] == "application/json"

    interceptor.clear_recording()
    assert interceptor.play() == []


def test_latin1_response_replays_with_same_text(interceptor: HttpInterceptor) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            200,
            headers={"Content-Type": "text/plain; charset=ISO-8859-1"},
            content="café".encode("latin-1"),
        )

    interceptor.activate()
    interceptor.start_recording()
    with httpx.Client(transport=httpx.MockTransport(handler)) as client:
        assert client.get("https://api.example.test/menu").text == "café"

    (exchange,) = interceptor.play()
    descriptor = exchange.to_descriptor()
    assert descriptor.headers["Content-Type"] == "text/plain; charset=utf-8"
    interceptor.deactivate()

    interceptor.activate(allow_net_connect=False)
    interceptor.register(descriptor)
    interceptor.expect(
        "GET",
        "https://api.example.test/menu",
        headers={"Content-Type": "text/plain; charset=ISO-8859-1"},
        response="café",
    )

    assert httpx.get("https://api.example.test/menu").text == "café"
    assert requests.get("https://api.example.test/menu", timeout=5).text == "café"


def test_recording_keeps_transport_failures_apart(interceptor: HttpInterceptor) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.start_recording()

    with pytest.raises(requests.exceptions.ConnectionError):
        requests.get("http://127.0.0.1:9/unreachable", timeout=1)

    (exchange,) = interceptor.play()
    assert exchange.is_call is False
    assert exchange.error.startswith("ConnectionError")
    with pytest.raises(ValueError, match="no response"):
        exchange.to_descriptor()


def test_deactivate_drops_unconsumed_expectations(interceptor: HttpInterceptor, caplog) -> None:
    interceptor.activate(allow_net_connect=False)
    interceptor.expect("GET", "https://api.example.test/never-called")

    with caplog.at_level("WARNING"):
        interceptor.deactivate()

    assert interceptor.pending() == []
    assert "unconsumed" in caplog.text
