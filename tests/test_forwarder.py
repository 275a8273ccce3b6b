import asyncio
import json

import httpx
import pytest
import respx

from core.request_types import InboundRequest
from services.forwarder import Forwarder
from services.upstream import UpstreamClient

GEOCODE_URL = "https://maps.googleapis.com/maps/api/geocode/json?address=Pittsburgh"
SEARCH_TEXT_URL = "https://places.googleapis.com/v1/places:searchText"

PREFLIGHT = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Methods": "GET, POST",
    "Access-Control-Allow-Headers": "Content-Type",
}
JSON_HEADERS = {"Access-Control-Allow-Origin": "*", "Content-Type": "application/json"}


async def _handle(inbound, logger, **client_kwargs):
    async with httpx.AsyncClient(**client_kwargs) as client:
        forwarder = Forwarder(UpstreamClient(client), logger)
        return await forwarder.handle(inbound)


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "inbound",
    [
        InboundRequest("OPTIONS"),
        InboundRequest("OPTIONS", query_params={"url": "https://evil.com/"}),
        InboundRequest("OPTIONS", parsed_body={"url": GEOCODE_URL, "body": "x"}),
    ],
)
@respx.mock
async def test_preflight_short_circuits(inbound, logger):
    response = await _handle(inbound, logger)

    assert response.status_code == 204
    assert response.headers == PREFLIGHT
    assert not response.body
    assert not respx.calls
    logger.log_forward.assert_not_called()


@pytest.mark.asyncio
async def test_get_without_url_is_missing(logger):
    response = await _handle(InboundRequest("GET", query_params={"q": "x"}), logger)

    assert response.status_code == 400
    assert response.body == b'{"error":"Missing url"}'
    assert response.headers == JSON_HEADERS
    logger.log_error.assert_called_once()


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "inbound",
    [
        InboundRequest("GET", query_params={"url": "https://maps.googleapis.com.attacker.net/x"}),
        InboundRequest("GET", query_params={"url": "http://maps.googleapis.com/maps/api/geocode/json"}),
        InboundRequest("POST", parsed_body={"url": "https://evil.example/maps.googleapis.com/"}),
        InboundRequest("POST", parsed_body={"body": "{}"}),
    ],
)
@respx.mock
async def test_disallowed_target_is_invalid(inbound, logger):
    response = await _handle(inbound, logger)

    assert response.status_code == 400
    assert response.body == b'{"error":"Invalid url"}'
    assert response.headers["Access-Control-Allow-Origin"] == "*"
    assert not respx.calls


@pytest.mark.asyncio
@respx.mock
async def test_post_without_body_forwards_get_with_api_key(logger):
    route = respx.get(GEOCODE_URL).mock(return_value=httpx.Response(200, content=b"{}"))

    await _handle(InboundRequest("POST", parsed_body={"url": GEOCODE_URL, "apiKey": "K"}), logger)

    sent = route.calls.last.request
    assert sent.method == "GET"
    assert sent.headers["X-Goog-Api-Key"] == "K"
    assert "content-type" not in sent.headers


@pytest.mark.asyncio
@respx.mock
async def test_post_with_body_forwards_post_verbatim(logger):
    raw = '{"textQuery":"coffee"}'
    route = respx.post(SEARCH_TEXT_URL).mock(return_value=httpx.Response(200, content=b"{}"))

    await _handle(InboundRequest("POST", parsed_body={"url": SEARCH_TEXT_URL, "body": raw}), logger)

    sent = route.calls.last.request
    assert sent.method == "POST"
    assert sent.headers["Content-Type"] == "application/json"
    assert sent.content == raw.encode("utf-8")
    assert "x-goog-api-key" not in sent.headers


@pytest.mark.asyncio
@respx.mock
async def test_success_relays_upstream_bytes(logger):
    respx.get(GEOCODE_URL).mock(
        return_value=httpx.Response(200, content=b'{"results":[]}', headers={"X-Upstream": "1"})
    )

    response = await _handle(InboundRequest("GET", query_params={"url": GEOCODE_URL}), logger)

    assert response.status_code == 200
    assert response.headers == JSON_HEADERS
    assert response.body == b'{"results":[]}'
    logger.log_forward.assert_called_once()
    logger.log_error.assert_not_called()


@pytest.mark.asyncio
@respx.mock
async def test_upstream_error_becomes_502(logger):
    respx.get(GEOCODE_URL).mock(return_value=httpx.Response(403, json={"error_message": "denied"}))

    response = await _handle(InboundRequest("GET", query_params={"url": GEOCODE_URL}), logger)

    assert response.status_code == 502
    assert response.headers == JSON_HEADERS
    assert json.loads(response.body) == {"error": "Proxy failed: HTTP 403"}
    route, status, message = logger.log_error.call_args.args
    assert route == "maps.googleapis.com"
    assert status == 502
    assert "denied" in message


@pytest.mark.asyncio
@respx.mock
async def test_transport_error_becomes_502(logger):
    respx.get(GEOCODE_URL).mock(side_effect=httpx.ConnectError("connection refused"))

    response = await _handle(InboundRequest("GET", query_params={"url": GEOCODE_URL}), logger)

    assert response.status_code == 502
    assert json.loads(response.body) == {"error": "Proxy failed: connection refused"}


@pytest.mark.asyncio
async def test_timeout_becomes_502(logger):
    async def slow_upstream(request):
        await asyncio.sleep(5)
        return httpx.Response(200)

    async with httpx.AsyncClient(transport=httpx.MockTransport(slow_upstream)) as client:
        forwarder = Forwarder(UpstreamClient(client, timeout=0.05), logger)
        response = await forwarder.handle(InboundRequest("GET", query_params={"url": GEOCODE_URL}))

    assert response.status_code == 502
    assert response.body == b'{"error":"Proxy failed: Timeout"}'


@pytest.mark.asyncio
async def test_non_string_body_is_rejected(logger):
    response = await _handle(
        InboundRequest("POST", parsed_body={"url": SEARCH_TEXT_URL, "body": {"textQuery": "x"}}),
        logger,
    )

    assert response.status_code == 400
    assert response.body == b'{"error":"Invalid body"}'


@pytest.mark.asyncio
@respx.mock
async def test_concurrent_calls_are_isolated(logger):
    respx.get(GEOCODE_URL).mock(side_effect=lambda request: httpx.Response(200, content=b'{"a":1}'))
    respx.post(SEARCH_TEXT_URL).mock(side_effect=lambda request: httpx.Response(403))

    call_a = InboundRequest("GET", query_params={"url": GEOCODE_URL})
    call_b = InboundRequest("POST", parsed_body={"url": SEARCH_TEXT_URL, "body": "{}", "apiKey": "K"})

    async with httpx.AsyncClient() as client:
        forwarder = Forwarder(UpstreamClient(client), logger)
        sequential = [await forwarder.handle(call_a), await forwarder.handle(call_b)]
        concurrent = await asyncio.gather(forwarder.handle(call_a), forwarder.handle(call_b))

    assert list(concurrent) == sequential
    assert sequential[0].body == b'{"a":1}'
    assert sequential[1].status_code == 502


@pytest.mark.asyncio
@respx.mock
async def test_non_ascii_api_key_becomes_502(logger):
    response = await _handle(
        InboundRequest(
            "POST",
            parsed_body={"url": SEARCH_TEXT_URL, "body": "{}", "apiKey": "klüssel✓"},
        ),
        logger,
    )

    assert response.status_code == 502
    assert response.headers == JSON_HEADERS
    assert json.loads(response.body) == {"error": "Proxy failed: Invalid request to upstream"}
    assert not respx.calls
    logger.log_error.assert_called_once()


@pytest.mark.asyncio
@respx.mock
async def test_failing_forward_log_does_not_change_response(logger):
    respx.get(GEOCODE_URL).mock(return_value=httpx.Response(200, content=b'{"results":[]}'))
    logger.log_forward.side_effect = OSError("read-only file system")

    response = await _handle(InboundRequest("GET", query_params={"url": GEOCODE_URL}), logger)

    assert response.status_code == 200
    assert response.body == b'{"results":[]}'


@pytest.mark.asyncio
async def test_failing_error_log_still_renders_error(logger):
    logger.log_error.side_effect = OSError("no space left on device")

    response = await _handle(InboundRequest("GET"), logger)

    assert response.status_code == 400
    assert response.body == b'{"error":"Missing url"}'
