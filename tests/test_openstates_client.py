from __future__ import annotations

from datetime import date

import httpx
import pytest

from ballot_snapshot.domain.errors import ConfigurationError, InvalidUpstreamData, UpstreamError
from ballot_snapshot.infrastructure.openstates import ClientConfig, OpenStatesClient


def _client(http_client, **overrides) -> OpenStatesClient:
    config = ClientConfig(api_key="test-key", **overrides)
    return OpenStatesClient(config, http_client=http_client)


async def test_people_near_sends_key_and_lng(upstream, http_client):
    upstream.openstates("/people.geo", {"results": [{"name": "Jane Doe"}]})

    people = await _client(http_client).people_near(25.77, -80.19)

    assert people == [{"name": "Jane Doe"}]
    request = upstream.requests[0]
    assert request.headers["X-API-KEY"] == "test-key"
    assert request.url.params["lat"] == "25.77"
    assert request.url.params["lng"] == "-80.19"
    assert "lon" not in request.url.params


async def test_events_for_jurisdiction_builds_query_and_truncates(upstream, http_client):
    upstream.openstates("/events", [{"id": str(index)} for index in range(8)])

    events = await _client(http_client).events_for_jurisdiction("Florida", 5)

    assert [event["id"] for event in events] == ["0", "1", "2", "3", "4"]
    params = upstream.requests[0].url.params
    assert params["jurisdiction"] == "Florida"
    assert params["deleted"] == "false"
    assert params["require_bills"] == "false"
    assert params["page"] == "1"
    assert params["per_page"] == "5"


async def test_events_near_accepts_bare_array(upstream, http_client):
    upstream.openstates("/events.geo", [{"id": "a"}, {"id": "b"}, {"id": "c"}])

    events = await _client(http_client).events_near(1.0, 2.0, limit=2)

    assert events == [{"id": "a"}, {"id": "b"}]


async def test_bills_keep_order_and_report_total(upstream, http_client):
    bills = [{"identifier": f"HB {index}"} for index in range(12)]
    upstream.openstates("/bills", {"results": bills, "pagination": {"total": 240, "page": 1}})

    page = await _client(http_client).bills_for_jurisdiction("Texas", date(2024, 1, 1), "updated_desc", 10)

    assert len(page.items) == 10
    assert [bill["identifier"] for bill in page.items] == [f"HB {index}" for index in range(10)]
    assert page.total == 240
    request = upstream.requests[0]
    assert request.url.params["created_since"] == "2024-01-01"
    assert request.url.params["sort"] == "updated_desc"
    assert request.url.params["per_page"] == "10"
    assert request.url.params.get_list("include") == ["other_titles", "other_identifiers", "sources", "votes"]


async def test_bill_total_falls_back_to_item_count(upstream, http_client):
    upstream.openstates("/bills", [{"identifier": "SB 1"}, {"identifier": "SB 2"}])

    page = await _client(http_client).bills_for_jurisdiction("Texas", "2024-01-01")

    assert page.total == 2


async def test_missing_key_fails_before_request(upstream, http_client):
    client = OpenStatesClient(ClientConfig(api_key=None), http_client=http_client)

    with pytest.raises(ConfigurationError):
        await client.people_near(1.0, 2.0)
    assert upstream.requests == []


async def test_error_status_carries_body(upstream, http_client):
    upstream.openstates("/events", httpx.Response(429, json={"detail": "slow down"}))

    with pytest.raises(UpstreamError) as excinfo:
        await _client(http_client).events_for_jurisdiction("Ohio")

    assert excinfo.value.status == 429
    assert excinfo.value.body == {"detail": "slow down"}
    assert excinfo.value.stage == "events"


async def test_payload_without_list_is_invalid(upstream, http_client):
    upstream.openstates("/people.geo", {"detail": "unexpected"})

    with pytest.raises(InvalidUpstreamData):
        await _client(http_client).people_near(1.0, 2.0)


async def test_timeout_is_reported_as_upstream_error():
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ReadTimeout("too slow", request=request)

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    with pytest.raises(UpstreamError) as excinfo:
        await _client(http_client).events_near(1.0, 2.0)

    assert excinfo.value.stage == "timeout"
    assert excinfo.value.status is None


async def test_proxy_mode_calls_gateway_without_key():
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(200, json=[{"name": "Jane Doe"}])

    http_client = httpx.AsyncClient(transport=httpx.MockTransport(handler))
    config = ClientConfig(base_url="https://civic.example.org/api", use_proxy=True)
    client = OpenStatesClient(config, http_client=http_client)

    await client.people_near(42.35, -71.06)
    await client.events_for_jurisdiction("Massachusetts", 3)

    people_request, events_request = seen
    assert people_request.url.path == "/api/people.geo"
    assert people_request.url.params["lon"] == "-71.06"
    assert "X-API-KEY" not in people_request.headers
    assert events_request.url.path == "/api/events"
    assert events_request.url.params["per_page"] == "3"
    assert "deleted" not in events_request.url.params


async def test_close_releases_only_an_owned_client(http_client):
    owned = OpenStatesClient(ClientConfig(api_key="test-key"))
    await owned.close()
    assert owned._client.is_closed

    shared = _client(http_client)
    await shared.close()
    assert not http_client.is_closed
