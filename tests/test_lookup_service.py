from __future__ import annotations

from datetime import datetime, timezone

import pytest

from ballot_snapshot.application import CivicLookupService
from ballot_snapshot.domain.errors import InvalidInput
from ballot_snapshot.infrastructure import OpenStatesClient, ZippopotamGeocoder
from ballot_snapshot.infrastructure.openstates import ClientConfig

NOW = datetime(2025, 3, 1, tzinfo=timezone.utc)


@pytest.fixture()
def service(http_client) -> CivicLookupService:
    client = OpenStatesClient(ClientConfig(api_key="test-key"), http_client=http_client)
    return CivicLookupService(client, ZippopotamGeocoder(http_client))


async def test_representatives_for_zip(service, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates(
        "/people.geo",
        {
            "results": [
                {"name": "Jane Doe", "party": "Republican", "current_role": {"title": "Senator", "district": "38"}},
                {"name": "John Roe", "roles": ["Representative"], "emails": ["roe@example.org"]},
            ]
        },
    )

    result = await service.representatives("33101")

    assert result["place"]["state"] == "Florida"
    first, second = result["items"]
    assert first["role_text"] == "Senator"
    assert first["district"] == "38"
    assert second["role"]["kind"] == "label"
    assert second["email"] == "roe@example.org"
    people_request = upstream.calls("/people.geo")[0]
    assert people_request.url.params["lat"] == "25.7791"
    assert people_request.url.params["lng"] == "-80.1937"


async def test_upcoming_events_filter_then_trim(service, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates(
        "/events",
        {
            "results": [
                {"id": "past", "end_date": "2025-01-01"},
                {"id": "next", "start_date": "2025-03-10", "title": "Appropriations"},
                {"id": "undated", "name": "Open hearing"},
                {"id": "later", "when": "2025-04-02T09:00:00Z"},
            ]
        },
    )

    result = await service.upcoming_events("33101", show=2, now=NOW)

    assert result["jurisdiction"] == "Florida"
    assert result["available"] == 3
    assert result["showing"] == 2
    assert [item["key"] for item in result["items"]] == ["next", "undated"]
    assert result["items"][1]["title"] == "Open hearing"


async def test_upcoming_events_show_cannot_exceed_available(service, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates("/events", [{"id": "only"}])

    result = await service.upcoming_events("33101", show=5, now=NOW)

    assert result["showing"] == 1


async def test_bills_for_zip(service, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates(
        "/bills",
        {"results": [{"identifier": f"HB {index}", "title": f"Bill {index}"} for index in range(4)], "count": 120},
    )

    result = await service.bills("33101", "2024-01-01", sort="last_action_desc", per_page=3)

    assert result["total"] == 120
    assert result["showing"] == 3
    assert [item["identifier"] for item in result["items"]] == ["HB 0", "HB 1", "HB 2"]
    request = upstream.calls("/bills")[0]
    assert request.url.params["jurisdiction"] == "Florida"
    assert request.url.params["sort"] == "last_action_desc"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"created_since": "01/01/2024"},
        {"created_since": "2024-02-30"},
        {"created_since": "2024-01-01", "sort": "popular"},
        {"created_since": "2024-01-01", "per_page": 0},
        {"created_since": "2024-01-01", "per_page": 51},
    ],
)
async def test_bills_validate_before_any_request(service, upstream, kwargs):
    created_since = kwargs.pop("created_since")
    with pytest.raises(InvalidInput):
        await service.bills("33101", created_since, **kwargs)
    assert upstream.requests == []


async def test_non_record_events_are_not_counted(service, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates("/events", ["stray", {"id": "real"}, None])

    result = await service.upcoming_events("33101", show=5, now=NOW)

    assert result["available"] == 1
    assert result["showing"] == 1
    assert [item["key"] for item in result["items"]] == ["real"]
