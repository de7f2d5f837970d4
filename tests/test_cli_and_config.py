from __future__ import annotations

import pytest

from ballot_snapshot.cli import parse_args, run_lookup
from ballot_snapshot.config import Settings


def test_parse_args_defaults():
    args = parse_args(["events", "33101"])
    assert args.command == "events"
    assert args.zip == "33101"
    assert args.show == 5
    assert args.log_level is None


def test_parse_args_bills():
    args = parse_args(["bills", "73301", "--created-since", "2024-01-01", "--per-page", "20"])
    assert args.sort == "updated_desc"
    assert args.per_page == 20


def test_parse_args_rejects_unknown_sort():
    with pytest.raises(SystemExit):
        parse_args(["bills", "73301", "--created-since", "2024-01-01", "--sort", "random"])


def test_settings_from_environment(monkeypatch):
    monkeypatch.setenv("OPENSTATES_API_KEY", "  env-key ")
    monkeypatch.setenv("USE_SERVER_PROXY", "true")
    monkeypatch.setenv("PROXY_BASE_URL", "https://civic.example.org/api")
    monkeypatch.setenv("API_CORS_ORIGINS", "https://a.example.org, https://b.example.org")

    settings = Settings(_env_file=None)

    assert settings.openstates_api_key == "env-key"
    assert settings.cors_origins == ["https://a.example.org", "https://b.example.org"]
    proxied = settings.client_config()
    assert proxied.use_proxy is True
    assert proxied.api_key is None
    assert proxied.base_url == "https://civic.example.org/api"
    direct = settings.client_config(use_proxy=False)
    assert direct.api_key == "env-key"
    assert direct.base_url == "https://v3.openstates.org"


def test_blank_key_counts_as_missing():
    settings = Settings(_env_file=None, openstates_api_key="   ")
    assert settings.openstates_api_key is None


def test_timeout_must_be_positive():
    with pytest.raises(ValueError):
        Settings(_env_file=None, request_timeout=0)


async def test_run_lookup_representatives(settings, http_client, upstream, miami_payload):
    upstream.zip("33101", miami_payload)
    upstream.openstates("/people.geo", [{"name": "Jane Doe"}])

    payload = await run_lookup(parse_args(["representatives", "33101"]), settings, http_client)

    assert payload["items"][0]["name"] == "Jane Doe"
    assert payload["place"]["city"] == "Miami"
