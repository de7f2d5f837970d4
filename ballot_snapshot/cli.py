"""Command line entrypoint: run the gateway or print lookups as JSON."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys
from typing import Any

import httpx

from ballot_snapshot.application import CivicLookupService
from ballot_snapshot.config import Settings, get_settings
from ballot_snapshot.core.events import MAX_EVENTS
from ballot_snapshot.core.logging import configure_logging, log_event
from ballot_snapshot.domain.errors import CivicError, ConfigurationError
from ballot_snapshot.infrastructure import OpenStatesClient, ZippopotamGeocoder
from ballot_snapshot.infrastructure.openstates import BILL_SORTS

EXIT_SUCCESS = 0
EXIT_LOOKUP_FAILED = 1
EXIT_CONFIG_ERROR = 2


def parse_args(argv: list[str]) -> argparse.Namespace:
    parser = argparse.ArgumentParser(prog="ballot-snapshot", description=__doc__)
    parser.add_argument("--log-level", default=None, choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="run the OpenStates gateway")
    serve.add_argument("--host", default=None)
    serve.add_argument("--port", type=int, default=None)

    reps = sub.add_parser("representatives", help="elected officials for a ZIP code")
    reps.add_argument("zip")

    events = sub.add_parser("events", help="upcoming legislative events for a ZIP code")
    events.add_argument("zip")
    events.add_argument("--show", type=int, default=MAX_EVENTS)

    bills = sub.add_parser("bills", help="recent bills for the ZIP code's state")
    bills.add_argument("zip")
    bills.add_argument("--created-since", required=True)
    bills.add_argument("--sort", default="updated_desc", choices=sorted(BILL_SORTS))
    bills.add_argument("--per-page", type=int, default=10)
    return parser.parse_args(argv)


async def run_lookup(args: argparse.Namespace, settings: Settings, http_client: httpx.AsyncClient | None = None) -> dict[str, Any]:
    client_http = http_client or httpx.AsyncClient(timeout=settings.request_timeout)
    try:
        client = OpenStatesClient(settings.client_config(), http_client=client_http)
        geocoder = ZippopotamGeocoder(client_http, base_url=settings.geocoder_base_url)
        service = CivicLookupService(client, geocoder)
        if args.command == "representatives":
            return await service.representatives(args.zip)
        if args.command == "events":
            return await service.upcoming_events(args.zip, show=args.show)
        if args.command == "bills":
            return await service.bills(args.zip, args.created_since, sort=args.sort, per_page=args.per_page)
        raise ValueError(f"Unknown lookup: {args.command}")
    finally:
        if http_client is None:
            await client_http.aclose()


def serve(args: argparse.Namespace, settings: Settings) -> int:
    import uvicorn

    from ballot_snapshot.app import create_app

    uvicorn.run(
        create_app(settings),
        host=args.host or settings.host,
        port=args.port or settings.port,
        log_config=None,
    )
    return EXIT_SUCCESS


def main(argv: list[str] | None = None) -> int:
    args = parse_args(sys.argv[1:] if argv is None else argv)
    settings = get_settings()
    logger = configure_logging(args.log_level or settings.log_level)

    if args.command == "serve":
        return serve(args, settings)

    try:
        payload = asyncio.run(run_lookup(args, settings))
    except ConfigurationError as exc:
        log_event(logger, exc.message, event="lookup_failed", error_code=exc.error_code)
        print(json.dumps({"error": exc.message}), file=sys.stderr)
        return EXIT_CONFIG_ERROR
    except CivicError as exc:
        log_event(logger, exc.message, event="lookup_failed", stage=getattr(exc, "stage", None), error_code=exc.error_code)
        print(json.dumps({"error": exc.message}), file=sys.stderr)
        return EXIT_LOOKUP_FAILED

    print(json.dumps(payload, indent=2, ensure_ascii=False))
    return EXIT_SUCCESS


__all__ = ["main", "parse_args", "run_lookup"]
