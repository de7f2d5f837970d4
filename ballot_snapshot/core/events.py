"""Staleness filtering and display selection for event lists."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Iterable

from dateutil import parser as date_parser

from ballot_snapshot.core.records import EVENT_WHEN_FIELDS, first_present

MAX_EVENTS = 5


# Two defaults differing in every date field; a string that only parses to
# the same date under both names its own year, month and day.
_FILL_DEFAULTS = (datetime(2000, 1, 1), datetime(2001, 2, 2))


def _parse_loose(text: str) -> datetime | None:
    first, second = (date_parser.parse(text, default=default) for default in _FILL_DEFAULTS)
    if first.date() != second.date():
        return None
    return first


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an upstream date string; naive values are read as UTC.

    Strings without a full calendar date (``"10:00"``, ``"Monday"``) count as
    unparseable rather than being completed from today's date.
    """

    if not isinstance(value, str) or not value.strip():
        return None
    text = value.strip()
    try:
        parsed = date_parser.isoparse(text)
    except (ValueError, OverflowError):
        try:
            parsed = _parse_loose(text)
        except (ValueError, OverflowError):
            return None
    if parsed is None:
        return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def reference_timestamp(event: Any) -> datetime | None:
    """First parseable of ``end_date``, ``start_date`` and the "when" fields."""

    if not isinstance(event, dict):
        return None
    for candidate in (event.get("end_date"), event.get("start_date"), first_present(event, EVENT_WHEN_FIELDS)):
        parsed = parse_timestamp(candidate)
        if parsed is not None:
            return parsed
    return None


def is_upcoming(event: Any, now: datetime | None = None) -> bool:
    """False only when the event's reference time lies strictly in the past."""

    current = now or datetime.now(timezone.utc)
    if current.tzinfo is None:
        current = current.replace(tzinfo=timezone.utc)
    stamp = reference_timestamp(event)
    if stamp is None:
        return True
    return not stamp < current


def filter_upcoming(events: Iterable[Any], now: datetime | None = None) -> list[Any]:
    current = now or datetime.now(timezone.utc)
    return [event for event in events if is_upcoming(event, current)]


def display_count(requested: int | None, available: int, cap: int = MAX_EVENTS) -> int:
    """Clamp a user-chosen count to ``0..min(cap, available)``."""

    upper = max(min(cap, available), 0)
    if requested is None:
        return upper
    return max(0, min(int(requested), upper))


def select_for_display(events: list[Any], requested: int | None, cap: int = MAX_EVENTS) -> list[Any]:
    return events[: display_count(requested, len(events), cap)]


__all__ = [
    "MAX_EVENTS",
    "display_count",
    "filter_upcoming",
    "is_upcoming",
    "parse_timestamp",
    "reference_timestamp",
    "select_for_display",
]
