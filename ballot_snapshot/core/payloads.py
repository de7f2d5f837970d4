"""Helpers for the two response shapes OpenStates returns.

Endpoints answer either with a bare JSON array or with an envelope object
carrying the array under ``results`` (plus optional pagination fields). These
helpers unwrap both without ever raising on a loosely shaped payload.
"""
from __future__ import annotations

import json
from typing import Any

from ballot_snapshot.domain.errors import InvalidUpstreamData

TOTAL_FIELDS: tuple[str, ...] = ("count", "total")


def parse_body(text: str) -> Any:
    """Decode JSON when possible, otherwise hand back the raw text."""

    if not text:
        return text
    try:
        return json.loads(text)
    except ValueError:
        return text


def extract_items(payload: Any) -> list[Any] | None:
    """Return the list inside ``payload`` or ``None`` when there is none."""

    if isinstance(payload, list):
        return payload
    if isinstance(payload, dict):
        results = payload.get("results")
        if isinstance(results, list):
            return results
    return None


def _as_count(value: Any) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    return None


def extract_total(payload: Any) -> int | None:
    """Total result count reported by the envelope.

    Checks ``count``, ``total`` and ``pagination.total`` in that order and
    falls back to the number of returned items.
    """

    if isinstance(payload, dict):
        for key in TOTAL_FIELDS:
            total = _as_count(payload.get(key))
            if total is not None:
                return total
        pagination = payload.get("pagination")
        if isinstance(pagination, dict):
            total = _as_count(pagination.get("total"))
            if total is not None:
                return total
    items = extract_items(payload)
    return len(items) if items is not None else None


def truncate(items: list[Any], limit: int | None) -> list[Any]:
    if limit is None:
        return list(items)
    return list(items[: max(int(limit), 0)])


def jurisdiction_identifier(record: Any) -> str:
    """Pick the identifier out of a jurisdiction lookup record.

    Priority: ``id``, ``jurisdiction``, ``data.jurisdiction``.
    """

    if isinstance(record, dict):
        data = record.get("data")
        candidates = [
            record.get("id"),
            record.get("jurisdiction"),
            data.get("jurisdiction") if isinstance(data, dict) else None,
        ]
        for candidate in candidates:
            if isinstance(candidate, dict):
                candidate = candidate.get("id") or candidate.get("name")
            if candidate not in (None, ""):
                return str(candidate)
    raise InvalidUpstreamData("Could not determine jurisdiction id from lookup")


__all__ = [
    "extract_items",
    "extract_total",
    "jurisdiction_identifier",
    "parse_body",
    "truncate",
]
