"""Normalization of loosely shaped OpenStates records.

Each entity has exactly one constructor here, and each accepted field list is
ordered: the first present, non-empty value wins.

* person email: ``email``, ``emails[0]``, then the first ``contact_details``
  entry whose ``type`` or ``label`` mentions email (``value`` then ``email``)
* person image: ``image``, ``image_url``, ``photo_url``, ``photo``,
  ``thumbnail``
* person role: ``current_role``, then ``roles[0]``
* event key: ``id``, ``identifier``, then the position in the list
* event title: ``title``, ``name``
* event time: ``when``, ``start_time``, ``datetime``, ``start``
* bill title: ``title``, ``other_titles[0]``, ``identifier``, ``"Untitled"``
"""
from __future__ import annotations

import re
from typing import Any, Iterable

from ballot_snapshot.core.schema import (
    BillSummary,
    EventSummary,
    PersonSummary,
    RoleModel,
    SourceLink,
)
from ballot_snapshot.domain.models import LabelRole, Role, StructuredRole, UnknownRole

IMAGE_FIELDS: tuple[str, ...] = ("image", "image_url", "photo_url", "photo", "thumbnail")
EVENT_TITLE_FIELDS: tuple[str, ...] = ("title", "name")
EVENT_WHEN_FIELDS: tuple[str, ...] = ("when", "start_time", "datetime", "start")
EVENT_KEY_FIELDS: tuple[str, ...] = ("id", "identifier")

_EMAIL_PATTERN = re.compile(r"email", re.IGNORECASE)


def first_present(record: Any, fields: Iterable[str]) -> Any:
    if not isinstance(record, dict):
        return None
    for name in fields:
        value = record.get(name)
        if value not in (None, ""):
            return value
    return None


def _text(value: Any) -> str | None:
    if value is None:
        return None
    if isinstance(value, str):
        stripped = value.strip()
        return stripped or None
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return str(value)
    return None


# ----------------------------------------------------------------------
# people
# ----------------------------------------------------------------------
def person_role(record: Any) -> Role:
    if not isinstance(record, dict):
        return UnknownRole()
    raw = record.get("current_role")
    if raw in (None, "", {}):
        roles = record.get("roles")
        raw = roles[0] if isinstance(roles, list) and roles else None

    if isinstance(raw, str):
        return LabelRole(raw.strip()) if raw.strip() else UnknownRole()
    if isinstance(raw, dict):
        title = _text(raw.get("title")) or _text(raw.get("label"))
        org = _text(raw.get("org_classification")) or _text(raw.get("org"))
        district = _text(raw.get("district"))
        if title is None and org is None and district is None:
            return UnknownRole()
        return StructuredRole(title=title, org=org, district=district)
    return UnknownRole()


def person_email(record: Any) -> str | None:
    if not isinstance(record, dict):
        return None
    direct = _text(record.get("email"))
    if direct:
        return direct
    emails = record.get("emails")
    if isinstance(emails, list) and emails:
        listed = _text(emails[0])
        if listed:
            return listed
    details = record.get("contact_details")
    if isinstance(details, list):
        for detail in details:
            if not isinstance(detail, dict):
                continue
            kind = str(detail.get("type") or "")
            label = str(detail.get("label") or "")
            if not (_EMAIL_PATTERN.search(kind) or label == "email"):
                continue
            value = _text(detail.get("value")) or _text(detail.get("email"))
            if value:
                return value
    return None


def person_image(record: Any) -> str | None:
    return _text(first_present(record, IMAGE_FIELDS))


def _role_model(role: Role) -> RoleModel:
    if isinstance(role, LabelRole):
        return RoleModel(kind="label", text=role.text)
    if isinstance(role, StructuredRole):
        return RoleModel(kind="structured", title=role.title, org=role.org, district=role.district)
    return RoleModel()


def summarise_person(record: dict[str, Any]) -> PersonSummary:
    role = person_role(record)
    name = _text(record.get("name")) or "Unknown"
    return PersonSummary(
        id=_text(record.get("id")),
        name=name,
        party=_text(record.get("party")),
        role=_role_model(role),
        role_text=role.describe(),
        district=role.district if isinstance(role, StructuredRole) else None,
        email=person_email(record),
        image_url=person_image(record),
    )


# ----------------------------------------------------------------------
# events
# ----------------------------------------------------------------------
def event_location(record: Any) -> str | None:
    if not isinstance(record, dict):
        return None
    location = record.get("location")
    if isinstance(location, str):
        return _text(location)
    if isinstance(location, dict):
        return _text(location.get("name"))
    return None


def event_when(record: Any) -> Any:
    return first_present(record, EVENT_WHEN_FIELDS)


def summarise_event(record: dict[str, Any], position: int = 0) -> EventSummary:
    key = _text(first_present(record, EVENT_KEY_FIELDS)) or f"ev-{position}"
    classification = record.get("classification")
    return EventSummary(
        key=key,
        title=_text(first_present(record, EVENT_TITLE_FIELDS)),
        location=event_location(record),
        classification=_text(classification),
        when=_text(event_when(record)),
        start_date=_text(record.get("start_date")),
        end_date=_text(record.get("end_date")),
        all_day=bool(record.get("all_day") or False),
        status=_text(record.get("status")),
        deleted=bool(record.get("deleted") or False),
    )


# ----------------------------------------------------------------------
# bills
# ----------------------------------------------------------------------
def bill_title(record: Any) -> str:
    if isinstance(record, dict):
        title = _text(record.get("title"))
        if title:
            return title
        others = record.get("other_titles")
        if isinstance(others, list) and others:
            other = others[0]
            if isinstance(other, dict):
                other = other.get("title")
            other_text = _text(other)
            if other_text:
                return other_text
        identifier = _text(record.get("identifier"))
        if identifier:
            return identifier
    return "Untitled"


def _bill_sources(record: dict[str, Any]) -> list[SourceLink]:
    sources = record.get("sources")
    if not isinstance(sources, list):
        return []
    links: list[SourceLink] = []
    for source in sources:
        if isinstance(source, dict):
            links.append(SourceLink(url=_text(source.get("url")), title=_text(source.get("title") or source.get("note"))))
        elif isinstance(source, str):
            links.append(SourceLink(url=source))
    return links


def summarise_bill(record: dict[str, Any], position: int = 0) -> BillSummary:
    classification = record.get("classification")
    if isinstance(classification, str):
        classes = [classification]
    elif isinstance(classification, list):
        classes = [str(item) for item in classification if item not in (None, "")]
    else:
        classes = []
    votes = record.get("votes")
    return BillSummary(
        key=_text(first_present(record, EVENT_KEY_FIELDS)) or f"bill-{position}",
        identifier=_text(record.get("identifier")),
        title=bill_title(record),
        classification=classes,
        updated_at=_text(record.get("updated_at")),
        sources=_bill_sources(record),
        vote_count=len(votes) if isinstance(votes, list) else 0,
    )
