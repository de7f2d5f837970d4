from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field


class RoleModel(BaseModel):
    kind: Literal["unknown", "label", "structured"] = "unknown"
    text: str | None = None
    title: str | None = None
    org: str | None = None
    district: str | None = None


class PersonSummary(BaseModel):
    id: str | None = None
    name: str
    party: str | None = None
    role: RoleModel = Field(default_factory=RoleModel)
    role_text: str | None = None
    district: str | None = None
    email: str | None = None
    image_url: str | None = None


class EventSummary(BaseModel):
    key: str
    title: str | None = None
    location: str | None = None
    classification: str | None = None
    when: str | None = None
    start_date: str | None = None
    end_date: str | None = None
    all_day: bool = False
    status: str | None = None
    deleted: bool = False


class SourceLink(BaseModel):
    url: str | None = None
    title: str | None = None


class BillSummary(BaseModel):
    key: str
    identifier: str | None = None
    title: str
    classification: list[str] = Field(default_factory=list)
    updated_at: str | None = None
    sources: list[SourceLink] = Field(default_factory=list)
    vote_count: int = 0
