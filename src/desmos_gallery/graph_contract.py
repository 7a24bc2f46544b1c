from __future__ import annotations

import time
from datetime import datetime, timezone
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ErrorResponse(BaseModel):
    error: str
    message: str
    details: dict[str, Any] | None = None


class GraphRecord(BaseModel):
    """One saved graph. Caller-supplied extra fields are stored verbatim."""

    model_config = ConfigDict(extra="allow")

    id: str
    title: str
    formula: str
    type: str
    author: str = ""
    lineColor: str | None = None
    tags: list[str] = Field(default_factory=list)
    createdAt: str


class GraphCreateRequest(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str | None = None
    title: str
    formula: str
    type: Literal["2D", "3D"]
    author: str = ""
    lineColor: str | None = None
    tags: list[str] = Field(default_factory=list)
    createdAt: str | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, value: str) -> str:
        text = str(value).strip()
        if not text:
            raise ValueError("title must not be empty.")
        return text

    @field_validator("formula")
    @classmethod
    def validate_formula(cls, value: str) -> str:
        if not str(value).strip():
            raise ValueError("formula must not be empty.")
        return value

    @field_validator("id", "createdAt")
    @classmethod
    def blank_to_none(cls, value: str | None) -> str | None:
        if value is None or not str(value).strip():
            return None
        return value


class GraphUpdateRequest(BaseModel):
    """Partial update. Only fields present in the payload are applied."""

    model_config = ConfigDict(extra="allow")

    title: str | None = None
    formula: str | None = None
    type: str | None = None
    author: str | None = None
    lineColor: str | None = None
    tags: list[str] | None = None
    createdAt: str | None = None

    def patch_fields(self) -> dict[str, Any]:
        patch = self.model_dump(exclude_unset=True, exclude_none=True)
        patch.pop("id", None)
        return patch


class DeleteResponse(BaseModel):
    id: str
    deleted: bool
    message: str


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def utc_timestamp(moment: datetime | None = None) -> str:
    moment = moment or utcnow()
    return moment.astimezone(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def generate_graph_id() -> str:
    return str(time.time_ns() // 1_000_000)


def validation_error_details(errors: list[dict[str, Any]]) -> dict[str, Any]:
    return {
        "errors": [
            {
                "loc": [str(part) for part in error.get("loc", ())],
                "msg": str(error.get("msg", "")),
                "type": str(error.get("type", "")),
            }
            for error in errors
        ]
    }
