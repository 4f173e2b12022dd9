"""List semantics shared by the network path and the local fallback.

Both paths build the same query object, so filtering, ordering and page
slicing are defined exactly once.
"""

from __future__ import annotations

import math
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from talentflow.errors import InvalidIdError

CANONICAL_STAGES: tuple[str, ...] = ("applied", "screen", "tech", "offer", "hired", "rejected")
JOB_SORT_KEYS: tuple[str, ...] = ("order", "title", "status")
JOB_SEARCH_FIELDS: tuple[str, ...] = ("title", "slug", "company", "role")
CANDIDATE_SEARCH_FIELDS: tuple[str, ...] = ("name", "email")

DEFAULT_JOB_PAGE_SIZE = 12
DEFAULT_CANDIDATE_PAGE_SIZE = 50


def normalize_stage(value: Any) -> str:
    lowered = str(value if value is not None else "").strip().lower()
    return lowered if lowered in CANONICAL_STAGES else "applied"


def coerce_id(value: Any, *, entity: str) -> int:
    if isinstance(value, bool) or value is None:
        raise InvalidIdError(entity=entity, raw=value)
    if isinstance(value, int):
        return value
    if isinstance(value, float):
        if math.isfinite(value) and value.is_integer():
            return int(value)
        raise InvalidIdError(entity=entity, raw=value)
    text = str(value).strip()
    try:
        number = float(text)
    except ValueError:
        raise InvalidIdError(entity=entity, raw=value) from None
    if not math.isfinite(number) or not number.is_integer():
        raise InvalidIdError(entity=entity, raw=value)
    return int(number)


def _coerce_positive_int(value: Any, default: int) -> int:
    if value is None or value == "":
        return default
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    return number if number >= 1 else default


class _ListQuery(BaseModel):
    model_config = ConfigDict(populate_by_name=True, frozen=True)

    search: str = ""
    page: int = 1
    page_size: int = Field(default=DEFAULT_JOB_PAGE_SIZE, alias="pageSize")

    @field_validator("search", mode="before")
    @classmethod
    def _strip_search(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("page", mode="before")
    @classmethod
    def _clamp_page(cls, value: Any) -> int:
        return _coerce_positive_int(value, 1)

    @property
    def needle(self) -> str:
        return self.search.lower()

    def _base_params(self) -> dict[str, Any]:
        return {"search": self.search, "page": self.page, "pageSize": self.page_size}


class JobListQuery(_ListQuery):
    status: str = ""
    sort: str = "order"

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: Any) -> int:
        return _coerce_positive_int(value, DEFAULT_JOB_PAGE_SIZE)

    @field_validator("status", mode="before")
    @classmethod
    def _normalize_status(cls, value: Any) -> str:
        return str(value or "").strip()

    @field_validator("sort", mode="before")
    @classmethod
    def _normalize_sort(cls, value: Any) -> str:
        key = str(value or "").strip().lower()
        return key if key in JOB_SORT_KEYS else "order"

    def to_params(self) -> dict[str, Any]:
        return {**self._base_params(), "status": self.status, "sort": self.sort}


class CandidateListQuery(_ListQuery):
    stage: str = ""
    page_size: int = Field(default=DEFAULT_CANDIDATE_PAGE_SIZE, alias="pageSize")

    @field_validator("page_size", mode="before")
    @classmethod
    def _clamp_page_size(cls, value: Any) -> int:
        return _coerce_positive_int(value, DEFAULT_CANDIDATE_PAGE_SIZE)

    @field_validator("stage", mode="before")
    @classmethod
    def _normalize_stage(cls, value: Any) -> str:
        return normalize_stage(value) if value else ""

    def to_params(self) -> dict[str, Any]:
        return {**self._base_params(), "stage": self.stage}


def _text(row: dict[str, Any], field: str) -> str:
    value = row.get(field)
    return str(value).lower() if value is not None else ""


def _numeric_order(row: dict[str, Any]) -> float:
    value = row.get("order")
    if isinstance(value, (int, float)) and not isinstance(value, bool):
        return value
    return 0


def filter_jobs(rows: list[dict[str, Any]], query: JobListQuery) -> list[dict[str, Any]]:
    needle = query.needle
    if needle:
        rows = [row for row in rows if any(needle in _text(row, f) for f in JOB_SEARCH_FIELDS)]
    if query.status:
        rows = [row for row in rows if row.get("status") == query.status]
    return rows


def sort_jobs(rows: list[dict[str, Any]], query: JobListQuery) -> list[dict[str, Any]]:
    if query.sort == "title":
        return sorted(rows, key=lambda row: str(row.get("title") or "").casefold())
    if query.sort == "status":
        return sorted(rows, key=lambda row: str(row.get("status") or "").casefold())
    return sorted(rows, key=_numeric_order)


def filter_candidates(rows: list[dict[str, Any]], query: CandidateListQuery) -> list[dict[str, Any]]:
    needle = query.needle
    if needle:
        rows = [row for row in rows if any(needle in _text(row, f) for f in CANDIDATE_SEARCH_FIELDS)]
    if query.stage:
        rows = [row for row in rows if _text(row, "stage") == query.stage]
    return rows


def sort_candidates(rows: list[dict[str, Any]]) -> list[dict[str, Any]]:
    return sorted(rows, key=lambda row: str(row.get("name") or "").casefold())


def paginate(rows: list[dict[str, Any]], *, page: int, page_size: int) -> dict[str, Any]:
    start = (page - 1) * page_size
    return {
        "items": rows[start : start + page_size],
        "total": len(rows),
        "page": page,
        "pageSize": page_size,
    }


def list_jobs_envelope(rows: list[dict[str, Any]], query: JobListQuery) -> dict[str, Any]:
    ordered = sort_jobs(filter_jobs(rows, query), query)
    return paginate(ordered, page=query.page, page_size=query.page_size)


def list_candidates_envelope(rows: list[dict[str, Any]], query: CandidateListQuery) -> dict[str, Any]:
    ordered = sort_candidates(filter_candidates(rows, query))
    return paginate(ordered, page=query.page, page_size=query.page_size)
