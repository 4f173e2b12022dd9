from __future__ import annotations

import re
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from talentflow.errors import InvalidPayloadError

QuestionType = Literal["single", "multi", "numeric", "short", "long"]


def slugify(text: str) -> str:
    return re.sub(r"^-+|-+$", "", re.sub(r"[^a-z0-9]+", "-", str(text or "").lower()))


def validate_payload(model: type[BaseModel], payload: Any) -> BaseModel:
    try:
        return model.model_validate(payload or {})
    except ValidationError as exc:
        raise InvalidPayloadError(
            message=f"invalid {model.__name__} payload",
            errors=[{"loc": list(err["loc"]), "msg": err["msg"]} for err in exc.errors()],
        ) from exc


class JobDraft(BaseModel):
    model_config = ConfigDict(extra="allow")

    title: str | None = None
    slug: str | None = None
    status: Literal["active", "archived"] = "active"
    tags: list[str] = Field(default_factory=list)

    @field_validator("title", "slug", mode="before")
    @classmethod
    def _strip(cls, value: Any) -> str | None:
        if value is None:
            return None
        text = str(value).strip()
        return text or None

    @field_validator("tags", mode="before")
    @classmethod
    def _split_tags(cls, value: Any) -> list[str]:
        if value is None:
            return []
        if isinstance(value, str):
            return [tag.strip() for tag in value.split(",") if tag.strip()]
        return [str(tag) for tag in value]


class Question(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str
    type: QuestionType
    label: str = ""
    required: bool = False
    options: list[str] | None = None
    min: float | None = None
    max: float | None = None
    max_length: int | None = Field(default=None, alias="maxLength")
    correct_index: int | None = Field(default=None, alias="correctIndex")


class Section(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str
    title: str = ""
    questions: list[Question] = Field(default_factory=list)


class AssessmentDocument(BaseModel):
    model_config = ConfigDict(extra="allow", populate_by_name=True)

    job_id: int | None = Field(default=None, alias="jobId")
    sections: list[Section] = Field(default_factory=list)

    def to_row(self, job_id: int) -> dict[str, Any]:
        row = self.model_dump(by_alias=True, exclude_none=True)
        row["jobId"] = job_id
        return row
