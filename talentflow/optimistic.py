"""Instant in-memory state changes with rollback when the write fails."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from typing import Any

from talentflow.errors import NotFoundError
from talentflow.results import Result

logger = logging.getLogger(__name__)

_MISSING = object()


def _find(rows: list[dict[str, Any]], entity_id: Any, id_field: str) -> dict[str, Any]:
    for row in rows:
        if row.get(id_field) == entity_id:
            return row
    raise NotFoundError(entity="row", key=entity_id)


def _restore(row: dict[str, Any], field: str, previous: Any) -> None:
    if previous is _MISSING:
        row.pop(field, None)
    else:
        row[field] = previous


async def apply_optimistic(
    rows: list[dict[str, Any]],
    entity_id: Any,
    field: str,
    value: Any,
    write: Callable[[], Awaitable[Result[Any]]],
    *,
    id_field: str = "id",
) -> Result[Any]:
    row = _find(rows, entity_id, id_field)
    previous = row.get(field, _MISSING)
    row[field] = value
    try:
        outcome = await write()
    except BaseException:
        _restore(row, field, previous)
        raise
    if not outcome.ok:
        logger.info("optimistic_rollback id=%s field=%s error=%s", entity_id, field, outcome.error)
        _restore(row, field, previous)
    return outcome


async def move_candidate_stage(
    candidates: list[dict[str, Any]],
    candidate_id: Any,
    stage: str,
    service: Any,
) -> Result[Any]:
    return await apply_optimistic(
        candidates,
        candidate_id,
        "stage",
        stage,
        lambda: service.move_stage(candidate_id, stage, by="Pipeline", note=f"Moved to {stage}"),
    )
