from __future__ import annotations

import asyncio

import pytest

from talentflow.errors import NotFoundError, RemoteUnavailableError
from talentflow.optimistic import apply_optimistic, move_candidate_stage
from talentflow.results import AccessPolicy, Result, Source
from talentflow.services import CandidatesService


def test_failed_move_rolls_back_to_previous_stage(offline_gateway, local_store):
    service = CandidatesService(gateway=offline_gateway, local_store=local_store, policy=AccessPolicy.NETWORK_ONLY)
    board = [{"id": 1, "name": "Alice Chen", "stage": "screen"}, {"id": 2, "name": "bob Rodriguez", "stage": "applied"}]

    result = asyncio.run(move_candidate_stage(board, 1, "tech", service))

    assert isinstance(result.error, RemoteUnavailableError)
    assert board[0]["stage"] == "screen"
    assert board[1]["stage"] == "applied"


def test_fallback_move_keeps_the_new_stage(offline_gateway, local_store):
    service = CandidatesService(gateway=offline_gateway, local_store=local_store)
    board = [{"id": 1, "name": "Alice Chen", "stage": "screen"}]

    result = asyncio.run(move_candidate_stage(board, 1, "tech", service))

    assert result.ok
    assert result.source is Source.LOCAL
    assert board[0]["stage"] == "tech"
    latest = local_store.where("timelines", "candidateId", 1)[-1]
    assert latest["by"] == "Pipeline"
    assert latest["note"] == "Moved to tech"


def test_new_value_is_visible_while_the_write_is_in_flight():
    rows = [{"id": 7, "status": "active"}]
    seen: list[str] = []

    async def write() -> Result[dict]:
        seen.append(rows[0]["status"])
        return Result.success({"id": 7}, source=Source.REMOTE)

    asyncio.run(apply_optimistic(rows, 7, "status", "archived", write))

    assert seen == ["archived"]
    assert rows[0]["status"] == "archived"


def test_exception_rolls_back_and_propagates():
    rows = [{"id": 7, "status": "active"}]

    async def write() -> Result[dict]:
        raise RuntimeError("lost connection mid-flight")

    with pytest.raises(RuntimeError):
        asyncio.run(apply_optimistic(rows, 7, "status", "archived", write))

    assert rows[0] == {"id": 7, "status": "active"}


def test_rollback_removes_a_field_that_was_absent():
    rows = [{"slug": "job-3", "title": "Analyst"}]

    async def write() -> Result[dict]:
        return Result.failure(NotFoundError(entity="job", key=3))

    result = asyncio.run(apply_optimistic(rows, "job-3", "status", "archived", write, id_field="slug"))

    assert not result.ok
    assert rows[0] == {"slug": "job-3", "title": "Analyst"}


def test_unknown_row_is_rejected_before_the_write():
    calls: list[int] = []

    async def write() -> Result[dict]:
        calls.append(1)
        return Result.success({}, source=Source.REMOTE)

    with pytest.raises(NotFoundError):
        asyncio.run(apply_optimistic([{"id": 1}], 2, "stage", "tech", write))
    assert calls == []
