from __future__ import annotations

import logging
import random
import uuid
from typing import Any

from talentflow.errors import NotFoundError, TalentflowError
from talentflow.query import CandidateListQuery, list_candidates_envelope, normalize_stage
from talentflow.results import AccessPolicy, Result
from talentflow.services.base import EntityService

logger = logging.getLogger(__name__)

TABLE = "candidates"
TIMELINE_TABLE = "timelines"
JOBS_TABLE = "jobs"

# Keys carried on a stage patch for the history entry only.
_TIMELINE_META_FIELDS = ("by", "note")


def _split_skills(raw: Any) -> list[str]:
    if isinstance(raw, (list, tuple)):
        return [str(skill) for skill in raw]
    return [part.strip() for part in str(raw or "").split(",") if part.strip()]


def coerce_candidate_payload(raw: dict[str, Any] | None, *, rng: random.Random) -> dict[str, Any]:
    """Fill in the profile fields a local create needs; the remote service does this itself."""
    raw = raw or {}
    job_id = raw.get("jobId")
    try:
        job_id = int(job_id) if job_id is not None and not isinstance(job_id, bool) else None
    except (TypeError, ValueError):
        job_id = None
    skills = _split_skills(raw.get("skills"))
    doc = {
        **{k: v for k, v in raw.items() if k not in _TIMELINE_META_FIELDS and k != "id"},
        "name": str(raw.get("name") or "New Candidate").strip(),
        "email": str(raw.get("email") or f"user-{uuid.uuid4().hex[:10]}@mail.com").strip().lower(),
        "stage": normalize_stage(raw.get("stage")),
        "jobId": job_id,
        "phone": raw.get("phone")
        or f"({rng.randint(100, 899)}) {rng.randint(100, 999)}-{rng.randint(1000, 9999)}",
        "location": raw.get("location") or "Remote",
        "position": raw.get("position") or "Applicant",
        "experience": raw.get("experience") or f"{rng.randint(1, 9)} years",
        "skills": skills or ["Communication", "Teamwork"],
        "education": raw.get("education") or "BS (any)",
        "status": raw.get("status") or "New",
        "lastContact": raw.get("lastContact") or "Today",
        "notes": raw.get("notes") or "—",
    }
    return doc


class CandidatesService(EntityService):
    entity = "candidate"

    def __init__(self, *, rng: random.Random | None = None, **kwargs: Any) -> None:
        super().__init__(**kwargs)
        self.rng = rng or random.Random()

    async def list_candidates(
        self,
        *,
        search: str = "",
        stage: str = "",
        page: int = 1,
        page_size: int = 50,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        query = CandidateListQuery(search=search, stage=stage, page=page, page_size=page_size)

        async def _remote() -> Any:
            return await self.gateway.fetch_json("/candidates", params=query.to_params())

        def _local() -> dict[str, Any]:
            return list_candidates_envelope(self.local_store.all(TABLE), query)

        result = await self._execute(operation="list", remote=_remote, local=_local, policy=policy)
        return self._overlay_list(result)

    async def get_candidate(
        self,
        candidate_id: Any,
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(candidate_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/candidates/{key}")

        result = await self._execute(
            operation="get",
            remote=_remote,
            local=lambda: self._require_local(key),
            policy=policy,
        )
        return self._overlay_one(result, key)

    async def get_timeline(
        self,
        candidate_id: Any,
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(candidate_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/candidates/{key}/timeline")

        def _local() -> dict[str, Any]:
            items = sorted(self.local_store.where(TIMELINE_TABLE, "candidateId", key), key=lambda e: e.get("ts") or 0)
            return {"candidateId": key, "items": items}

        return await self._execute(operation="timeline", remote=_remote, local=_local, policy=policy)

    async def create_candidate(
        self,
        payload: dict[str, Any] | None = None,
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        body = dict(payload or {})

        async def _remote() -> Any:
            return await self.gateway.fetch_json("/candidates", method="POST", body=body)

        return await self._execute(
            operation="create",
            remote=_remote,
            local=lambda: self._create_local(body),
            policy=policy,
        )

    async def patch_candidate(
        self,
        candidate_id: Any,
        changes: dict[str, Any],
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(candidate_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/candidates/{key}", method="PATCH", body=changes)

        return await self._execute(
            operation="patch",
            remote=_remote,
            local=lambda: self._patch_local(key, changes),
            policy=policy,
        )

    async def move_stage(
        self,
        candidate_id: Any,
        stage: str,
        *,
        by: str = "System",
        note: str | None = None,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        next_stage = normalize_stage(stage)
        return await self.patch_candidate(
            candidate_id,
            {"stage": next_stage, "by": by, "note": note or f"Moved to {next_stage}"},
            policy=policy,
        )

    def _require_local(self, key: int) -> dict[str, Any]:
        row = self.local_store.get(TABLE, key)
        if row is None:
            raise NotFoundError(entity=self.entity, key=key)
        return row

    def _append_timeline(self, *, candidate_id: int, stage: str, by: str, note: str) -> Any:
        return self.local_store.add(
            TIMELINE_TABLE,
            {"candidateId": candidate_id, "stage": stage, "ts": self._now_ms(), "by": by, "note": note},
        )

    def _create_local(self, body: dict[str, Any]) -> dict[str, Any]:
        doc = coerce_candidate_payload(body, rng=self.rng)
        if doc["jobId"] is None:
            known_job_ids = self.local_store.primary_keys(JOBS_TABLE)
            if known_job_ids:
                doc["jobId"] = self.rng.choice(known_job_ids)
        new_id = self.local_store.add(TABLE, doc)
        self._append_timeline(
            candidate_id=new_id,
            stage=doc["stage"],
            by="System",
            note=f"Stage set to {doc['stage']}",
        )
        logger.info("candidate_created_locally id=%s job_id=%s", new_id, doc["jobId"])
        return self._require_local(new_id)

    def _patch_local(self, key: int, changes: dict[str, Any]) -> dict[str, Any]:
        existing = self._require_local(key)
        patch = {k: v for k, v in changes.items() if k not in _TIMELINE_META_FIELDS and k != "id"}

        requested_stage = patch.pop("stage", None)
        if requested_stage:
            next_stage = normalize_stage(requested_stage)
            previous_stage = normalize_stage(existing.get("stage"))
            if next_stage != previous_stage:
                self._append_timeline(
                    candidate_id=key,
                    stage=next_stage,
                    by=changes.get("by") or "System",
                    note=changes.get("note") or f"Stage set to {next_stage}",
                )
                patch["stage"] = next_stage
                logger.info("candidate_stage_changed_locally id=%s %s->%s", key, previous_stage, next_stage)

        if patch:
            self.local_store.update(TABLE, key, patch)
        return self._require_local(key)
