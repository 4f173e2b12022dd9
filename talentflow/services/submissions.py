from __future__ import annotations

import logging
from typing import Any

from talentflow.errors import TalentflowError
from talentflow.results import AccessPolicy, Result, Source
from talentflow.services.base import EntityService

logger = logging.getLogger(__name__)

TABLE = "submissions"
LOCAL_ACK = "local"


class SubmissionsService(EntityService):
    entity = "submission"

    async def submit(
        self,
        job_id: Any,
        *,
        candidate_id: Any = None,
        data: Any = None,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        """Deliver a completed assessment; always acknowledged, locally if need be."""
        try:
            job_key = self._coerce_id(job_id)
            candidate_key = self._coerce_id(candidate_id) if candidate_id is not None else None
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(
                f"/assessments/{job_key}/submit",
                method="POST",
                body={"candidateId": candidate_key, "data": data},
            )

        def _local() -> dict[str, Any]:
            local_id = self.local_store.add(
                TABLE,
                {
                    "jobId": job_key,
                    "candidateId": candidate_key,
                    "submittedAt": self._now_ms(),
                    "data": data,
                    "ack": LOCAL_ACK,
                },
            )
            logger.info("submission_recorded_locally id=%s job_id=%s", local_id, job_key)
            return {"id": local_id, "ok": True, "ack": LOCAL_ACK}

        return await self._execute(operation="submit", remote=_remote, local=_local, policy=policy)

    def list_submissions(self, *, job_id: Any = None, candidate_id: Any = None) -> Result[list[dict[str, Any]]]:
        """Local-only; the remote contract has no submissions listing."""
        try:
            job_key = self._coerce_id(job_id) if job_id is not None else None
            candidate_key = self._coerce_id(candidate_id) if candidate_id is not None else None
        except TalentflowError as exc:
            return Result.failure(exc)
        if job_key is not None:
            rows = self.local_store.where(TABLE, "jobId", job_key)
        else:
            rows = self.local_store.all(TABLE)
        if candidate_key is not None:
            rows = [row for row in rows if row.get("candidateId") == candidate_key]
        return Result.success(rows, source=Source.LOCAL)
