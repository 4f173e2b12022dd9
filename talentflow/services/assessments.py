from __future__ import annotations

from typing import Any

from talentflow.errors import TalentflowError
from talentflow.results import AccessPolicy, Result
from talentflow.schemas import AssessmentDocument, validate_payload
from talentflow.services.base import EntityService

TABLE = "assessments"


class AssessmentsService(EntityService):
    entity = "assessment"

    async def get_assessment(
        self,
        job_id: Any,
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(job_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/assessments/{key}")

        def _local() -> dict[str, Any]:
            # A job without a stored document still has an (empty) assessment.
            return self.local_store.get(TABLE, key) or {"jobId": key, "sections": []}

        return await self._execute(operation="get", remote=_remote, local=_local, policy=policy)

    async def save_assessment(
        self,
        job_id: Any,
        document: dict[str, Any],
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(job_id)
            validated = validate_payload(AssessmentDocument, document)
        except TalentflowError as exc:
            return Result.failure(exc)
        row = validated.to_row(key)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/assessments/{key}", method="PUT", body=row)

        def _local() -> dict[str, Any]:
            self.local_store.put(TABLE, row)
            return dict(row)

        return await self._execute(operation="save", remote=_remote, local=_local, policy=policy)
