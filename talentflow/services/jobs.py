from __future__ import annotations

import logging
from typing import Any

from talentflow.errors import ConflictError, NotFoundError, TalentflowError
from talentflow.query import JobListQuery, list_jobs_envelope
from talentflow.results import AccessPolicy, Result, Source
from talentflow.schemas import JobDraft, slugify, validate_payload
from talentflow.services.base import EntityService

logger = logging.getLogger(__name__)

TABLE = "jobs"
_ALL_ROWS = 100_000


class JobsService(EntityService):
    entity = "job"

    async def list_jobs(
        self,
        *,
        search: str = "",
        status: str = "",
        page: int = 1,
        page_size: int = 12,
        sort: str = "order",
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        query = JobListQuery(search=search, status=status, page=page, page_size=page_size, sort=sort)

        async def _remote() -> Any:
            return await self.gateway.fetch_json("/jobs", params=query.to_params())

        def _local() -> dict[str, Any]:
            return list_jobs_envelope(self.local_store.all(TABLE), query)

        result = await self._execute(operation="list", remote=_remote, local=_local, policy=policy)
        return self._overlay_list(result, rerank=query.sort == "order")

    async def get_job(self, job_id: Any, *, policy: AccessPolicy | str | None = None) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(job_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/jobs/{key}")

        def _local() -> dict[str, Any]:
            row = self.local_store.get(TABLE, key)
            if row is None:
                raise NotFoundError(entity=self.entity, key=key)
            return row

        result = await self._execute(operation="get", remote=_remote, local=_local, policy=policy)
        return self._overlay_one(result, key)

    async def is_slug_available(
        self,
        slug: str,
        *,
        exclude_id: Any = None,
        policy: AccessPolicy | str | None = None,
    ) -> Result[bool]:
        """Check ``slug`` against every job visible on whichever path answers."""
        normalized = slugify(slug)
        if not normalized:
            return Result.success(False, source=Source.LOCAL)
        if exclude_id is not None:
            try:
                exclude_id = self._coerce_id(exclude_id)
            except TalentflowError as exc:
                return Result.failure(exc)
        listed = await self.list_jobs(page=1, page_size=_ALL_ROWS, policy=policy)
        if not listed.ok:
            return listed
        taken = any(
            row.get("slug") == normalized and row.get("id") != exclude_id for row in listed.value["items"]
        )
        return Result.success(not taken, source=listed.source)

    async def create_job(
        self,
        payload: dict[str, Any] | None = None,
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            draft = validate_payload(JobDraft, payload)
        except TalentflowError as exc:
            return Result.failure(exc)
        body = draft.model_dump(exclude_none=True)
        # Identity and rank are assigned by whichever side stores the job.
        body.pop("id", None)
        body.pop("order", None)

        async def _remote() -> Any:
            return await self.gateway.fetch_json("/jobs", method="POST", body=body)

        def _local() -> dict[str, Any]:
            return self._create_local(body)

        return await self._execute(operation="create", remote=_remote, local=_local, policy=policy)

    async def patch_job(
        self,
        job_id: Any,
        changes: dict[str, Any],
        *,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(job_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(f"/jobs/{key}", method="PATCH", body=changes)

        def _local() -> dict[str, Any]:
            return self._patch_local(key, dict(changes))

        return await self._execute(operation="patch", remote=_remote, local=_local, policy=policy)

    async def reorder_job(
        self,
        job_id: Any,
        *,
        from_order: int,
        to_order: int,
        policy: AccessPolicy | str | None = None,
    ) -> Result[dict[str, Any]]:
        try:
            key = self._coerce_id(job_id)
        except TalentflowError as exc:
            return Result.failure(exc)

        async def _remote() -> Any:
            return await self.gateway.fetch_json(
                f"/jobs/{key}/reorder",
                method="PATCH",
                body={"fromOrder": from_order, "toOrder": to_order},
            )

        def _local() -> dict[str, Any]:
            return {"ok": self._move_local(key, to_order)}

        return await self._execute(operation="reorder", remote=_remote, local=_local, policy=policy)

    def _next_rank(self) -> int:
        ranks = [row["order"] for row in self.local_store.all(TABLE) if isinstance(row.get("order"), int)]
        return max(ranks, default=-1) + 1

    def _unique_slug(self, base: str) -> str:
        taken = {row.get("slug") for row in self.local_store.all(TABLE)}
        if base not in taken:
            return base
        suffix = 2
        while f"{base}-{suffix}" in taken:
            suffix += 1
        return f"{base}-{suffix}"

    def _create_local(self, body: dict[str, Any]) -> dict[str, Any]:
        title = body.get("title") or "Untitled"
        explicit_slug = slugify(body.get("slug") or "")
        if explicit_slug:
            if self.local_store.where(TABLE, "slug", explicit_slug):
                raise ConflictError(message=f"slug already in use: {explicit_slug}")
            slug = explicit_slug
        else:
            slug = self._unique_slug(slugify(title) or f"job-{self._now_ms()}")

        record = {
            **body,
            "title": title,
            "slug": slug,
            "status": body.get("status", "active"),
            "tags": list(body.get("tags", [])),
            "order": self._next_rank(),
        }
        new_id = self.local_store.add(TABLE, record)
        self._resequence(self.local_store.order_by(TABLE, "order"))
        created = self.local_store.get(TABLE, new_id)
        logger.info("job_created_locally id=%s slug=%s order=%s", new_id, slug, created["order"])
        return created

    def _patch_local(self, key: int, changes: dict[str, Any]) -> dict[str, Any]:
        if self.local_store.get(TABLE, key) is None:
            raise NotFoundError(entity=self.entity, key=key)
        target_order = changes.pop("order", None)
        changes.pop("id", None)
        if "slug" in changes:
            slug = slugify(changes["slug"])
            clash = [row for row in self.local_store.where(TABLE, "slug", slug) if row.get("id") != key]
            if not slug or clash:
                raise ConflictError(message=f"slug already in use: {slug}")
            changes["slug"] = slug
        if changes:
            self.local_store.update(TABLE, key, changes)
        if isinstance(target_order, int) and not isinstance(target_order, bool):
            self._move_local(key, target_order)
        updated = self.local_store.get(TABLE, key)
        if updated is None:
            raise NotFoundError(entity=self.entity, key=key)
        return updated

    def _move_local(self, key: int, to_order: int) -> bool:
        ordered = self.local_store.order_by(TABLE, "order")
        source_index = next((i for i, row in enumerate(ordered) if row.get("id") == key), -1)
        target_index = next((i for i, row in enumerate(ordered) if row.get("order") == to_order), -1)
        if source_index < 0 or target_index < 0:
            return False
        if source_index != target_index:
            moved = ordered.pop(source_index)
            ordered.insert(target_index, moved)
        self._resequence(ordered)
        return True

    def _resequence(self, ordered: list[dict[str, Any]]) -> None:
        """Rewrite every rank to its list index so ``order`` stays a dense 0..n-1 sequence."""
        for index, row in enumerate(ordered):
            if row.get("order") != index:
                self.local_store.update(TABLE, row["id"], {"order": index})
