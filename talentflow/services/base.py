from __future__ import annotations

import logging
import time
from collections.abc import Awaitable, Callable
from typing import Any

from talentflow.errors import NetworkFailure, NotFoundError, TalentflowError
from talentflow.gateway import RemoteGateway
from talentflow.local_store import LocalStore
from talentflow.overlay import SessionOverlayStore
from talentflow.query import coerce_id
from talentflow.results import AccessPolicy, Result, Source

logger = logging.getLogger(__name__)


class EntityService:
    """Network-first, local-fallback executor shared by every entity service."""

    entity = "entity"

    def __init__(
        self,
        *,
        gateway: RemoteGateway,
        local_store: LocalStore,
        overlay: SessionOverlayStore | None = None,
        policy: AccessPolicy | str = AccessPolicy.NETWORK_FIRST,
    ) -> None:
        self.gateway = gateway
        self.local_store = local_store
        self.overlay = overlay
        self.policy = AccessPolicy.parse(policy)

    @staticmethod
    def _now_ms() -> int:
        return int(time.time() * 1000)

    def _coerce_id(self, value: Any) -> int:
        return coerce_id(value, entity=self.entity)

    async def _execute(
        self,
        *,
        operation: str,
        remote: Callable[[], Awaitable[Any]],
        local: Callable[[], Any],
        policy: AccessPolicy | str | None = None,
    ) -> Result[Any]:
        effective = AccessPolicy.parse(policy) if policy is not None else self.policy
        if effective is not AccessPolicy.LOCAL_ONLY:
            try:
                value = await remote()
            except NetworkFailure as exc:
                if effective is AccessPolicy.NETWORK_ONLY:
                    return Result.failure(exc, source=Source.REMOTE)
                logger.warning(
                    "%s_%s remote failed (%s: %s), falling back to local store",
                    self.entity,
                    operation,
                    exc.code,
                    exc.message,
                )
            else:
                return Result.success(value, source=Source.REMOTE)
        try:
            value = local()
        except TalentflowError as exc:
            return Result.failure(exc, source=Source.LOCAL)
        return Result.success(value, source=Source.LOCAL)

    def _overlay_list(self, result: Result[Any], *, rerank: bool = False) -> Result[Any]:
        if self.overlay is None or not result.ok or not isinstance(result.value, dict):
            return result
        items = result.value.get("items")
        if not isinstance(items, list):
            return result
        envelope = {**result.value, "items": self.overlay.apply(items, rerank=rerank)}
        return Result.success(envelope, source=result.source)

    def _overlay_one(self, result: Result[Any], key: Any) -> Result[Any]:
        if self.overlay is None or not result.ok or not isinstance(result.value, dict):
            return result
        merged = self.overlay.apply_one(result.value)
        if merged is None:
            return Result.failure(NotFoundError(entity=self.entity, key=key), source=result.source)
        return Result.success(merged, source=result.source)
