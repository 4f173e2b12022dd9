from __future__ import annotations

import logging
import random
from collections.abc import Mapping
from dataclasses import dataclass

import httpx

from talentflow.bootstrap import seed_if_empty
from talentflow.gateway import RemoteGateway
from talentflow.local_store import LocalStore, create_local_store_from_env
from talentflow.overlay import SessionOverlayStore
from talentflow.services import AssessmentsService, CandidatesService, JobsService, SubmissionsService
from talentflow.settings import Settings, load_settings

logger = logging.getLogger(__name__)


@dataclass
class DataLayer:
    """Every component one caller needs, built once and owned by that caller."""

    settings: Settings
    gateway: RemoteGateway
    local_store: LocalStore
    job_overlay: SessionOverlayStore
    candidate_overlay: SessionOverlayStore
    jobs: JobsService
    candidates: CandidatesService
    assessments: AssessmentsService
    submissions: SubmissionsService

    def reset_overlays(self) -> None:
        self.job_overlay.reset()
        self.candidate_overlay.reset()

    async def aclose(self) -> None:
        await self.gateway.aclose()

    async def __aenter__(self) -> DataLayer:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()


def create_data_layer(
    settings: Settings,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
    local_store: LocalStore | None = None,
) -> DataLayer:
    store = local_store if local_store is not None else create_local_store_from_env(settings.store_environ())
    rng = random.Random(settings.seed) if settings.seed is not None else random.Random()
    if settings.seed_on_start:
        seeded = seed_if_empty(store, rng=rng)
        if seeded:
            logger.info("data_layer_seeded backend=%s seed=%s", settings.local_store_backend, settings.seed)

    gateway = RemoteGateway(base_url=settings.api_base_url, transport=transport, timeout_s=settings.http_timeout_s)
    job_overlay = SessionOverlayStore()
    candidate_overlay = SessionOverlayStore()
    common = {"gateway": gateway, "local_store": store, "policy": settings.access_policy}
    return DataLayer(
        settings=settings,
        gateway=gateway,
        local_store=store,
        job_overlay=job_overlay,
        candidate_overlay=candidate_overlay,
        jobs=JobsService(overlay=job_overlay, **common),
        candidates=CandidatesService(overlay=candidate_overlay, rng=rng, **common),
        assessments=AssessmentsService(**common),
        submissions=SubmissionsService(**common),
    )


def create_data_layer_from_env(
    environ: Mapping[str, str] | None = None,
    *,
    transport: httpx.AsyncBaseTransport | None = None,
) -> DataLayer:
    return create_data_layer(load_settings(environ), transport=transport)
