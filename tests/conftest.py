import copy
import pathlib
import sys
from typing import Any

import httpx
import pytest
from fastapi import FastAPI, Query, Request
from fastapi.responses import JSONResponse

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from talentflow.gateway import RemoteGateway
from talentflow.local_store import InMemoryLocalStore

BASE_URL = "http://remote.test"

JOB_ROWS: list[dict[str, Any]] = [
    {"id": 1, "title": "Frontend Developer @ Acme Corp", "slug": "job-1", "status": "active", "order": 0,
     "company": "Acme Corp", "role": "Frontend Developer", "tags": ["react"]},
    {"id": 2, "title": "Backend Engineer @ Globex", "slug": "job-2", "status": "archived", "order": 1,
     "company": "Globex", "role": "Backend Engineer", "tags": ["node"]},
    {"id": 3, "title": "Data Scientist @ Initech", "slug": "job-3", "status": "active", "order": 2,
     "company": "Initech", "role": "Data Scientist", "tags": ["ml"]},
    {"id": 4, "title": "QA Engineer @ Hooli", "slug": "job-4", "status": "active", "order": 3,
     "company": "Hooli", "role": "QA Engineer", "tags": []},
    {"id": 5, "title": "backend engineer @ Umbrella", "slug": "job-5", "status": "active", "order": 4,
     "company": "Umbrella", "role": "Backend Engineer", "tags": ["remote"]},
    {"id": 6, "title": "DevOps Engineer @ Acme Corp", "slug": "job-6", "status": "archived", "order": 5,
     "company": "Acme Corp", "role": "DevOps Engineer", "tags": ["senior"]},
]

CANDIDATE_ROWS: list[dict[str, Any]] = [
    {"id": 1, "name": "Alice Chen", "email": "alice@mail.com", "stage": "screen", "jobId": 1},
    {"id": 2, "name": "bob Rodriguez", "email": "bob@mail.com", "stage": "applied", "jobId": 1},
    {"id": 3, "name": "Carol Kim", "email": "carol.chen@mail.com", "stage": "tech", "jobId": 3},
    {"id": 4, "name": "David Lee", "email": "david@mail.com", "stage": "screen", "jobId": 4},
    {"id": 5, "name": "Evelyn Zhao", "email": "evelyn@mail.com", "stage": "hired", "jobId": 3},
]

TIMELINE_ROWS: list[dict[str, Any]] = [
    {"candidateId": 1, "stage": "screen", "ts": 2_000, "by": "Priya (Recruiter)", "note": "Stage set to screen"},
    {"candidateId": 1, "stage": "applied", "ts": 1_000, "by": "System", "note": "Stage set to applied"},
    {"candidateId": 3, "stage": "applied", "ts": 1_500, "by": "System", "note": "Stage set to applied"},
]


def _page(rows: list[dict[str, Any]], page: int, page_size: int) -> dict[str, Any]:
    start = (page - 1) * page_size
    return {"items": rows[start : start + page_size], "total": len(rows), "page": page, "pageSize": page_size}


def _not_found(entity: str, key: int) -> JSONResponse:
    return JSONResponse({"message": f"{entity} {key} not found"}, status_code=404)


class FakeRemote:
    """In-process stand-in for the hiring API, served over ASGI."""

    def __init__(self, *, jobs: list[dict[str, Any]], candidates: list[dict[str, Any]]):
        self.jobs = {row["id"]: copy.deepcopy(row) for row in jobs}
        self.candidates = {row["id"]: copy.deepcopy(row) for row in candidates}
        self.timelines: list[dict[str, Any]] = []
        self.assessments: dict[int, dict[str, Any]] = {}
        self.submissions: list[dict[str, Any]] = []
        self.calls: list[tuple[str, str]] = []
        self.fail_with: int | None = None
        self.app = self._build_app()

    def transport(self) -> httpx.ASGITransport:
        return httpx.ASGITransport(app=self.app)

    def _build_app(self) -> FastAPI:
        app = FastAPI()

        @app.middleware("http")
        async def record_calls(request: Request, call_next):
            self.calls.append((request.method, request.url.path))
            if self.fail_with is not None:
                return JSONResponse({"message": "remote exploded"}, status_code=self.fail_with)
            return await call_next(request)

        @app.get("/jobs")
        async def list_jobs(
            search: str = "",
            status: str = "",
            page: int = 1,
            page_size: int = Query(12, alias="pageSize"),
            sort: str = "order",
        ):
            needle = search.lower()
            rows = [
                row
                for row in self.jobs.values()
                if not needle
                or any(needle in str(row.get(field) or "").lower() for field in ("title", "slug", "company", "role"))
            ]
            if status:
                rows = [row for row in rows if row["status"] == status]
            if sort == "title":
                rows.sort(key=lambda row: row["title"].lower())
            elif sort == "status":
                rows.sort(key=lambda row: row["status"])
            else:
                rows.sort(key=lambda row: row["order"])
            return _page(rows, page, page_size)

        @app.get("/jobs/{job_id}")
        async def get_job(job_id: int):
            row = self.jobs.get(job_id)
            if row is None:
                return _not_found("Job", job_id)
            return row

        @app.post("/jobs")
        async def create_job(request: Request):
            body = await request.json()
            new_id = max(self.jobs, default=0) + 1
            row = {**body, "id": new_id, "slug": body.get("slug") or f"remote-{new_id}", "order": len(self.jobs)}
            self.jobs[new_id] = row
            return JSONResponse(row, status_code=201)

        @app.patch("/jobs/{job_id}")
        async def patch_job(job_id: int, request: Request):
            row = self.jobs.get(job_id)
            if row is None:
                return _not_found("Job", job_id)
            row.update(await request.json())
            return row

        @app.patch("/jobs/{job_id}/reorder")
        async def reorder_job(job_id: int, request: Request):
            body = await request.json()
            return {"ok": job_id in self.jobs, "fromOrder": body.get("fromOrder"), "toOrder": body.get("toOrder")}

        @app.get("/candidates")
        async def list_candidates(
            search: str = "",
            stage: str = "",
            page: int = 1,
            page_size: int = Query(50, alias="pageSize"),
        ):
            needle = search.lower()
            rows = [
                row
                for row in self.candidates.values()
                if not needle or needle in row["name"].lower() or needle in row["email"].lower()
            ]
            if stage:
                rows = [row for row in rows if row["stage"] == stage]
            rows.sort(key=lambda row: row["name"].lower())
            return _page(rows, page, page_size)

        @app.post("/candidates")
        async def create_candidate(request: Request):
            body = await request.json()
            new_id = max(self.candidates, default=0) + 1
            row = {**body, "id": new_id}
            self.candidates[new_id] = row
            return JSONResponse(row, status_code=201)

        @app.get("/candidates/{candidate_id}")
        async def get_candidate(candidate_id: int):
            row = self.candidates.get(candidate_id)
            if row is None:
                return _not_found("Candidate", candidate_id)
            return row

        @app.patch("/candidates/{candidate_id}")
        async def patch_candidate(candidate_id: int, request: Request):
            row = self.candidates.get(candidate_id)
            if row is None:
                return _not_found("Candidate", candidate_id)
            body = await request.json()
            if body.get("stage") and body["stage"] != row.get("stage"):
                self.timelines.append(
                    {"candidateId": candidate_id, "stage": body["stage"], "by": body.get("by"), "note": body.get("note")}
                )
            row.update({k: v for k, v in body.items() if k not in ("by", "note")})
            return row

        @app.get("/candidates/{candidate_id}/timeline")
        async def get_timeline(candidate_id: int):
            items = [entry for entry in self.timelines if entry["candidateId"] == candidate_id]
            return {"candidateId": candidate_id, "items": items}

        @app.get("/assessments/{job_id}")
        async def get_assessment(job_id: int):
            return self.assessments.get(job_id) or {"jobId": job_id, "sections": []}

        @app.put("/assessments/{job_id}")
        async def put_assessment(job_id: int, request: Request):
            body = await request.json()
            self.assessments[job_id] = {**body, "jobId": job_id}
            return self.assessments[job_id]

        @app.post("/assessments/{job_id}/submit")
        async def submit_assessment(job_id: int, request: Request):
            body = await request.json()
            self.submissions.append({"jobId": job_id, **body})
            return {"ok": True}

        return app


def _refuse_connection(request: httpx.Request) -> httpx.Response:
    raise httpx.ConnectError("connection refused", request=request)


@pytest.fixture
def remote() -> FakeRemote:
    return FakeRemote(jobs=JOB_ROWS, candidates=CANDIDATE_ROWS)


@pytest.fixture
def online_gateway(remote: FakeRemote) -> RemoteGateway:
    return RemoteGateway(base_url=BASE_URL, transport=remote.transport())


@pytest.fixture
def offline_gateway() -> RemoteGateway:
    return RemoteGateway(base_url=BASE_URL, transport=httpx.MockTransport(_refuse_connection))


@pytest.fixture
def local_store() -> InMemoryLocalStore:
    store = InMemoryLocalStore()
    store.bulk_add("jobs", copy.deepcopy(JOB_ROWS))
    store.bulk_add("candidates", copy.deepcopy(CANDIDATE_ROWS))
    store.bulk_add("timelines", copy.deepcopy(TIMELINE_ROWS))
    return store
