from __future__ import annotations

import json
from typing import Any

from talentflow.results import AccessPolicy

ENVELOPE_FIELDS = ["total", "page", "pageSize", "ids"]


def _canonical(value: Any) -> str:
    return json.dumps(value, sort_keys=True, ensure_ascii=True, separators=(",", ":"))


def _project(envelope: dict[str, Any] | None, id_field: str) -> dict[str, Any]:
    envelope = envelope or {}
    items = envelope.get("items") or []
    return {
        "total": envelope.get("total"),
        "page": envelope.get("page"),
        "pageSize": envelope.get("pageSize"),
        "ids": [item.get(id_field) for item in items if isinstance(item, dict)],
    }


def compare_list_envelopes(
    remote_envelope: dict[str, Any] | None,
    local_envelope: dict[str, Any] | None,
    *,
    id_field: str = "id",
) -> dict[str, Any]:
    """Report which envelope fields differ between the network and local answers to one query."""
    left = _project(remote_envelope, id_field)
    right = _project(local_envelope, id_field)
    rows: list[dict[str, Any]] = []
    mismatch: list[str] = []
    for field in ENVELOPE_FIELDS:
        matched = _canonical(left[field]) == _canonical(right[field])
        if not matched:
            mismatch.append(field)
        rows.append({"field": field, "matched": matched, "remote": left[field], "local": right[field]})
    return {
        "all_matched": len(mismatch) == 0,
        "mismatch_fields": mismatch,
        "fields": rows,
    }


async def check_jobs_parity(jobs_service: Any, queries: list[dict[str, Any]]) -> dict[str, Any]:
    """Run each job list query on both paths and collect one report per query."""
    reports: list[dict[str, Any]] = []
    for query in queries:
        remote = await jobs_service.list_jobs(**query, policy=AccessPolicy.NETWORK_ONLY)
        local = await jobs_service.list_jobs(**query, policy=AccessPolicy.LOCAL_ONLY)
        if not remote.ok:
            reports.append({"query": query, "all_matched": False, "error": remote.error.message})
            continue
        report = compare_list_envelopes(remote.value, local.value if local.ok else None)
        reports.append({"query": query, **report})
    return {
        "all_matched": all(report["all_matched"] for report in reports),
        "queries": reports,
    }


async def check_candidates_parity(candidates_service: Any, queries: list[dict[str, Any]]) -> dict[str, Any]:
    reports: list[dict[str, Any]] = []
    for query in queries:
        remote = await candidates_service.list_candidates(**query, policy=AccessPolicy.NETWORK_ONLY)
        local = await candidates_service.list_candidates(**query, policy=AccessPolicy.LOCAL_ONLY)
        if not remote.ok:
            reports.append({"query": query, "all_matched": False, "error": remote.error.message})
            continue
        report = compare_list_envelopes(remote.value, local.value if local.ok else None)
        reports.append({"query": query, **report})
    return {
        "all_matched": all(report["all_matched"] for report in reports),
        "queries": reports,
    }
