#!/usr/bin/env python3
from __future__ import annotations

import argparse
import asyncio
import json
import sys
from dataclasses import replace
from pathlib import Path
from typing import Any

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from talentflow.ops.parity import check_candidates_parity, check_jobs_parity
from talentflow.runtime import create_data_layer
from talentflow.settings import load_settings

DEFAULT_JOB_QUERIES: list[dict[str, Any]] = [
    {},
    {"status": "active"},
    {"status": "archived", "sort": "title"},
    {"search": "engineer", "page": 2},
]
DEFAULT_CANDIDATE_QUERIES: list[dict[str, Any]] = [
    {},
    {"stage": "tech"},
    {"search": "chen"},
]


async def _run(base_url: str | None) -> dict[str, Any]:
    settings = load_settings()
    if base_url:
        settings = replace(settings, api_base_url=base_url)
    async with create_data_layer(settings) as layer:
        jobs = await check_jobs_parity(layer.jobs, DEFAULT_JOB_QUERIES)
        candidates = await check_candidates_parity(layer.candidates, DEFAULT_CANDIDATE_QUERIES)
    return {
        "all_matched": jobs["all_matched"] and candidates["all_matched"],
        "base_url": settings.api_base_url,
        "jobs": jobs,
        "candidates": candidates,
    }


def main() -> int:
    parser = argparse.ArgumentParser(description="Compare network and local-fallback list answers for the same queries")
    parser.add_argument("--base-url", default="", help="remote API base url, overrides TALENTFLOW_API_BASE_URL")
    args = parser.parse_args()

    result = asyncio.run(_run(args.base_url.strip() or None))
    print(json.dumps(result, ensure_ascii=True, sort_keys=True, indent=2))
    return 0 if result["all_matched"] else 2


if __name__ == "__main__":
    raise SystemExit(main())
