#!/usr/bin/env python3
from __future__ import annotations

import argparse
import json
import random
import sys
from pathlib import Path

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from talentflow.bootstrap import reset_and_reseed, seed_if_empty
from talentflow.local_store import SqliteLocalStore


def main() -> int:
    parser = argparse.ArgumentParser(description="Seed the local sqlite store with synthetic hiring data")
    parser.add_argument("--sqlite-path", default=".runtime/talentflow.sqlite3", help="sqlite store db path")
    parser.add_argument("--seed", type=int, default=None, help="random seed for reproducible data")
    parser.add_argument("--jobs", type=int, default=150, help="number of jobs")
    parser.add_argument("--candidates", type=int, default=1050, help="number of candidates")
    parser.add_argument("--assessments", type=int, default=7, help="number of assessment documents")
    parser.add_argument("--reset", action="store_true", help="clear every table before seeding")
    args = parser.parse_args()

    store = SqliteLocalStore(args.sqlite_path)
    rng = random.Random(args.seed) if args.seed is not None else random.Random()
    counts = {"job_count": args.jobs, "candidate_count": args.candidates, "assessment_count": args.assessments}
    if args.reset:
        seeded = reset_and_reseed(store, rng=rng, **counts)
    else:
        seeded = seed_if_empty(store, rng=rng, **counts)
    result = {
        "seeded": seeded,
        "sqlite_path": args.sqlite_path,
        "tables": {name: store.count(name) for name in store.schema},
    }
    print(json.dumps(result, ensure_ascii=True, sort_keys=True, indent=2))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
