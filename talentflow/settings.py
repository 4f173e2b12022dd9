from __future__ import annotations

import os
from collections.abc import Mapping
from dataclasses import dataclass

from talentflow.results import AccessPolicy


def _as_bool(value: str) -> bool:
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _optional_int(env: Mapping[str, str], name: str) -> int | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from exc


def _optional_float(env: Mapping[str, str], name: str) -> float | None:
    raw = env.get(name, "").strip()
    if not raw:
        return None
    try:
        value = float(raw)
    except ValueError as exc:
        raise ValueError(f"{name} must be a number, got {raw!r}") from exc
    return value if value > 0 else None


@dataclass(frozen=True)
class Settings:
    api_base_url: str = "http://localhost:5173"
    access_policy: AccessPolicy = AccessPolicy.NETWORK_FIRST
    local_store_backend: str = "sqlite"
    sqlite_path: str = ".runtime/talentflow.sqlite3"
    seed: int | None = None
    seed_on_start: bool = True
    http_timeout_s: float | None = None

    def store_environ(self) -> dict[str, str]:
        return {"TALENTFLOW_LOCAL_STORE": self.local_store_backend, "TALENTFLOW_SQLITE_PATH": self.sqlite_path}


def load_settings(environ: Mapping[str, str] | None = None) -> Settings:
    env = os.environ if environ is None else environ
    return Settings(
        api_base_url=env.get("TALENTFLOW_API_BASE_URL", "http://localhost:5173").strip() or "http://localhost:5173",
        access_policy=AccessPolicy.parse(env.get("TALENTFLOW_ACCESS_POLICY", "network_first")),
        local_store_backend=env.get("TALENTFLOW_LOCAL_STORE", "sqlite").strip().lower() or "sqlite",
        sqlite_path=env.get("TALENTFLOW_SQLITE_PATH", ".runtime/talentflow.sqlite3").strip(),
        seed=_optional_int(env, "TALENTFLOW_SEED"),
        seed_on_start=_as_bool(env.get("TALENTFLOW_SEED_ON_START", "true")),
        http_timeout_s=_optional_float(env, "TALENTFLOW_HTTP_TIMEOUT_S"),
    )
