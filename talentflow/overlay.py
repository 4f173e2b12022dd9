"""Session-only edits layered over read results.

Patches held here never reach the remote service or the local store. They
live as long as the owning ``SessionOverlayStore`` does, or until ``reset()``.
"""

from __future__ import annotations

import logging
from typing import Any

logger = logging.getLogger(__name__)

TOMBSTONE = "__deleted"


def _key(entity_id: Any) -> Any:
    if isinstance(entity_id, str) and entity_id.strip().lstrip("-").isdigit():
        return int(entity_id.strip())
    return entity_id


def _has_rank(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class SessionOverlayStore:
    def __init__(self, *, id_field: str = "id", rank_field: str = "order") -> None:
        self.id_field = id_field
        self.rank_field = rank_field
        self._patches: dict[Any, dict[str, Any]] = {}

    def __len__(self) -> int:
        return len(self._patches)

    def __contains__(self, entity_id: Any) -> bool:
        return _key(entity_id) in self._patches

    def remember(self, entity_id: Any, patch: dict[str, Any]) -> dict[str, Any]:
        key = _key(entity_id)
        merged = {**self._patches.get(key, {}), **patch}
        self._patches[key] = merged
        return dict(merged)

    def patch_for(self, entity_id: Any) -> dict[str, Any]:
        return dict(self._patches.get(_key(entity_id), {}))

    def forget(self, entity_id: Any) -> None:
        self._patches.pop(_key(entity_id), None)

    def reset(self) -> None:
        if self._patches:
            logger.debug("overlay_reset patches=%d", len(self._patches))
        self._patches.clear()

    def is_deleted(self, entity_id: Any) -> bool:
        return bool(self._patches.get(_key(entity_id), {}).get(TOMBSTONE))

    def soft_delete(self, entity_id: Any) -> None:
        self.remember(entity_id, {TOMBSTONE: True})

    def rename(self, entity_id: Any, **fields: Any) -> dict[str, Any]:
        return self.remember(entity_id, fields)

    def toggle_archive(self, row: dict[str, Any]) -> str:
        current = self.patch_for(row[self.id_field]).get("status", row.get("status"))
        next_status = "active" if current == "archived" else "archived"
        self.remember(row[self.id_field], {"status": next_status})
        return next_status

    def move(self, rows: list[dict[str, Any]], entity_id: Any, direction: str) -> list[dict[str, Any]]:
        """Swap ranks with the neighbour above or below in an already-merged list."""
        key = _key(entity_id)
        index = next((i for i, row in enumerate(rows) if _key(row.get(self.id_field)) == key), -1)
        if index < 0:
            return self.apply(rows)
        swap_index = index - 1 if direction == "up" else index + 1
        if swap_index < 0 or swap_index >= len(rows):
            return self.apply(rows)
        a, b = rows[index], rows[swap_index]
        rank_a = a.get(self.rank_field) if _has_rank(a.get(self.rank_field)) else index
        rank_b = b.get(self.rank_field) if _has_rank(b.get(self.rank_field)) else swap_index
        self.remember(a[self.id_field], {self.rank_field: rank_b})
        self.remember(b[self.id_field], {self.rank_field: rank_a})
        return self.apply(rows)

    def apply_one(self, row: dict[str, Any]) -> dict[str, Any] | None:
        patch = self._patches.get(_key(row.get(self.id_field)))
        if not patch:
            return dict(row)
        if patch.get(TOMBSTONE):
            return None
        return {**row, **{k: v for k, v in patch.items() if k != TOMBSTONE}}

    def apply(self, rows: list[dict[str, Any]], *, rerank: bool = True) -> list[dict[str, Any]]:
        """Merge patches into ``rows`` and drop tombstoned ones.

        With ``rerank`` the result is ordered by effective rank. Without it the
        input order is kept, so lists sorted by another key stay as they came.
        """
        ranked: list[tuple[float, int, int, dict[str, Any]]] = []
        for position, row in enumerate(rows):
            patch = self._patches.get(_key(row.get(self.id_field)), {})
            if patch.get(TOMBSTONE):
                continue
            merged = {**row, **{k: v for k, v in patch.items() if k != TOMBSTONE}}
            if _has_rank(patch.get(self.rank_field)):
                rank, patched = patch[self.rank_field], 0
            elif _has_rank(row.get(self.rank_field)):
                rank, patched = row[self.rank_field], 1
            else:
                rank, patched = position, 1
            # On equal rank a patched row goes first, then input order decides.
            ranked.append((rank, patched, position, merged))
        if rerank:
            ranked.sort(key=lambda item: (item[0], item[1], item[2]))
        return [item[3] for item in ranked]
