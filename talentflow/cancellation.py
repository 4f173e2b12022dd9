from __future__ import annotations

from collections.abc import Awaitable
from typing import Any


class AbortSignal:
    """Marks a caller context as torn down so late results can be dropped.

    The underlying request is never cancelled; ``settle`` still awaits it.
    """

    def __init__(self) -> None:
        self._aborted = False

    @property
    def aborted(self) -> bool:
        return self._aborted

    def abort(self) -> None:
        self._aborted = True

    async def settle(self, awaitable: Awaitable[Any]) -> Any:
        value = await awaitable
        if self._aborted:
            return None
        return value
