from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Generic, TypeVar

from talentflow.errors import TalentflowError

T = TypeVar("T")


class AccessPolicy(str, Enum):
    NETWORK_FIRST = "network_first"
    LOCAL_ONLY = "local_only"
    NETWORK_ONLY = "network_only"

    @classmethod
    def parse(cls, value: str | AccessPolicy) -> AccessPolicy:
        if isinstance(value, AccessPolicy):
            return value
        normalized = str(value).strip().lower().replace("-", "_")
        for policy in cls:
            if policy.value == normalized:
                return policy
        raise ValueError(f"unsupported access policy: {value}")


class Source(str, Enum):
    REMOTE = "remote"
    LOCAL = "local"


@dataclass(frozen=True)
class Result(Generic[T]):
    """Outcome of a service call.

    ``source`` tells whether the value is authoritative (``REMOTE``) or came
    from the local mirror (``LOCAL``). Failed results carry ``error`` and the
    source that produced it, if any I/O happened at all.
    """

    value: T | None = None
    error: TalentflowError | None = None
    source: Source | None = None

    @classmethod
    def success(cls, value: T, *, source: Source) -> Result[T]:
        return cls(value=value, source=source)

    @classmethod
    def failure(cls, error: TalentflowError, *, source: Source | None = None) -> Result[Any]:
        return cls(error=error, source=source)

    @property
    def ok(self) -> bool:
        return self.error is None

    @property
    def is_fallback(self) -> bool:
        return self.ok and self.source is Source.LOCAL

    def unwrap(self) -> T:
        if self.error is not None:
            raise self.error
        return self.value  # type: ignore[return-value]
