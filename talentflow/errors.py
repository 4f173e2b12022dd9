from __future__ import annotations

from typing import Any


class TalentflowError(Exception):
    def __init__(
        self,
        *,
        code: str,
        message: str,
        retryable: bool = False,
        http_status: int | None = None,
    ) -> None:
        super().__init__(message)
        self.code = code
        self.message = message
        self.retryable = retryable
        self.http_status = http_status


class InvalidIdError(TalentflowError):
    def __init__(self, *, entity: str, raw: Any) -> None:
        super().__init__(
            code="INVALID_ID",
            message=f"Invalid {entity} id: {raw!r}",
            http_status=400,
        )
        self.entity = entity
        self.raw = raw


class NotFoundError(TalentflowError):
    def __init__(self, *, entity: str, key: Any) -> None:
        super().__init__(
            code="NOT_FOUND",
            message=f"{entity.capitalize()} {key} not found",
            http_status=404,
        )
        self.entity = entity
        self.key = key


class ConflictError(TalentflowError):
    def __init__(self, *, message: str, code: str = "SLUG_CONFLICT") -> None:
        super().__init__(code=code, message=message, http_status=409)


class InvalidPayloadError(TalentflowError):
    def __init__(self, *, message: str, errors: list[dict[str, Any]] | None = None) -> None:
        super().__init__(code="INVALID_PAYLOAD", message=message, http_status=422)
        self.errors = errors or []


class NetworkFailure(TalentflowError):
    """Any failure of the remote call; absorbed by the network-first policy."""


class RemoteStatusError(NetworkFailure):
    def __init__(self, *, status: int, data: Any = None, message: str | None = None) -> None:
        super().__init__(
            code="REMOTE_STATUS",
            message=message or f"HTTP {status}",
            retryable=status >= 500,
            http_status=status,
        )
        self.status = status
        self.data = data


class RemoteUnavailableError(NetworkFailure):
    def __init__(self, *, message: str) -> None:
        super().__init__(code="REMOTE_UNAVAILABLE", message=message, retryable=True)
