from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from talentflow.errors import RemoteStatusError, RemoteUnavailableError

logger = logging.getLogger(__name__)


def _clean_params(params: dict[str, Any] | None) -> dict[str, Any]:
    if not params:
        return {}
    return {key: value for key, value in params.items() if value is not None and value != ""}


def _parse_body(raw_text: str) -> Any:
    if not raw_text:
        return None
    try:
        return json.loads(raw_text)
    except ValueError:
        return raw_text


class RemoteGateway:
    """Minimal JSON-over-HTTP client for the hiring API."""

    def __init__(
        self,
        *,
        base_url: str,
        transport: httpx.AsyncBaseTransport | None = None,
        timeout_s: float | None = None,
        headers: dict[str, str] | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            transport=transport,
            timeout=httpx.Timeout(timeout_s),
            headers=headers,
        )

    @property
    def base_url(self) -> str:
        return self._base_url

    async def fetch_json(
        self,
        path: str,
        *,
        method: str = "GET",
        headers: dict[str, str] | None = None,
        body: Any = None,
        params: dict[str, Any] | None = None,
    ) -> Any:
        merged_headers = {"Content-Type": "application/json", **(headers or {})}
        content = json.dumps(body) if body is not None else None
        try:
            response = await self._client.request(
                method.upper(),
                path,
                params=_clean_params(params),
                headers=merged_headers,
                content=content,
            )
        except httpx.HTTPError as exc:
            logger.debug("remote_unavailable method=%s path=%s error=%s", method, path, type(exc).__name__)
            raise RemoteUnavailableError(message=f"{method.upper()} {path} failed: {exc}") from exc

        data = _parse_body(response.text)
        if not response.is_success:
            message = None
            if isinstance(data, dict) and data.get("message"):
                message = str(data["message"])
            raise RemoteStatusError(status=response.status_code, data=data, message=message)
        return data

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> RemoteGateway:
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self.aclose()
