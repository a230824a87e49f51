"""Async HTTP client for the Databasin REST API.

Wraps :class:`httpx.AsyncClient` with bearer-token auth (reloaded once on a
401), mapping of error responses to :class:`ApiError` and of transport
failures to :class:`NetworkError`.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Callable
from typing import Any

import httpx

from databasin import __version__
from databasin.errors import ApiError, AuthError, NetworkError
from databasin.settings import Settings

logger = logging.getLogger("databasin.client")

_HEADERS = {"User-Agent": f"databasin-cli/{__version__}", "Accept": "application/json"}


def _reload_token() -> str | None:
    return Settings().token


class DatabasinClient:
    """Shared transport for the resource clients.

    Use as an async context manager, or call :meth:`aclose` when done.
    *transport* is passed through to httpx (tests use ``httpx.MockTransport``).
    """

    def __init__(
        self,
        settings: Settings | None = None,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        token_loader: Callable[[], str | None] = _reload_token,
    ) -> None:
        self.settings = settings or Settings()
        self._token = self.settings.token
        self._token_loader = token_loader
        self._http = httpx.AsyncClient(
            base_url=self.settings.api_url,
            timeout=self.settings.timeout_seconds,
            headers=_HEADERS,
            transport=transport,
        )

    async def __aenter__(self) -> DatabasinClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._http.aclose()

    # -- verbs ---------------------------------------------------------------

    async def get(
        self,
        endpoint: str,
        params: dict[str, Any] | None = None,
        *,
        count: bool = False,
        fields: str | None = None,
        limit: int | None = None,
    ) -> Any:
        data = await self.request("GET", endpoint, params=params)
        return apply_token_efficiency(data, count=count, fields=fields, limit=limit)

    async def post(self, endpoint: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("POST", endpoint, json=body, **kwargs)

    async def put(self, endpoint: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("PUT", endpoint, json=body, **kwargs)

    async def delete(self, endpoint: str, body: Any = None, **kwargs: Any) -> Any:
        return await self.request("DELETE", endpoint, json=body, **kwargs)

    async def request(
        self,
        method: str,
        endpoint: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any = None,
        skip_auth: bool = False,
        retries: int = 0,
        retry_delay: float = 1.0,
    ) -> Any:
        """Send one request and return the decoded body.

        Connection failures are retried *retries* times; HTTP error
        responses never are, except for the single token reload on 401.
        """
        headers: dict[str, str] = {}
        if not skip_auth:
            headers["Authorization"] = f"Bearer {self._require_token()}"
        if params is not None:
            params = {k: _query_value(v) for k, v in params.items() if v is not None}

        attempt = 0
        reauthenticated = False
        while True:
            started = time.monotonic()
            try:
                response = await self._http.request(
                    method, endpoint, params=params, json=json, headers=headers
                )
            except httpx.TimeoutException as exc:
                raise NetworkError(
                    f"Request timeout after {self.settings.timeout_seconds}s", endpoint
                ) from exc
            except httpx.TransportError as exc:
                if attempt < retries:
                    attempt += 1
                    logger.debug(
                        "Network error on %s %s, retrying in %.1fs (attempt %d/%d)",
                        method, endpoint, retry_delay, attempt, retries,
                    )
                    await asyncio.sleep(retry_delay)
                    continue
                raise NetworkError(str(exc) or "Network request failed", endpoint) from exc

            logger.debug(
                "%s %s -> %d (%.0f ms)",
                method, endpoint, response.status_code, (time.monotonic() - started) * 1000,
            )

            if response.status_code == 401 and not skip_auth and not reauthenticated:
                # The token may have been rotated on disk since startup
                reauthenticated = True
                self._token = self._token_loader()
                headers["Authorization"] = f"Bearer {self._require_token()}"
                continue

            body = _decode(response)
            if response.is_error:
                raise ApiError(
                    _error_message(response, body), response.status_code, endpoint, body
                )
            return body

    def _require_token(self) -> str:
        if not self._token:
            self._token = self._token_loader()
        if not self._token:
            raise AuthError("No authentication token found")
        return self._token


def apply_token_efficiency(
    data: Any, *, count: bool = False, fields: str | None = None, limit: int | None = None
) -> Any:
    """Shrink a response: count only, first *limit* rows, or selected *fields*."""
    if count:
        return {"count": len(data) if isinstance(data, list) else 1}
    if limit and isinstance(data, list):
        data = data[:limit]
    if fields:
        wanted = [f.strip() for f in fields.split(",") if f.strip()]
        if isinstance(data, list):
            return [_pick(row, wanted) for row in data]
        if isinstance(data, dict):
            return _pick(data, wanted)
    return data


def _pick(row: Any, wanted: list[str]) -> Any:
    if not isinstance(row, dict):
        return row
    return {key: row[key] for key in wanted if key in row}


def _query_value(value: Any) -> Any:
    if isinstance(value, bool):
        return "true" if value else "false"
    return value


def _decode(response: httpx.Response) -> Any:
    if response.status_code == 204 or not response.content:
        return None
    try:
        return response.json()
    except ValueError:
        return response.text


def _error_message(response: httpx.Response, body: Any) -> str:
    if isinstance(body, dict):
        for key in ("message", "error", "detail"):
            if isinstance(body.get(key), str) and body[key]:
                return body[key]
    return f"HTTP {response.status_code} {response.reason_phrase}".rstrip()
