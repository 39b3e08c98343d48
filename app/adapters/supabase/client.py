"""Minimal async PostgREST client for Supabase tables.

Only the read operations the service needs are implemented: filtered selects
and exact counts. All failures surface as ``DataStoreAppError`` so callers see
one error type regardless of whether the network or the database failed.
"""

from __future__ import annotations

import logging
from typing import Any

import httpx

from app.core.errors import DataStoreAppError

logger = logging.getLogger(__name__)


def eq(value: str) -> str:
    """PostgREST ``column=eq.value`` filter operand."""
    return f"eq.{value}"


def neq(value: str) -> str:
    """PostgREST ``column=neq.value`` filter operand."""
    return f"neq.{value}"


def parse_content_range_total(header: str | None) -> int:
    """Extract the total row count from a ``Content-Range`` header.

    PostgREST answers ``Prefer: count=exact`` with ``0-24/3573`` or ``*/0``.

    Raises:
        DataStoreAppError: If the header is missing or carries no total.
    """
    if not header or "/" not in header:
        raise DataStoreAppError(
            code="data_store_invalid_response",
            message="Count response is missing a Content-Range total",
            details={"backend": "supabase"},
        )

    total = header.rsplit("/", 1)[1].strip()
    if not total.isdigit():
        raise DataStoreAppError(
            code="data_store_invalid_response",
            message=f"Count response has a non-numeric total: {total!r}",
            details={"backend": "supabase"},
        )
    return int(total)


class SupabaseRestClient:
    """Thin wrapper over ``httpx.AsyncClient`` pointed at ``/rest/v1``."""

    def __init__(
        self,
        url: str,
        service_role_key: str,
        *,
        timeout_seconds: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        """Initialize the REST client.

        Args:
            url: Supabase project URL (without the ``/rest/v1`` suffix).
            service_role_key: Key sent as both ``apikey`` and bearer token.
            timeout_seconds: Per-request timeout.
            transport: Optional transport override (tests use MockTransport).
        """
        self._client = httpx.AsyncClient(
            base_url=f"{url.rstrip('/')}/rest/v1",
            headers={
                "apikey": service_role_key,
                "Authorization": f"Bearer {service_role_key}",
                "Accept": "application/json",
            },
            timeout=timeout_seconds,
            transport=transport,
        )

    async def aclose(self) -> None:
        await self._client.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        params: dict[str, str],
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        try:
            response = await self._client.request(
                method, f"/{table}", params=params, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error(
                "supabase.request_failed",
                extra={"table": table, "method": method, "error_type": type(exc).__name__},
            )
            raise DataStoreAppError(
                code="data_store_unavailable",
                message=f"Supabase request failed: {exc}",
                details={"backend": "supabase"},
            ) from exc

        if response.status_code >= 400:
            logger.error(
                "supabase.request_rejected",
                extra={
                    "table": table,
                    "method": method,
                    "status_code": response.status_code,
                },
            )
            raise DataStoreAppError(
                code="data_store_error",
                message=f"Supabase returned HTTP {response.status_code} for {table}",
                details={"backend": "supabase", "http_status": response.status_code},
            )
        return response

    async def select(self, table: str, params: dict[str, str]) -> list[dict[str, Any]]:
        """Return the rows matching PostgREST query ``params``."""
        response = await self._request("GET", table, params)
        rows = response.json()
        if not isinstance(rows, list):
            raise DataStoreAppError(
                code="data_store_invalid_response",
                message=f"Expected a list of rows from {table}",
                details={"backend": "supabase"},
            )
        return rows

    async def count(self, table: str, params: dict[str, str]) -> int:
        """Return the exact number of rows matching ``params``."""
        response = await self._request(
            "HEAD",
            table,
            params,
            headers={"Prefer": "count=exact"},
        )
        return parse_content_range_total(response.headers.get("Content-Range"))
