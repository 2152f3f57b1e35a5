"""Minimal PostgREST client for a Supabase project (select, update, delete)."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import httpx

logger = logging.getLogger(__name__)


class DataSourceError(Exception):
    """Raised when a user data source cannot complete a read or write."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        self.message = message
        self.status_code = status_code
        super().__init__(message)


def _error_message(resp: httpx.Response) -> str:
    """Extract the PostgREST error message from a failed response."""
    try:
        body = resp.json()
    except ValueError:
        return resp.text[:500] or f"HTTP {resp.status_code}"
    if isinstance(body, dict):
        parts = [str(body[k]) for k in ("message", "details", "hint") if body.get(k)]
        if parts:
            return " ".join(parts)
    return str(body)[:500]


class SupabaseClient:
    """
    Thin wrapper over the Supabase REST endpoint (``/rest/v1``).

    Usage:
        client = SupabaseClient(url, anon_key)
        rows = client.select("users", "*", order="created_at.desc")
        client.update("users", {"is_active": False}, id="u1")
        client.delete("users", id="u1")
    """

    def __init__(
        self,
        url: str,
        api_key: str,
        timeout: float = 10.0,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.base_url = f"{url.rstrip('/')}/rest/v1"
        self.timeout = timeout
        self._client = httpx.Client(
            base_url=self.base_url,
            headers={
                "apikey": api_key,
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
            transport=transport,
        )

    def close(self) -> None:
        self._client.close()

    def _request(self, method: str, table: str, **kwargs: Any) -> httpx.Response:
        try:
            resp = self._client.request(method, f"/{table}", **kwargs)
        except httpx.HTTPError as e:
            raise DataSourceError(f"Request to {table} failed: {e}") from e
        if resp.status_code >= 400:
            raise DataSourceError(_error_message(resp), resp.status_code)
        return resp

    def select(self, table: str, columns: str = "*", order: Optional[str] = None) -> List[Dict[str, Any]]:
        params = {"select": columns}
        if order:
            params["order"] = order
        resp = self._request("GET", table, params=params)
        try:
            data = resp.json()
        except ValueError as e:
            raise DataSourceError(f"Invalid JSON from {table}", resp.status_code) from e
        if data is None:
            return []
        if not isinstance(data, list):
            raise DataSourceError(f"Expected a list of rows from {table}", resp.status_code)
        return data

    def update(self, table: str, values: Dict[str, Any], **match: Any) -> None:
        params = {k: f"eq.{v}" for k, v in match.items()}
        self._request("PATCH", table, params=params, json=values, headers={"Prefer": "return=minimal"})
        logger.debug("Updated %s where %s", table, params)

    def delete(self, table: str, **match: Any) -> None:
        params = {k: f"eq.{v}" for k, v in match.items()}
        self._request("DELETE", table, params=params, headers={"Prefer": "return=minimal"})
        logger.debug("Deleted from %s where %s", table, params)
