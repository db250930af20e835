"""
HTTP clients for the consent and inventory record services.

Design:
- Framework-agnostic, callable from the probes.
- Uses httpx under the hood; every failure surfaces as ProbeTransportError so
  the probe can apply the fail-open policy in one place.

Contract (record service):
    GET {base}/consent/student/{student_id}
    GET {base}/inventory/student/{student_id}
    404 or a JSON `null` body means "no record"; 2xx with a record means it
    exists. Anything else is a transport failure.

Security:
- Do not log tokens. Student ids are path-quoted.
"""

from __future__ import annotations

from typing import Dict, Optional
from urllib.parse import quote

import httpx

from .ports import ProbeTransportError


class RecordServiceClient:
    def __init__(
        self,
        base_url: str,
        *,
        token: Optional[str] = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token = token
        self._timeout = timeout
        self._transport = transport

    def _headers(self) -> Dict[str, str]:
        headers = {"Accept": "application/json"}
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _record_exists(self, path: str) -> bool:
        try:
            async with httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self._timeout,
                transport=self._transport,
                follow_redirects=False,
            ) as client:
                resp = await client.get(path, headers=self._headers())
        except httpx.HTTPError as exc:
            raise ProbeTransportError(f"request_failed: {exc.__class__.__name__}") from exc

        if resp.status_code == 404:
            return False
        if not 200 <= resp.status_code < 300:
            raise ProbeTransportError(f"unexpected_status: {resp.status_code}")
        if not resp.content:
            return False
        try:
            body = resp.json()
        except ValueError as exc:
            raise ProbeTransportError("invalid_json") from exc
        return body is not None


class ConsentServiceClient(RecordServiceClient):
    async def has_consent(self, student_id: str) -> bool:
        return await self._record_exists(f"/consent/student/{quote(student_id, safe='')}")


class InventoryServiceClient(RecordServiceClient):
    async def has_inventory(self, student_id: str) -> bool:
        return await self._record_exists(f"/inventory/student/{quote(student_id, safe='')}")


__all__ = ["ConsentServiceClient", "InventoryServiceClient", "RecordServiceClient"]
