# callbridge/services/ghl_api.py
from __future__ import annotations

import logging
from typing import Any, Dict, Optional

import httpx

logger = logging.getLogger(__name__)


class GhlForwarder:
    """
    Posts inbound-call events to a subaccount's GHL inbound webhook.

    One attempt per event, bounded by `timeout`; no retry. `deliver` returns
    a short result dict for logging and raises only on transport errors.
    """

    def __init__(
        self,
        timeout: float = 10.0,
        verify_ssl: bool = True,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.timeout = timeout
        self.verify_ssl = verify_ssl
        self.transport = transport

    def _client(self) -> httpx.AsyncClient:
        kwargs: Dict[str, Any] = dict(
            timeout=httpx.Timeout(self.timeout),
            follow_redirects=True,
            verify=self.verify_ssl,
        )
        if self.transport is not None:
            kwargs["transport"] = self.transport
        return httpx.AsyncClient(**kwargs)

    async def deliver(self, url: str, payload: Dict[str, Any]) -> Dict[str, Any]:
        async with self._client() as client:
            r = await client.post(url, json=payload)
        try:
            body = r.json() if r.content else {}
        except ValueError:
            body = {"raw": r.text[:500]}
        return {"status": r.status_code, "ok": r.is_success, "url": str(r.request.url), "body": body}
