"""Forwards the hub's raw upload to the AcuRite cloud."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

import httpx

logger = logging.getLogger(__name__)

# Headers describing the inbound hop; httpx sets its own.
_HOP_HEADERS = frozenset({"host", "content-length", "connection", "transfer-encoding"})


class VendorRelay:
    def __init__(
        self,
        host: str,
        enabled: bool = True,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.host = host
        self.enabled = enabled
        self._client = client
        if self._client is None and enabled:
            self._client = httpx.Client(base_url=f"http://{host}", timeout=timeout)

    def forward(self, path: str, headers: Mapping[str, str]) -> None:
        """Replay ``path`` (including its query string) against the vendor host."""
        if not self.enabled or self._client is None:
            return
        forwarded = {
            name: value for name, value in headers.items() if name.lower() not in _HOP_HEADERS
        }
        try:
            response = self._client.get(path, headers=forwarded)
        except httpx.HTTPError as exc:
            logger.warning(
                "Relay to vendor cloud failed",
                extra={"path": path, "reason": str(exc) or type(exc).__name__},
            )
            return
        logger.debug(
            "Relayed upload to vendor cloud",
            extra={"path": path, "status_code": response.status_code},
        )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
