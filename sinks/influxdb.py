"""InfluxDB 1.x writer using the HTTP line protocol."""

from __future__ import annotations

import logging
from typing import Iterable, List, Mapping, Optional

import httpx

from models.records import AttributeValue

logger = logging.getLogger(__name__)

RETENTION = "14d"
_NANOSECONDS_PER_MS = 1000 * 1000


def _escape_identifier(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace("=", "\\=").replace(" ", "\\ ")


def _escape_measurement(value: str) -> str:
    return value.replace("\\", "\\\\").replace(",", "\\,").replace(" ", "\\ ")


def _format_field_value(value: AttributeValue) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (int, float)):
        # Integers are written without the ``i`` suffix so every series is a float.
        return repr(value)
    escaped = str(value).replace("\\", "\\\\").replace('"', '\\"')
    return f'"{escaped}"'


def encode_lines(
    timestamp_ms: int,
    tags: Mapping[str, str],
    fields: Mapping[str, AttributeValue],
) -> List[str]:
    """Render one line-protocol point per field, all sharing ``tags`` and time."""
    tag_string = ",".join(
        f"{_escape_identifier(key)}={_escape_identifier(str(value))}"
        for key, value in tags.items()
    )
    timestamp_ns = int(timestamp_ms) * _NANOSECONDS_PER_MS
    lines = []
    for name, value in fields.items():
        measurement = _escape_measurement(name)
        prefix = f"{measurement},{tag_string}" if tag_string else measurement
        lines.append(f"{prefix} value={_format_field_value(value)} {timestamp_ns}")
    return lines


def _database_names(payload: Mapping) -> Iterable[str]:
    for result in payload.get("results") or []:
        for series in result.get("series") or []:
            for row in series.get("values") or []:
                if row:
                    yield row[0]


class InfluxDBSink:
    """Writes normalized readings to an InfluxDB database.

    A sink built without a base URL is disabled: every call is a logged no-op.
    """

    def __init__(
        self,
        base_url: Optional[str],
        database: str,
        client: Optional[httpx.Client] = None,
        timeout: float = 10.0,
    ) -> None:
        self.base_url = base_url
        self.database = database
        self._client = client
        if self._client is None and base_url is not None:
            self._client = httpx.Client(base_url=base_url, timeout=timeout)
        self._disabled_logged = False

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def ensure_database(self) -> None:
        """Create the target database with a 14 day retention if it is missing."""
        if not self._check_enabled():
            return

        assert self._client is not None
        logger.info("Checking InfluxDB databases", extra={"database": self.database})
        try:
            response = self._client.get(
                "/query", params={"q": "SHOW DATABASES", "db": "_internal"}
            )
            response.raise_for_status()
            databases = list(_database_names(response.json()))
            if self.database in databases:
                logger.info("InfluxDB database already exists", extra={"database": self.database})
                return

            logger.info(
                "Creating InfluxDB database (existing: %s)",
                ", ".join(databases) or "none",
                extra={"database": self.database},
            )
            response = self._client.post(
                "/query",
                params={
                    "q": f'CREATE DATABASE "{self.database}" WITH DURATION {RETENTION}',
                    "db": "_internal",
                },
            )
            response.raise_for_status()
        except (httpx.HTTPError, ValueError) as exc:
            logger.warning(
                "Unable to prepare InfluxDB database",
                extra={"database": self.database, "reason": str(exc) or type(exc).__name__},
            )

    def write(
        self,
        timestamp_ms: int,
        tags: Mapping[str, str],
        fields: Mapping[str, AttributeValue],
    ) -> None:
        """POST one batch of points. Failures are logged and dropped."""
        if not self._check_enabled():
            return
        lines = encode_lines(timestamp_ms, tags, fields)
        if not lines:
            return

        assert self._client is not None
        try:
            response = self._client.post(
                "/write",
                params={"db": self.database},
                content="\n".join(lines).encode("utf-8"),
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            logger.warning(
                "InfluxDB rejected write",
                extra={
                    "database": self.database,
                    "status_code": exc.response.status_code,
                    "reason": exc.response.text.strip(),
                },
            )
        except httpx.HTTPError as exc:
            logger.warning(
                "InfluxDB write failed",
                extra={"database": self.database, "reason": str(exc) or type(exc).__name__},
            )

    def close(self) -> None:
        if self._client is not None:
            self._client.close()

    def _check_enabled(self) -> bool:
        if self.enabled:
            return True
        if not self._disabled_logged:
            logger.info("InfluxDB not configured")
            self._disabled_logged = True
        return False
