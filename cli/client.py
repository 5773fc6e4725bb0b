from __future__ import annotations

import re
from typing import Any, Dict

import httpx
import typer

from cli.config import CLIConfig

_HUB_HOST_PATTERN = re.compile(r"\$\('txtSer'\)\.value = '([^']+)'")


class ApiClient:
    """Minimal HTTP client for the bridge service."""

    def __init__(self, config: CLIConfig) -> None:
        self._config = config
        self._client = httpx.Client(base_url=config.base_url, timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def get_status(self) -> Dict[str, Any]:
        try:
            response = self._client.get("/")
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            self._handle_http_error(exc)
        except httpx.TransportError as exc:
            typer.secho(
                f"Could not reach {self._config.base_url}: {exc}", fg=typer.colors.RED, err=True
            )
            raise typer.Exit(code=1)
        return response.json()

    @staticmethod
    def _handle_http_error(exc: httpx.HTTPStatusError) -> None:
        detail: str | None = None
        try:
            data = exc.response.json()
            detail = data.get("detail")
        except Exception:  # noqa: BLE001 - best effort parsing
            detail = exc.response.text.strip()
        message = (
            f"Request failed with status {exc.response.status_code}: {detail or 'no detail provided.'}"
        )
        typer.secho(message, fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)


class HubClient:
    """Talks to the configuration pages served by AcuRite Access hubs."""

    def __init__(self, config: CLIConfig) -> None:
        self._client = httpx.Client(timeout=config.timeout)

    def close(self) -> None:
        self._client.close()

    def current_host(self, ip: str) -> str:
        """Scrape the upload host the hub is currently configured with."""
        response = self._client.get(f"http://{ip}/")
        response.raise_for_status()
        match = _HUB_HOST_PATTERN.search(response.text)
        if match is None:
            raise ValueError(f"Hub {ip} did not report an upload host.")
        return match.group(1)

    def set_host(self, ip: str, host: str) -> None:
        response = self._client.post(f"http://{ip}/config.cgi", data={"ser": host})
        response.raise_for_status()
