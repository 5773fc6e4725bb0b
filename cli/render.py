from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def format_epoch_ms(value: Any) -> str:
    if not isinstance(value, (int, float)):
        return str(value)
    moment = datetime.fromtimestamp(value / 1000, tz=timezone.utc)
    return moment.isoformat().replace("+00:00", "Z")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Last Seen")
    last_seen = payload.get("lastSeen") or {}
    if last_seen:
        for sensor_id, models in sorted(last_seen.items()):
            echo_key_values(
                (f"  - {model_type}:{sensor_id}", format_epoch_ms(timestamp))
                for model_type, timestamp in sorted(models.items())
            )
    else:
        typer.echo("No devices have reported yet.")

    requests = payload.get("last10Reqs") or []
    typer.echo()
    echo_heading("Recent Requests")
    if requests:
        for path in requests:
            typer.echo(f"  - {path}")
    else:
        typer.echo("No requests recorded.")
