from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

import httpx
import typer

from cli.client import ApiClient, HubClient
from cli.config import CLIConfig, load_config
from cli.render import render_status


@dataclass
class CLIState:
    config: CLIConfig


app = typer.Typer(
    help="Utilities for operating the AcuRite bridge and the hubs that feed it.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Bridge base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each HTTP request.",
    ),
) -> None:
    """Entry point for the CLI."""
    ctx.obj = CLIState(config=load_config(base_url=base_url, timeout=timeout))


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show when each device last reported and the latest raw requests."""
    state = _get_state(ctx)
    client = ApiClient(state.config)
    try:
        payload = client.get_status()
    finally:
        client.close()
    render_status(payload)


@app.command("retarget-hubs")
def retarget_hubs_command(
    ctx: typer.Context,
    ips: Optional[List[str]] = typer.Argument(
        None, help="Hub IP addresses (defaults to ACURITE_IPS env)."
    ),
    host: Optional[str] = typer.Option(
        None,
        "--host",
        help="Hostname the hubs should upload to (defaults to HOST env).",
    ),
) -> None:
    """Point each hub's upload host at this bridge."""
    state = _get_state(ctx)
    config = load_config(
        base_url=state.config.base_url,
        timeout=state.config.timeout,
        host=host,
        hub_ips=ips,
    )
    if not config.host:
        typer.secho("A target host is required (--host or HOST).", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)
    if not config.hub_ips:
        typer.secho("No valid hub IP addresses given.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=2)

    hubs = HubClient(config)
    failures = 0
    try:
        for ip in config.hub_ips:
            try:
                current = hubs.current_host(ip)
                if current == config.host:
                    typer.echo(f"Hub {ip} already has host {config.host}")
                    continue
                typer.echo(f"Hub {ip} had host {current}, changing to {config.host}")
                hubs.set_host(ip, config.host)
            except (httpx.HTTPError, ValueError) as exc:
                failures += 1
                typer.secho(f"Error with hub {ip}: {exc}", fg=typer.colors.RED, err=True)
    finally:
        hubs.close()

    if failures:
        raise typer.Exit(code=1)
