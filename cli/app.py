from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_ack, render_settings
from settings import ConfigError, get_settings, validate_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: ApiClient


app = typer.Typer(
    help="Utilities for operating the EdgeX Influx ingest service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)
config_app = typer.Typer(help="Inspect the service settings read from the environment.")
app.add_typer(config_app, name="config")


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.find_object(CLIState)
    if not isinstance(state, CLIState):
        raise typer.Exit(code=1)
    return state


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Ingest service base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, timeout=timeout)
    client = ApiClient(config)
    ctx.obj = CLIState(config=config, client=client)
    ctx.call_on_close(client.close)


@app.command("send")
def send_command(
    ctx: typer.Context,
    files: List[Path] = typer.Argument(
        ..., exists=True, dir_okay=False, readable=True, help="EdgeX event JSON files."
    ),
) -> None:
    """Push one or more EdgeX event files to the ingest service."""
    state = _get_state(ctx)
    typer.echo(f"Sending {len(files)} event(s) to {state.config.base_url} ...")
    for path in files:
        payload = state.client.send_event(path)
        render_ack(str(path), payload)


@app.command("serve")
def serve_command(
    host: str = typer.Option("0.0.0.0", "--host", help="Interface to bind."),
    port: int = typer.Option(8000, "--port", "-p", min=1, max=65535, help="Port to bind."),
) -> None:
    """Run the ingest HTTP service."""
    try:
        validate_settings(get_settings())
    except ConfigError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc

    import uvicorn

    # log_config=None keeps the service's own logging configuration.
    uvicorn.run("app.main:app", host=host, port=port, log_config=None)


@config_app.command("show")
def config_show_command() -> None:
    """Print the effective settings."""
    render_settings(get_settings())


@config_app.command("check")
def config_check_command() -> None:
    """Validate the effective settings."""
    try:
        validate_settings(get_settings())
    except ConfigError as exc:
        typer.secho(f"Invalid configuration: {exc}", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1) from exc
    typer.secho("Configuration is valid.", fg=typer.colors.GREEN)
