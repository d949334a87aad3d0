from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Iterable

import typer

from settings import Settings

_SECRET_KEYS = {"influx_password"}


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_ack(path: str, payload: Dict[str, Any]) -> None:
    typer.secho(
        f"{path}: accepted event_id={payload.get('event_id')} readings={payload.get('readings')}",
        fg=typer.colors.GREEN,
    )


def render_settings(settings: Settings) -> None:
    echo_heading("Settings")
    pairs = []
    for key, value in asdict(settings).items():
        if key in _SECRET_KEYS and value:
            value = "********"
        pairs.append((key, value))
    echo_key_values(pairs)
