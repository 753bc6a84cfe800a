from __future__ import annotations

from typing import Any, Dict, Iterable

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def render_status(payload: Dict[str, Any]) -> None:
    echo_heading("Pipeline Status")
    echo_key_values(
        [
            ("sensor_state", payload.get("sensor_state")),
            ("writer_state", payload.get("writer_state")),
            ("queued", payload.get("queued")),
            ("realtime", payload.get("realtime")),
        ]
    )

    typer.echo()
    echo_heading("Counters")
    echo_key_values(
        [
            ("samples_taken", payload.get("samples_taken")),
            ("samples_skipped", payload.get("samples_skipped")),
            ("flushed_batches", payload.get("flushed_batches")),
            ("flushed_readings", payload.get("flushed_readings")),
            ("failed_flushes", payload.get("failed_flushes")),
            ("dropped_readings", payload.get("dropped_readings")),
        ]
    )

    latest = payload.get("latest")
    typer.echo()
    echo_heading("Latest Reading")
    if latest:
        typer.echo(f"{latest.get('timestamp')}  {latest.get('temperature_f')} F")
    else:
        typer.echo("No readings yet.")


def render_archive_day(payload: Dict[str, Any]) -> None:
    readings = payload.get("readings") or []
    echo_heading(f"Archive {payload.get('day')} ({len(readings)} readings)")
    for reading in readings:
        typer.echo(f"  {reading.get('timestamp')}  {reading.get('temperature_f')} F")


def render_summary(payload: Dict[str, Any]) -> None:
    echo_heading(f"Summary {payload.get('day')}")
    echo_key_values(
        [
            ("count", payload.get("count")),
            ("min_temperature_f", payload.get("min_temperature_f")),
            ("max_temperature_f", payload.get("max_temperature_f")),
            ("mean_temperature_f", payload.get("mean_temperature_f")),
            ("first_timestamp", payload.get("first_timestamp")),
            ("last_timestamp", payload.get("last_timestamp")),
        ]
    )
