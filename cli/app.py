from __future__ import annotations

import time
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

import typer

from cli.client import ApiClient
from cli.config import CLIConfig, load_config
from cli.render import render_archive_day, render_status, render_summary
from logging_config import configure_logging
from services.pipeline import build_pipeline
from settings import get_settings


@dataclass
class CLIState:
    config: CLIConfig
    client: Optional[ApiClient] = None


app = typer.Typer(
    help="Run the temperature archiver or inspect a running service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _get_client(ctx: typer.Context) -> ApiClient:
    state = _get_state(ctx)
    if state.client is None:
        state.client = ApiClient(state.config)
        ctx.call_on_close(state.client.close)
    return state.client


@app.callback()
def main(
    ctx: typer.Context,
    base_url: Optional[str] = typer.Option(
        None,
        "--base-url",
        "-b",
        help="Archiver API base URL (defaults to API_BASE_URL env or http://localhost:8000).",
    ),
    timeout: Optional[float] = typer.Option(
        None,
        "--timeout",
        help="Seconds to wait for each API request.",
    ),
) -> None:
    """Entry point for the CLI."""
    config = load_config(base_url=base_url, request_timeout=timeout)
    ctx.obj = CLIState(config=config)


@app.command("run")
def run_command(
    interval: Optional[float] = typer.Option(
        None, "--interval", min=0.001, help="Seconds between sensor samples."
    ),
    batch_size: Optional[int] = typer.Option(
        None, "--batch-size", min=1, help="Queued readings that trigger a flush."
    ),
    archive_root: Optional[Path] = typer.Option(
        None, "--archive-root", file_okay=False, help="Directory holding <year>/<month>/<day>.dat files."
    ),
    realtime: Optional[bool] = typer.Option(
        None, "--realtime/--no-realtime", help="Forward each reading to the realtime client."
    ),
    client_url: Optional[str] = typer.Option(
        None, "--client-url", help="URL that receives realtime readings as JSON."
    ),
    sensor: Optional[str] = typer.Option(
        None, "--sensor", help="Sensor source: 'simulated' or 'tmp102'."
    ),
    duration: Optional[float] = typer.Option(
        None, "--duration", min=0.0, help="Stop after this many seconds instead of waiting for Ctrl+C."
    ),
) -> None:
    """Sample and archive readings in the foreground until interrupted."""
    settings = get_settings()
    overrides = {
        "sample_interval": interval,
        "batch_size": batch_size,
        "archive_root": str(archive_root) if archive_root is not None else None,
        "realtime_enabled": realtime,
        "realtime_client_url": client_url,
        "sensor_source": sensor.lower() if sensor else None,
    }
    settings = replace(settings, **{k: v for k, v in overrides.items() if v is not None})
    configure_logging(settings.log_level)

    try:
        pipeline = build_pipeline(settings)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc

    typer.echo(
        f"Archiving to {settings.archive_root} every {settings.sample_interval}s "
        f"(batch size {settings.batch_size}). Press Ctrl+C to stop."
    )
    pipeline.start()
    try:
        if duration is not None:
            time.sleep(duration)
        else:
            while True:
                time.sleep(1.0)
    except KeyboardInterrupt:
        typer.echo()
    finally:
        pipeline.stop()

    snapshot = pipeline.snapshot()
    typer.secho(
        f"Stopped. Archived {snapshot.flushed_readings} readings in {snapshot.flushed_batches} batches.",
        fg=typer.colors.GREEN,
    )


@app.command("status")
def status_command(ctx: typer.Context) -> None:
    """Show the pipeline status of a running service."""
    render_status(_get_client(ctx).get_status())


@app.command("archive")
def archive_command(
    ctx: typer.Context,
    year: int = typer.Argument(..., help="Four digit year."),
    month: int = typer.Argument(..., min=1, max=12, help="Month number."),
    day: int = typer.Argument(..., min=1, max=31, help="Day of month."),
    summary: bool = typer.Option(
        False,
        "--summary/--readings",
        help="Show aggregate statistics instead of every reading.",
    ),
) -> None:
    """Print the readings archived on a given day."""
    client = _get_client(ctx)
    if summary:
        render_summary(client.get_archive_summary(year, month, day))
    else:
        render_archive_day(client.get_archive_day(year, month, day))
