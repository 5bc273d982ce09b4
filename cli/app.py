from __future__ import annotations

import time
from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

import typer

from cli.client import ApiClient
from cli.render import render_alerts, render_summaries, render_weather

DEFAULT_BASE_URL = "http://localhost:8000"


@dataclass
class CLIState:
    base_url: str
    client: ApiClient


app = typer.Typer(
    help="Utilities for querying the weather monitor service.",
    context_settings={"help_option_names": ["-h", "--help"]},
)


def _get_state(ctx: typer.Context) -> CLIState:
    state = ctx.obj
    if not isinstance(state, CLIState):
        typer.secho("CLI state is uninitialized.", fg=typer.colors.RED, err=True)
        raise typer.Exit(code=1)
    return state


def _as_date(value: Optional[datetime]) -> Optional[date]:
    return value.date() if value is not None else None


@app.callback()
def main(
    ctx: typer.Context,
    base_url: str = typer.Option(
        DEFAULT_BASE_URL,
        "--base-url",
        "-b",
        envvar="API_BASE_URL",
        help="Monitor API base URL.",
    ),
) -> None:
    """Entry point for the CLI."""
    client = ApiClient(base_url)
    ctx.obj = CLIState(base_url=client.base_url, client=client)
    ctx.call_on_close(client.close)


@app.command("current")
def current_command(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Only show this location."),
    forecast: bool = typer.Option(True, "--forecast/--no-forecast", help="Include the forecast."),
) -> None:
    """Show the latest observation (and forecast) per location."""
    state = _get_state(ctx)
    payload = state.client.get_weather(location, include_forecast=forecast)
    render_weather(payload)


@app.command("watch")
def watch_command(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l", help="Only show this location."),
    interval: float = typer.Option(
        60.0, "--interval", envvar="CLI_WATCH_INTERVAL", min=0.0, help="Seconds between refreshes."
    ),
    timeout: float = typer.Option(
        600.0, "--timeout", envvar="CLI_WATCH_TIMEOUT", min=0.0, help="Stop watching after this many seconds."
    ),
    count: Optional[int] = typer.Option(None, "--count", min=1, help="Stop after this many refreshes."),
) -> None:
    """Print current conditions repeatedly."""
    state = _get_state(ctx)
    deadline = time.monotonic() + timeout
    shown = 0
    while True:
        payload = state.client.get_weather(location, include_forecast=False)
        typer.secho(f"--- {datetime.now().strftime('%Y-%m-%d %H:%M:%S')} ---", dim=True)
        render_weather(payload)
        shown += 1
        if count is not None and shown >= count:
            return
        if time.monotonic() + interval > deadline:
            return
        time.sleep(interval)


@app.command("alerts")
def alerts_command(ctx: typer.Context) -> None:
    """List recently fired temperature alerts."""
    state = _get_state(ctx)
    render_alerts(state.client.get_alerts())


@app.command("summarize")
def summarize_command(
    ctx: typer.Context,
    day: Optional[datetime] = typer.Option(
        None, "--date", formats=["%Y-%m-%d"], help="UTC day to summarize (defaults to today)."
    ),
) -> None:
    """Aggregate the collected readings of a day into stored summaries."""
    state = _get_state(ctx)
    rows = state.client.create_summaries(_as_date(day))
    typer.secho(f"Stored {len(rows)} summaries.", fg=typer.colors.GREEN)
    render_summaries(rows)


@app.command("summaries")
def summaries_command(
    ctx: typer.Context,
    location: Optional[str] = typer.Option(None, "--location", "-l"),
    day: Optional[datetime] = typer.Option(None, "--date", formats=["%Y-%m-%d"]),
) -> None:
    """List stored daily summaries."""
    state = _get_state(ctx)
    render_summaries(state.client.list_summaries(location, _as_date(day)))
