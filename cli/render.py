from __future__ import annotations

from typing import Any, Dict, Iterable, List

import typer


def echo_heading(text: str) -> None:
    typer.secho(text, bold=True)


def echo_key_values(pairs: Iterable[tuple[str, Any]]) -> None:
    for key, value in pairs:
        typer.echo(f"{key}: {value}")


def _format_temperature(value: Any) -> str:
    if value is None:
        return "n/a"
    return f"{float(value):.1f}°C"


def render_weather(payload: Dict[str, Any], forecast_steps: int = 5) -> None:
    first = True
    for location, entry in payload.items():
        if not first:
            typer.echo()
        first = False
        echo_heading(location)

        current = entry.get("current_weather")
        if current:
            echo_key_values(
                [
                    ("temperature", _format_temperature(current.get("temperature"))),
                    ("condition", current.get("condition")),
                    ("humidity", f"{current.get('humidity')}%"),
                    ("wind_speed", f"{current.get('wind_speed')} m/s"),
                    ("observed_at", current.get("observed_at")),
                ]
            )
        else:
            typer.echo("No data yet.")

        forecast = entry.get("forecast") or {}
        steps = (forecast.get("entries") or [])[:forecast_steps]
        if steps:
            typer.echo("forecast:")
            for step in steps:
                typer.echo(
                    f"  - {step.get('timestamp')}: "
                    f"{_format_temperature(step.get('temperature'))} {step.get('condition')}"
                )
        elif entry.get("forecast_error"):
            typer.secho(f"forecast unavailable: {entry['forecast_error']}", fg=typer.colors.YELLOW)


def render_alerts(alerts: List[Dict[str, Any]]) -> None:
    echo_heading("Alerts")
    if not alerts:
        typer.echo("No alerts recorded.")
        return
    for alert in alerts:
        typer.secho(
            f"  - {alert.get('triggered_at')} {alert.get('location')}: "
            f"{_format_temperature(alert.get('temperature'))} above "
            f"{_format_temperature(alert.get('threshold'))} for {alert.get('streak')} updates",
            fg=typer.colors.RED,
        )


def render_summaries(rows: List[Dict[str, Any]]) -> None:
    echo_heading("Daily Summaries")
    if not rows:
        typer.echo("No summaries stored.")
        return
    for row in rows:
        typer.echo(
            f"  - {row.get('day')} {row.get('location')}: "
            f"avg {_format_temperature(row.get('avg_temp'))}, "
            f"max {_format_temperature(row.get('max_temp'))}, "
            f"min {_format_temperature(row.get('min_temp'))}, "
            f"mostly {row.get('dominant_condition')}"
        )
