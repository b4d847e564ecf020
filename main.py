import asyncio
import json
import sys
from typing import Any, Dict, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from marathon_pronouns.logging.setup import setup_logging
from marathon_pronouns.models.enums import Source
from marathon_pronouns.pipeline.batch import aggregate_marathons
from marathon_pronouns.pipeline.orchestrator import calculate_for_source

from loguru import logger

app = typer.Typer(
    name="marathon-pronouns",
    help="Pronoun distribution statistics for marathon rosters and schedules.",
)
console = Console()


def _format_share(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.1%}"


def render_view(title: str, view: Dict[str, Any]) -> Table:
    """Rich table for one serialized AggregateView."""
    table = Table(title=title)
    table.add_column("Category")
    table.add_column("Count", justify="right")
    table.add_column("Share", justify="right")
    table.add_column("Normalized", justify="right")

    for category, count in view["counts"].items():
        normalized = view["normalizedPercentages"]
        table.add_row(
            category,
            str(count),
            _format_share(view["percentages"][category]),
            _format_share(normalized[category]) if category in normalized else "-",
        )
    return table


@app.callback()
def main(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="Override LOG_LEVEL from the environment"
    ),
) -> None:
    """Pronoun distribution statistics for marathon rosters and schedules."""
    setup_logging(log_level)


@app.command()
def calculate(
    source: Source = typer.Argument(..., help="Event platform"),
    locator: str = typer.Argument(
        ..., help="Oengus marathon slug, or Horaro 'organization/event'"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON result"),
) -> None:
    """Calculate pronoun statistics for one event."""
    result = asyncio.run(calculate_for_source(source, locator))

    if as_json:
        typer.echo(json.dumps(result, indent=2))
    elif "error" in result:
        console.print(Panel(result["error"], title="Error", style="red"))
    else:
        console.print(Panel(result["name"], style="bold"))
        console.print(render_view("Submissions", result["submissions"]))
        if result["schedule"] is not None:
            console.print(render_view("Schedule", result["schedule"]))

    if "error" in result:
        raise typer.Exit(1)


@app.command()
def combine(
    start: str = typer.Option(
        ..., "--start", help="Window start, ISO-8601 (e.g. 2021-01-01T05:00:00.000Z)"
    ),
    end: str = typer.Option(..., "--end", help="Window end, ISO-8601"),
    zone: str = typer.Option("UTC", "--zone", help="Time zone id passed to Oengus"),
    language: str = typer.Option(
        "en", "--language", help="Only include marathons in this language"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw JSON result"),
) -> None:
    """Combine statistics over every Oengus marathon in a date window."""
    combined = asyncio.run(aggregate_marathons(start, end, zone, language))
    data = combined.to_json()

    if as_json:
        typer.echo(json.dumps(data, indent=2))
        return

    console.print(Panel(f"{len(combined.events)} marathons combined", style="bold"))
    console.print(render_view("Submissions", data["submissions"]))
    console.print(render_view("Schedule", data["schedule"]))


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        logger.info("Execution interrupted by user (KeyboardInterrupt).")
        sys.exit(0)
