"""CLI entry point for sleep-insights-server."""

import asyncio
import json
from datetime import datetime
from pathlib import Path

import typer
import uvicorn

from sleep_insights_server import __version__
from sleep_insights_server.core.config import settings
from sleep_insights_server.core.logging import configure_logging
from sleep_insights_server.schemas.sleep import SleepAnalysisReport, TimeWindow
from sleep_insights_server.services.advice import AdviceClient
from sleep_insights_server.services.analysis import SleepAnalysisService
from sleep_insights_server.services.formatting import format_hours_and_minutes
from sleep_insights_server.services.ingest import NoSleepDataError, load_sleep_records

app = typer.Typer(
    name="sleep-insights-server",
    help="Sleep quality scoring and insights for nightly sleep exports",
    no_args_is_help=True,
)


@app.command()
def serve(
    host: str = typer.Option(None, help="Host to bind to (overrides config)"),
    port: int = typer.Option(None, help="Port to bind to (overrides config)"),
    reload: bool = typer.Option(False, help="Enable auto-reload for development"),
) -> None:
    """Start the API server.

    Example:
        sleep-insights-server serve
        sleep-insights-server serve --host 0.0.0.0 --port 8080 --reload
    """
    uvicorn.run(
        "sleep_insights_server.app:app",
        host=host or settings.api_host,
        port=port or settings.api_port,
        reload=reload,
        log_level=settings.log_level.lower(),
    )


@app.command()
def analyze(
    csv_path: Path = typer.Argument(..., exists=True, dir_okay=False, help="CSV sleep export"),
    window: TimeWindow = typer.Option(settings.default_window, help="week, month or all"),
    today: str = typer.Option(None, help="Reference date for the window (YYYY-MM-DD)"),
    remote: bool = typer.Option(True, help="Ask the advice service before composing locally"),
    as_json: bool = typer.Option(False, "--json", help="Print the full report as JSON"),
) -> None:
    """Analyze a sleep export file.

    Example:
        sleep-insights-server analyze export.csv --window month --no-remote
    """
    configure_logging()

    try:
        reference = datetime.strptime(today, "%Y-%m-%d").date() if today else None
    except ValueError as e:
        raise typer.BadParameter(f"Invalid date: {today}", param_hint="--today") from e

    try:
        records = load_sleep_records(csv_path.read_text(encoding="utf-8-sig"))
        service = SleepAnalysisService(advice_client=AdviceClient.from_settings(settings))
        report = asyncio.run(service.analyze(records, window, reference, use_advice=remote))
    except NoSleepDataError as e:
        typer.echo(f"Error: {e}", err=True)
        raise typer.Exit(code=1) from e

    if as_json:
        typer.echo(json.dumps(report.model_dump(mode="json", by_alias=True), indent=2))
    else:
        typer.echo(render_report(report))


def render_report(report: SleepAnalysisReport) -> str:
    """Render a report as plain text."""
    insights = report.insights
    lines = [
        f"Window: {report.window.value} ({report.digest.data_points} nights)",
        f"Average sleep: {format_hours_and_minutes(insights.average_sleep_duration)}",
        f"Deep / core / REM: {insights.deep_sleep_percentage:.0f}% / "
        f"{insights.core_sleep_percentage:.0f}% / {insights.rem_sleep_percentage:.0f}%",
        f"Sleep quality: {insights.sleep_quality_score}/100 "
        f"({report.analysis.quality_category.value})",
        f"Consistency: {insights.sleep_consistency}/10",
        f"Duration trend: {insights.average_sleep_duration_trend:+.1f}%",
        "",
        "Insights:",
    ]
    lines.extend(f"  [{i.color.value}] {i.title}" for i in insights.insights)
    lines.append("")
    lines.append("Recommendations:")
    lines.extend(f"  - {r.title}" for r in insights.recommendations)
    lines.append("")
    lines.append(f"Analysis ({report.analysis.source.value}):")
    lines.append(report.analysis.summary)
    return "\n".join(lines)


@app.command()
def version() -> None:
    """Show version information."""
    typer.echo(f"sleep-insights-server v{__version__}")


def main() -> None:
    """Main entry point."""
    app()


if __name__ == "__main__":
    main()
