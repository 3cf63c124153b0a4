"""
Command-line interface using Typer and Rich.

Provides:
- Repository cost estimation with a progress spinner
- Formatted tables for the summary and per-issue results
- Configuration and version display
- A launcher for the web server
"""

from __future__ import annotations

import asyncio
import sys
from dataclasses import replace
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn, TimeElapsedColumn
from rich.table import Table
from rich.text import Text

from ..core.config import settings
from ..core.exceptions import EstimatorError
from ..core.logging import configure_logging, get_logger
from ..domain.models import AnalyzedIssue, ComplexityTier, Report, Summary

# Initialize CLI components
app = typer.Typer(
    name="issue-cost-estimator",
    help="Estimate the cost of every open issue in a GitHub repository",
    add_completion=False,
    rich_markup_mode="rich",
)
console = Console()
logger = get_logger(__name__)

MAX_TABLE_ROWS = 50

_TIER_STYLES = {
    ComplexityTier.LOW: "green",
    ComplexityTier.MEDIUM: "yellow",
    ComplexityTier.HIGH: "red",
}


def print_summary(summary: Summary) -> None:
    """Display aggregate statistics."""
    table = Table(
        title="Cost Summary",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        border_style="cyan",
    )
    table.add_column("Metric", style="yellow")
    table.add_column("Value", justify="right", style="green")

    table.add_row("Open issues", str(summary.total_issues))
    table.add_row("Estimated cost", f"${summary.total_estimated_cost:,}")
    for tier, count in summary.tier_counts.items():
        table.add_row(f"{tier.value.capitalize()} complexity", str(count))

    console.print(table)


def print_issues(issues: tuple[AnalyzedIssue, ...]) -> None:
    """Display per-issue results, truncated to the first rows."""
    table = Table(
        title="Analyzed Issues",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
        border_style="cyan",
    )
    table.add_column("#", justify="right", style="magenta", width=7)
    table.add_column("Title", style="white", no_wrap=False)
    table.add_column("Complexity", width=10)
    table.add_column("Cost", justify="right", style="green", width=7)
    table.add_column("Reasoning", style="dim", no_wrap=False)

    for issue in issues[:MAX_TABLE_ROWS]:
        table.add_row(
            str(issue.issue_number),
            issue.title[:80],
            Text(issue.tier.value, style=_TIER_STYLES[issue.tier]),
            f"${issue.cost}",
            issue.reasoning[:100],
        )

    if len(issues) > MAX_TABLE_ROWS:
        table.add_row(
            "...", f"+{len(issues) - MAX_TABLE_ROWS} more", "", "", "", style="dim"
        )

    console.print(table)


def print_report(report: Report) -> None:
    console.print("\n")
    if report.message:
        console.print(Panel(report.message, border_style="yellow", expand=False))
        return
    print_summary(report.summary)
    console.print("\n")
    print_issues(report.issues)


@app.command()
def analyze(
    repo_url: Annotated[
        str,
        typer.Argument(help="Repository URL, e.g. https://github.com/owner/repo"),
    ],
    output: Annotated[
        Optional[Path],
        typer.Option(
            "--output",
            "-o",
            help="Write the CSV report to this file",
        ),
    ] = None,
    model: Annotated[
        Optional[str],
        typer.Option(
            "--model",
            "-m",
            help="LLM model to use (e.g., 'openai/gpt-4o', 'ollama/llama3')",
        ),
    ] = None,
    verbose: Annotated[
        bool,
        typer.Option(
            "--verbose",
            "-v",
            help="Enable verbose logging",
        ),
    ] = False,
) -> None:
    """
    Estimate the cost of the open issues of a repository.

    Every open issue is classified as low, medium or high complexity and
    priced at the midpoint of its tier's cost band.
    """
    # Lazy import to keep `version` and `config` fast
    from ..services.pipeline import analyze_repository

    if verbose:
        configure_logging("DEBUG")

    try:
        config = settings.pipeline_config()
    except EstimatorError as e:
        console.print(f"\n[red]Configuration error:[/red] {e.message}")
        raise typer.Exit(1)

    if model:
        config = replace(config, llm_model=model)

    console.print(f"\n[cyan]Repository:[/cyan] {repo_url}")
    console.print(f"[cyan]Model:[/cyan] {config.llm_model}\n")

    with Progress(
        SpinnerColumn(),
        TextColumn("[progress.description]{task.description}"),
        TimeElapsedColumn(),
        console=console,
    ) as progress:
        task = progress.add_task("[cyan]Estimating issue costs...", total=None)

        try:
            report = asyncio.run(analyze_repository(repo_url, config))
        except EstimatorError as e:
            progress.stop()
            console.print(f"\n[red]Analysis failed:[/red] {e.message}")
            if verbose and e.context:
                console.print(f"[dim]Context: {e.context}[/dim]")
            logger.error("analysis_failed", error=str(e))
            raise typer.Exit(1)

        progress.update(task, completed=True)

    console.print("[green]Analysis completed successfully![/green]")
    print_report(report)

    if output:
        output.write_text(report.csv_text, encoding="utf-8")
        console.print(f"\n[green]CSV report saved to:[/green] {output}")


@app.command()
def version() -> None:
    """Display version information."""
    version_text = Text()
    version_text.append(f"{settings.app_name}\n", style="bold blue")
    version_text.append(f"Version: {settings.app_version}\n", style="green")
    version_text.append(f"Environment: {settings.environment}\n", style="yellow")
    version_text.append(f"Default Model: {settings.llm_model}\n", style="cyan")

    console.print(Panel(version_text, border_style="blue"))


@app.command()
def config() -> None:
    """Display current configuration."""
    config_table = Table(
        title="Current Configuration",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold cyan",
    )
    config_table.add_column("Setting", style="yellow")
    config_table.add_column("Value", style="green")

    config_items = [
        ("Model", settings.llm_model),
        ("GitHub API", settings.github_api_url),
        ("GitHub Token", "configured" if settings.has_github_token else "missing"),
        ("LLM API Key", "configured" if settings.has_llm_api_key else "missing"),
        ("Classification Delay", f"{settings.classification_delay_seconds} s"),
        ("Request Timeout", f"{settings.request_timeout_seconds} s"),
        ("Environment", settings.environment),
        ("Log Level", settings.log_level),
    ]

    for key, value in config_items:
        config_table.add_row(key, str(value))

    console.print(config_table)


@app.command()
def server(
    host: Annotated[
        str,
        typer.Option(help="Host to bind the server to"),
    ] = settings.app_host,
    port: Annotated[
        int,
        typer.Option(help="Port to bind the server to"),
    ] = settings.app_port,
    reload: Annotated[
        bool,
        typer.Option(help="Enable auto-reload on code changes"),
    ] = False,
) -> None:
    """
    Start the web server exposing POST /api/analyze.
    """
    import uvicorn

    console.print("\n[green]Starting web server...[/green]")
    console.print(f"[cyan]URL:[/cyan] http://{host}:{port}")
    console.print(f"[cyan]API Docs:[/cyan] http://{host}:{port}/docs\n")

    try:
        uvicorn.run(
            "issue_cost_estimator.web.app:app",
            host=host,
            port=port,
            reload=reload,
            log_level=settings.log_level.lower(),
        )
    except KeyboardInterrupt:
        console.print("\n[yellow]Server stopped by user[/yellow]")


def main() -> None:
    """Main entry point for CLI."""
    try:
        app()
    except KeyboardInterrupt:
        console.print("\n[yellow]Operation cancelled by user[/yellow]")
        sys.exit(130)


if __name__ == "__main__":
    main()
