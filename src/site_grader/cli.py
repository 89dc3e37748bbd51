"""CLI interface for site-grader."""

import json
import logging
import sys
from pathlib import Path

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from rich import box

from . import __version__
from .auditor import ANALYZERS, audit_url
from .config import Settings
from .imaging import sniff_dimensions, sniff_format
from .models import AnalysisResult, Finding, Priority


console = Console()


def priority_style(finding: Finding) -> str:
    """Get Rich style for a finding."""
    if finding.passed:
        return "green"
    return {
        Priority.CRITICAL: "red",
        Priority.IMPORTANT: "yellow",
        Priority.OPTIONAL: "blue",
    }.get(finding.priority, "white")


def priority_icon(finding: Finding) -> str:
    """Get icon for a finding."""
    if finding.passed:
        return "✓"
    return {
        Priority.CRITICAL: "✗",
        Priority.IMPORTANT: "⚠",
        Priority.OPTIONAL: "ℹ",
    }.get(finding.priority, "•")


def score_color(score: int) -> str:
    """Get color for a score value."""
    if score >= 80:
        return "green"
    elif score >= 60:
        return "yellow"
    elif score >= 40:
        return "orange1"
    else:
        return "red"


def score_bar(score: int, width: int = 20) -> Text:
    """Create a visual score bar."""
    filled = int((score / 100) * width)
    color = score_color(score)

    bar = Text()
    bar.append("█" * filled, style=color)
    bar.append("░" * (width - filled), style="dim")
    bar.append(f" {score}/100", style=f"bold {color}")
    return bar


def _print_finding(finding: Finding, show_fix: bool = True) -> None:
    style = priority_style(finding)
    console.print(f"  [{style}]{priority_icon(finding)}[/] [dim]{finding.category.value}/{finding.subcategory}[/dim] {finding.issue}")
    if show_fix and not finding.passed and finding.how_to_fix:
        console.print(f"    [cyan]→ {finding.how_to_fix}[/cyan]")


def print_result(result: AnalysisResult, verbose: bool = False) -> None:
    """Print analysis result to console."""
    if result.error:
        console.print(f"\n[red]Error:[/red] {result.error}")
        return

    console.print()
    timing = f"Fetched in {result.fetch_time_ms}ms"
    if result.ttfb_ms is not None:
        timing += f" • TTFB {result.ttfb_ms}ms"
    console.print(Panel(
        f"[bold]{result.url}[/bold]\n[dim]{timing}[/dim]",
        title="Site Grader",
        border_style="blue",
    ))

    console.print()
    console.print(f"  Overall: [bold]{result.grade}[/bold] ", end="")
    console.print(score_bar(result.overall_score, width=25))
    console.print()

    table = Table(box=box.SIMPLE, show_header=True, header_style="bold")
    table.add_column("Analyzer", style="cyan")
    table.add_column("Score", justify="right")
    table.add_column("Status")

    for check in result.checks:
        failed = [f for f in check.findings if not f.passed]
        critical = sum(1 for f in failed if f.priority == Priority.CRITICAL)
        status_parts = []
        if critical:
            status_parts.append(f"[red]{critical} critical[/red]")
        if len(failed) > critical:
            status_parts.append(f"[yellow]{len(failed) - critical} other[/yellow]")
        if not failed:
            status_parts.append("[green]OK[/green]")

        table.add_row(
            check.name,
            f"[{score_color(check.score)}]{check.score}/100[/]",
            ", ".join(status_parts),
        )

    console.print(table)

    if verbose:
        console.print("\n[bold]All Findings:[/bold]\n")
        for finding in result.findings:
            _print_finding(finding)
    else:
        issues = [f for f in result.findings if not f.passed]
        if issues:
            console.print("\n[bold]Issues Found:[/bold]\n")
            for finding in issues:
                _print_finding(finding, show_fix=False)

    quick_wins = result.quick_wins
    if quick_wins:
        console.print("\n[bold]Top Quick Wins:[/bold]\n")
        for i, finding in enumerate(quick_wins[:3], 1):
            console.print(f"  {i}. [bold]{finding.issue}[/bold]")
            console.print(f"     [cyan]{finding.how_to_fix}[/cyan]")
            console.print()

    console.print("[dim]─" * 50 + "[/dim]")
    console.print(f"[dim]site-grader v{__version__}[/dim]")
    console.print()


def setup_logging(debug: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if debug else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True)],
        force=True,
    )


@click.group(invoke_without_command=True)
@click.pass_context
@click.version_option(version=__version__)
def cli(ctx):
    """Site Grader - deterministic website quality scoring.

    \b
    Quick start:
        site-grader scan example.com
        site-grader sniff og-image.png

    \b
    Commands:
        scan    Analyze a URL across every dimension
        sniff   Print the format and size of an image file
    """
    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


@cli.command()
@click.argument("url")
@click.option("-v", "--verbose", is_flag=True, help="Show all findings, not just issues")
@click.option("-t", "--timeout", type=float, default=None, help="Page fetch timeout in seconds")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option("--only", help=f"Comma-separated analyzers to run ({', '.join(ANALYZERS)})")
@click.option("--no-parallel", is_flag=True, help="Run analyzers one after another")
@click.option("--debug", is_flag=True, help="Log probes and scores to stderr")
def scan(url: str, verbose: bool, timeout: float | None, json_output: bool,
         only: str | None, no_parallel: bool, debug: bool):
    """Analyze a URL.

    \b
    Examples:
        site-grader scan stripe.com
        site-grader scan example.com --verbose
        site-grader scan example.com --only seo,security --json
    """
    setup_logging(debug)
    settings = Settings.from_env().with_overrides(
        fetch_timeout=timeout,
        parallel=False if no_parallel else None,
    )
    selected = [name.strip() for name in only.split(",") if name.strip()] if only else None

    try:
        if json_output:
            result = audit_url(url, settings=settings, only=selected)
        else:
            with console.status(f"[bold blue]Analyzing {url}...[/bold blue]"):
                result = audit_url(url, settings=settings, only=selected)
    except ValueError as e:
        raise click.ClickException(str(e)) from e

    if json_output:
        click.echo(json.dumps(result.to_dict(), indent=2))
    else:
        print_result(result, verbose=verbose)

    if result.error:
        sys.exit(1)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def sniff(path: Path):
    """Print the format and pixel size of an image file.

    \b
    Example:
        site-grader sniff public/og-image.png
    """
    data = path.read_bytes()
    fmt = sniff_format(data)
    size = sniff_dimensions(data)
    if fmt is None or size is None:
        raise click.ClickException(f"Unrecognized or truncated image: {path}")
    click.echo(f"{path.name}: {fmt} {size.width}x{size.height}")


# Convenience: allow `site-grader URL` as shortcut for `site-grader scan URL`
def main():
    """Entry point that handles both `site-grader URL` and `site-grader scan URL`."""
    args = sys.argv[1:]

    # If first arg looks like a URL (not a command), insert 'scan'
    if args and not args[0].startswith("-") and args[0] not in ("scan", "sniff", "--help", "--version"):
        if '.' in args[0] or '://' in args[0]:
            sys.argv.insert(1, 'scan')

    cli()


if __name__ == "__main__":
    main()
