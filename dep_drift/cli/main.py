"""Main CLI interface for DepDrift."""

import asyncio
import dataclasses
import time
from pathlib import Path
from typing import List, Optional
import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from ..config import DriftConfig
from ..errors import DepDriftError, FetchError
from ..utils.logging import setup_logging, get_logger
from ..utils.path_utils import find_manifest_files, read_text_or_empty
from ..utils.performance import PerformanceMonitor
from ..core.parsers import DependencyParser
from ..core.pipeline import DriftPipeline, build_contexts
from ..registries import AiohttpFetcher, all_clients, get_registry_client
from ..output.formatters import ConsoleFormatter, JSONFormatter, ManifestReport

app = typer.Typer(
    name="depdrift",
    help="A CLI tool reporting how far locked dependencies have drifted from their registries",
    add_completion=False
)

console = Console()
logger = get_logger("dep_drift.cli")


@app.command()
def check(
    path: Path = typer.Argument(
        Path("."),
        help="Project directory to search, or a single manifest file"
    ),
    json_output: Optional[Path] = typer.Option(
        None,
        "--json",
        "-o",
        help="Output file for JSON results"
    ),
    ttl: Optional[float] = typer.Option(
        None,
        "--ttl",
        help="Seconds before cached registry results are dropped"
    ),
    concurrency: Optional[int] = typer.Option(
        None,
        "--concurrency",
        "-c",
        help="Maximum concurrent registry requests"
    ),
    verbose: bool = typer.Option(
        False,
        "--verbose",
        "-v",
        help="Enable verbose logging"
    ),
    performance: bool = typer.Option(
        False,
        "--performance",
        help="Show performance summary"
    ),
    ignore_patterns: Optional[List[str]] = typer.Option(
        None,
        "--ignore",
        help="Additional ignore patterns"
    )
) -> None:
    """Check manifests for dependencies behind their latest release."""
    setup_logging(verbose=verbose)

    try:
        config = _load_config(ttl, concurrency)
        manifests = find_manifest_files(path, DependencyParser.get_manifest_names(), ignore_patterns)
    except ValueError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    if not manifests:
        console.print("[yellow]No manifests found[/yellow]")
        return

    monitor = PerformanceMonitor()
    start_time = time.perf_counter()
    reports = asyncio.run(_check_manifests(manifests, config, monitor))
    check_time = time.perf_counter() - start_time

    formatter = ConsoleFormatter(console)
    for report in reports:
        formatter.format_report(report)
    formatter.format_summary(reports)

    if json_output:
        json_formatter = JSONFormatter(json_output)
        json_formatter.save_results(json_formatter.format_check_results(reports, check_time))
        console.print(f"[green]Results saved to: {json_output}[/green]")

    if performance:
        monitor.print_summary(console)

    if any(report.failed for report in reports):
        raise typer.Exit(1)


def _load_config(ttl: Optional[float], concurrency: Optional[int]) -> DriftConfig:
    """Environment configuration with command-line overrides applied.

    Raises:
        ValueError: If a setting is invalid
    """
    config = DriftConfig.from_env()
    overrides = {}
    if ttl is not None:
        overrides["cache_ttl"] = ttl
    if concurrency is not None:
        overrides["max_concurrent"] = concurrency
    return dataclasses.replace(config, **overrides) if overrides else config


async def _check_manifests(
    manifests: List[Path],
    config: DriftConfig,
    monitor: PerformanceMonitor
) -> List[ManifestReport]:
    """Run the pipeline over each manifest with one shared HTTP session.

    Args:
        manifests: Manifest paths to check
        config: Runtime configuration
        monitor: Collector for phase timings

    Returns:
        One report per manifest, failed manifests included
    """
    pipeline = DriftPipeline(config, monitor)
    reports = []

    async with AiohttpFetcher(config) as fetcher:
        contexts = build_contexts(fetcher, config)

        for manifest_path in manifests:
            parser = DependencyParser.find_parser_for_file(manifest_path)
            if parser is None:
                continue

            report = ManifestReport(manifest_path, parser.ecosystem)
            try:
                report.source = manifest_path.read_text(encoding="utf-8")
                lockfile_text = read_text_or_empty(DependencyParser.lockfile_for(manifest_path))
                if not lockfile_text:
                    logger.info(f"No {parser.lockfile_name} next to {manifest_path}")
                report.annotations = await pipeline.analyze(
                    report.source, lockfile_text, contexts[parser.ecosystem]
                )
            except (DepDriftError, OSError) as e:
                logger.error(f"{manifest_path}: {e}")
                report.error = str(e)
            reports.append(report)

    return reports


@app.command()
def latest(
    name: str = typer.Argument(..., help="Package name"),
    ecosystem: str = typer.Option(
        "rust",
        "--ecosystem",
        "-e",
        help="Package ecosystem: rust, python or nodejs"
    )
) -> None:
    """Show the latest published version of a package."""
    setup_logging()

    if ecosystem not in DependencyParser.get_supported_ecosystems():
        console.print(f"[red]Error: Unsupported ecosystem: {ecosystem}[/red]")
        raise typer.Exit(1)

    config = DriftConfig.from_env()

    async def query() -> str:
        async with AiohttpFetcher(config) as fetcher:
            return await get_registry_client(ecosystem, fetcher).get_max_version(name)

    try:
        version = asyncio.run(query())
    except FetchError as e:
        console.print(f"[red]Error: {e}[/red]")
        raise typer.Exit(1)

    console.print(f"{name} {version}")


@app.command()
def info() -> None:
    """Show DepDrift information."""

    console.print(Panel.fit(
        "[bold blue]DepDrift[/bold blue]\n"
        "Reports how far locked dependencies have drifted\n"
        "from the latest versions on their registries",
        title="Information"
    ))

    clients = all_clients()
    table = Table(title="Supported Ecosystems")
    table.add_column("Ecosystem", style="cyan")
    table.add_column("Manifest")
    table.add_column("Lockfile")
    table.add_column("Registry", style="green")

    for parser in DependencyParser:
        client = clients.get(parser.ecosystem)
        table.add_row(
            parser.ecosystem,
            parser.manifest_name,
            parser.lockfile_name,
            client.name if client else "-"
        )

    console.print(table)


def main() -> None:
    """Main entry point for DepDrift CLI."""
    app()


if __name__ == "__main__":
    main()
