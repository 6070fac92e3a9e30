"""Output formatters for DepDrift results."""

import json
from collections import Counter
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from rich.console import Console
from rich.panel import Panel
from rich.table import Table
from rich.text import Text

from ..core.classifier import BLUE, GREEN, GREY, RED, YELLOW, Fragment, Severity
from ..core.pipeline import Annotation, AnnotationSink, publish
from ..utils.logging import get_logger

# Style tags -> rich styles
RICH_STYLES = {
    GREY: "dim",
    RED: "red",
    BLUE: "blue",
    GREEN: "green",
    YELLOW: "yellow",
}


@dataclass
class ManifestReport:
    """Outcome of checking one manifest file."""

    path: Path
    ecosystem: str
    annotations: List[Annotation] = field(default_factory=list)
    error: Optional[str] = None
    source: str = ""

    @property
    def failed(self) -> bool:
        return self.error is not None


class ConsoleFormatter(AnnotationSink):
    """Rich console formatter mimicking inline editor annotations.

    Each annotation is printed after the manifest line it belongs to.
    """

    def __init__(self, console: Optional[Console] = None) -> None:
        """Initialize the console formatter.

        Args:
            console: Rich console instance
        """
        self.console = console or Console()
        self.logger = get_logger(__name__)
        self._lines: List[str] = []

    def format_report(self, report: ManifestReport) -> None:
        """Print a manifest header followed by its annotated lines."""
        self.console.rule(f"[bold]{report.path}[/bold] [dim]({report.ecosystem})[/dim]", align="left")

        if report.failed:
            self.format_error(report.error or "")
            return
        if not report.annotations:
            self.console.print("[dim]No dependencies declared[/dim]")
            return

        self._lines = report.source.split("\n")
        publish(report.annotations, self)

    def set_text(self, line: int, fragments: List[Fragment]) -> None:
        """Print one annotated manifest line."""
        source = self._lines[line].strip() if line < len(self._lines) else ""
        text = Text(f"{line + 1:>5}  ", style="dim")
        text.append(f"{source:<40}  ")
        text.append_text(to_rich_text(fragments))
        self.console.print(text, soft_wrap=True)

    def format_summary(self, reports: List[ManifestReport]) -> None:
        """Print severity counts across all reports."""
        counts = severity_counts(reports)
        failed = sum(1 for report in reports if report.failed)

        table = Table(title="Drift Summary")
        table.add_column("Severity", style="cyan")
        table.add_column("Dependencies", justify="right")
        for severity in Severity:
            style = RICH_STYLES.get(_SUMMARY_STYLES.get(severity, GREY), "")
            table.add_row(Text(severity.value, style=style), str(counts.get(severity.value, 0)))
        if counts.get("error"):
            table.add_row(Text("error", style="red"), str(counts["error"]))

        self.console.print(table)
        if failed:
            self.console.print(f"[red]{failed} manifest(s) could not be checked[/red]")

    def format_error(self, error: str, details: Optional[str] = None) -> None:
        """Format and display error message.

        Args:
            error: Error message
            details: Optional error details
        """
        content = Text("Error: ", style="bold red")
        content.append(error)
        if details:
            content.append(f"\n\n{details}", style="dim")

        self.console.print(Panel(content, style="red"))


_SUMMARY_STYLES = {
    Severity.MAJOR: RED,
    Severity.MINOR: BLUE,
    Severity.PATCH: GREEN,
    Severity.UNRESOLVABLE: YELLOW,
}


def to_rich_text(fragments: List[Fragment]) -> Text:
    """Convert ``(text, style)`` fragments into rich text."""
    text = Text()
    for content, style in fragments:
        text.append(content, style=RICH_STYLES.get(style, ""))
    return text


def severity_counts(reports: List[ManifestReport]) -> Counter:
    """Count annotations per severity value; fetch failures count as ``error``."""
    counts: Counter = Counter()
    for report in reports:
        for annotation in report.annotations:
            if annotation.error is not None:
                counts["error"] += 1
            elif annotation.drift is not None:
                counts[annotation.drift.severity.value] += 1
    return counts


class JSONFormatter:
    """JSON formatter for DepDrift output."""

    def __init__(self, output_file: Optional[Path] = None) -> None:
        """Initialize the JSON formatter.

        Args:
            output_file: Optional output file path
        """
        self.output_file = output_file
        self.logger = get_logger(__name__)

    def format_check_results(
        self,
        reports: List[ManifestReport],
        check_time: float,
        metadata: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """Format check results as JSON.

        Args:
            reports: One report per manifest
            check_time: Time taken in seconds
            metadata: Optional additional metadata

        Returns:
            Formatted JSON data
        """
        result = {
            "check_summary": {
                "manifests": len(reports),
                "failed_manifests": sum(1 for report in reports if report.failed),
                "dependencies": sum(len(report.annotations) for report in reports),
                "severities": dict(severity_counts(reports)),
                "check_time_seconds": check_time,
                "timestamp": datetime.now().isoformat(),
            },
            "manifests": [self._report_to_dict(report) for report in reports],
        }

        if metadata:
            result["metadata"] = metadata

        return result

    def _report_to_dict(self, report: ManifestReport) -> Dict[str, Any]:
        return {
            "path": str(report.path),
            "ecosystem": report.ecosystem,
            "error": report.error,
            "dependencies": [annotation_to_dict(a) for a in report.annotations],
        }

    def save_results(
        self,
        results: Dict[str, Any],
        output_file: Optional[Path] = None
    ) -> None:
        """Save results to JSON file.

        Args:
            results: Results dictionary
            output_file: Output file path (uses instance default if None)
        """
        file_path = output_file or self.output_file
        if not file_path:
            raise ValueError("No output file specified")

        try:
            with open(file_path, 'w', encoding='utf-8') as f:
                json.dump(results, f, indent=2, ensure_ascii=False)

            self.logger.info(f"Results saved to {file_path}")
        except IOError as e:
            self.logger.error(f"Failed to save results to {file_path}: {e}")
            raise


def annotation_to_dict(annotation: Annotation) -> Dict[str, Any]:
    """Serializable view of an annotation."""
    record = annotation.record
    drift = annotation.drift
    return {
        "name": annotation.name,
        "line": annotation.source_line,
        "section": record.section if record else None,
        "requirement": record.requirement if record else None,
        "current": record.resolved_current if record else None,
        "latest": drift.latest if drift else None,
        "severity": drift.severity.value if drift else None,
        "range_matched": drift.range_matched if drift else None,
        "error": annotation.error,
        "text": annotation.text,
        "fragments": [[text, style] for text, style in annotation.fragments],
    }
