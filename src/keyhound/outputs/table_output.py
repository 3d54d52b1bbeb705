"""Table output formatter for keyhound.

This module provides a table output formatter that renders scan results
as a console-friendly table using Rich. Secret keys are masked; use the
text or json format for the full values.
"""

from io import StringIO

from rich.console import Console
from rich.markup import escape
from rich.table import Table

from keyhound.core.logging import mask
from keyhound.core.models import ScanResult
from keyhound.outputs import BaseOutput


class TableOutput(BaseOutput):
    """Output formatter that renders ScanResult as a Rich table.

    Shows branch, file, short commit hash, author, access key and masked
    secret for each finding, followed by a summary of the scan statistics.

    Example:
        formatter = TableOutput()
        print(formatter.format(scan_result))
    """

    @property
    def name(self) -> str:
        """Return the formatter name."""
        return "table"

    def format(self, result: ScanResult) -> str:
        """Format a scan result as a Rich table.

        Args:
            result: The ScanResult to format.

        Returns:
            A formatted table string representation of the scan result.
        """
        table = Table(
            title=f"Live AWS keys: {escape(result.target_path)}",
            show_header=True,
            header_style="bold cyan",
        )

        table.add_column("Branch", style="green")
        table.add_column("File", style="white", no_wrap=False)
        table.add_column("Commit", style="yellow")
        table.add_column("Author", style="white")
        table.add_column("Access Key", style="bold red")
        table.add_column("Secret Key", style="red")

        for finding in result.findings:
            table.add_row(
                escape(finding.branch),
                escape(finding.file_path),
                finding.commit_hash[:10],
                escape(finding.author),
                finding.identifier,
                mask(finding.secret),
            )

        string_io = StringIO()
        console = Console(file=string_io, force_terminal=True, width=120)
        console.print(table)

        stats = result.stats
        summary_lines = [
            "",
            "[bold]Scan Summary[/bold]",
            f"  Duration: {result.scan_duration:.2f}s",
            f"  Total findings: {len(result.findings)}",
        ]

        if stats:
            if "branches_scanned" in stats:
                summary_lines.append(f"  Branches scanned: {len(stats['branches_scanned'])}")
            if stats.get("branches_failed"):
                failed = escape(", ".join(stats["branches_failed"]))
                summary_lines.append(f"  [yellow]Branches failed: {failed}[/yellow]")
            if "units_scanned" in stats:
                summary_lines.append(f"  Content units scanned: {stats['units_scanned']}")
            if "pairs_validated" in stats:
                summary_lines.append(f"  Pairs validated: {stats['pairs_validated']}")
            outcomes = stats.get("outcomes") or {}
            if any(outcomes.values()):
                summary_lines.append("  By outcome:")
                for outcome, count in outcomes.items():
                    if count:
                        summary_lines.append(f"    {outcome}: {count}")

        if result.diagnostics:
            summary_lines.append(f"  [yellow]Diagnostics: {len(result.diagnostics)}[/yellow]")

        for line in summary_lines:
            console.print(line)

        return string_io.getvalue()
