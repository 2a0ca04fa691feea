"""
Rendering functions for tfbump output.

This module handles all pretty-printing and table formatting.
Services return data, this module makes it human-readable.
"""

from rich.table import Table
from rich.console import Console
from rich import box
from typing import List

from .services.update_service import (
    FileUpdate,
    ReferenceSummary,
    STATUS_UNKNOWN_TAG,
    STATUS_UPGRADE,
)

console = Console()

STATUS_STYLES = {
    STATUS_UPGRADE: "yellow",
    STATUS_UNKNOWN_TAG: "dim",
}


def render_reference_table(summaries: List[ReferenceSummary], locations: bool = False,
                           check_remote: bool = False) -> None:
    """
    Render module references as a pretty table.

    Args:
        summaries: One entry per (repository, tag)
        locations: Add a column with the files using each reference
        check_remote: Add proposed tag and status columns
    """
    if not summaries:
        console.print("[yellow]No module references found.[/yellow]")
        return

    table = Table(
        title="Module References",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("Repository", style="cyan")
    table.add_column("Tag", style="green")
    table.add_column("Files", justify="right")
    if check_remote:
        table.add_column("Proposed", style="yellow")
        table.add_column("Status")
    if locations:
        table.add_column("Locations", style="dim")

    for summary in summaries:
        row = [str(summary.repository_id), summary.tag.raw, str(len(summary.files))]
        if check_remote:
            row.append(summary.proposed.raw if summary.proposed else "")
            style = STATUS_STYLES.get(summary.status)
            row.append(f"[{style}]{summary.status}[/{style}]" if style else summary.status or "")
        if locations:
            row.append("\n".join(str(p) for p in summary.files))
        table.add_row(*row)

    console.print(table)


def render_update_table(updates: List[FileUpdate], dry_run: bool = False) -> None:
    """
    Render rewritten files as a pretty table.

    Args:
        updates: Files whose references changed
        dry_run: Title the table as a preview
    """
    if not updates:
        console.print("[green]All module references are up to date.[/green]")
        return

    table = Table(
        title="Planned Updates (dry run)" if dry_run else "Updated Files",
        box=box.ROUNDED,
        show_header=True,
        header_style="bold magenta"
    )

    table.add_column("File", style="cyan")
    table.add_column("Repository")
    table.add_column("From", style="red")
    table.add_column("To", style="green")

    for update in updates:
        for reference, new_tag in update.result.replacements:
            table.add_row(
                str(update.path),
                str(reference.repository_id),
                reference.tag.raw,
                new_tag.raw,
            )

    console.print(table)
