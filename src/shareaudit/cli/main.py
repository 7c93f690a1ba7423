"""CLI application using Typer for the workspace sharing audit."""

import asyncio
import locale
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from ..audit.aggregator import PipelineState, ShareAuditor
from ..config.settings import settings
from ..core.errors import ShareAuditError
from ..io.export import export_csv, export_json
from ..report.summary import SORT_KEYS, compute_summary, filter_workspaces, sort_workspaces
from ..report.tables import build_failure_table, build_summary_table, build_workspace_table
from ..utils.logging import get_logger

app = typer.Typer(
    name="shareaudit",
    help="Workspace Auditor - sharing permissions across collaboration workspaces",
    add_completion=False,
)

console = Console()
logger = get_logger(__name__)

STATUS_TEXT = {
    PipelineState.IDLE: "Starting...",
    PipelineState.LISTING: "Listing workspaces...",
    PipelineState.ENRICHING: "Fetching workspace details and shares...",
    PipelineState.CLASSIFYING: "Classifying shares...",
    PipelineState.ASSEMBLING: "Assembling report...",
    PipelineState.DONE: "Done",
    PipelineState.FAILED: "Failed",
}


def _use_system_collation() -> None:
    try:
        locale.setlocale(locale.LC_COLLATE, "")
    except locale.Error as e:
        logger.debug(f"Keeping default collation: {e}")


@app.command()
def audit(
    token: Optional[str] = typer.Option(
        None, "--token", "-t", help="Platform API token (defaults to SHAREAUDIT_API_TOKEN)"
    ),
    base_url: Optional[str] = typer.Option(None, "--base-url", help="Upstream API root"),
    relay: Optional[str] = typer.Option(None, "--relay", help="Pass-through relay prefixed to upstream URLs"),
    max_concurrency: Optional[int] = typer.Option(
        None, "--max-concurrency", min=1, help="Enrich at most N workspaces at once (default: unbounded)"
    ),
    allow_partial: bool = typer.Option(
        False, "--allow-partial/--all-or-nothing", help="Report succeeded workspaces when some fail"
    ),
    filter_term: Optional[str] = typer.Option(None, "--filter", "-f", help="Only show matching workspaces"),
    sort_by: str = typer.Option("name", "--sort-by", help=f"Sort column ({', '.join(SORT_KEYS)})"),
    descending: bool = typer.Option(False, "--desc", help="Sort descending"),
    expand: bool = typer.Option(False, "--expand", "-e", help="List every member share"),
    csv_path: Optional[Path] = typer.Option(None, "--csv", help="Write the (filtered) report as CSV"),
    json_path: Optional[Path] = typer.Option(None, "--json", help="Write the (filtered) report as JSON"),
    show_table: bool = typer.Option(True, "--table/--no-table", help="Print the workspace table"),
) -> None:
    """Audit sharing permissions of every workspace visible to the token.

    Fetches all workspaces, their owners and collaborators, then prints an
    overview and the workspace report. Use ``--csv``/``--json`` to export.
    """
    credential = token or settings.api_token
    if not credential:
        console.print("[red]Error: Please provide an API token with --token or SHAREAUDIT_API_TOKEN[/red]")
        raise typer.Exit(1)
    if sort_by not in SORT_KEYS:
        console.print(f"[red]Error: Unknown sort column '{sort_by}'. Choose from: {', '.join(SORT_KEYS)}[/red]")
        raise typer.Exit(1)

    overrides = {}
    if base_url:
        overrides["api_base_url"] = base_url.rstrip("/")
    if relay:
        overrides["relay_url"] = relay
    config = settings.model_copy(update=overrides)

    _use_system_collation()
    console.print("[bold blue]Starting workspace audit[/bold blue]")
    console.print(f"API: {config.api_base_url}")
    if config.relay_url:
        console.print(f"Relay: {config.relay_url}")

    with console.status(STATUS_TEXT[PipelineState.IDLE]) as status:
        auditor = ShareAuditor(
            config=config,
            max_concurrency=max_concurrency,
            on_state_change=lambda state: status.update(STATUS_TEXT[state]),
        )
        try:
            if allow_partial:
                result = asyncio.run(auditor.fetch_and_aggregate_partial(credential))
                records, failures = result.workspaces, result.failures
            else:
                records = asyncio.run(auditor.fetch_and_aggregate(credential))
                failures = []
        except ShareAuditError as e:
            logger.error(f"Audit failed: {e}")
            console.print(f"[red]Error: {e}[/red]")
            raise typer.Exit(1)

    if not records and not failures:
        console.print("[yellow]No workspaces found[/yellow]")
        raise typer.Exit(0)

    console.print(build_summary_table(compute_summary(records)))

    shown = filter_workspaces(records, filter_term or "")
    if sort_by != "name" or descending:
        shown = sort_workspaces(shown, key=sort_by, descending=descending)
    if show_table:
        if shown:
            console.print(build_workspace_table(shown, expand=expand))
        elif filter_term:
            console.print("[yellow]No workspaces found matching your filter.[/yellow]")
    if failures:
        console.print(build_failure_table(failures))

    if csv_path:
        console.print(f"Saved: {export_csv(shown, config.export_dir / csv_path)}")
    if json_path:
        console.print(f"Saved: {export_json(shown, config.export_dir / json_path)}")

    console.print(f"\n[bold green]✓ Audited {len(records)} workspaces[/bold green]")
    if failures:
        console.print(f"[yellow]{len(failures)} workspace(s) could not be audited[/yellow]")


@app.command()
def version() -> None:
    """Print the installed version."""
    from .. import __version__

    console.print(f"shareaudit {__version__}")


if __name__ == "__main__":
    app()
