"""Rich renderings of the audit overview and workspace report."""

from typing import List, Sequence

from rich.table import Table

from ..core.models import AccessLevel, AggregatedWorkspace, WorkspaceFailure
from .summary import AuditSummary

LEVEL_STYLES = {
    AccessLevel.OWNER: "red",
    AccessLevel.ADMIN: "magenta",
    AccessLevel.EDITOR: "blue",
    AccessLevel.COMMENTER: "yellow",
    AccessLevel.VIEWER: "green",
}


def format_created(record: AggregatedWorkspace) -> str:
    return record.created_at.date().isoformat() if record.created_at else "N/A"


def _badge(level: AccessLevel) -> str:
    style = LEVEL_STYLES.get(level, "white")
    return f"[{style}]{level.value}[/{style}]"


def build_summary_table(summary: AuditSummary) -> Table:
    table = Table(title="High-Level Overview")
    table.add_column("Metric", style="cyan")
    table.add_column("Value", style="yellow", justify="right")
    table.add_row("Total workspaces", str(summary.total_workspaces))
    table.add_row("Unique collaborators", str(summary.unique_collaborators))
    table.add_row("Workspaces without owner", str(summary.workspaces_without_owner))
    for level, count in summary.permission_counts.items():
        table.add_row(f"{level.value}S", str(count))
    return table


def build_workspace_table(records: Sequence[AggregatedWorkspace], expand: bool = False) -> Table:
    """Workspace report; ``expand`` lists every member share instead of a count."""
    table = Table(title="Workspace Report", show_lines=expand)
    table.add_column("Workspace", style="bold")
    table.add_column("Owner", style="cyan")
    table.add_column("Created")
    if expand:
        table.add_column("Members")
        table.add_column("Access")
    else:
        table.add_column("Shares", justify="right")
    for record in records:
        if expand:
            identities: List[str] = [s.identity for s in record.shares] or ["-"]
            levels: List[str] = [_badge(s.access_level) for s in record.shares] or ["-"]
            table.add_row(
                record.workspace_name,
                record.owner,
                format_created(record),
                "\n".join(identities),
                "\n".join(levels),
            )
        else:
            table.add_row(record.workspace_name, record.owner, format_created(record), str(len(record.shares)))
    return table


def build_failure_table(failures: Sequence[WorkspaceFailure]) -> Table:
    table = Table(title="Workspaces Not Audited")
    table.add_column("ID", style="dim")
    table.add_column("Workspace")
    table.add_column("Error", style="red")
    for failure in failures:
        table.add_row(str(failure.workspace_id), failure.workspace_name, str(failure.error))
    return table
