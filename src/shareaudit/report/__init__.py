"""Presentation helpers consuming the audit records."""

from .summary import AuditSummary, compute_summary, filter_workspaces, sort_workspaces

__all__ = ["AuditSummary", "compute_summary", "filter_workspaces", "sort_workspaces"]
