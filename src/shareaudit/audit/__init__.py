"""Audit pipeline: enrichment, share classification and aggregation."""

from .aggregator import PipelineState, ShareAuditor, fetch_and_aggregate, sort_by_name
from .classifier import IDENTITY_PREFERENCE, UNKNOWN_IDENTITY, classify, resolve_identity
from .enrichment import enrich, gather_or_cancel

__all__ = [
    "ShareAuditor",
    "PipelineState",
    "fetch_and_aggregate",
    "sort_by_name",
    "classify",
    "resolve_identity",
    "IDENTITY_PREFERENCE",
    "UNKNOWN_IDENTITY",
    "enrich",
    "gather_or_cancel",
]
