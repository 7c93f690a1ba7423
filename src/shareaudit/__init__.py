"""Sharing-permission audit for collaboration platform workspaces.

Typical use::

    from shareaudit import fetch_and_aggregate

    records = asyncio.run(fetch_and_aggregate(token))
"""

from .audit import PipelineState, ShareAuditor, fetch_and_aggregate
from .core.errors import (
    AggregateFailure,
    CredentialMissing,
    MalformedResponse,
    ShareAuditError,
    TransportFailure,
    UpstreamApiError,
)
from .core.models import AccessLevel, AggregatedWorkspace, AuditResult, MemberShare

__version__ = "0.1.0"

__all__ = [
    "ShareAuditor",
    "PipelineState",
    "fetch_and_aggregate",
    "AccessLevel",
    "AggregatedWorkspace",
    "AuditResult",
    "MemberShare",
    "ShareAuditError",
    "CredentialMissing",
    "TransportFailure",
    "UpstreamApiError",
    "MalformedResponse",
    "AggregateFailure",
]
