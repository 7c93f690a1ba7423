"""Overview statistics, filtering and sorting over audit records."""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable, Dict, Iterable, List, Sequence

from ..core.models import NO_OWNER, AccessLevel, AggregatedWorkspace

# Levels shown in the permissions breakdown; OWNER is reported per workspace.
BREAKDOWN_ORDER = (AccessLevel.ADMIN, AccessLevel.EDITOR, AccessLevel.COMMENTER, AccessLevel.VIEWER)


@dataclass
class AuditSummary:
    """High-level overview of an audit."""
    total_workspaces: int = 0
    unique_collaborators: int = 0
    workspaces_without_owner: int = 0
    permission_counts: Dict[AccessLevel, int] = field(default_factory=dict)


def compute_summary(records: Iterable[AggregatedWorkspace]) -> AuditSummary:
    """Tally workspaces, distinct identities and member shares per access level.

    The ``N/A`` owner sentinel is not an identity and is not counted as a
    collaborator. Levels with no shares are left out of the breakdown.
    """
    collaborators = set()
    counts: Dict[AccessLevel, int] = {}
    total = 0
    orphaned = 0
    for record in records:
        total += 1
        if record.owner == NO_OWNER:
            orphaned += 1
        else:
            collaborators.add(record.owner)
        for share in record.shares:
            collaborators.add(share.identity)
            counts[share.access_level] = counts.get(share.access_level, 0) + 1
    ordered = {level: counts[level] for level in BREAKDOWN_ORDER if counts.get(level)}
    return AuditSummary(
        total_workspaces=total,
        unique_collaborators=len(collaborators),
        workspaces_without_owner=orphaned,
        permission_counts=ordered,
    )


def filter_workspaces(records: Sequence[AggregatedWorkspace], term: str) -> List[AggregatedWorkspace]:
    """Keep records whose name, owner or any member identity contains ``term`` (any case)."""
    if not term:
        return list(records)
    needle = term.casefold()
    return [
        r
        for r in records
        if needle in r.workspace_name.casefold()
        or needle in r.owner.casefold()
        or any(needle in s.identity.casefold() for s in r.shares)
    ]


_EPOCH = datetime.min.replace(tzinfo=timezone.utc)


def _created_key(record: AggregatedWorkspace) -> datetime:
    created = record.created_at
    if created is None:
        return _EPOCH
    if created.tzinfo is None:
        return created.replace(tzinfo=timezone.utc)
    return created


SORT_KEYS: Dict[str, Callable[[AggregatedWorkspace], object]] = {
    "name": lambda r: r.workspace_name.casefold(),
    "owner": lambda r: r.owner.casefold(),
    "created": _created_key,
    "shares": lambda r: len(r.shares),
}


def sort_workspaces(
    records: Sequence[AggregatedWorkspace], key: str = "name", descending: bool = False
) -> List[AggregatedWorkspace]:
    if key not in SORT_KEYS:
        raise ValueError(f"Unknown sort key: {key}. Available: {list(SORT_KEYS.keys())}")
    return sorted(records, key=SORT_KEYS[key], reverse=descending)
