"""CSV and JSON export of audit records."""

import csv
import json
from pathlib import Path
from typing import Sequence

import pandas as pd  # type: ignore

from ..core.models import AggregatedWorkspace
from ..utils.logging import get_logger

logger = get_logger(__name__)

CSV_COLUMNS = ["Workspace Name", "Owner", "Date Created", "Members", "Permissions"]
DEFAULT_CSV_NAME = "workspace_audit.csv"


def workspaces_to_frame(records: Sequence[AggregatedWorkspace]) -> pd.DataFrame:
    """One row per workspace; member identities and access levels are ``; ``-joined in the same order."""
    rows = [
        {
            "Workspace Name": r.workspace_name,
            "Owner": r.owner,
            "Date Created": r.created_at.date().isoformat() if r.created_at else "N/A",
            "Members": "; ".join(s.identity for s in r.shares),
            "Permissions": "; ".join(s.access_level.value for s in r.shares),
        }
        for r in records
    ]
    return pd.DataFrame(rows, columns=CSV_COLUMNS)


def export_csv(records: Sequence[AggregatedWorkspace], path: Path) -> Path:
    path = Path(path)
    if path.is_dir():
        path = path / DEFAULT_CSV_NAME
    path.parent.mkdir(parents=True, exist_ok=True)
    workspaces_to_frame(records).to_csv(path, index=False, quoting=csv.QUOTE_ALL)
    logger.info(f"Exported {len(records)} workspaces to {path}")
    return path


def export_json(records: Sequence[AggregatedWorkspace], path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    payload = [r.model_dump(mode="json") for r in records]
    path.write_text(json.dumps(payload, indent=2))
    logger.info(f"Exported {len(records)} workspaces to {path}")
    return path
