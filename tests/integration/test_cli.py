"""CLI tests using Typer's CliRunner with a stubbed auditor."""

import csv
from datetime import datetime, timezone

import pytest
from typer.testing import CliRunner

from shareaudit.cli import main as cli
from shareaudit.core.errors import AggregateFailure, UpstreamApiError
from shareaudit.core.models import AccessLevel, AggregatedWorkspace, AuditResult, MemberShare, WorkspaceFailure

runner = CliRunner()

RECORDS = [
    AggregatedWorkspace(
        id=2,
        workspace_name="alpha",
        owner="a@x.com",
        created_at=datetime(2023, 1, 5, tzinfo=timezone.utc),
        shares=[MemberShare(identity="b@x.com", access_level=AccessLevel.EDITOR)],
    ),
    AggregatedWorkspace(id=1, workspace_name="Zeta", owner="N/A"),
]


class StubAuditor:
    """Stands in for ShareAuditor; behaviour is set per test through class attributes."""

    records = RECORDS
    error = None
    failures = []
    last_kwargs = {}

    def __init__(self, **kwargs):
        StubAuditor.last_kwargs = kwargs

    async def fetch_and_aggregate(self, credential):
        if self.error:
            raise self.error
        return list(self.records)

    async def fetch_and_aggregate_partial(self, credential):
        return AuditResult(workspaces=list(self.records), failures=list(self.failures))


@pytest.fixture(autouse=True)
def stub_auditor(monkeypatch):
    monkeypatch.setattr(cli, "ShareAuditor", StubAuditor)
    monkeypatch.setattr(StubAuditor, "error", None)
    monkeypatch.setattr(StubAuditor, "failures", [])
    monkeypatch.setattr(cli.settings, "api_token", None)
    yield StubAuditor


def test_requires_token():
    result = runner.invoke(cli.app, ["audit"])
    assert result.exit_code == 1
    assert "API token" in result.stdout


def test_prints_report(stub_auditor):
    result = runner.invoke(cli.app, ["audit", "--token", "t", "--max-concurrency", "3"])
    assert result.exit_code == 0
    assert "alpha" in result.stdout
    assert "Zeta" in result.stdout
    assert "Audited 2 workspaces" in result.stdout
    assert stub_auditor.last_kwargs["max_concurrency"] == 3


def test_token_from_settings(monkeypatch):
    monkeypatch.setattr(cli.settings, "api_token", "from-env")
    result = runner.invoke(cli.app, ["audit", "--no-table"])
    assert result.exit_code == 0


def test_csv_export_respects_filter(tmp_path):
    out = tmp_path / "report.csv"
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--filter", "b@x", "--csv", str(out)])
    assert result.exit_code == 0
    with out.open(newline="") as fh:
        rows = list(csv.reader(fh))
    assert len(rows) == 2
    assert rows[1][:3] == ["alpha", "a@x.com", "2023-01-05"]


def test_relay_override_reaches_auditor(stub_auditor):
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--relay", "https://relay.test/fetch/"])
    assert result.exit_code == 0
    assert stub_auditor.last_kwargs["config"].relay_url == "https://relay.test/fetch/"


def test_failure_exits_non_zero(monkeypatch):
    error = AggregateFailure(UpstreamApiError(500, 4000, "An unexpected error has occurred."), workspace_id=7)
    monkeypatch.setattr(StubAuditor, "error", error)
    result = runner.invoke(cli.app, ["audit", "-t", "t"])
    assert result.exit_code == 1
    assert "Error:" in result.stdout


def test_partial_mode_lists_failures(monkeypatch):
    failure = WorkspaceFailure(5, "Broken", UpstreamApiError(403, 1004, "Denied"))
    monkeypatch.setattr(StubAuditor, "failures", [failure])
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--allow-partial"])
    assert result.exit_code == 0
    assert "Broken" in result.stdout
    assert "1 workspace(s) could not be audited" in result.stdout


def test_unknown_sort_column():
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--sort-by", "size"])
    assert result.exit_code == 1


def test_version():
    result = runner.invoke(cli.app, ["version"])
    assert result.exit_code == 0
    assert "shareaudit" in result.stdout


def test_all_failed_without_filter_has_no_filter_notice(monkeypatch):
    failure = WorkspaceFailure(5, "Broken", UpstreamApiError(403, 1004, "Denied"))
    monkeypatch.setattr(StubAuditor, "records", [])
    monkeypatch.setattr(StubAuditor, "failures", [failure])
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--allow-partial"])
    assert result.exit_code == 0
    assert "matching your filter" not in result.stdout
    assert "Broken" in result.stdout


def test_filter_without_matches_is_reported():
    result = runner.invoke(cli.app, ["audit", "-t", "t", "--filter", "nothing-matches"])
    assert result.exit_code == 0
    assert "matching your filter" in result.stdout
