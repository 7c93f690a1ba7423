"""Audit pipeline: list, enrich concurrently, classify, assemble, sort."""

import asyncio
import locale
import unicodedata
from contextlib import nullcontext
from enum import Enum
from typing import Callable, List, Optional, Sequence, Tuple

import httpx

from ..client.pagination import list_all
from ..client.transport import PlatformClient
from ..config.settings import Settings, settings as default_settings
from ..core.errors import AggregateFailure, CredentialMissing
from ..core.models import (
    AggregatedWorkspace,
    AuditResult,
    MemberShare,
    ShareRecord,
    WorkspaceDetail,
    WorkspaceFailure,
    WorkspaceSummary,
)
from ..utils.logging import get_logger
from .classifier import classify
from .enrichment import enrich, gather_or_cancel

logger = get_logger(__name__)

Enrichment = Tuple[List[ShareRecord], WorkspaceDetail]


class PipelineState(Enum):
    """Stages of one audit run."""
    IDLE = "idle"
    LISTING = "listing"
    ENRICHING = "enriching"
    CLASSIFYING = "classifying"
    ASSEMBLING = "assembling"
    DONE = "done"
    FAILED = "failed"


StateCallback = Callable[[PipelineState], None]


def _collation_key(name: str) -> str:
    folded = unicodedata.normalize("NFKD", name.casefold())
    base = "".join(ch for ch in folded if not unicodedata.combining(ch))
    return locale.strxfrm(base)


def sort_by_name(records: Sequence[AggregatedWorkspace]) -> List[AggregatedWorkspace]:
    """Sort records by workspace name, ignoring case and accents.

    ``sorted`` is stable, so records with equal keys keep their input order.
    """
    return sorted(records, key=lambda r: _collation_key(r.workspace_name))


def assemble(owner: str, members: List[MemberShare], detail: WorkspaceDetail) -> AggregatedWorkspace:
    """Build the output record; id and name come from the detail, not the listing."""
    return AggregatedWorkspace(
        id=detail.id,
        workspace_name=detail.name,
        owner=owner,
        created_at=detail.created_at,
        shares=members,
    )


class _Run:
    """State of a single pipeline invocation."""

    def __init__(self, callback: Optional[StateCallback]) -> None:
        self.state = PipelineState.IDLE
        self._callback = callback

    def advance(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline {self.state.value} -> {state.value}")
        self.state = state
        if self._callback is not None:
            self._callback(state)


class ShareAuditor:
    """Build the sharing audit for every workspace visible to a credential.

    Each call is an independent run: a client is opened, the listing is
    drained, every workspace is enriched concurrently, and the sorted
    records are returned. Nothing is kept between calls.

    Args:
        config: Settings to use instead of the process-wide ones
        http_client: Pre-built ``httpx.AsyncClient`` (left open after the run)
        max_concurrency: Cap on workspaces enriched at once; ``None`` keeps
            the fan-out unbounded
        on_state_change: Called with each new :class:`PipelineState`
    """

    def __init__(
        self,
        config: Optional[Settings] = None,
        http_client: Optional[httpx.AsyncClient] = None,
        max_concurrency: Optional[int] = None,
        on_state_change: Optional[StateCallback] = None,
    ) -> None:
        self.config = config or default_settings
        self.http_client = http_client
        self.max_concurrency = max_concurrency if max_concurrency is not None else self.config.max_concurrency
        if self.max_concurrency is not None and self.max_concurrency < 1:
            raise ValueError(f"max_concurrency must be >= 1, got {self.max_concurrency}")
        self.on_state_change = on_state_change

    def _open_client(self, credential: Optional[str]) -> PlatformClient:
        if not credential or not credential.strip():
            raise CredentialMissing()
        return PlatformClient(
            credential,
            base_url=self.config.api_base_url,
            relay_url=self.config.relay_url or "",
            page_size=self.config.page_size,
            http_client=self.http_client,
        )

    def _limiter(self):
        if self.max_concurrency is None:
            return None
        return asyncio.Semaphore(self.max_concurrency)

    async def _enrich_limited(
        self, client: PlatformClient, summary: WorkspaceSummary, limiter: Optional[asyncio.Semaphore]
    ) -> Enrichment:
        async with (limiter if limiter is not None else nullcontext()):
            return await enrich(client, summary)

    async def _enrich_or_fail(
        self, client: PlatformClient, summary: WorkspaceSummary, limiter: Optional[asyncio.Semaphore]
    ) -> Enrichment:
        try:
            return await self._enrich_limited(client, summary, limiter)
        except Exception as e:
            logger.error(f"Enrichment failed for workspace {summary.id}: {e}")
            raise AggregateFailure(e, workspace_id=summary.id) from e

    def _build_records(self, enriched: List[Enrichment], run: _Run) -> List[AggregatedWorkspace]:
        run.advance(PipelineState.CLASSIFYING)
        classified = [(classify(shares), detail) for shares, detail in enriched]
        run.advance(PipelineState.ASSEMBLING)
        records = [assemble(owner, members, detail) for (owner, members), detail in classified]
        result = sort_by_name(records)
        run.advance(PipelineState.DONE)
        return result

    async def _list(self, client: PlatformClient, run: _Run) -> List[WorkspaceSummary]:
        run.advance(PipelineState.LISTING)
        summaries = await list_all(client.get_workspace_page, WorkspaceSummary)
        logger.info("Listed workspaces", extra={"workspaces": len(summaries)})
        return summaries

    async def fetch_and_aggregate(self, credential: Optional[str]) -> List[AggregatedWorkspace]:
        """
        Audit every workspace, all or nothing.

        Raises:
            CredentialMissing: empty credential, nothing was requested
            AggregateFailure: a workspace's enrichment failed; wraps the first
                failure observed, outstanding requests are cancelled
            ShareAuditError: listing failed
        """
        run = _Run(self.on_state_change)
        try:
            async with self._open_client(credential) as client:
                summaries = await self._list(client, run)
                run.advance(PipelineState.ENRICHING)
                limiter = self._limiter()
                enriched: List[Enrichment] = await gather_or_cancel(
                    self._enrich_or_fail(client, summary, limiter) for summary in summaries
                )
            result = self._build_records(enriched, run)
        except BaseException:
            run.advance(PipelineState.FAILED)
            raise

        logger.info("Audit completed", extra={"workspaces": len(result)})
        return result

    async def fetch_and_aggregate_partial(self, credential: Optional[str]) -> AuditResult:
        """
        Audit every workspace, keeping whatever succeeds.

        Each workspace settles independently; failures are reported per
        workspace instead of failing the run. Listing failures still raise.
        """
        run = _Run(self.on_state_change)
        try:
            async with self._open_client(credential) as client:
                summaries = await self._list(client, run)
                run.advance(PipelineState.ENRICHING)
                limiter = self._limiter()
                outcomes = await asyncio.gather(
                    *(self._enrich_limited(client, summary, limiter) for summary in summaries),
                    return_exceptions=True,
                )
            result = AuditResult()
            succeeded: List[Enrichment] = []
            for summary, outcome in zip(summaries, outcomes):
                if isinstance(outcome, asyncio.CancelledError):
                    raise outcome
                if isinstance(outcome, Exception):
                    logger.warning(f"Workspace {summary.id} skipped: {outcome}")
                    result.failures.append(WorkspaceFailure(summary.id, summary.name, outcome))
                else:
                    succeeded.append(outcome)
            result.workspaces = self._build_records(succeeded, run)
        except BaseException:
            run.advance(PipelineState.FAILED)
            raise

        logger.info(
            "Partial audit completed",
            extra={"workspaces": len(result.workspaces), "failures": len(result.failures)},
        )
        return result


async def fetch_and_aggregate(
    credential: Optional[str],
    config: Optional[Settings] = None,
    http_client: Optional[httpx.AsyncClient] = None,
    max_concurrency: Optional[int] = None,
) -> List[AggregatedWorkspace]:
    """Run a one-off all-or-nothing audit with a fresh :class:`ShareAuditor`."""
    auditor = ShareAuditor(config=config, http_client=http_client, max_concurrency=max_concurrency)
    return await auditor.fetch_and_aggregate(credential)
