"""Per-workspace enrichment: detail and share list fetched concurrently."""

import asyncio
from functools import partial
from typing import Any, Awaitable, Iterable, List, Tuple

from pydantic import ValidationError

from ..client.pagination import list_all
from ..client.transport import PlatformClient
from ..core.errors import MalformedResponse
from ..core.models import ShareRecord, WorkspaceDetail, WorkspaceSummary
from ..utils.logging import get_logger

logger = get_logger(__name__)


async def gather_or_cancel(aws: Iterable[Awaitable[Any]]) -> List[Any]:
    """
    Run awaitables concurrently and return their results in submission order.

    The first failure to settle wins: every sibling still in flight is
    cancelled, the cancellations are awaited, and that failure is re-raised.
    Cancelling the caller cancels all children as well.
    """
    tasks = [asyncio.ensure_future(aw) for aw in aws]
    if not tasks:
        return []
    try:
        for next_done in asyncio.as_completed(tasks):
            await next_done
    except BaseException:
        pending = [t for t in tasks if not t.done()]
        for task in pending:
            task.cancel()
        if pending:
            logger.debug(f"Cancelling {len(pending)} outstanding task(s)")
            await asyncio.gather(*pending, return_exceptions=True)
        # Later failures are superseded by the one being raised
        for task in tasks:
            if task.done() and not task.cancelled():
                task.exception()
        raise
    return [task.result() for task in tasks]


async def fetch_detail(client: PlatformClient, summary: WorkspaceSummary) -> WorkspaceDetail:
    body = await client.get_workspace(summary.id)
    try:
        detail = WorkspaceDetail.model_validate(body)
    except ValidationError as e:
        raise MalformedResponse(200, "OK", detail=f"invalid detail for workspace {summary.id}") from e
    if detail.id != summary.id:
        raise MalformedResponse(
            200, "OK", detail=f"detail for workspace {summary.id} returned id {detail.id}"
        )
    return detail


async def fetch_shares(client: PlatformClient, summary: WorkspaceSummary) -> List[ShareRecord]:
    return await list_all(partial(client.get_share_page, summary.id), ShareRecord)


async def enrich(
    client: PlatformClient, summary: WorkspaceSummary
) -> Tuple[List[ShareRecord], WorkspaceDetail]:
    """Fetch a workspace's shares and detail side by side.

    Returns only once both have completed; if either fails the other is
    cancelled and the failure propagates.
    """
    shares, detail = await gather_or_cancel(
        [fetch_shares(client, summary), fetch_detail(client, summary)]
    )
    logger.debug("Enriched workspace", extra={"workspace_id": summary.id, "shares": len(shares)})
    return shares, detail
