"""Drain a page-numbered listing endpoint into one list."""

from typing import Any, Awaitable, Callable, List, Type, TypeVar
from pydantic import ValidationError

from ..core.errors import MalformedResponse
from ..core.models import Page
from ..utils.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


def parse_page(body: Any, item_type: Type[T]) -> Page[T]:
    try:
        return Page[item_type].model_validate(body)  # type: ignore[valid-type]
    except ValidationError as e:
        raise MalformedResponse(200, "OK", detail=f"unexpected page envelope: {e.error_count()} error(s)") from e


async def list_all(fetch_page: Callable[[int], Awaitable[Any]], item_type: Type[T]) -> List[T]:
    """
    Collect every item of a paginated listing, in the order received.

    Page 1 is always requested; further pages are requested while the
    current page is below ``totalPages``, so no page past the last one is
    ever fetched.

    Args:
        fetch_page: Coroutine function returning the raw envelope for a page number
        item_type: Model each element of ``data`` is validated into

    Returns:
        Concatenated ``data`` of all pages
    """
    page_number = 1
    envelope = parse_page(await fetch_page(page_number), item_type)
    if envelope.total_count == 0:
        return []
    items: List[T] = list(envelope.data)
    while page_number < envelope.total_pages:
        page_number += 1
        envelope = parse_page(await fetch_page(page_number), item_type)
        items.extend(envelope.data)
        logger.debug("Fetched page", extra={"page": page_number, "total_pages": envelope.total_pages})
    logger.debug("Listing drained", extra={"pages": page_number, "items": len(items)})
    return items
