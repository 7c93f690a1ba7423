"""Split a workspace's shares into its owner and its other members."""

from typing import Iterable, List, Optional, Tuple

from ..core.models import NO_OWNER, AccessLevel, MemberShare, ShareRecord
from ..utils.logging import get_logger

logger = get_logger(__name__)

# Fields consulted, in order, to name the identity behind a share.
IDENTITY_PREFERENCE: Tuple[str, ...] = ("email", "name")
UNKNOWN_IDENTITY = "Group/Unknown"


def resolve_identity(share: ShareRecord) -> str:
    """Return the first non-empty preferred field, else ``Group/Unknown``."""
    for field_name in IDENTITY_PREFERENCE:
        value = getattr(share, field_name, None)
        if value:
            return value
    return UNKNOWN_IDENTITY


def classify(shares: Iterable[ShareRecord]) -> Tuple[str, List[MemberShare]]:
    """
    Partition shares into an owner identity and the non-owner member shares.

    If several OWNER shares are present the first one in input order is the
    owner; the rest are dropped and reported in the log. Without any OWNER
    share the owner is ``"N/A"``.

    Returns:
        (owner, member_shares) with member shares in input order
    """
    owner: Optional[str] = None
    members: List[MemberShare] = []
    for share in shares:
        identity = resolve_identity(share)
        if share.access_level is AccessLevel.OWNER:
            if owner is None:
                owner = identity
            else:
                logger.warning(
                    "Ignoring additional OWNER share",
                    extra={"owner": owner, "ignored": identity, "share_id": share.id},
                )
            continue
        members.append(MemberShare(identity=identity, access_level=share.access_level))
    return owner if owner is not None else NO_OWNER, members
