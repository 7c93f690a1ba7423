"""Error taxonomy for the audit pipeline.

Every failure the core can produce is a :class:`ShareAuditError` whose
``str()`` is a message fit to show to a user. Errors are raised where they
are detected and propagate unchanged up to the caller of the pipeline.
"""

from typing import Optional


class ShareAuditError(Exception):
    """Base class for all audit errors."""


class CredentialMissing(ShareAuditError):
    """No API credential was supplied; no request is attempted."""

    def __init__(self, message: str = "Please provide a platform API token.") -> None:
        super().__init__(message)


class TransportFailure(ShareAuditError):
    """The relay or upstream host could not be reached."""

    def __init__(self, url: str, cause: Exception) -> None:
        self.url = url
        self.cause = cause
        super().__init__(f"Network error while requesting {url}: {cause}")


class UpstreamApiError(ShareAuditError):
    """Non-success status with a structured error body."""

    def __init__(
        self,
        status_code: int,
        error_code: Optional[int],
        message: str,
        ref_id: Optional[str] = None,
    ) -> None:
        self.status_code = status_code
        self.error_code = error_code
        self.message = message
        self.ref_id = ref_id
        super().__init__(f"API Error: {message} (Code: {error_code})")


class MalformedResponse(ShareAuditError):
    """Response body could not be interpreted.

    For non-success statuses this is the generic fallback carrying only the
    status line; for success statuses it means the payload was not the JSON
    shape expected.
    """

    def __init__(self, status_code: int, reason: str, detail: Optional[str] = None) -> None:
        self.status_code = status_code
        self.reason = reason
        self.detail = detail
        message = f"API Error: {status_code} {reason}".rstrip()
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class AggregateFailure(ShareAuditError):
    """A workspace's enrichment failed, failing the whole audit run."""

    def __init__(self, error: BaseException, workspace_id: Optional[int] = None) -> None:
        self.error = error
        self.workspace_id = workspace_id
        where = f"workspace {workspace_id}" if workspace_id is not None else "a workspace"
        super().__init__(f"Audit failed while enriching {where}: {error}")
