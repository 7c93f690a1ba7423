"""Authenticated HTTP transport to the collaboration platform API."""

from typing import Any, Dict, Optional
import httpx

from ..config.settings import settings
from ..core.errors import CredentialMissing, MalformedResponse, TransportFailure, UpstreamApiError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class PlatformClient:
    """Single-call API client that routes every request through an optional relay.

    The relay is an opaque pass-through: the absolute upstream URL is appended
    to ``relay_url`` and the origin response is expected back unmodified.
    Requests are never retried and carry no timeout.
    """

    def __init__(
        self,
        credential: Optional[str],
        base_url: Optional[str] = None,
        relay_url: Optional[str] = None,
        page_size: Optional[int] = None,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        if not credential or not credential.strip():
            raise CredentialMissing()
        self._credential = credential.strip()
        self.base_url = (base_url or settings.api_base_url).rstrip("/")
        self.relay_url = relay_url if relay_url is not None else settings.relay_url
        self.page_size = page_size or settings.page_size
        self._owns_client = http_client is None
        # No pool cap; concurrency is bounded only by an explicit max_concurrency
        self.client = http_client or httpx.AsyncClient(
            timeout=httpx.Timeout(None),
            limits=httpx.Limits(max_connections=None, max_keepalive_connections=None),
        )
        self._requests_sent = 0

    def _build_headers(self) -> Dict[str, str]:
        return {
            "Authorization": f"Bearer {self._credential}",
            "Content-Type": "application/json",
            "User-Agent": settings.user_agent,
        }

    def build_url(self, path: str) -> str:
        target = f"{self.base_url}{path}"
        if self.relay_url:
            return f"{self.relay_url}{target}"
        return target

    @property
    def requests_sent(self) -> int:
        return self._requests_sent

    async def perform(self, path: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """Issue one GET request and return the decoded JSON body.

        Raises:
            TransportFailure: no response was received
            UpstreamApiError: non-success status with a structured error body
            MalformedResponse: non-success status without one, or a success
                body that is not JSON
        """
        url = self.build_url(path)
        logger.debug("Requesting", extra={"path": path, "params": params})
        self._requests_sent += 1
        try:
            response = await self.client.get(url, params=params, headers=self._build_headers())
        except httpx.RequestError as e:
            logger.error(f"Transport failure for {path}: {e}")
            raise TransportFailure(url, e) from e

        if not response.is_success:
            raise self._error_from_response(response)

        try:
            return response.json()
        except ValueError as e:
            raise MalformedResponse(
                response.status_code, response.reason_phrase, detail="response body is not valid JSON"
            ) from e

    def _error_from_response(self, response: httpx.Response) -> Exception:
        try:
            body = response.json()
        except ValueError:
            body = None
        if not isinstance(body, dict):
            logger.error(f"HTTP error: {response.status_code} (unstructured body)")
            return MalformedResponse(response.status_code, response.reason_phrase)
        message = body.get("message") or f"{response.status_code} {response.reason_phrase}".rstrip()
        error_code = body.get("errorCode")
        logger.error(
            f"HTTP error: {response.status_code}",
            extra={"error_code": error_code, "ref_id": body.get("refId")},
        )
        return UpstreamApiError(response.status_code, error_code, message, ref_id=body.get("refId"))

    async def get_workspace_page(self, page: int) -> Any:
        return await self.perform("/workspaces", params={"page": page, "pageSize": self.page_size})

    async def get_workspace(self, workspace_id: int) -> Any:
        return await self.perform(f"/workspaces/{workspace_id}")

    async def get_share_page(self, workspace_id: int, page: int) -> Any:
        return await self.perform(
            f"/workspaces/{workspace_id}/shares",
            params={"page": page, "pageSize": self.page_size},
        )

    async def close(self) -> None:
        if self._owns_client:
            await self.client.aclose()

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    def __repr__(self) -> str:
        return f"<{self.__class__.__name__} base_url={self.base_url} relay={self.relay_url or 'none'}>"
