"""Shared fixtures: an in-memory platform served through httpx.MockTransport."""

import asyncio
import math
import re
from typing import Any, Dict, List, Optional

import httpx
import pytest

from shareaudit.config.settings import Settings

API = "https://api.test/2.0"
_PATH_RE = re.compile(r"^/workspaces/(\d+)(/shares)?$")


def envelope(items: List[Any], page: int = 1, page_size: int = 100, total_count: Optional[int] = None) -> Dict[str, Any]:
    total = len(items) if total_count is None else total_count
    total_pages = max(1, math.ceil(total / page_size)) if total else 0
    start = (page - 1) * page_size
    return {
        "pageNumber": page,
        "pageSize": page_size,
        "totalPages": total_pages,
        "totalCount": total,
        "data": items[start:start + page_size],
    }


def share(access_level: str, email: Optional[str] = None, name: Optional[str] = None, share_id: str = "s") -> Dict[str, Any]:
    data: Dict[str, Any] = {
        "id": share_id,
        "type": "USER" if email else "GROUP",
        "scope": "WORKSPACE",
        "accessLevel": access_level,
        "createdAt": "2024-01-01T00:00:00Z",
        "modifiedAt": "2024-01-02T00:00:00Z",
    }
    if email is not None:
        data["email"] = email
    if name is not None:
        data["name"] = name
    return data


class FakePlatform:
    """Serves /workspaces, /workspaces/{id} and /workspaces/{id}/shares.

    ``delays`` maps an API path to seconds to wait before answering;
    ``overrides`` maps a path to a canned response. Cancelled requests are
    recorded in ``cancelled``.
    """

    def __init__(self, workspaces: List[Dict[str, Any]], shares: Optional[Dict[int, List[Dict[str, Any]]]] = None, page_size: int = 2) -> None:
        self.workspaces = workspaces
        self.shares = shares or {}
        self.page_size = page_size
        self.details: Dict[int, Dict[str, Any]] = {
            ws["id"]: {"id": ws["id"], "name": ws["name"], "createdAt": "2023-05-04T10:00:00Z"}
            for ws in workspaces
        }
        self.delays: Dict[str, float] = {}
        self.overrides: Dict[str, httpx.Response] = {}
        self.requests: List[httpx.Request] = []
        self.cancelled: List[str] = []
        self.in_flight = 0
        self.max_in_flight = 0

    def _path(self, request: httpx.Request) -> str:
        return request.url.path[len("/2.0"):]

    async def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = self._path(request)
        self.in_flight += 1
        self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            await asyncio.sleep(self.delays.get(path, 0.01))
        except asyncio.CancelledError:
            self.cancelled.append(path)
            raise
        finally:
            self.in_flight -= 1
        if path in self.overrides:
            return self.overrides[path]
        page = int(request.url.params.get("page", "1"))
        if path == "/workspaces":
            return httpx.Response(200, json=envelope(self.workspaces, page, self.page_size))
        match = _PATH_RE.match(path)
        if match:
            workspace_id = int(match.group(1))
            if match.group(2):
                return httpx.Response(200, json=envelope(self.shares.get(workspace_id, []), page, self.page_size))
            if workspace_id in self.details:
                return httpx.Response(200, json=self.details[workspace_id])
        return httpx.Response(404, json={"errorCode": 1006, "message": "Not Found"})

    def paths(self) -> List[str]:
        return [self._path(r) for r in self.requests]

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def config() -> Settings:
    return Settings(_env_file=None, api_base_url=API, relay_url=None, page_size=2, max_concurrency=None)
