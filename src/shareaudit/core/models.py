"""Core domain models for workspaces, shares and audit records."""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Generic, List, Optional, TypeVar
from pydantic import BaseModel, ConfigDict, Field, field_validator

T = TypeVar("T")

NO_OWNER = "N/A"


class AccessLevel(str, Enum):
    """Access level granted by a share."""
    OWNER = "OWNER"
    ADMIN = "ADMIN"
    EDITOR = "EDITOR"
    COMMENTER = "COMMENTER"
    VIEWER = "VIEWER"


class PlatformModel(BaseModel):
    """Base for models read from the platform's camelCase payloads."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")


class Page(PlatformModel, Generic[T]):
    """Paginated listing envelope."""
    page_number: int = Field(..., alias="pageNumber", ge=1)
    page_size: Optional[int] = Field(None, alias="pageSize")
    total_pages: int = Field(..., alias="totalPages", ge=0)
    total_count: int = Field(..., alias="totalCount", ge=0)
    data: List[T] = Field(default_factory=list)


class WorkspaceSummary(PlatformModel):
    """Workspace row as returned by the listing endpoint."""
    id: int
    name: str


class WorkspaceDetail(PlatformModel):
    """Authoritative workspace metadata from the detail endpoint."""
    id: int
    name: str
    created_at: Optional[datetime] = Field(None, alias="createdAt")


class ShareRecord(PlatformModel):
    """Raw share grant as returned by the platform."""

    id: str
    type: str
    scope: str
    email: Optional[str] = None
    name: Optional[str] = None
    access_level: AccessLevel = Field(..., alias="accessLevel")
    created_at: Optional[datetime] = Field(None, alias="createdAt")
    modified_at: Optional[datetime] = Field(None, alias="modifiedAt")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, v):
        # Group shares come back with numeric ids on some accounts
        return str(v) if isinstance(v, int) else v


class MemberShare(BaseModel):
    """Non-owner collaborator on a workspace."""
    identity: str
    access_level: AccessLevel

    @field_validator("access_level")
    @classmethod
    def _reject_owner(cls, v: AccessLevel) -> AccessLevel:
        if v is AccessLevel.OWNER:
            raise ValueError("member shares cannot carry OWNER access")
        return v


class AggregatedWorkspace(BaseModel):
    """Final per-workspace audit record."""

    id: int
    workspace_name: str
    owner: str = Field(NO_OWNER, description="Owner identity or 'N/A' when no OWNER share exists")
    created_at: Optional[datetime] = None
    shares: List[MemberShare] = Field(default_factory=list)

    @property
    def has_owner(self) -> bool:
        return self.owner != NO_OWNER


@dataclass
class WorkspaceFailure:
    """A workspace whose enrichment failed under the partial-result policy."""
    workspace_id: int
    workspace_name: str
    error: Exception


@dataclass
class AuditResult:
    """Succeeded records plus per-workspace failures."""
    workspaces: List[AggregatedWorkspace] = field(default_factory=list)
    failures: List[WorkspaceFailure] = field(default_factory=list)

    @property
    def complete(self) -> bool:
        return not self.failures
