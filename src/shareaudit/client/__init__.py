"""Platform API access: transport and pagination."""

from .pagination import list_all
from .transport import PlatformClient

__all__ = ["PlatformClient", "list_all"]
