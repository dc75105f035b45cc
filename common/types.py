"""Shared data type definitions (Identity, FileRecord, ShareState, stats)."""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class Role(str, Enum):
    """Which listing and stats endpoints a session is entitled to."""
    USER = "user"
    ADMIN = "admin"

    @classmethod
    def for_identity(cls, identity: Optional["Identity"]) -> "Role":
        if identity is not None and identity.is_admin:
            return cls.ADMIN
        return cls.USER


@dataclass(frozen=True)
class Identity:
    """
    Opaque user identifier plus administrator flag.

    Supplied by the caller from its session store and trusted as-is.
    """
    user_id: str
    is_admin: bool = False

    @property
    def role(self) -> Role:
        return Role.for_identity(self)


@dataclass(frozen=True)
class FileRecord:
    """
    A file as listed by the search or admin endpoints.
    """
    id: str
    filename: str
    created_at: str
    size: int
    mime_type: str
    owner_id: Optional[str] = None
    owner_username: Optional[str] = None


@dataclass(frozen=True)
class ShareState:
    """
    Server truth returned by the share toggle endpoint.
    """
    token: str
    is_public: bool


@dataclass(frozen=True)
class PublicShare:
    """
    A publicly shared file, from the shared-publicly listing or a share view.
    """
    file_id: str
    filename: str
    owner_username: str
    mime_type: str
    size: int
    download_count: int
    created_at: str
    share_token: Optional[str] = None
    share_id: Optional[str] = None


@dataclass(frozen=True)
class DashboardStats:
    """File count and raw usage shown on the home dashboard."""
    total_files: int
    total_storage_used: int
    total_users: Optional[int] = None


@dataclass(frozen=True)
class StorageStats:
    """Deduplicated usage, savings and quota shown in the sidebar."""
    total_storage_used_deduplicated: int
    storage_savings_percentage: str
    storage_quota: int

    def usage_fraction(self) -> float:
        """Share of the quota in use; a zero quota is treated as 1 byte."""
        return self.total_storage_used_deduplicated / (self.storage_quota or 1)


@dataclass(frozen=True)
class Quota:
    """Per-user rate limit and storage quota."""
    rate_limit: int
    storage_quota: int
