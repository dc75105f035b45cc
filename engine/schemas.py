"""Pydantic schemas for server response bodies."""

from typing import Any, List, Optional, Type, TypeVar

from pydantic import BaseModel, ValidationError

from common.types import (
    DashboardStats,
    FileRecord,
    PublicShare,
    Quota,
    ShareState,
    StorageStats,
)
from engine.errors import MalformedResponseError

ModelT = TypeVar("ModelT", bound=BaseModel)


class FileContentsSummary(BaseModel):
    """Size and MIME type embedded in a file listing."""
    size: int
    mime_type: str = ""


class OwnerSummary(BaseModel):
    """Owner attribution embedded in admin listings."""
    username: Optional[str] = None


class FileRecordPayload(BaseModel):
    """One entry of the search or admin file listing."""
    file_id: str
    filename: str
    created_at: Optional[str] = None
    file_contents: FileContentsSummary
    owner_id: Optional[str] = None
    users: Optional[OwnerSummary] = None

    def to_record(self) -> FileRecord:
        return FileRecord(
            id=self.file_id,
            filename=self.filename,
            created_at=self.created_at or "",
            size=self.file_contents.size,
            mime_type=self.file_contents.mime_type,
            owner_id=self.owner_id,
            owner_username=self.users.username if self.users else None,
        )


class ShareToggleResponse(BaseModel):
    """Response model for the share toggle."""
    share_token: str
    is_public: bool

    def to_state(self) -> ShareState:
        return ShareState(token=self.share_token, is_public=self.is_public)


class PublicShareResponse(BaseModel):
    """Response model for shared-publicly entries and public share details."""
    file_id: str
    filename: str
    owner_username: str = ""
    mime_type: str = ""
    size: int = 0
    download_count: int = 0
    created_at: Optional[str] = None
    share_token: Optional[str] = None
    share_id: Optional[str] = None

    def to_share(self) -> PublicShare:
        return PublicShare(
            file_id=self.file_id,
            filename=self.filename,
            owner_username=self.owner_username,
            mime_type=self.mime_type,
            size=self.size,
            download_count=self.download_count,
            created_at=self.created_at or "",
            share_token=self.share_token,
            share_id=self.share_id,
        )


class StorageStatsResponse(BaseModel):
    """Response model for the deduplicated storage figures."""
    total_storage_used_deduplicated: int
    storage_savings_percentage: str
    storage_quota: int

    def to_stats(self) -> StorageStats:
        return StorageStats(
            total_storage_used_deduplicated=self.total_storage_used_deduplicated,
            storage_savings_percentage=self.storage_savings_percentage,
            storage_quota=self.storage_quota,
        )


class DashboardStatsResponse(BaseModel):
    """Response model for per-user or admin dashboard stats."""
    total_files: int
    total_storage_used: int
    total_users: Optional[int] = None

    def to_stats(self) -> DashboardStats:
        return DashboardStats(
            total_files=self.total_files,
            total_storage_used=self.total_storage_used,
            total_users=self.total_users,
        )


class QuotaResponse(BaseModel):
    """Response model for the user quota."""
    rate_limit: int = 0
    storage_quota: int = 0

    def to_quota(self) -> Quota:
        return Quota(rate_limit=self.rate_limit, storage_quota=self.storage_quota)


class LoginResponse(BaseModel):
    """Response model for a successful login."""
    user_id: str
    username: str = ""
    email: str = ""
    first_name: str = ""
    last_name: str = ""
    is_admin: bool = False
    message: Optional[str] = None


class MessageResponse(BaseModel):
    """Generic `{message}` body returned by auth endpoints."""
    message: Optional[str] = None


def parse_model(model: Type[ModelT], data: Any) -> ModelT:
    """
    Validate a decoded JSON body against a schema.

    Raises:
        MalformedResponseError: If the body does not match the schema
    """
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise MalformedResponseError(
            f"Unexpected {model.__name__} payload: {e.error_count()} validation error(s)"
        ) from e


def parse_model_list(model: Type[ModelT], data: Any) -> List[ModelT]:
    """
    Validate a decoded JSON list body. A JSON ``null`` is an empty list.

    Raises:
        MalformedResponseError: If the body is not a list of the schema
    """
    if data is None:
        return []
    if not isinstance(data, list):
        raise MalformedResponseError(
            f"Expected a list of {model.__name__}, got {type(data).__name__}"
        )
    return [parse_model(model, item) for item in data]
