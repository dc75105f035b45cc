"""Read-through usage, deduplication and quota figures."""

from typing import Optional

from common.constants import (
    ADMIN_STATS_ENDPOINT,
    QUOTA_ENDPOINT,
    STORAGE_STATS_ENDPOINT,
    USER_STATS_ENDPOINT,
)
from common.logging_config import get_logger
from common.types import DashboardStats, Identity, Quota, Role, StorageStats
from engine.api_client import ApiClient, is_success, parse_json
from engine.errors import FileSessionError, PreconditionError, ServerError
from engine.result import Result
from engine.schemas import (
    DashboardStatsResponse,
    QuotaResponse,
    StorageStatsResponse,
    parse_model,
)

logger = get_logger(__name__)


class StatsPresenter:
    """
    Fetches stats and keeps the last good value of each.

    A failed fetch returns the error and leaves the previous value in
    place. Figures are displayed as the server computed them.
    """

    def __init__(self, api: ApiClient):
        self.api = api
        self.dashboard: Optional[DashboardStats] = None
        self.storage: Optional[StorageStats] = None
        self.quota: Optional[Quota] = None

    async def fetch(self, identity: Optional[Identity], role: Role) -> Result[DashboardStats]:
        """Dashboard totals; admins get system-wide figures."""
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))
        if role is Role.ADMIN:
            endpoint = ADMIN_STATS_ENDPOINT
        else:
            endpoint = USER_STATS_ENDPOINT.format(user_id=identity.user_id)

        try:
            payload = parse_model(DashboardStatsResponse, await self._get_json(endpoint))
        except FileSessionError as e:
            logger.warning(f"Failed to fetch stats: {e}")
            return Result.failure(e)

        self.dashboard = payload.to_stats()
        return Result.success(self.dashboard)

    async def fetch_storage(self, identity: Optional[Identity]) -> Result[StorageStats]:
        """Deduplicated usage, savings percentage and quota."""
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))
        try:
            data = await self._get_json(STORAGE_STATS_ENDPOINT, params={'user_id': identity.user_id})
            payload = parse_model(StorageStatsResponse, data)
        except FileSessionError as e:
            logger.warning(f"Failed to fetch storage stats: {e}")
            return Result.failure(e)

        self.storage = payload.to_stats()
        return Result.success(self.storage)

    async def fetch_quota(self, identity: Optional[Identity]) -> Result[Quota]:
        """Rate limit and storage quota for the caller."""
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))
        try:
            data = await self._get_json(QUOTA_ENDPOINT, params={'user_id': identity.user_id})
            payload = parse_model(QuotaResponse, data)
        except FileSessionError as e:
            logger.warning(f"Failed to fetch quota: {e}")
            return Result.failure(e)

        self.quota = payload.to_quota()
        return Result.success(self.quota)

    async def _get_json(self, endpoint: str, params: Optional[dict] = None):
        response = await self.api.request('GET', endpoint, params=params)
        if not is_success(response):
            raise ServerError(f"HTTP error! status: {response.status_code}", response.status_code)
        return parse_json(response, "Stats")
