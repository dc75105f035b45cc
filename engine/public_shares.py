"""Listing and fetching publicly shared files."""

from typing import Callable, Optional, Tuple

from common.constants import (
    PUBLIC_SHARE_DOWNLOAD_ENDPOINT,
    PUBLIC_SHARE_ENDPOINT,
    SHARED_PUBLICLY_ENDPOINT,
)
from common.logging_config import get_logger
from common.types import Identity, PublicShare
from engine.api_client import (
    ApiClient,
    identity_header,
    is_success,
    parse_json,
    server_error,
)
from engine.errors import FileSessionError, PreconditionError, ServerError
from engine.result import Result
from engine.schemas import PublicShareResponse, parse_model, parse_model_list
from engine.share_links import share_url

logger = get_logger(__name__)


class PublicShareBrowser:
    """Reads the caller's public shares and unauthenticated share pages."""

    def __init__(self, api: ApiClient, origin: str):
        self.api = api
        self.origin = origin

    async def list_shared(self, identity: Optional[Identity]) -> Result[Tuple[PublicShare, ...]]:
        """Files currently shared publicly."""
        if identity is None:
            return Result.failure(
                PreconditionError("You must be logged in to view publicly shared files.")
            )
        try:
            response = await self.api.request(
                'GET',
                SHARED_PUBLICLY_ENDPOINT,
                headers=identity_header(identity),
            )
            if not is_success(response):
                raise ServerError(f"HTTP error! status: {response.status_code}", response.status_code)
            data = parse_json(response, "Publicly shared files")
            shares = tuple(
                payload.to_share()
                for payload in parse_model_list(PublicShareResponse, data)
            )
        except FileSessionError as e:
            logger.warning(f"Failed to load publicly shared files: {e}")
            return Result.failure(e)
        return Result.success(shares)

    async def details(self, token: str) -> Result[PublicShare]:
        """Metadata for a share token. Each call counts as a view server-side."""
        if not token:
            return Result.failure(PreconditionError("Share token is missing."))
        try:
            response = await self.api.request('GET', PUBLIC_SHARE_ENDPOINT.format(token=token))
            if not is_success(response):
                raise server_error(response, f"HTTP error! status: {response.status_code}")
            payload = parse_model(PublicShareResponse, parse_json(response, "Public share"))
        except FileSessionError as e:
            logger.warning(f"Failed to fetch public share details: {e}")
            return Result.failure(e)
        return Result.success(payload.to_share())

    async def download(
        self,
        token: str,
        filename: str,
        trigger_download: Callable[[bytes, str], None],
    ) -> Result[None]:
        """Fetch a shared file's bytes and hand them to the download capability."""
        if not token:
            return Result.failure(PreconditionError("Share token is missing."))
        try:
            response = await self.api.request(
                'GET',
                PUBLIC_SHARE_DOWNLOAD_ENDPOINT.format(token=token),
            )
            if not is_success(response):
                raise server_error(response, f"HTTP error! status: {response.status_code}")
        except FileSessionError as e:
            logger.warning(f"Public download failed: {e}")
            return Result.failure(e)

        trigger_download(response.content, filename)
        return Result.success()

    def link_for(self, token: str) -> str:
        return share_url(self.origin, token)
