"""Public share-link toggling and URL construction."""

from dataclasses import dataclass
from typing import Optional

from common.constants import SHARE_TOGGLE_ENDPOINT
from common.logging_config import get_logger
from common.types import Identity, ShareState
from engine.api_client import ApiClient, identity_header, is_success, parse_json, server_error
from engine.errors import FileSessionError, PreconditionError
from engine.result import Result
from engine.schemas import ShareToggleResponse, parse_model

logger = get_logger(__name__)


def share_url(origin: str, token: str) -> str:
    """Absolute link for a share token: ``{origin}/share/{token}``."""
    return f"{origin.rstrip('/')}/share/{token}"


@dataclass(frozen=True)
class ShareLink:
    """Server share state plus the link derived from it."""
    state: ShareState
    url: str

    @property
    def token(self) -> str:
        return self.state.token

    @property
    def is_public(self) -> bool:
        return self.state.is_public

    @property
    def message(self) -> str:
        status = "enabled" if self.is_public else "disabled"
        return f"File sharing {status}! Link: {self.url}"


class ShareLinkManager:
    """
    Flips a file's public visibility on the server.

    The endpoint is a toggle: each call alternates the state and the
    manager reports exactly what the server returned, keeping nothing
    between calls.
    """

    def __init__(self, api: ApiClient, origin: str):
        """
        Initialize share link manager.

        Args:
            api: API client
            origin: Origin share links are built on (e.g. "https://files.example.com")
        """
        self.api = api
        self.origin = origin

    async def toggle(self, file_id: str, identity: Optional[Identity]) -> Result[ShareLink]:
        """
        Toggle public sharing for a file.

        Returns:
            Result with the ShareLink, or PreconditionError without identity
        """
        if identity is None:
            return Result.failure(PreconditionError("You must be logged in to share files."))

        try:
            response = await self.api.request(
                'POST',
                SHARE_TOGGLE_ENDPOINT.format(file_id=file_id),
                headers=identity_header(identity),
            )
            if not is_success(response):
                raise server_error(response, "Failed to share file.")
            payload = parse_model(ShareToggleResponse, parse_json(response, "Share toggle"))
        except FileSessionError as e:
            logger.warning(f"Share toggle failed for file {file_id}: {e}")
            return Result.failure(e)

        state = payload.to_state()
        logger.info(f"Share toggled for file {file_id} [is_public={state.is_public}]")
        return Result.success(ShareLink(state, share_url(self.origin, state.token)))
