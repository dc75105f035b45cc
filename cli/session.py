"""Engine components wired to one CLI configuration."""

from typing import List, Optional, Tuple

import httpx

from common.logging_config import get_logger
from common.types import Identity
from cli.config import Config
from cli.constants import LEVEL_COLORS, RESET
from engine.api_client import ApiClient
from engine.auth import AuthClient
from engine.catalog_store import FileCatalogStore
from engine.public_shares import PublicShareBrowser
from engine.selection import ExclusiveSelection
from engine.share_links import ShareLinkManager
from engine.stats_presenter import StatsPresenter
from engine.upload_orchestrator import (
    BatchResult,
    UploadOrchestrator,
    UploadOutcome,
    UploadSuccess,
)

logger = get_logger(__name__)


class CliSession:
    """
    One REPL session: API client, engine components and the upload
    messages reported while a batch runs.
    """

    def __init__(self, config: Config, transport: Optional[httpx.AsyncBaseTransport] = None):
        """
        Initialize CLI session.

        Args:
            config: Configuration instance
            transport: Optional httpx transport for testing
        """
        self.config = config
        self.api = ApiClient(
            config.get_base_url(),
            timeout=config.get_timeout(),
            transport=transport,
            **config.get_upload_timeout_config(),
        )
        self.upload_messages: List[Tuple[str, str]] = []

        self.catalog = FileCatalogStore(self.api)
        self.uploads = UploadOrchestrator(
            self.api,
            on_item=self._on_upload_item,
            on_complete=self._on_upload_complete,
        )
        self.shares = ShareLinkManager(self.api, config.get_share_origin())
        self.public = PublicShareBrowser(self.api, config.get_share_origin())
        self.stats = StatsPresenter(self.api)
        self.auth = AuthClient(self.api)
        self.menu = ExclusiveSelection()

    @property
    def identity(self) -> Optional[Identity]:
        return self.config.get_identity()

    def _on_upload_item(self, outcome: UploadOutcome) -> None:
        if isinstance(outcome, UploadSuccess):
            self.upload_messages.append(("success", outcome.message))
        else:
            self.upload_messages.append(("error", outcome.message))

    def _on_upload_complete(self, result: BatchResult) -> None:
        summary = result.summary()
        if summary is not None:
            self.upload_messages.append(summary)

    def drain_upload_messages(self) -> str:
        """Colored upload messages collected so far, then forget them."""
        lines = [
            f"{LEVEL_COLORS.get(level, '')}{message}{RESET}"
            for level, message in self.upload_messages
        ]
        self.upload_messages.clear()
        return "\n".join(lines)

    async def close(self) -> None:
        """Close the HTTP session."""
        await self.api.close()
