"""Batch upload: select, confirm, upload one file at a time, report."""

import mimetypes
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Callable, Iterable, List, Optional, Tuple, Union

from common.constants import UPLOAD_ENDPOINT
from common.logging_config import get_logger
from common.types import Identity
from engine.api_client import ApiClient, is_success
from engine.errors import (
    FileSessionError,
    MalformedResponseError,
    NetworkError,
    PreconditionError,
    ServerError,
)
from engine.result import Result

logger = get_logger(__name__)


class UploadState(str, Enum):
    IDLE = "idle"
    CONFIRMING = "confirming"
    UPLOADING = "uploading"


@dataclass(frozen=True)
class UploadTask:
    """
    One file of a batch.
    """
    name: str
    size: int
    content: bytes = field(repr=False)
    mime_type: Optional[str] = None

    @classmethod
    def from_path(cls, path: Path) -> "UploadTask":
        """Read a local file into a task."""
        content = path.read_bytes()
        return cls(name=path.name, size=len(content), content=content)

    @property
    def content_type(self) -> str:
        """Declared MIME type for the multipart part."""
        if self.mime_type:
            return self.mime_type
        guessed, _ = mimetypes.guess_type(self.name)
        return guessed or "application/octet-stream"


@dataclass(frozen=True)
class UploadSuccess:
    name: str
    response: Any = field(default=None, compare=False)

    @property
    def message(self) -> str:
        return f"File '{self.name}' uploaded successfully!"


@dataclass(frozen=True)
class UploadFailure:
    name: str
    message: str
    error: Optional[FileSessionError] = field(default=None, compare=False)


UploadOutcome = Union[UploadSuccess, UploadFailure]


@dataclass(frozen=True)
class BatchResult:
    """Aggregate counts for one confirmed batch."""
    success_count: int
    error_count: int

    def summary(self) -> Optional[Tuple[str, str]]:
        """
        Overall (level, message) for the batch.

        Returns:
            ("success" | "warning" | "error", text), or None for an empty batch
        """
        if self.success_count > 0 and self.error_count == 0:
            return "success", f"{self.success_count} file(s) uploaded successfully!"
        if self.success_count > 0 and self.error_count > 0:
            return (
                "warning",
                f"{self.success_count} file(s) uploaded, {self.error_count} file(s) failed.",
            )
        if self.error_count > 0:
            return "error", f"All {self.error_count} file(s) failed to upload."
        return None


@dataclass(frozen=True)
class UploadProgress:
    """Position within the batch currently uploading (0-based index)."""
    index: int
    total: int
    current: str


class UploadOrchestrator:
    """
    Drives one upload batch at a time through Idle -> Confirming ->
    Uploading -> Idle.

    Files are sent strictly in selection order and file i+1 is not sent
    until file i's outcome has been recorded and reported. A failed file
    never stops the batch; only a missing identity aborts it, before any
    request is made.
    """

    def __init__(
        self,
        api: ApiClient,
        on_item: Optional[Callable[[UploadOutcome], None]] = None,
        on_complete: Optional[Callable[[BatchResult], None]] = None,
    ):
        """
        Initialize upload orchestrator.

        Args:
            api: API client
            on_item: Called once per file, in order, with its outcome
            on_complete: Called once per confirmed batch with the totals
        """
        self.api = api
        self.on_item = on_item
        self.on_complete = on_complete
        self.state = UploadState.IDLE
        self.batch: Tuple[UploadTask, ...] = ()
        self.progress: Optional[UploadProgress] = None

    @property
    def pending_names(self) -> List[str]:
        """Names in the batch awaiting confirmation or upload."""
        return [task.name for task in self.batch]

    def select(self, files: Iterable[UploadTask]) -> bool:
        """
        Capture a batch for review.

        An empty selection changes nothing. A new selection while
        confirming replaces the previous one; while uploading it is refused.

        Returns:
            True if the orchestrator is now confirming the given batch
        """
        tasks = tuple(files)
        if not tasks:
            return False
        if self.state is UploadState.UPLOADING:
            logger.warning("Ignoring selection while a batch is uploading")
            return False

        self.batch = tasks
        self.state = UploadState.CONFIRMING
        logger.info(f"Selected {len(tasks)} file(s) for upload")
        return True

    def cancel(self) -> None:
        """Discard the batch under review."""
        if self.state is UploadState.CONFIRMING:
            logger.info(f"Upload of {len(self.batch)} file(s) cancelled")
            self._reset()

    async def confirm(self, identity: Optional[Identity]) -> Result[BatchResult]:
        """
        Upload the reviewed batch.

        Returns:
            Result with the BatchResult, or a PreconditionError when there
            is no batch to confirm or no identity (no request is made)
        """
        if self.state is not UploadState.CONFIRMING:
            return Result.failure(PreconditionError("No upload is awaiting confirmation."))
        if identity is None:
            logger.warning("Upload confirmed without a user id; batch discarded")
            self._reset()
            return Result.failure(PreconditionError("You must be logged in to upload files."))

        batch = self.batch
        self.state = UploadState.UPLOADING
        success_count = 0
        error_count = 0

        try:
            for index, task in enumerate(batch):
                self.progress = UploadProgress(index, len(batch), task.name)
                outcome = await self._upload_one(identity, task)
                if isinstance(outcome, UploadSuccess):
                    success_count += 1
                else:
                    error_count += 1
                if self.on_item is not None:
                    self.on_item(outcome)
        finally:
            self._reset()

        result = BatchResult(success_count, error_count)
        logger.info(
            f"Upload batch finished [success={success_count}, errors={error_count}]"
        )
        if self.on_complete is not None:
            self.on_complete(result)
        return Result.success(result)

    async def _upload_one(self, identity: Identity, task: UploadTask) -> UploadOutcome:
        files = {'file': (task.name, task.content, task.content_type)}
        try:
            response = await self.api.request(
                'POST',
                UPLOAD_ENDPOINT,
                params={'owner_id': identity.user_id},
                files=files,
                timeout=self.api.calculate_upload_timeout(task.size),
            )
        except NetworkError as e:
            logger.error(f"Upload of {task.name} failed: {e}")
            message = e.message or f"An unknown error occurred during upload of {task.name}."
            return UploadFailure(task.name, message, e)

        if not is_success(response):
            try:
                data = response.json()
            except ValueError:
                message = f"Server error for {task.name}: {response.text or 'Unknown error'}"
                return UploadFailure(task.name, message, ServerError(message, response.status_code))
            message = f"File upload failed for {task.name}"
            if isinstance(data, dict) and data.get('error'):
                message = str(data['error'])
            return UploadFailure(task.name, message, ServerError(message, response.status_code))

        try:
            body = response.json()
        except ValueError:
            message = f"File {task.name} uploaded, but response was malformed."
            return UploadFailure(task.name, message, MalformedResponseError(message))

        logger.debug(f"Uploaded {task.name} ({task.size} bytes)")
        return UploadSuccess(task.name, body)

    def _reset(self) -> None:
        self.state = UploadState.IDLE
        self.batch = ()
        self.progress = None
