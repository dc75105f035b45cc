"""Current file listing for a session: search, filter, admin grouping, delete."""

import re
from dataclasses import dataclass, field
from datetime import datetime, timezone, tzinfo
from typing import Callable, Dict, Optional, Tuple

from common.constants import FILE_ENDPOINT, RECENT_FILES_LIMIT, UNKNOWN_OWNER_LABEL
from common.logging_config import get_logger
from common.types import FileRecord, Identity, Role
from engine.api_client import ApiClient, is_success, parse_json, server_error
from engine.errors import FileSessionError, InvalidFilterError, PreconditionError, ServerError
from engine.filters import EMPTY_FILTER, Filter
from engine.query_builder import Query, build_query, build_recent_query
from engine.result import Result
from engine.schemas import FileRecordPayload, parse_model_list

logger = get_logger(__name__)

TriggerDownload = Callable[[bytes, str], None]

_FRACTION = re.compile(r'\.(\d+)')


@dataclass(frozen=True)
class ResultSet:
    """
    One wholesale listing. ``groups`` is set only for admin listings and
    maps owner label to that owner's records in server order.
    """
    records: Tuple[FileRecord, ...] = ()
    groups: Optional[Dict[str, Tuple[FileRecord, ...]]] = field(default=None, hash=False)

    @property
    def count(self) -> int:
        return len(self.records)

    @property
    def total_size(self) -> int:
        return sum(record.size for record in self.records)

    def without(self, file_id: str) -> "ResultSet":
        """Copy of this result set with one file removed."""
        records = tuple(r for r in self.records if r.id != file_id)
        groups = None
        if self.groups is not None:
            groups = group_by_owner(records)
        return ResultSet(records, groups)


def group_by_owner(records: Tuple[FileRecord, ...]) -> Dict[str, Tuple[FileRecord, ...]]:
    """
    Group records by owner username, keeping first-seen owner order and
    server order within each group.
    """
    grouped: Dict[str, list] = {}
    for record in records:
        label = record.owner_username or UNKNOWN_OWNER_LABEL
        grouped.setdefault(label, []).append(record)
    return {label: tuple(items) for label, items in grouped.items()}


def created_timestamp(record: FileRecord) -> float:
    """POSIX timestamp of a record's creation time; 0.0 when unparseable."""
    text = record.created_at.replace("Z", "+00:00")
    text = _FRACTION.sub(lambda m: "." + (m.group(1) + "000000")[:6], text)
    try:
        created = datetime.fromisoformat(text)
    except ValueError:
        return 0.0
    if created.tzinfo is None:
        created = created.replace(tzinfo=timezone.utc)
    return created.timestamp()


class FileCatalogStore:
    """
    Holds the visible result set and the search state that produced it.

    Free text is only recorded by set_free_text(); requests are issued by
    mount() (once), submit_search() and save_filter(). Responses are
    applied by request sequence number, so a slow older refresh can never
    overwrite a newer one.
    """

    def __init__(self, api: ApiClient, tz: Optional[tzinfo] = None):
        """
        Initialize catalog store.

        Args:
            api: API client
            tz: Timezone used to read filter dates (local when None)
        """
        self.api = api
        self.tz = tz
        self.result_set = ResultSet()
        self.free_text = ""
        self.filter: Filter = EMPTY_FILTER
        self.last_error: Optional[FileSessionError] = None
        self.mounted = False
        self._issued = 0
        self._applied = 0

    def set_free_text(self, text: str) -> None:
        """Record search text without fetching."""
        self.free_text = text

    async def mount(self, identity: Optional[Identity]) -> Optional[Result[ResultSet]]:
        """Initial load; later calls are no-ops returning None."""
        if self.mounted:
            return None
        self.mounted = True
        return await self.reload(identity)

    async def submit_search(
        self,
        identity: Optional[Identity],
        text: Optional[str] = None,
    ) -> Result[ResultSet]:
        """Explicit search trigger (the Enter key)."""
        if text is not None:
            self.set_free_text(text)
        return await self.reload(identity)

    async def save_filter(self, identity: Optional[Identity], filter_: Filter) -> Result[ResultSet]:
        """Replace the active filter and refetch."""
        self.filter = filter_
        return await self.reload(identity)

    async def reload(self, identity: Optional[Identity]) -> Result[ResultSet]:
        """Refetch with the current search text and filter."""
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))
        return await self.refresh(identity, identity.role, self.free_text, self.filter)

    async def refresh(
        self,
        identity: Identity,
        role: Role,
        free_text: str,
        filter_: Filter,
    ) -> Result[ResultSet]:
        """
        Fetch a listing and replace the result set.

        On failure the visible result set is emptied. If a newer refresh
        has already been applied, this response is dropped and the current
        result set is returned instead.
        A filter that cannot be turned into a query is rejected before any
        request and leaves the result set untouched.

        Returns:
            Result carrying the visible ResultSet or the fetch error
        """
        try:
            query = build_query(identity, role, free_text, filter_, self.tz)
        except ValueError as e:
            logger.warning(f"Rejected filter: {e}")
            return Result.failure(InvalidFilterError(f"Invalid filter date: {e}"))

        self._issued += 1
        sequence = self._issued

        try:
            records = await self._fetch_records(query)
        except FileSessionError as e:
            logger.warning(f"File listing failed: {e} [sequence={sequence}]")
            if self._apply(sequence, ResultSet(), e):
                return Result.failure(e)
            return Result.success(self.result_set)

        result_set = ResultSet(
            records,
            group_by_owner(records) if role is Role.ADMIN else None,
        )
        self._apply(sequence, result_set, None)
        return Result.success(self.result_set)

    def _apply(
        self,
        sequence: int,
        result_set: ResultSet,
        error: Optional[FileSessionError],
    ) -> bool:
        if sequence < self._applied:
            logger.info(
                f"Discarding stale listing [sequence={sequence}, applied={self._applied}]"
            )
            return False
        self._applied = sequence
        self.result_set = result_set
        self.last_error = error
        logger.debug(f"Applied listing [sequence={sequence}, count={result_set.count}]")
        return True

    async def _fetch_records(self, query: Query) -> Tuple[FileRecord, ...]:
        response = await self.api.request('GET', query.endpoint, params=list(query.params))
        if not is_success(response):
            raise ServerError(f"HTTP error! status: {response.status_code}", response.status_code)
        data = parse_json(response, "File listing")
        return tuple(payload.to_record() for payload in parse_model_list(FileRecordPayload, data))

    async def recent(
        self,
        identity: Optional[Identity],
        limit: int = RECENT_FILES_LIMIT,
    ) -> Result[Tuple[FileRecord, ...]]:
        """
        Most recently created files, newest first.

        Does not touch the visible result set.
        """
        if identity is None:
            return Result.failure(PreconditionError("User ID not found. Please log in."))
        try:
            records = await self._fetch_records(build_recent_query(identity, limit))
        except FileSessionError as e:
            logger.warning(f"Recent files fetch failed: {e}")
            return Result.failure(e)

        ordered = sorted(records, key=created_timestamp, reverse=True)
        return Result.success(tuple(ordered[:limit]))

    async def remove(self, identity: Optional[Identity], file_id: str) -> Result[None]:
        """
        Delete a file owned by the caller.

        On success the file is dropped from the visible result set; the
        caller is still expected to reload() so every view reflects server
        state.
        """
        if identity is None:
            return Result.failure(PreconditionError("You must be logged in to delete files."))

        try:
            response = await self.api.request(
                'DELETE',
                FILE_ENDPOINT.format(file_id=file_id),
                params={'user_id': identity.user_id},
            )
            if not is_success(response):
                raise server_error(response, "Failed to delete file.")
        except FileSessionError as e:
            logger.warning(f"Delete failed for file {file_id}: {e}")
            return Result.failure(e)

        self.result_set = self.result_set.without(file_id)
        logger.info(f"Deleted file {file_id}")
        return Result.success()

    async def download(self, record: FileRecord, trigger_download: TriggerDownload) -> Result[None]:
        """Fetch a file's bytes and hand them to the download capability."""
        try:
            response = await self.api.request('GET', FILE_ENDPOINT.format(file_id=record.id))
            if not is_success(response):
                raise ServerError(f"HTTP error! status: {response.status_code}", response.status_code)
        except FileSessionError as e:
            logger.warning(f"Download failed for file {record.id}: {e}")
            return Result.failure(e)

        trigger_download(response.content, record.filename)
        return Result.success()

    def find(self, file_id: str) -> Optional[FileRecord]:
        """Look up a record in the visible result set by id."""
        for record in self.result_set.records:
            if record.id == file_id:
                return record
        return None
