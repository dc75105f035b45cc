"""Translate identity, free text and filters into server query parameters."""

from dataclasses import dataclass
from datetime import datetime, timezone, tzinfo
from typing import Dict, Optional, Tuple

from common.constants import (
    ADMIN_FILES_ENDPOINT,
    RECENT_FILES_LIMIT,
    SEARCH_ENDPOINT,
)
from common.types import Identity, Role
from engine.filters import EMPTY_FILTER, Filter


@dataclass(frozen=True)
class Query:
    """An endpoint plus its ordered query parameters."""
    endpoint: str
    params: Tuple[Tuple[str, str], ...]

    def as_dict(self) -> Dict[str, str]:
        return dict(self.params)


def to_utc_instant(value: str, tz: Optional[tzinfo] = None) -> str:
    """
    Convert a date or datetime to an absolute UTC instant.

    A bare date is read as the start of that day in ``tz`` (the local
    timezone when None). Output is ISO-8601 with milliseconds and a Z
    suffix, e.g. "2024-03-01T00:00:00.000Z".
    """
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=tz) if tz is not None else parsed.astimezone()
    instant = parsed.astimezone(timezone.utc)
    return instant.strftime("%Y-%m-%dT%H:%M:%S.") + f"{instant.microsecond // 1000:03d}Z"


def build_query(
    identity: Identity,
    role: Role,
    free_text: str = "",
    filter_: Filter = EMPTY_FILTER,
    tz: Optional[tzinfo] = None,
) -> Query:
    """
    Build the listing query for a session.

    Admins browse everything through the admin endpoint, which takes only
    the subject user id; search text and filters are not sent. Everyone
    else searches their own files. Unset fields are left out entirely.

    Args:
        identity: Caller identity
        role: USER or ADMIN
        free_text: Filename substring ("" for none)
        filter_: Canonical filter
        tz: Timezone used to read bare dates (local when None)

    Returns:
        Query with endpoint and ordered params
    """
    if role is Role.ADMIN:
        return Query(ADMIN_FILES_ENDPOINT, (("user_id", identity.user_id),))

    params = [("owner_id", identity.user_id)]
    if free_text:
        params.append(("filename", free_text))
    if filter_.min_size is not None:
        params.append(("min_size", str(filter_.min_size)))
    if filter_.max_size is not None:
        params.append(("max_size", str(filter_.max_size)))
    if filter_.mime_type:
        params.append(("mime_type", filter_.mime_type))
    if filter_.start_date:
        params.append(("start_date", to_utc_instant(filter_.start_date, tz)))
    if filter_.end_date:
        params.append(("end_date", to_utc_instant(filter_.end_date, tz)))

    return Query(SEARCH_ENDPOINT, tuple(params))


def build_recent_query(identity: Identity, limit: int = RECENT_FILES_LIMIT) -> Query:
    """Query for the caller's most recently created files."""
    return Query(
        SEARCH_ENDPOINT,
        (
            ("owner_id", identity.user_id),
            ("limit", str(limit)),
            ("sort_by", "created_at"),
        ),
    )
