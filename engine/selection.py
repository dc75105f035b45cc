"""Exclusive open-menu state owned by a listing view."""

from typing import Optional


class ExclusiveSelection:
    """At most one item (e.g. a file's action menu) is open at a time."""

    def __init__(self):
        self.open_id: Optional[str] = None

    def toggle(self, item_id: str) -> Optional[str]:
        """Open item_id, or close it if it is already open. Returns the open id."""
        self.open_id = None if self.open_id == item_id else item_id
        return self.open_id

    def close(self) -> None:
        self.open_id = None

    def is_open(self, item_id: str) -> bool:
        return self.open_id == item_id
