"""Utility functions for CLI output and downloads."""

from pathlib import Path
from typing import Iterable, Optional, Tuple

from common.types import FileRecord, PublicShare
from engine.catalog_store import ResultSet
from engine.filters import Filter, to_display


def format_file_size(size_bytes: int) -> str:
    """
    Format file size in bytes to human-readable format with appropriate unit.

    Uses binary units (1024-based) and automatically selects the most
    appropriate unit (B, KiB, MiB, GiB, TiB).

    Args:
        size_bytes: File size in bytes

    Returns:
        Formatted string with size and unit (e.g., "1.50 MiB", "512 B")
    """
    if size_bytes < 1024:
        return f"{size_bytes} B"

    units = ['KiB', 'MiB', 'GiB', 'TiB']
    size = size_bytes / 1024.0

    for unit in units:
        if size < 1024.0:
            return f"{size:.2f} {unit}"
        size /= 1024.0

    return f"{size:.2f} PiB"


def short_id(file_id: str) -> str:
    return file_id[:8] + "..." if len(file_id) > 8 else file_id


def format_record(record: FileRecord) -> str:
    """Two-line listing entry for one file."""
    return (
        f"  - {record.filename} (ID: {record.id})\n"
        f"    Size: {format_file_size(record.size)}  Type: {record.mime_type or 'unknown'}  "
        f"Created: {record.created_at}"
    )


def format_records(records: Iterable[FileRecord]) -> str:
    return "\n".join(format_record(record) for record in records)


def format_result_set(result_set: ResultSet) -> str:
    """
    Listing text; admin listings are grouped under owner headings.
    """
    if not result_set.records:
        return "No files found."

    output = []
    if result_set.groups is not None:
        for owner, records in result_set.groups.items():
            output.append(f"{owner} ({len(records)} file(s)):")
            output.append(format_records(records))
    else:
        output.append(format_records(result_set.records))

    output.append(
        f"\nTotal: {result_set.count} file(s), {format_file_size(result_set.total_size)}"
    )
    return "\n".join(output)


def format_public_share(share: PublicShare, link: Optional[str] = None) -> str:
    lines = [
        f"  - {share.filename} (ID: {short_id(share.file_id)})",
        f"    Owner: {share.owner_username or 'unknown'}  Size: {format_file_size(share.size)}  "
        f"Type: {share.mime_type or 'unknown'}  Downloads: {share.download_count}",
    ]
    if link:
        lines.append(f"    Link: {link}")
    return "\n".join(lines)


def describe_filter(filter_: Filter) -> str:
    """One-line summary of a filter in display units."""
    if filter_.is_empty():
        return "none"

    shown = to_display(filter_)
    parts = []
    if shown.min_size_value:
        parts.append(f"min {shown.min_size_value} {shown.min_size_unit}")
    if shown.max_size_value:
        parts.append(f"max {shown.max_size_value} {shown.max_size_unit}")
    if shown.mime_type:
        parts.append(f"type {shown.mime_type}")
    if shown.start_date:
        parts.append(f"from {shown.start_date}")
    if shown.end_date:
        parts.append(f"to {shown.end_date}")
    return ", ".join(parts)


def resolve_download_path(
    base_dir: Path,
    output_path: Optional[str],
    filename: str,
) -> Tuple[Path, Optional[str]]:
    """
    Resolve where a download is written, confined to the downloads directory.

    Args:
        base_dir: Downloads directory
        output_path: Optional path relative to base_dir (a directory keeps filename)
        filename: Original filename for default naming

    Returns:
        Tuple of (target_path, error_message)
        error_message is None if validation succeeds
    """
    base_dir = base_dir.resolve()

    if output_path:
        output_file = base_dir / output_path.strip()
        if output_file.exists() and output_file.is_dir():
            output_file = output_file / filename
    else:
        output_file = base_dir / Path(filename).name

    try:
        resolved_path = output_file.resolve()
        resolved_path.relative_to(base_dir)
    except (OSError, RuntimeError, ValueError):
        return Path(), f"Invalid path: '{output_path or filename}' is outside downloads directory"

    return resolved_path, None


def write_download(target: Path, content: bytes) -> None:
    """Write downloaded bytes, creating parent directories."""
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_bytes(content)
