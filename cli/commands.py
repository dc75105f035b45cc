"""Command handler functions for CLI operations."""

from pathlib import Path
from typing import Optional

from common.logging_config import get_logger
from common.types import FileRecord
from cli.config import Config
from cli.models import (
    CancelCommand,
    ConfirmCommand,
    DeleteCommand,
    DownloadCommand,
    FilterCommand,
    FilterResetCommand,
    ListCommand,
    LoginCommand,
    LogoutCommand,
    MenuCommand,
    PasswordCommand,
    PublicCommand,
    PublicDownloadCommand,
    QuotaCommand,
    RecentCommand,
    RegisterCommand,
    ResendOtpCommand,
    SearchCommand,
    ShareCommand,
    SharedCommand,
    StatsCommand,
    UploadCommand,
    VerifyCommand,
    WhoamiCommand,
)
from cli.session import CliSession
from cli.utils import (
    describe_filter,
    format_file_size,
    format_public_share,
    format_records,
    format_result_set,
    resolve_download_path,
    write_download,
)
from engine.catalog_store import FileCatalogStore, ResultSet
from engine.errors import InvalidFilterError
from engine.filters import EMPTY_FILTER, FilterInput, canonicalize
from engine.result import Result
from engine.upload_orchestrator import UploadState, UploadTask

logger = get_logger(__name__)


_session: Optional[CliSession] = None


def get_session() -> CliSession:
    """
    Get or create global CliSession instance.

    Returns:
        CliSession instance
    """
    global _session
    if _session is None:
        logger.debug("Creating new CliSession instance")
        config = Config(Path.home() / '.filevault' / 'config.json')
        _session = CliSession(config)
    return _session


def _listing(result: Result[ResultSet]) -> str:
    if not result.ok:
        return f"Error: Failed to fetch files. {result.message}"
    return format_result_set(result.value)


async def handle_mount(session: Optional[CliSession] = None) -> Optional[str]:
    """
    Load the listing the first time a logged-in session starts.

    Returns:
        Listing text, or None if nothing was loaded
    """
    if session is None:
        session = get_session()
    if session.identity is None:
        return None
    result = await session.catalog.mount(session.identity)
    return _listing(result) if result is not None else None


async def handle_register(cmd: RegisterCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'register' command.

    Args:
        cmd: RegisterCommand with account fields
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Success or error message
    """
    if session is None:
        session = get_session()
    result = await session.auth.register(
        cmd.username, cmd.email, cmd.password, cmd.confirm_password, cmd.first_name, cmd.last_name
    )
    if not result.ok:
        return f"Registration failed: {result.message}"
    return f"{result.value}\nRun: verify {cmd.email} <otp>"


async def handle_verify(cmd: VerifyCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'verify' command."""
    if session is None:
        session = get_session()
    result = await session.auth.verify_otp(cmd.email, cmd.otp)
    return result.value if result.ok else f"Verification failed: {result.message}"


async def handle_resend_otp(cmd: ResendOtpCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'resend-otp' command."""
    if session is None:
        session = get_session()
    result = await session.auth.resend_otp(cmd.email)
    return result.value if result.ok else f"Failed to resend OTP: {result.message}"


async def handle_login(cmd: LoginCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'login' command.

    Stores the returned identity and loads the first listing.

    Args:
        cmd: LoginCommand with email and password
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Success message with the first listing, or error message
    """
    if session is None:
        session = get_session()
    result = await session.auth.login(cmd.email, cmd.password)
    if not result.ok:
        return f"Login failed: {result.message}"

    user = result.value
    session.config.set_session(
        user.identity.user_id,
        is_admin=user.identity.is_admin,
        username=user.username,
        email=user.email,
        first_name=user.first_name,
        last_name=user.last_name,
    )
    session.catalog = FileCatalogStore(session.api)
    session.menu.close()

    output = [f"Login successful!\nWelcome, {user.first_name or user.username}."]
    listing = await handle_mount(session)
    if listing:
        output.append(listing)
    return "\n".join(output)


async def handle_logout(cmd: LogoutCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'logout' command."""
    if session is None:
        session = get_session()
    session.config.clear_session()
    session.catalog = FileCatalogStore(session.api)
    session.uploads.cancel()
    session.menu.close()
    return "Logged out."


async def handle_whoami(cmd: WhoamiCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'whoami' command."""
    if session is None:
        session = get_session()
    identity = session.identity
    if identity is None:
        return "Not logged in. Please run: login <email> <password>"
    profile = session.config.get_profile()
    name = " ".join(part for part in (profile['first_name'], profile['last_name']) if part)
    return (
        f"User: {profile['username'] or '-'} ({profile['email'] or '-'})\n"
        f"Name: {name or '-'}\n"
        f"User ID: {identity.user_id}\n"
        f"Role: {identity.role.value}"
    )


async def handle_search(cmd: SearchCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'search' command.

    Args:
        cmd: SearchCommand with filename text
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Formatted listing
    """
    logger.info(f"Executing search command: text={cmd.text!r}")
    if session is None:
        session = get_session()
    result = await session.catalog.submit_search(session.identity, cmd.text)
    return _listing(result)


async def handle_filter(cmd: FilterCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'filter' command.

    Args:
        cmd: FilterCommand with user-entered bounds
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Active filter summary and the refreshed listing
    """
    if session is None:
        session = get_session()
    try:
        filter_ = canonicalize(FilterInput(
            min_size_value=cmd.min_size_value,
            min_size_unit=cmd.min_size_unit,
            max_size_value=cmd.max_size_value,
            max_size_unit=cmd.max_size_unit,
            mime_type=cmd.mime_type,
            start_date=cmd.start_date,
            end_date=cmd.end_date,
        ))
    except InvalidFilterError as e:
        return f"Error: {e}"

    result = await session.catalog.save_filter(session.identity, filter_)
    output = [f"Filter: {describe_filter(filter_)}"]
    identity = session.identity
    if identity is not None and identity.is_admin:
        output.append("Note: search and filters do not apply to the admin listing.")
    output.append(_listing(result))
    return "\n".join(output)


async def handle_filter_reset(cmd: FilterResetCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'filter-reset' command."""
    if session is None:
        session = get_session()
    result = await session.catalog.save_filter(session.identity, EMPTY_FILTER)
    return f"Filter: none\n{_listing(result)}"


async def handle_list(cmd: ListCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'list' command.

    Args:
        cmd: ListCommand
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Formatted listing
    """
    if session is None:
        session = get_session()
    result = await session.catalog.reload(session.identity)
    logger.debug("List command completed")
    return _listing(result)


async def handle_recent(cmd: RecentCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'recent' command."""
    if session is None:
        session = get_session()
    result = await session.catalog.recent(session.identity)
    if not result.ok:
        return f"Error: {result.message}"
    if not result.value:
        return "No recent files."
    return f"Recent files:\n{format_records(result.value)}"


async def handle_upload(cmd: UploadCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'upload' command: read the files and hold them for confirmation.

    Args:
        cmd: UploadCommand with local paths
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Batch summary awaiting confirm/cancel, or error messages
    """
    logger.info(f"Executing upload command: {len(cmd.file_list)} file(s)")
    if session is None:
        session = get_session()

    errors = []
    tasks = []
    for file_path in cmd.file_list:
        path = Path(file_path).expanduser()
        if not path.exists():
            errors.append(f"Error: File not found: {file_path}")
            continue
        if not path.is_file():
            errors.append(f"Error: Not a file: {file_path}")
            continue
        try:
            tasks.append(UploadTask.from_path(path))
        except OSError as e:
            errors.append(f"Error: Cannot read {file_path}: {e}")

    if not tasks:
        errors.append("No files selected.")
        return "\n".join(errors)

    if not session.uploads.select(tasks):
        errors.append("An upload is already in progress.")
        return "\n".join(errors)

    output = errors + [f"Selected {len(tasks)} file(s) for upload:"]
    output.extend(f"  - {task.name} ({format_file_size(task.size)})" for task in tasks)
    output.append("Type 'confirm' to upload or 'cancel' to discard.")
    return "\n".join(output)


async def handle_confirm(cmd: ConfirmCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'confirm' command: upload the held batch, then reload the listing.

    Args:
        cmd: ConfirmCommand
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Per-file and overall upload messages
    """
    if session is None:
        session = get_session()
    identity = session.identity
    result = await session.uploads.confirm(identity)
    if not result.ok:
        return f"Error: {result.message}"

    output = session.drain_upload_messages()
    await session.catalog.reload(identity)
    logger.debug("Confirm command completed")
    return output


async def handle_cancel(cmd: CancelCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'cancel' command."""
    if session is None:
        session = get_session()
    if session.uploads.state is not UploadState.CONFIRMING:
        return "No upload is awaiting confirmation."
    session.uploads.cancel()
    return "Upload cancelled."


async def handle_delete(cmd: DeleteCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'delete' command, then reload the listing.

    Args:
        cmd: DeleteCommand with file_id
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Success or error message
    """
    if session is None:
        session = get_session()
    identity = session.identity
    result = await session.catalog.remove(identity, cmd.file_id)
    if not result.ok:
        return f"Error deleting file: {result.message}"

    if session.menu.is_open(cmd.file_id):
        session.menu.close()
    await session.catalog.reload(identity)
    return "File deleted successfully!"


async def handle_download(cmd: DownloadCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'download' command.

    Args:
        cmd: DownloadCommand with file_id and optional output_path
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Success message with saved path, or error message
    """
    logger.info(f"Executing download command: file_id={cmd.file_id} output_path={cmd.output_path}")
    if session is None:
        session = get_session()

    record = session.catalog.find(cmd.file_id)
    if record is None:
        record = FileRecord(id=cmd.file_id, filename=cmd.file_id, created_at="", size=0, mime_type="")

    target, error = resolve_download_path(
        session.config.get_downloads_dir(), cmd.output_path, record.filename
    )
    if error:
        return f"Error: {error}"

    try:
        result = await session.catalog.download(
            record, lambda content, _filename: write_download(target, content)
        )
    except OSError as e:
        return f"Error writing file: {e}"
    if not result.ok:
        return f"Failed to download file: {result.message}"
    return f"Downloaded: {record.filename}\nSaved to: {target}"


async def handle_share(cmd: ShareCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'share' command.

    Args:
        cmd: ShareCommand with file_id
        session: Optional CliSession for dependency injection (testing)

    Returns:
        New share status and link, or error message
    """
    if session is None:
        session = get_session()
    result = await session.shares.toggle(cmd.file_id, session.identity)
    if not result.ok:
        return f"Error sharing file: {result.message}"
    return result.value.message


async def handle_shared(cmd: SharedCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'shared' command."""
    if session is None:
        session = get_session()
    result = await session.public.list_shared(session.identity)
    if not result.ok:
        return f"Failed to load publicly shared files: {result.message}"
    if not result.value:
        return "No publicly shared files."

    output = [f"Publicly shared files ({len(result.value)}):"]
    for share in result.value:
        link = session.public.link_for(share.share_token) if share.share_token else None
        output.append(format_public_share(share, link))
    return "\n".join(output)


async def handle_public(cmd: PublicCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'public' command."""
    if session is None:
        session = get_session()
    result = await session.public.details(cmd.token)
    if not result.ok:
        return f"Error: {result.message}"
    return format_public_share(result.value, session.public.link_for(cmd.token))


async def handle_public_download(
    cmd: PublicDownloadCommand,
    session: Optional[CliSession] = None,
) -> str:
    """Handle 'public-download' command."""
    if session is None:
        session = get_session()
    details = await session.public.details(cmd.token)
    if not details.ok:
        return f"Failed to download file: {details.message}"

    filename = details.value.filename
    target, error = resolve_download_path(session.config.get_downloads_dir(), cmd.output_path, filename)
    if error:
        return f"Error: {error}"

    try:
        result = await session.public.download(
            cmd.token, filename, lambda content, _filename: write_download(target, content)
        )
    except OSError as e:
        return f"Error writing file: {e}"
    if not result.ok:
        return f"Failed to download file: {result.message}"
    return f"File downloaded successfully!\nSaved to: {target}"


async def handle_stats(cmd: StatsCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'stats' command.

    A failed fetch keeps the last figures that were loaded.

    Args:
        cmd: StatsCommand
        session: Optional CliSession for dependency injection (testing)

    Returns:
        Usage, deduplication and quota lines
    """
    if session is None:
        session = get_session()
    identity = session.identity
    if identity is None:
        return "Error: Not logged in. Please run: login <email> <password>"

    dashboard_result = await session.stats.fetch(identity, identity.role)
    storage_result = await session.stats.fetch_storage(identity)
    output = []

    dashboard = session.stats.dashboard
    if dashboard is not None:
        output.append(f"Total files: {dashboard.total_files}")
        output.append(f"Storage used: {format_file_size(dashboard.total_storage_used)}")
        if dashboard.total_users is not None:
            output.append(f"Total users: {dashboard.total_users}")
    if not dashboard_result.ok:
        output.append(f"Stats unavailable: {dashboard_result.message}")

    storage = session.stats.storage
    if storage is not None:
        output.append(
            f"Storage: {format_file_size(storage.total_storage_used_deduplicated)} of "
            f"{format_file_size(storage.storage_quota)} used "
            f"({storage.usage_fraction() * 100:.1f}%)"
        )
        output.append(f"Savings: {storage.storage_savings_percentage}")
    if not storage_result.ok:
        output.append(f"Storage stats unavailable: {storage_result.message}")

    return "\n".join(output)


async def handle_quota(cmd: QuotaCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'quota' command."""
    if session is None:
        session = get_session()
    result = await session.stats.fetch_quota(session.identity)
    if not result.ok:
        return f"Failed to fetch user quota: {result.message}"
    return (
        f"Rate limit: {result.value.rate_limit} request(s)\n"
        f"Storage quota: {format_file_size(result.value.storage_quota)}"
    )


async def handle_password(cmd: PasswordCommand, session: Optional[CliSession] = None) -> str:
    """Handle 'password' command."""
    if session is None:
        session = get_session()
    result = await session.auth.update_password(
        session.identity, cmd.current_password, cmd.new_password, cmd.confirm_password
    )
    return result.value if result.ok else f"Error: {result.message}"


async def handle_menu(cmd: MenuCommand, session: Optional[CliSession] = None) -> str:
    """
    Handle 'menu' command: open one file's actions, closing any other.

    Args:
        cmd: MenuCommand with file_id
        session: Optional CliSession for dependency injection (testing)

    Returns:
        File details and available actions, or a closed notice
    """
    if session is None:
        session = get_session()
    record = session.catalog.find(cmd.file_id)
    if record is None:
        return f"File not in current listing: {cmd.file_id}"

    if session.menu.toggle(cmd.file_id) is None:
        return f"Menu closed for {record.filename}."

    lines = [
        f"{record.filename}",
        f"  Size: {format_file_size(record.size)}",
        f"  Type: {record.mime_type or 'unknown'}",
        f"  Created: {record.created_at}",
    ]
    if record.owner_username:
        lines.append(f"  Owner: {record.owner_username}")
    lines.append(f"  Actions: download {record.id} | share {record.id} | delete {record.id}")
    return "\n".join(lines)
