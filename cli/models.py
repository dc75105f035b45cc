"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal, Optional


@dataclass(frozen=True)
class RegisterCommand:
    """Register a new user account."""

    username: str
    email: str
    password: str
    confirm_password: str
    first_name: str
    last_name: str
    command: Literal["register"] = "register"


@dataclass(frozen=True)
class VerifyCommand:
    """Verify an email address with its OTP."""

    email: str
    otp: str
    command: Literal["verify"] = "verify"


@dataclass(frozen=True)
class ResendOtpCommand:
    """Request a new OTP email."""

    email: str
    command: Literal["resend-otp"] = "resend-otp"


@dataclass(frozen=True)
class LoginCommand:
    """Login with email and password."""

    email: str
    password: str
    command: Literal["login"] = "login"


@dataclass(frozen=True)
class LogoutCommand:
    """Forget the stored session."""

    command: Literal["logout"] = "logout"


@dataclass(frozen=True)
class WhoamiCommand:
    """Show the stored session."""

    command: Literal["whoami"] = "whoami"


@dataclass(frozen=True)
class SearchCommand:
    """Search own files by filename substring (empty text clears the search)."""

    text: str
    command: Literal["search"] = "search"


@dataclass(frozen=True)
class FilterCommand:
    """Replace the active filter with the given bounds."""

    min_size_value: str = ""
    min_size_unit: str = "KB"
    max_size_value: str = ""
    max_size_unit: str = "KB"
    mime_type: str = ""
    start_date: str = ""
    end_date: str = ""
    command: Literal["filter"] = "filter"


@dataclass(frozen=True)
class FilterResetCommand:
    """Clear every filter bound."""

    command: Literal["filter-reset"] = "filter-reset"


@dataclass(frozen=True)
class ListCommand:
    """Reload the listing with the current search and filter."""

    command: Literal["list"] = "list"


@dataclass(frozen=True)
class RecentCommand:
    """Show the most recently uploaded files."""

    command: Literal["recent"] = "recent"


@dataclass(frozen=True)
class UploadCommand:
    """Select local files for upload."""

    file_list: tuple[str, ...]
    command: Literal["upload"] = "upload"


@dataclass(frozen=True)
class ConfirmCommand:
    """Upload the selected batch."""

    command: Literal["confirm"] = "confirm"


@dataclass(frozen=True)
class CancelCommand:
    """Discard the selected batch."""

    command: Literal["cancel"] = "cancel"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a file by id."""

    file_id: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class DownloadCommand:
    """Download a file by id."""

    file_id: str
    output_path: Optional[str] = None
    command: Literal["download"] = "download"


@dataclass(frozen=True)
class ShareCommand:
    """Toggle public sharing for a file."""

    file_id: str
    command: Literal["share"] = "share"


@dataclass(frozen=True)
class SharedCommand:
    """List publicly shared files."""

    command: Literal["shared"] = "shared"


@dataclass(frozen=True)
class PublicCommand:
    """Show a public share by token."""

    token: str
    command: Literal["public"] = "public"


@dataclass(frozen=True)
class PublicDownloadCommand:
    """Download a public share by token."""

    token: str
    output_path: Optional[str] = None
    command: Literal["public-download"] = "public-download"


@dataclass(frozen=True)
class StatsCommand:
    """Show usage and deduplication figures."""

    command: Literal["stats"] = "stats"


@dataclass(frozen=True)
class QuotaCommand:
    """Show rate limit and storage quota."""

    command: Literal["quota"] = "quota"


@dataclass(frozen=True)
class PasswordCommand:
    """Change the password."""

    current_password: str
    new_password: str
    confirm_password: str
    command: Literal["password"] = "password"


@dataclass(frozen=True)
class MenuCommand:
    """Open (or close) the action menu of one listed file."""

    file_id: str
    command: Literal["menu"] = "menu"


CommandRequest = (
    RegisterCommand
    | VerifyCommand
    | ResendOtpCommand
    | LoginCommand
    | LogoutCommand
    | WhoamiCommand
    | SearchCommand
    | FilterCommand
    | FilterResetCommand
    | ListCommand
    | RecentCommand
    | UploadCommand
    | ConfirmCommand
    | CancelCommand
    | DeleteCommand
    | DownloadCommand
    | ShareCommand
    | SharedCommand
    | PublicCommand
    | PublicDownloadCommand
    | StatsCommand
    | QuotaCommand
    | PasswordCommand
    | MenuCommand
)
