"""REPL with prompt_toolkit for user interaction."""

import os
import sys

from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from common.logging_config import get_logger
from cli import commands
from cli.completer import FileVaultCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
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
from cli.parser import ParseError, parse_command
from cli.session import CliSession

logger = get_logger(__name__)

_HANDLERS = {
    RegisterCommand: commands.handle_register,
    VerifyCommand: commands.handle_verify,
    ResendOtpCommand: commands.handle_resend_otp,
    LoginCommand: commands.handle_login,
    LogoutCommand: commands.handle_logout,
    WhoamiCommand: commands.handle_whoami,
    SearchCommand: commands.handle_search,
    FilterCommand: commands.handle_filter,
    FilterResetCommand: commands.handle_filter_reset,
    ListCommand: commands.handle_list,
    RecentCommand: commands.handle_recent,
    UploadCommand: commands.handle_upload,
    ConfirmCommand: commands.handle_confirm,
    CancelCommand: commands.handle_cancel,
    DeleteCommand: commands.handle_delete,
    DownloadCommand: commands.handle_download,
    ShareCommand: commands.handle_share,
    SharedCommand: commands.handle_shared,
    PublicCommand: commands.handle_public,
    PublicDownloadCommand: commands.handle_public_download,
    StatsCommand: commands.handle_stats,
    QuotaCommand: commands.handle_quota,
    PasswordCommand: commands.handle_password,
    MenuCommand: commands.handle_menu,
}


def clear_screen() -> None:
    """Clear the terminal screen (cross-platform)."""
    if sys.platform == "win32":
        os.system("cls")
    else:
        os.system("clear")


def show_welcome() -> None:
    print(LOGO)
    print(WELCOME_TITLE)
    print(WELCOME_HELP)


async def dispatch_command(cmd_obj, session: CliSession = None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = _HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return await handler(cmd_obj, session)


async def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    prompt_session: PromptSession = PromptSession(
        completer=FileVaultCompleter(), history=InMemoryHistory(), style=STYLE
    )
    session = commands.get_session()

    clear_screen()
    show_welcome()

    listing = await commands.handle_mount(session)
    if listing:
        print(listing)

    try:
        while True:
            try:
                user_input = await prompt_session.prompt_async([("class:prompt", PROMPT_TEXT)])
                line = user_input.strip()

                if not line:
                    continue

                if line == "exit":
                    print("Goodbye!")
                    break

                if line == "help":
                    print(HELP_TEXT)
                    continue

                if line == "clear":
                    clear_screen()
                    show_welcome()
                    continue

                cmd_obj = parse_command(user_input)
                logger.debug(f"Dispatching {cmd_obj.command}")
                print(await dispatch_command(cmd_obj, session))

            except ParseError as e:
                print(f"Error: {e}")
            except KeyboardInterrupt:
                continue
            except EOFError:
                print("\nGoodbye!")
                break
    finally:
        await session.close()
