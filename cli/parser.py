"""Command parser for CLI input."""

import shlex

from common.constants import DEFAULT_SIZE_UNIT, SIZE_UNITS
from cli.models import (
    CancelCommand,
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


_NO_ARG_COMMANDS = {
    "logout": LogoutCommand,
    "whoami": WhoamiCommand,
    "filter-reset": FilterResetCommand,
    "list": ListCommand,
    "recent": RecentCommand,
    "confirm": ConfirmCommand,
    "cancel": CancelCommand,
    "shared": SharedCommand,
    "stats": StatsCommand,
    "quota": QuotaCommand,
}

_UNITS_BY_NAME = {name.lower(): name for name in SIZE_UNITS}


def parse_command(input_line: str) -> CommandRequest:
    """Parse user input into a CommandRequest object.

    Args:
        input_line: Raw user input from REPL

    Returns:
        CommandRequest object

    Raises:
        ParseError: If command syntax is invalid
    """
    if not input_line.strip():
        raise ParseError("Empty command")

    try:
        tokens = shlex.split(input_line)
    except ValueError as e:
        raise ParseError(f"Invalid syntax: {e}")

    if not tokens:
        raise ParseError("Empty command")

    command_name = tokens[0]
    args = tokens[1:]

    if command_name in _NO_ARG_COMMANDS:
        if args:
            raise ParseError(f"{command_name} takes no arguments")
        return _NO_ARG_COMMANDS[command_name]()

    if command_name == "register":
        return _parse_register(args)
    elif command_name == "verify":
        return VerifyCommand(*_exact(command_name, args, "<email> <otp>"))
    elif command_name == "resend-otp":
        return ResendOtpCommand(*_exact(command_name, args, "<email>"))
    elif command_name == "login":
        return LoginCommand(*_exact(command_name, args, "<email> <password>"))
    elif command_name == "search":
        return SearchCommand(text=" ".join(args))
    elif command_name == "filter":
        return _parse_filter(args)
    elif command_name == "upload":
        if not args:
            raise ParseError("upload requires at least one file")
        return UploadCommand(file_list=tuple(args))
    elif command_name == "delete":
        return DeleteCommand(*_exact(command_name, args, "<file_id>"))
    elif command_name == "download":
        return DownloadCommand(*_one_plus_optional(command_name, args, "<file_id> [output_path]"))
    elif command_name == "share":
        return ShareCommand(*_exact(command_name, args, "<file_id>"))
    elif command_name == "public":
        return PublicCommand(*_exact(command_name, args, "<token>"))
    elif command_name == "public-download":
        return PublicDownloadCommand(*_one_plus_optional(command_name, args, "<token> [output_path]"))
    elif command_name == "password":
        return PasswordCommand(*_exact(command_name, args, "<current> <new> <confirm>"))
    elif command_name == "menu":
        return MenuCommand(*_exact(command_name, args, "<file_id>"))
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _exact(command_name: str, args: list[str], usage: str) -> list[str]:
    """Require exactly as many arguments as the usage string names."""
    expected = len(usage.split())
    if len(args) != expected:
        raise ParseError(
            f"{command_name} requires exactly {expected} argument(s): {usage}"
        )
    return args


def _one_plus_optional(command_name: str, args: list[str], usage: str) -> list[str]:
    """Require one argument and allow a second."""
    if not 1 <= len(args) <= 2:
        raise ParseError(f"{command_name} requires 1 or 2 arguments: {usage}")
    return args


def _parse_register(args: list[str]) -> RegisterCommand:
    """Parse 'register <username> <email> <password> <confirm> <first> <last>' command."""
    if len(args) != 6:
        raise ParseError(
            "register requires exactly 6 arguments: "
            "<username> <email> <password> <confirm_password> <first_name> <last_name>"
        )
    return RegisterCommand(*args)


def _parse_filter(args: list[str]) -> FilterCommand:
    """Parse 'filter [--min N [UNIT]] [--max N [UNIT]] [--type MIME] [--from DATE] [--to DATE]'."""
    fields: dict = {}
    index = 0

    while index < len(args):
        flag = args[index]
        if index + 1 >= len(args):
            raise ParseError(f"{flag} requires a value")
        value = args[index + 1]
        index += 2

        if flag in ("--min", "--max"):
            unit = DEFAULT_SIZE_UNIT
            if index < len(args) and args[index].lower() in _UNITS_BY_NAME:
                unit = _UNITS_BY_NAME[args[index].lower()]
                index += 1
            prefix = "min" if flag == "--min" else "max"
            fields[f"{prefix}_size_value"] = value
            fields[f"{prefix}_size_unit"] = unit
        elif flag == "--type":
            fields["mime_type"] = value
        elif flag == "--from":
            fields["start_date"] = value
        elif flag == "--to":
            fields["end_date"] = value
        else:
            raise ParseError(f"Unknown filter option: {flag}")

    return FilterCommand(**fields)
