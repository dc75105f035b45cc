"""CLI constants and configuration."""

from prompt_toolkit.styles import Style

COMMANDS = [
    "register", "verify", "resend-otp", "login", "logout", "whoami",
    "search", "filter", "filter-reset", "list", "recent",
    "upload", "confirm", "cancel", "delete", "download",
    "share", "shared", "public", "public-download",
    "stats", "quota", "password", "menu", "clear", "help", "exit",
]

STYLE = Style.from_dict(
    {
        "prompt": "#2BA6DE bold",
        "command": "#0088ff bold",
    }
)

BLUE = "\033[38;2;43;166;222m"
GREEN = "\033[32m"
YELLOW = "\033[33m"
RED = "\033[31m"
RESET = "\033[0m"

LEVEL_COLORS = {
    "success": GREEN,
    "warning": YELLOW,
    "error": RED,
}

LOGO = f"""{BLUE}
 ███████╗██╗██╗     ███████╗██╗   ██╗ █████╗ ██╗   ██╗██╗  ████████╗
 ██╔════╝██║██║     ██╔════╝██║   ██║██╔══██╗██║   ██║██║  ╚══██╔══╝
 █████╗  ██║██║     █████╗  ██║   ██║███████║██║   ██║██║     ██║
 ██╔══╝  ██║██║     ██╔══╝  ╚██╗ ██╔╝██╔══██║██║   ██║██║     ██║
 ██║     ██║███████╗███████╗ ╚████╔╝ ██║  ██║╚██████╔╝███████╗██║
 ╚═╝     ╚═╝╚══════╝╚══════╝  ╚═══╝  ╚═╝  ╚═╝ ╚═════╝ ╚══════╝╚═╝
{RESET}"""

WELCOME_TITLE = "FileVault CLI - Personal File Storage"
WELCOME_HELP = "Type 'help' for commands or 'exit' to quit.\n"

PROMPT_TEXT = "filevault> "

HELP_TEXT = """Available commands:
  register <user> <email> <pass> <confirm> <first> <last>   Create an account
  verify <email> <otp>                Verify email with the emailed OTP
  resend-otp <email>                  Send a new OTP
  login <email> <password>            Login and store the session
  logout                              Forget the stored session
  whoami                              Show the stored session
  search [text]                       Search filenames (empty text clears the search)
  filter [--min N UNIT] [--max N UNIT] [--type MIME|All] [--from DATE] [--to DATE]
                                      Replace the filter (units: Bytes, KB, MB, GB)
  filter-reset                        Clear the filter
  list                                Reload the listing
  recent                              Show the 5 most recent files
  upload <path> [path ...]            Select files for upload
  confirm                             Upload the selected files, one at a time
  cancel                              Discard the selection
  delete <file_id>                    Delete a file
  download <file_id> [output_path]    Download a file (saved under the downloads directory)
  share <file_id>                     Toggle public sharing and print the link
  shared                              List publicly shared files
  public <token>                      Show a public share
  public-download <token> [output]    Download a public share
  stats                               Show usage, deduplication savings and quota
  quota                               Show rate limit and storage quota
  password <current> <new> <confirm>  Change password
  menu <file_id>                      Show actions for a listed file
  clear                               Clear screen and redisplay welcome message
  help                                Show this help
  exit                                Exit REPL

Examples:
  login alice@example.com secret123
  search report
  filter --min 1.5 MB --type application/pdf --from 2024-01-01
  upload notes.txt photos/cat.png
  confirm
  share 3f2a9c1e-...
  download 3f2a9c1e-... reports/q1.pdf"""
