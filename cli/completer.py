"""Custom completer for FileVault CLI with local file autocompletion."""

from pathlib import Path
from typing import Iterable, Optional

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from common.constants import MIME_TYPES
from cli.constants import COMMANDS

PATH_COMMANDS = ("upload",)


class FileVaultCompleter(Completer):
    """
    Custom completer that provides:
    - Command name completion for the first token
    - Local file path completion for 'upload' arguments
    - MIME type completion after 'filter --type'
    """

    def __init__(self, base_dir: Optional[Path] = None):
        self.base_dir = base_dir

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        """
        Generate completions based on cursor position and context.

        For the first token, completes command names.
        For 'upload' arguments, completes paths relative to the working directory.
        After "filter --type", completes the known MIME types.
        """
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        current_word = "" if is_typing_new_token else tokens[-1]
        command = tokens[0].lower()

        if command == "filter":
            previous = tokens[-1] if is_typing_new_token else tokens[-2]
            if previous == "--type":
                yield from self._complete_mime_types(current_word)
            return

        if command not in PATH_COMMANDS:
            return

        already_typed = set(tokens[1:] if is_typing_new_token else tokens[1:-1])
        yield from self._complete_paths(current_word, already_typed)

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_mime_types(self, partial: str) -> Iterable[Completion]:
        partial_lower = partial.lower()
        for mime_type in MIME_TYPES:
            if mime_type.lower().startswith(partial_lower):
                yield Completion(mime_type, start_position=-len(partial))

    def _complete_paths(self, partial: str, exclude: set) -> Iterable[Completion]:
        """
        Complete files and directories under the partial path.

        Directories complete with a trailing slash so completion can
        continue into them; files already on the line are skipped.
        """
        base = self.base_dir or Path.cwd()
        head, _, prefix = partial.rpartition("/")
        directory = base / head if head else base
        if not directory.is_dir():
            return

        try:
            entries = sorted(directory.iterdir())
        except OSError:
            return

        for entry in entries:
            if entry.name.startswith(".") and not prefix.startswith("."):
                continue
            if not entry.name.lower().startswith(prefix.lower()):
                continue
            candidate = f"{head}/{entry.name}" if head else entry.name
            if entry.is_dir():
                yield Completion(candidate + "/", start_position=-len(partial))
            elif candidate not in exclude:
                yield Completion(candidate, start_position=-len(partial))
