"""Completer for the Folio CLI: command names, then file names seen this session."""

from typing import Iterable, Set

from prompt_toolkit.completion import Completer, Completion
from prompt_toolkit.document import Document

from cli.constants import COMMANDS

NAME_COMMANDS = {"read", "read-details", "transfer", "delete", "hash", "details-hash"}


class RegistryCompleter(Completer):
    """
    Completes the command name for the first token and, for commands whose
    first argument is a file name, the names this session created or read.

    The registry has no name listing that excludes index keys, so names
    are learned from the REPL's own successful commands.
    """

    def __init__(self) -> None:
        self.known_names: Set[str] = set()

    def remember(self, name: str) -> None:
        self.known_names.add(name)

    def forget(self, name: str) -> None:
        self.known_names.discard(name)

    def get_completions(
        self, document: Document, complete_event
    ) -> Iterable[Completion]:
        text = document.text_before_cursor
        tokens = text.split()

        is_typing_new_token = text.endswith(" ") or not tokens

        if not tokens or (len(tokens) == 1 and not is_typing_new_token):
            yield from self._complete_commands(tokens[0] if tokens else "")
            return

        if tokens[0].lower() not in NAME_COMMANDS:
            return

        # Only the first argument is a file name.
        if is_typing_new_token and len(tokens) == 1:
            yield from self._complete_names("")
        elif not is_typing_new_token and len(tokens) == 2:
            yield from self._complete_names(tokens[1])

    def _complete_commands(self, partial: str) -> Iterable[Completion]:
        """Complete command names matching the partial input."""
        partial_lower = partial.lower()
        for cmd in COMMANDS:
            if cmd.startswith(partial_lower):
                yield Completion(cmd, start_position=-len(partial))

    def _complete_names(self, partial: str) -> Iterable[Completion]:
        for name in sorted(self.known_names):
            if name.startswith(partial):
                yield Completion(name, start_position=-len(partial))
