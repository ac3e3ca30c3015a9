"""REPL with prompt_toolkit for user interaction."""

import os
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.history import InMemoryHistory

from cli.commands import (
    handle_by_hash,
    handle_connect,
    handle_create,
    handle_delete,
    handle_details_hash,
    handle_hash,
    handle_history,
    handle_range,
    handle_read,
    handle_read_details,
    handle_transfer,
)
from cli.completer import RegistryCompleter
from cli.constants import (
    HELP_TEXT,
    LOGO,
    PROMPT_TEXT,
    STYLE,
    WELCOME_HELP,
    WELCOME_TITLE,
)
from cli.models import (
    ByHashCommand,
    ConnectCommand,
    CreateCommand,
    DeleteCommand,
    DetailsHashCommand,
    HashCommand,
    HistoryCommand,
    RangeCommand,
    ReadCommand,
    ReadDetailsCommand,
    TransferCommand,
)
from cli.parser import ParseError, parse_command

COMMAND_HANDLERS = {
    CreateCommand: handle_create,
    ReadCommand: handle_read,
    ReadDetailsCommand: handle_read_details,
    TransferCommand: handle_transfer,
    DeleteCommand: handle_delete,
    RangeCommand: handle_range,
    ByHashCommand: handle_by_hash,
    HashCommand: handle_hash,
    DetailsHashCommand: handle_details_hash,
    HistoryCommand: handle_history,
    ConnectCommand: handle_connect,
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


def dispatch_command(cmd_obj, client=None) -> str:
    """Dispatch parsed command to appropriate handler."""
    handler = COMMAND_HANDLERS.get(type(cmd_obj))
    if handler is None:
        return f"Unknown command type: {type(cmd_obj)}"
    return handler(cmd_obj, client=client)


def succeeded(result: str) -> bool:
    first_line = result.split("\n", 1)[0]
    return " failed: " not in first_line and not first_line.startswith(("Error:", "Unexpected error"))


def track_names(completer: RegistryCompleter, cmd_obj, result: str) -> None:
    """Keep the completer's file names in step with successful commands."""
    if not succeeded(result):
        return
    if isinstance(cmd_obj, (CreateCommand, ReadCommand, ReadDetailsCommand, TransferCommand)):
        completer.remember(cmd_obj.name)
    elif isinstance(cmd_obj, DeleteCommand):
        completer.forget(cmd_obj.name)


def repl_loop() -> None:
    """Start interactive REPL with prompt_toolkit."""
    completer = RegistryCompleter()
    session: PromptSession = PromptSession(
        completer=completer, history=InMemoryHistory(), style=STYLE
    )

    clear_screen()
    show_welcome()

    while True:
        try:
            user_input = session.prompt([("class:prompt", PROMPT_TEXT)])

            if not user_input.strip():
                continue

            if user_input.strip() == "exit":
                print("Goodbye!")
                break

            if user_input.strip() == "help":
                print(HELP_TEXT)
                continue

            if user_input.strip() == "clear":
                clear_screen()
                show_welcome()
                continue

            cmd_obj = parse_command(user_input)
            result = dispatch_command(cmd_obj)
            track_names(completer, cmd_obj, result)
            print(result)

        except ParseError as e:
            print(f"Error: {e}")
        except KeyboardInterrupt:
            continue
        except EOFError:
            print("\nGoodbye!")
            break
