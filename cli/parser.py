"""Command parser for CLI input."""

import shlex

from cli.models import (
    ByHashCommand,
    CommandRequest,
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


class ParseError(Exception):
    """Raised when command parsing fails."""

    pass


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

    if command_name == "create":
        return _parse_create(args)
    elif command_name == "read":
        return ReadCommand(name=_single_name("read", args))
    elif command_name == "read-details":
        return ReadDetailsCommand(name=_single_name("read-details", args))
    elif command_name == "transfer":
        return _parse_transfer(args)
    elif command_name == "delete":
        return DeleteCommand(name=_single_name("delete", args))
    elif command_name == "range":
        return _parse_range(args)
    elif command_name == "by-hash":
        if len(args) != 1:
            raise ParseError("by-hash requires exactly 1 argument: <hash>")
        return ByHashCommand(content_hash=args[0])
    elif command_name == "hash":
        return HashCommand(name=_single_name("hash", args))
    elif command_name == "details-hash":
        return DetailsHashCommand(name=_single_name("details-hash", args))
    elif command_name == "history":
        return _parse_history(args)
    elif command_name == "connect":
        return _parse_connect(args)
    else:
        raise ParseError(f"Unknown command: {command_name}")


def _single_name(command_name: str, args: list[str]) -> str:
    if len(args) != 1:
        raise ParseError(f"{command_name} requires exactly 1 argument: <name>")
    return args[0]


def _parse_int(field: str, value: str) -> int:
    try:
        return int(value)
    except ValueError:
        raise ParseError(f"{field} must be an integer, got '{value}'")


def _parse_create(args: list[str]) -> CreateCommand:
    """Parse 'create <name> <hash> <timestamp> <owner> <folio>' command."""
    if len(args) != 5:
        raise ParseError("create requires exactly 5 arguments: <name> <hash> <timestamp> <owner> <folio>")

    name, content_hash, timestamp, owner, folio = args
    return CreateCommand(
        name=name,
        content_hash=content_hash,
        timestamp=_parse_int("timestamp", timestamp),
        owner=owner,
        folio=_parse_int("folio", folio),
    )


def _parse_transfer(args: list[str]) -> TransferCommand:
    """Parse 'transfer <name> <owner>' command."""
    if len(args) != 2:
        raise ParseError("transfer requires exactly 2 arguments: <name> <owner>")

    name, owner = args
    return TransferCommand(name=name, owner=owner)


def _parse_range(args: list[str]) -> RangeCommand:
    """Parse 'range <start-key> <end-key>' command."""
    if len(args) != 2:
        raise ParseError("range requires exactly 2 arguments: <start-key> <end-key>")

    start_key, end_key = args
    return RangeCommand(start_key=start_key, end_key=end_key)


def _parse_history(args: list[str]) -> HistoryCommand:
    """Parse 'history [limit]' command."""
    if len(args) > 1:
        raise ParseError("history accepts at most 1 argument: [limit]")
    if not args:
        return HistoryCommand()

    limit = _parse_int("limit", args[0])
    if limit <= 0:
        raise ParseError("limit must be a positive integer")
    return HistoryCommand(limit=limit)


def _parse_connect(args: list[str]) -> ConnectCommand:
    """Parse 'connect <host> <port>' command."""
    if len(args) != 2:
        raise ParseError("connect requires exactly 2 arguments: <host> <port>")

    host, port = args
    return ConnectCommand(host=host, port=_parse_int("port", port))
