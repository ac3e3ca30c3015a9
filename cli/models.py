"""Command request data types for CLI."""

from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True)
class CreateCommand:
    """Register a file with its restricted folio."""

    name: str
    content_hash: str
    timestamp: int
    owner: str
    folio: int
    command: Literal["create"] = "create"


@dataclass(frozen=True)
class ReadCommand:
    """Read the shared record of a file."""

    name: str
    command: Literal["read"] = "read"


@dataclass(frozen=True)
class ReadDetailsCommand:
    """Read the restricted details of a file."""

    name: str
    command: Literal["read-details"] = "read-details"


@dataclass(frozen=True)
class TransferCommand:
    """Change the owner of a file."""

    name: str
    owner: str
    command: Literal["transfer"] = "transfer"


@dataclass(frozen=True)
class DeleteCommand:
    """Delete a file."""

    name: str
    command: Literal["delete"] = "delete"


@dataclass(frozen=True)
class RangeCommand:
    """Range query over the shared partition."""

    start_key: str
    end_key: str
    command: Literal["range"] = "range"


@dataclass(frozen=True)
class ByHashCommand:
    """List file names indexed under a content hash."""

    content_hash: str
    command: Literal["by-hash"] = "by-hash"


@dataclass(frozen=True)
class HashCommand:
    """Digest of a file's shared record."""

    name: str
    command: Literal["hash"] = "hash"


@dataclass(frozen=True)
class DetailsHashCommand:
    """Digest of a file's restricted details."""

    name: str
    command: Literal["details-hash"] = "details-hash"


@dataclass(frozen=True)
class HistoryCommand:
    """Show recent call records."""

    limit: int = 20
    command: Literal["history"] = "history"


@dataclass(frozen=True)
class ConnectCommand:
    """Point the CLI at another registry."""

    host: str
    port: int
    command: Literal["connect"] = "connect"


CommandRequest = (
    CreateCommand
    | ReadCommand
    | ReadDetailsCommand
    | TransferCommand
    | DeleteCommand
    | RangeCommand
    | ByHashCommand
    | HashCommand
    | DetailsHashCommand
    | HistoryCommand
    | ConnectCommand
)
