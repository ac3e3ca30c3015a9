"""
Operation dispatch for the file registry.

Each operation name maps to a handler and the input shape it accepts:
either a fixed number of positional arguments, or exactly one payload
under a fixed transient key and no positional arguments at all. The
shape is checked before any payload field is validated.

One invocation runs inside one SQLite transaction, begun IMMEDIATE so
that concurrent invocations are serialized: every write made by the
handler is committed together, or rolled back together when the handler
raises.
"""

import sqlite3
from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type

from pydantic import BaseModel

from common.constants import (
    TRANSIENT_FILE_DELETE_KEY,
    TRANSIENT_FILE_KEY,
    TRANSIENT_FILE_OWNER_KEY,
)
from common.logging_config import get_logger
from registry.database import get_db_connection
from registry.exceptions import LedgerError, ProtocolError, RegistryException
from registry.repositories.invocation_repository import InvocationRepository
from registry.schemas.transient import (
    FileDeleteTransientInput,
    FileTransferTransientInput,
    FileTransientInput,
    parse_transient_payload,
)
from registry.services.file_registry_service import FileRegistryService
from registry.utils import generate_uuid

logger = get_logger(__name__)

Handler = Callable[[FileRegistryService, Any], Optional[bytes]]


@dataclass(frozen=True)
class OperationSpec:
    """
    Handler and input shape of one operation.

    Positional operations set arg_names; transient operations set
    transient_key and payload_model.
    """
    handler: Handler
    arg_names: Tuple[str, ...] = ()
    transient_key: Optional[str] = None
    payload_model: Optional[Type[BaseModel]] = None


def _create(service: FileRegistryService, file_input: FileTransientInput) -> None:
    service.create_file(file_input)


def _transfer(service: FileRegistryService, transfer_input: FileTransferTransientInput) -> None:
    service.transfer_file(transfer_input)


def _delete(service: FileRegistryService, delete_input: FileDeleteTransientInput) -> None:
    service.delete_file(delete_input)


OPERATIONS: Dict[str, OperationSpec] = {
    "create": OperationSpec(
        handler=_create,
        transient_key=TRANSIENT_FILE_KEY,
        payload_model=FileTransientInput,
    ),
    "readShared": OperationSpec(
        handler=lambda service, args: service.read_file(args[0]),
        arg_names=("name",),
    ),
    "readRestricted": OperationSpec(
        handler=lambda service, args: service.read_file_details(args[0]),
        arg_names=("name",),
    ),
    "transfer": OperationSpec(
        handler=_transfer,
        transient_key=TRANSIENT_FILE_OWNER_KEY,
        payload_model=FileTransferTransientInput,
    ),
    "delete": OperationSpec(
        handler=_delete,
        transient_key=TRANSIENT_FILE_DELETE_KEY,
        payload_model=FileDeleteTransientInput,
    ),
    "rangeScan": OperationSpec(
        handler=lambda service, args: service.get_files_by_range(args[0], args[1]),
        arg_names=("startKey", "endKey"),
    ),
    "digestShared": OperationSpec(
        handler=lambda service, args: service.get_file_hash(args[0]),
        arg_names=("name",),
    ),
    "digestRestricted": OperationSpec(
        handler=lambda service, args: service.get_file_details_hash(args[0]),
        arg_names=("name",),
    ),
}


def _resolve_inputs(operation: OperationSpec, args: Sequence[str], transient: Mapping[str, bytes]) -> Any:
    if operation.transient_key is None:
        if len(args) != len(operation.arg_names):
            raise ProtocolError(
                f"Incorrect number of arguments. Expecting {len(operation.arg_names)}: {', '.join(operation.arg_names)}"
            )
        return list(args)

    if args:
        raise ProtocolError(
            f"Incorrect number of arguments. Expecting 0: private file data must be passed "
            f"in the transient map under {operation.transient_key}"
        )

    raw = transient.get(operation.transient_key)
    if raw is None:
        raise ProtocolError(f"{operation.transient_key} must be a key in the transient map")
    if len(raw) == 0:
        raise ProtocolError(
            f"{operation.transient_key} value in the transient map must be a non-empty JSON string"
        )
    return parse_transient_payload(operation.payload_model, operation.transient_key, raw)


def _begin_immediate(conn: sqlite3.Connection) -> None:
    # The write lock is held from before the handler's first read.
    try:
        conn.execute("BEGIN IMMEDIATE")
    except sqlite3.Error as e:
        raise LedgerError(f"Failed to begin ledger transaction: {e}")


def _execute(function: str, args: Sequence[str], transient: Mapping[str, bytes]) -> Optional[bytes]:
    operation = OPERATIONS.get(function)
    if operation is None:
        logger.warning(f"Invoke did not find function: {function}")
        raise ProtocolError(f"Received unknown function invocation: {function}")

    inputs = _resolve_inputs(operation, args, transient)

    with get_db_connection() as conn:
        _begin_immediate(conn)
        try:
            result = operation.handler(FileRegistryService(conn), inputs)
            conn.commit()
        except Exception:
            conn.rollback()
            raise

    return result


def invoke(
    function: str,
    args: Optional[Sequence[str]] = None,
    transient: Optional[Mapping[str, bytes]] = None,
) -> Optional[bytes]:
    """
    Run one registry operation and record its call.

    Args:
        function: Operation name (e.g. "create", "readShared")
        args: Positional arguments; part of the public call record
        transient: Transient map; never logged or recorded

    Returns:
        Result payload: None for mutations, bytes otherwise

    Raises:
        RegistryException: Exactly one typed failure when the operation fails
    """
    args = list(args or [])
    transient = transient or {}
    invocation_id = generate_uuid()

    logger.info(f"Invoke is running {function} [invocation_id={invocation_id}]")

    try:
        result = _execute(function, args, transient)
    except RegistryException as e:
        logger.warning(f"Invoke {function} failed: {e} [code={e.code}] [invocation_id={invocation_id}]")
        _record_failure(invocation_id, function, args, e.code)
        raise
    except Exception as e:
        logger.error(f"Invoke {function} failed unexpectedly: {e} [invocation_id={invocation_id}]", exc_info=True)
        _record_failure(invocation_id, function, args, "INTERNAL_ERROR")
        raise

    _record(invocation_id, function, args, "success", None)
    logger.info(f"Invoke {function} completed [invocation_id={invocation_id}]")
    return result


def _record(invocation_id: str, function: str, args: List[str], status: str, error_code: Optional[str]) -> None:
    InvocationRepository.record_invocation(
        invocation_id=invocation_id,
        function=function,
        args=args,
        status=status,
        error_code=error_code,
        created_at=datetime.utcnow(),
    )


def _record_failure(invocation_id: str, function: str, args: List[str], error_code: str) -> None:
    """Record a failed call without masking the failure being reported."""
    try:
        _record(invocation_id, function, args, "error", error_code)
    except (sqlite3.Error, RegistryException) as e:
        logger.error(
            f"Could not record failed invocation: {e} [function={function}] [invocation_id={invocation_id}]"
        )
