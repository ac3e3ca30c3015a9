"""File registry service: files, their restricted details and the hash~name index."""

import json
import sqlite3
from typing import Any, Dict, Iterator, Optional, Tuple

from common.constants import (
    HASH_NAME_INDEX,
    INDEX_SENTINEL_VALUE,
    RESTRICTED_PARTITION,
    SHARED_PARTITION,
)
from common.logging_config import get_logger
from registry.composite_key import build_key, is_composite_key
from registry.exceptions import AlreadyExistsError, NotFoundError
from registry.models import FileDetailsRecord, FileRecord
from registry.repositories.ledger_repository import LedgerRepository
from registry.schemas.transient import (
    FileDeleteTransientInput,
    FileTransferTransientInput,
    FileTransientInput,
)

logger = get_logger(__name__)


def hash_name_index_key(content_hash: str, name: str) -> str:
    return build_key(HASH_NAME_INDEX, [content_hash, name])


class FileRegistryService:
    """
    Keeps the shared file record, its restricted details and its hash~name
    index entry in lockstep.

    All reads and writes of one service instance go through a single
    connection; the caller owns the transaction and commits or rolls back
    once the operation returns.
    """

    def __init__(self, conn: sqlite3.Connection):
        self.conn = conn
        self.ledger_repo = LedgerRepository()

    def create_file(self, file_input: FileTransientInput) -> FileRecord:
        name = file_input.name
        logger.info(f"Creating file [name={name}]")

        if self.ledger_repo.get_state(SHARED_PARTITION, name, conn=self.conn) is not None:
            logger.warning(f"Create failed: file already exists [name={name}]")
            raise AlreadyExistsError(f"This file already exists: {name}")

        file_record = FileRecord(
            name=name,
            content_hash=file_input.content_hash,
            timestamp=file_input.timestamp,
            owner=file_input.owner,
        )
        details_record = FileDetailsRecord(name=name, folio=file_input.folio)

        self.ledger_repo.put_state(SHARED_PARTITION, name, file_record.to_bytes(), conn=self.conn)
        self.ledger_repo.put_state(RESTRICTED_PARTITION, name, details_record.to_bytes(), conn=self.conn)
        self.ledger_repo.put_state(
            SHARED_PARTITION,
            hash_name_index_key(file_record.content_hash, name),
            INDEX_SENTINEL_VALUE,
            conn=self.conn,
        )

        logger.info(f"File created and indexed [name={name}] [content_hash={file_record.content_hash}]")
        return file_record

    def read_file(self, name: str) -> bytes:
        # Index entries share the partition but are not files.
        if is_composite_key(name):
            raise NotFoundError(f"File does not exist: {name!r}")
        value = self.ledger_repo.get_state(SHARED_PARTITION, name, conn=self.conn)
        if value is None:
            raise NotFoundError(f"File does not exist: {name}")
        return value

    def read_file_details(self, name: str) -> bytes:
        value = self.ledger_repo.get_state(RESTRICTED_PARTITION, name, conn=self.conn)
        if value is None:
            raise NotFoundError(f"File details do not exist: {name}")
        return value

    def get_file_hash(self, name: str) -> bytes:
        if is_composite_key(name):
            raise NotFoundError(f"File hash does not exist: {name!r}")
        digest = self.ledger_repo.get_state_hash(SHARED_PARTITION, name, conn=self.conn)
        if not digest:
            raise NotFoundError(f"File hash does not exist: {name}")
        return digest

    def get_file_details_hash(self, name: str) -> bytes:
        digest = self.ledger_repo.get_state_hash(RESTRICTED_PARTITION, name, conn=self.conn)
        if not digest:
            raise NotFoundError(f"File details hash does not exist: {name}")
        return digest

    def transfer_file(self, transfer_input: FileTransferTransientInput) -> FileRecord:
        name = transfer_input.name
        logger.info(f"Transferring file [name={name}] [new_owner={transfer_input.owner}]")

        current = FileRecord.from_bytes(self.read_file(name))
        transferred = current.with_owner(transfer_input.owner)

        self.ledger_repo.put_state(SHARED_PARTITION, name, transferred.to_bytes(), conn=self.conn)

        logger.info(f"File transferred [name={name}] [from={current.owner}] [to={transferred.owner}]")
        return transferred

    def delete_file(self, delete_input: FileDeleteTransientInput) -> FileRecord:
        name = delete_input.name
        logger.info(f"Deleting file [name={name}]")

        # The stored record is the only source of the content hash needed for the index key.
        file_record = FileRecord.from_bytes(self.read_file(name))

        self.ledger_repo.delete_state(SHARED_PARTITION, name, conn=self.conn)
        self.ledger_repo.delete_state(
            SHARED_PARTITION,
            hash_name_index_key(file_record.content_hash, file_record.name),
            conn=self.conn,
        )
        self.ledger_repo.delete_state(RESTRICTED_PARTITION, name, conn=self.conn)

        logger.info(f"File deleted with its index entry and details [name={name}]")
        return file_record

    def iter_files_by_range(self, start_key: str, end_key: str) -> Iterator[Tuple[str, bytes]]:
        """
        Shared-partition entries with start_key <= key < end_key, in key order.

        Index entries are included; callers wanting only indexed names range
        over the hash~name prefix.
        """
        return self.ledger_repo.get_state_by_range(SHARED_PARTITION, start_key, end_key, conn=self.conn)

    def get_files_by_range(self, start_key: str, end_key: str) -> bytes:
        results = [
            {"Key": key, "Record": _record_document(value)}
            for key, value in self.iter_files_by_range(start_key, end_key)
        ]
        logger.info(f"Range query returned {len(results)} entries")
        return json.dumps(results, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _record_document(value: bytes) -> Optional[Dict[str, Any]]:
    if value == INDEX_SENTINEL_VALUE:
        return None
    try:
        return json.loads(value)
    except (ValueError, UnicodeDecodeError):
        return None
