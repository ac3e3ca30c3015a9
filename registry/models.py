"""Ledger record types for files and their restricted details."""

import json
from dataclasses import dataclass, replace
from typing import Any, Dict

from common.constants import FILE_DETAILS_DOC_TYPE, FILE_DOC_TYPE
from registry.exceptions import LedgerError


def _dumps(document: Dict[str, Any]) -> bytes:
    # Compact and key-ordered as written, so equal records hash equally.
    return json.dumps(document, separators=(",", ":"), ensure_ascii=False).encode("utf-8")


def _loads(value: bytes, doc_type: str) -> Dict[str, Any]:
    try:
        document = json.loads(value)
    except (ValueError, UnicodeDecodeError) as e:
        raise LedgerError(f"Failed to decode stored {doc_type} record: {e}")
    if not isinstance(document, dict) or document.get("docType") != doc_type:
        raise LedgerError(f"Stored value is not a {doc_type} record")
    return document


@dataclass(frozen=True)
class FileRecord:
    """
    Shared record of a file, visible to every member of the shared partition.
    """
    name: str
    content_hash: str
    timestamp: int
    owner: str
    doc_type: str = FILE_DOC_TYPE

    def with_owner(self, owner: str) -> "FileRecord":
        return replace(self, owner=owner)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "docType": self.doc_type,
            "name": self.name,
            "contentHash": self.content_hash,
            "timestamp": self.timestamp,
            "owner": self.owner,
        }

    def to_bytes(self) -> bytes:
        return _dumps(self.to_dict())

    @staticmethod
    def from_bytes(value: bytes) -> "FileRecord":
        document = _loads(value, FILE_DOC_TYPE)
        try:
            return FileRecord(
                name=document["name"],
                content_hash=document["contentHash"],
                timestamp=document["timestamp"],
                owner=document["owner"],
            )
        except KeyError as e:
            raise LedgerError(f"Stored file record is missing field {e}")


@dataclass(frozen=True)
class FileDetailsRecord:
    """
    Restricted record of a file, visible only to the restricted partition.
    """
    name: str
    folio: int
    doc_type: str = FILE_DETAILS_DOC_TYPE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "docType": self.doc_type,
            "name": self.name,
            "folio": self.folio,
        }

    def to_bytes(self) -> bytes:
        return _dumps(self.to_dict())

    @staticmethod
    def from_bytes(value: bytes) -> "FileDetailsRecord":
        document = _loads(value, FILE_DETAILS_DOC_TYPE)
        try:
            return FileDetailsRecord(name=document["name"], folio=document["folio"])
        except KeyError as e:
            raise LedgerError(f"Stored file details record is missing field {e}")
