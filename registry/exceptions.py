"""Custom exception classes for the Registry."""

from typing import Optional


class RegistryException(Exception):
    """
    Base exception class for all registry errors.
    """
    code = "REGISTRY_ERROR"


class ProtocolError(RegistryException):
    """
    Raised when an invocation has the wrong call shape or names an unknown operation.
    """
    code = "PROTOCOL_ERROR"


class ValidationError(RegistryException):
    """
    Raised when a field of the input payload is missing or invalid.
    """
    code = "VALIDATION_ERROR"

    def __init__(self, message: str, field: Optional[str] = None):
        super().__init__(message)
        self.field = field


class AlreadyExistsError(RegistryException):
    """
    Raised when creating a file whose name is already registered.
    """
    code = "ALREADY_EXISTS"


class NotFoundError(RegistryException):
    """
    Raised when a read, transfer or delete targets a file that does not exist.
    """
    code = "NOT_FOUND"


class MalformedKeyError(RegistryException):
    """
    Raised when a composite key cannot be built or decomposed.
    """
    code = "MALFORMED_KEY"


class LedgerError(RegistryException):
    """
    Raised when the ledger store reports a failure.
    """
    code = "LEDGER_ERROR"
