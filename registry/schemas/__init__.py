"""Pydantic schemas for API requests, responses and transient payloads."""

from registry.schemas.invoke import (
    InvokeRequest,
    InvokeResponse,
    InvocationResponse,
    ListInvocationsResponse
)
from registry.schemas.transient import (
    FileTransientInput,
    FileTransferTransientInput,
    FileDeleteTransientInput,
    parse_transient_payload
)
from registry.schemas.common import ErrorResponse

__all__ = [
    "InvokeRequest",
    "InvokeResponse",
    "InvocationResponse",
    "ListInvocationsResponse",
    "FileTransientInput",
    "FileTransferTransientInput",
    "FileDeleteTransientInput",
    "parse_transient_payload",
    "ErrorResponse"
]
