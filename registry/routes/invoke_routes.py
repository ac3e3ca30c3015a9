"""Invoke and invocation history API routes."""

from fastapi import APIRouter, Query

from registry.config import INVOCATION_HISTORY_LIMIT
from registry.dispatcher import invoke
from registry.repositories.invocation_repository import InvocationRepository
from registry.schemas.common import ErrorResponse
from registry.schemas.invoke import (
    InvokeRequest,
    InvokeResponse,
    InvocationResponse,
    ListInvocationsResponse
)
from registry.utils import encode_payload, encode_transient

router = APIRouter(tags=["Registry"])

INVOKE_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Wrong call shape, unknown function, invalid field or malformed key"},
    404: {"model": ErrorResponse, "description": "File not found"},
    409: {"model": ErrorResponse, "description": "File already exists"},
    500: {"model": ErrorResponse, "description": "Ledger failure"},
}


@router.post("/invoke", response_model=InvokeResponse, responses=INVOKE_ERROR_RESPONSES)
def invoke_operation(request: InvokeRequest):
    """
    Invoke a registry operation.

    Parameters:
        - function: Operation name (create, readShared, readRestricted, transfer,
                    delete, rangeScan, digestShared, digestRestricted)
        - args: Positional arguments
        - transient: Transient map; values are the JSON text of each payload

    Returns:
        - function: Operation name
        - payload: Base64 result payload, or null when the operation returns nothing

    Raises:
        - 400: Wrong call shape, unknown function, invalid field or malformed key
        - 404: File not found
        - 409: File already exists
        - 500: Ledger failure
    """
    payload = invoke(
        request.function,
        args=request.args,
        transient=encode_transient(request.transient),
    )

    return InvokeResponse(function=request.function, payload=encode_payload(payload))


@router.get("/invocations", response_model=ListInvocationsResponse)
def list_invocations(
    limit: int = Query(INVOCATION_HISTORY_LIMIT, ge=1, le=1000, description="Maximum number of records")
):
    """
    List recent call records, newest first.

    Call records hold the operation name and positional arguments only.
    """
    invocations = InvocationRepository.get_recent(limit)

    return ListInvocationsResponse(invocations=[
        InvocationResponse(
            invocation_id=invocation.invocation_id,
            function=invocation.function,
            args=invocation.args,
            status=invocation.status,
            error_code=invocation.error_code,
            created_at=invocation.created_at.isoformat(),
        )
        for invocation in invocations
    ])
