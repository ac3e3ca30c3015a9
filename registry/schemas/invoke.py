"""Pydantic schemas for the invoke and invocation history endpoints."""

from typing import Dict, List, Optional
from pydantic import BaseModel, Field


class InvokeRequest(BaseModel):
    """Request model for invoking a registry operation."""
    function: str
    args: List[str] = Field(default_factory=list)
    transient: Dict[str, str] = Field(default_factory=dict)


class InvokeResponse(BaseModel):
    """Response model for a successful invocation."""
    function: str
    payload: Optional[str] = None


class InvocationResponse(BaseModel):
    """Response model for a single call record."""
    invocation_id: str
    function: str
    args: List[str]
    status: str
    error_code: Optional[str] = None
    created_at: str


class ListInvocationsResponse(BaseModel):
    """Response model for invocation history."""
    invocations: List[InvocationResponse]
