"""Pydantic schemas for payloads delivered through the transient map."""

import json
from typing import Type, TypeVar

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from registry.composite_key import COMPOSITE_KEY_NAMESPACE
from registry.exceptions import ProtocolError, ValidationError

PayloadT = TypeVar("PayloadT", bound=BaseModel)

_ERROR_MESSAGES = {
    "missing": "{field} field is required",
    "string_type": "{field} field must be a string",
    "string_too_short": "{field} field must be a non-empty string",
    "int_type": "{field} field must be an integer",
    "greater_than": "{field} field must be a positive integer",
}


class TransientPayload(BaseModel):
    """Base for transient payloads: no coercion between strings and integers."""
    model_config = ConfigDict(strict=True, populate_by_name=True, extra="ignore")


class FileTransientInput(TransientPayload):
    """Payload under the "file" transient key."""
    name: str = Field(min_length=1)
    content_hash: str = Field(alias="contentHash", min_length=1)
    timestamp: int = Field(gt=0)
    owner: str = Field(min_length=1)
    folio: int = Field(gt=0)

    @field_validator("name")
    @classmethod
    def name_outside_composite_namespace(cls, value: str) -> str:
        if value.startswith(COMPOSITE_KEY_NAMESPACE):
            raise ValueError("must not start with a null character")
        return value


class FileTransferTransientInput(TransientPayload):
    """Payload under the "file_owner" transient key."""
    name: str = Field(min_length=1)
    owner: str = Field(min_length=1)


class FileDeleteTransientInput(TransientPayload):
    """Payload under the "file_delete" transient key."""
    name: str = Field(min_length=1)


def _to_validation_error(exc: PydanticValidationError) -> ValidationError:
    error = exc.errors()[0]
    field = str(error["loc"][0]) if error["loc"] else "payload"
    template = _ERROR_MESSAGES.get(error["type"])
    if template is None:
        return ValidationError(f"{field} field is invalid: {error['msg']}", field=field)
    return ValidationError(template.format(field=field), field=field)


def parse_transient_payload(model: Type[PayloadT], transient_key: str, raw: bytes) -> PayloadT:
    """
    Decode and validate a transient payload.

    Error messages name the transient key and the offending field but never
    echo the payload, which may carry restricted values.

    Raises:
        ProtocolError: If the payload is not a JSON object
        ValidationError: If a field is missing or invalid
    """
    try:
        document = json.loads(raw)
    except (ValueError, UnicodeDecodeError):
        raise ProtocolError(f"Failed to decode JSON of: {transient_key}")

    if not isinstance(document, dict):
        raise ProtocolError(f"{transient_key} value in the transient map must be a JSON object")

    try:
        return model.model_validate(document)
    except PydanticValidationError as e:
        raise _to_validation_error(e)
