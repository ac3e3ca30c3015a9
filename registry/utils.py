"""Utility helper functions for the Registry."""

import base64
import uuid
from typing import Dict, Optional


def generate_uuid() -> str:
    """
    Generate a new UUID4 string.

    Returns:
        UUID4 string
    """
    return str(uuid.uuid4())


def encode_transient(transient: Dict[str, str]) -> Dict[str, bytes]:
    """
    Convert transient map values received as text into the bytes the registry expects.
    """
    return {key: value.encode("utf-8") for key, value in transient.items()}


def encode_payload(payload: Optional[bytes]) -> Optional[str]:
    """
    Base64-encode a result payload for a JSON response.

    Returns:
        Base64 string, or None for an empty payload
    """
    if not payload:
        return None
    return base64.b64encode(payload).decode("ascii")
