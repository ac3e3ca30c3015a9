"""
Order-preserving composite keys for range queries over the ledger.

A composite key is laid out as::

    \\x00 <index name> \\x00 <segment 1> \\x00 ... <segment N> \\x00

Each component is escaped so that it never contains the terminator:
``\\x00`` becomes ``\\x01\\x01`` and ``\\x01`` becomes ``\\x01\\x02``. The
terminator sorts below every escaped character, so a segment sorts before
any of its extensions and keys group by their leading segments.
"""

from typing import List, Sequence, Tuple

from registry.exceptions import MalformedKeyError

COMPOSITE_KEY_NAMESPACE = "\x00"
SEGMENT_TERMINATOR = "\x00"
ESCAPE_CHAR = "\x01"
MAX_UNICODE_CHAR = "\U0010ffff"

_ESCAPES = {
    "\x00": ESCAPE_CHAR + "\x01",
    "\x01": ESCAPE_CHAR + "\x02",
}
_UNESCAPES = {
    "\x01": "\x00",
    "\x02": "\x01",
}


def _escape(component: str) -> str:
    return "".join(_ESCAPES.get(ch, ch) for ch in component)


def _unescape(component: str) -> str:
    chars = []
    i = 0
    while i < len(component):
        ch = component[i]
        if ch == ESCAPE_CHAR:
            if i + 1 >= len(component) or component[i + 1] not in _UNESCAPES:
                raise MalformedKeyError(f"Invalid escape sequence at offset {i}")
            chars.append(_UNESCAPES[component[i + 1]])
            i += 2
            continue
        chars.append(ch)
        i += 1
    return "".join(chars)


def build_key(index_name: str, segments: Sequence[str]) -> str:
    """
    Build a composite key from an index name and ordered segments.

    Args:
        index_name: Name of the index (e.g. "hash~name")
        segments: Ordered string segments

    Returns:
        Encoded composite key

    Raises:
        MalformedKeyError: If the index name is empty or a segment is not a string
    """
    if not isinstance(index_name, str) or not index_name:
        raise MalformedKeyError("Index name must be a non-empty string")

    parts = [COMPOSITE_KEY_NAMESPACE, _escape(index_name), SEGMENT_TERMINATOR]
    for segment in segments:
        if not isinstance(segment, str):
            raise MalformedKeyError(f"Key segment must be a string, got {type(segment).__name__}")
        parts.append(_escape(segment))
        parts.append(SEGMENT_TERMINATOR)
    return "".join(parts)


def parse_key(key: str) -> Tuple[str, List[str]]:
    """
    Split a composite key into its index name and segments.

    Raises:
        MalformedKeyError: If the key was not produced by build_key
    """
    if not isinstance(key, str) or not key.startswith(COMPOSITE_KEY_NAMESPACE):
        raise MalformedKeyError("Key is not in the composite key namespace")

    body = key[len(COMPOSITE_KEY_NAMESPACE):]
    if not body.endswith(SEGMENT_TERMINATOR):
        raise MalformedKeyError("Composite key is missing its final terminator")

    components = [_unescape(part) for part in body[:-1].split(SEGMENT_TERMINATOR)]
    index_name, segments = components[0], components[1:]
    if not index_name:
        raise MalformedKeyError("Composite key has an empty index name")
    return index_name, segments


def is_composite_key(key: str) -> bool:
    return key.startswith(COMPOSITE_KEY_NAMESPACE)


def prefix_range(index_name: str, segments: Sequence[str]) -> Tuple[str, str]:
    """
    Half-open key range covering every composite key that extends the given segments.

    Returns:
        Tuple of (start_key inclusive, end_key exclusive)
    """
    start_key = build_key(index_name, segments)
    return start_key, start_key + MAX_UNICODE_CHAR
