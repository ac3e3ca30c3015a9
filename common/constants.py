"""Project-wide constants (partition names, index names, transient keys)."""

SHARED_PARTITION: str = "shared"
RESTRICTED_PARTITION: str = "restricted"

FILE_DOC_TYPE: str = "file"
FILE_DETAILS_DOC_TYPE: str = "fileDetails"

HASH_NAME_INDEX: str = "hash~name"
# A stored None would read back as absent, so index entries carry a null byte.
INDEX_SENTINEL_VALUE: bytes = b"\x00"

TRANSIENT_FILE_KEY: str = "file"
TRANSIENT_FILE_OWNER_KEY: str = "file_owner"
TRANSIENT_FILE_DELETE_KEY: str = "file_delete"

DEFAULT_REGISTRY_PORT: int = 8000
