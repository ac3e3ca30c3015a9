"""Configuration settings for the Registry server."""

import os
from common.constants import DEFAULT_REGISTRY_PORT


DATABASE_PATH = os.environ.get("FOLIO_DATABASE_PATH", "/app/data/ledger.db")

REGISTRY_HOST = os.environ.get("FOLIO_REGISTRY_HOST", "0.0.0.0")

REGISTRY_PORT = int(os.environ.get("FOLIO_REGISTRY_PORT", str(DEFAULT_REGISTRY_PORT)))

INVOCATION_HISTORY_LIMIT = int(os.environ.get("FOLIO_INVOCATION_HISTORY_LIMIT", "100"))
