"""Service layer for business logic."""

from registry.services.file_registry_service import FileRegistryService

__all__ = [
    "FileRegistryService",
]
