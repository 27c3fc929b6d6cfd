"""File store adapters and the canonical file placement scheme."""

from .file_placement import FilePlacementResolver, PlacementKey, build_file_name, normalize_extension
from .filesystem_storage import FilesystemStorage
from .storage_config import StorageConfig, load_storage_config, validate_storage_config

__all__ = [
    "FilePlacementResolver",
    "PlacementKey",
    "build_file_name",
    "normalize_extension",
    "FilesystemStorage",
    "StorageConfig",
    "load_storage_config",
    "validate_storage_config",
]
