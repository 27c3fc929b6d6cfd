"""Storage configuration for the document file store.

The root directory is resolved once at startup. A missing or unusable root is
fatal: the application must not start handling transfers without it.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from ...config import Settings, get_settings
from ...domain.errors import StorageConfigurationError


@dataclass(frozen=True)
class StorageConfig:
    """Configuration for the document file store.

    Attributes:
        root: Root directory; revision files live under ``root/matters``
        create_root: Create the root on startup if it does not exist
    """
    root: Path
    create_root: bool = True


def load_storage_config(settings: Optional[Settings] = None, create_root: bool = True) -> StorageConfig:
    """Build the storage configuration from settings.

    Environment Variables:
        FILE_STORAGE_ROOT: Root directory of the document file store

    Raises:
        StorageConfigurationError: If FILE_STORAGE_ROOT is unset or not a directory
    """
    settings = settings or get_settings()
    raw_root = (settings.FILE_STORAGE_ROOT or "").strip()
    if not raw_root:
        raise StorageConfigurationError(
            "Missing file store root. Set the FILE_STORAGE_ROOT environment variable."
        )

    config = StorageConfig(root=Path(raw_root).expanduser(), create_root=create_root)
    validate_storage_config(config)
    return config


def validate_storage_config(config: StorageConfig) -> None:
    """Validate storage configuration.

    Raises:
        StorageConfigurationError: If the root exists but is not a directory,
            or is missing and may not be created
    """
    if config.root.exists():
        if not config.root.is_dir():
            raise StorageConfigurationError(f"FILE_STORAGE_ROOT {config.root} is not a directory")
        return

    if not config.create_root:
        raise StorageConfigurationError(f"FILE_STORAGE_ROOT {config.root} does not exist")
    try:
        config.root.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        raise StorageConfigurationError(f"Cannot create FILE_STORAGE_ROOT {config.root}: {e}") from e
