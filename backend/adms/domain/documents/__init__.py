"""Documents domain module - ports for the document file store."""

from .ports.file_store_port import FileStorePort

__all__ = ["FileStorePort"]
