"""Ports (interfaces) for document file storage."""

from .file_store_port import FileStorePort

__all__ = ["FileStorePort"]
