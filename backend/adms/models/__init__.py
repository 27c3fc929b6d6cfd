"""SQLAlchemy models for ADMS"""

from .base import Base
from .matter import Matter
from .document import Document
from .revision import Revision
from .user import User
from .activity import MatterActivity, DocumentActivity, RevisionActivity, MatterDocumentActivity
from .activity_user import (
    MatterActivityUser,
    DocumentActivityUser,
    RevisionActivityUser,
    MatterDocumentActivityUserFrom,
    MatterDocumentActivityUserTo,
)
from .file_transfer import FileTransfer

__all__ = [
    "Base",
    "Matter",
    "Document",
    "Revision",
    "User",
    "MatterActivity",
    "DocumentActivity",
    "RevisionActivity",
    "MatterDocumentActivity",
    "MatterActivityUser",
    "DocumentActivityUser",
    "RevisionActivityUser",
    "MatterDocumentActivityUserFrom",
    "MatterDocumentActivityUserTo",
    "FileTransfer",
]
