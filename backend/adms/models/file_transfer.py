"""FileTransfer SQLAlchemy model

Journal of the file half of every move/copy. The row is committed together
with the database mutation and the transfer audit records, before any file is
touched, so a crash or I/O failure always leaves a retryable trace.
"""

import enum
from uuid import uuid4

from sqlalchemy import Column, DateTime, Enum as SQLEnum, ForeignKey, Index, Integer, String, Text, Uuid

from .base import Base, utcnow
from ..domain.activities import TransferOperation
from ..transfers.status import FileTransferStatus


class FileTransfer(Base):
    """Staged file operation for one cross-matter transfer.

    Paths were resolved under the storage root when the row was staged. A transfer
    with no file to carry over (a document without revisions) stages no row.
    """
    __tablename__ = "file_transfer"
    __table_args__ = (
        Index("ix_file_transfer_status", "status"),
        Index("ix_file_transfer_document_id", "document_id"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    operation = Column(
        SQLEnum(TransferOperation, name="transferoperation", native_enum=False, length=16),
        nullable=False,
    )
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    target_document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    source_matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    target_matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    source_path = Column(String(1024), nullable=False)
    destination_path = Column(String(1024), nullable=False)
    status = Column(
        SQLEnum(FileTransferStatus, name="filetransferstatus", native_enum=False, length=16),
        nullable=False,
        default=FileTransferStatus.STAGED,
    )
    error = Column(Text, nullable=True)
    attempts = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        """Convert journal entry to dictionary representation"""
        return {
            "id": str(self.id),
            "operation": self.operation.value if isinstance(self.operation, enum.Enum) else self.operation,
            "document_id": str(self.document_id),
            "target_document_id": str(self.target_document_id),
            "source_matter_id": str(self.source_matter_id),
            "target_matter_id": str(self.target_matter_id),
            "source_path": self.source_path,
            "destination_path": self.destination_path,
            "status": self.status.value if isinstance(self.status, enum.Enum) else self.status,
            "error": self.error,
            "attempts": self.attempts,
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }
