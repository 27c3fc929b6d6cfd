"""Document SQLAlchemy model

A document is a named file inside one matter. Its content lives on disk, one
file per revision, under the path produced by the file placement resolver.
"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, String, Uuid

from .base import Base, utcnow


class Document(Base):
    """Document model.

    ``extension`` is stored without a leading dot. ``matter_id`` changes when
    the document is moved to another matter.
    """
    __tablename__ = "document"
    __table_args__ = (
        Index("ix_document_matter_id", "matter_id"),
        Index("ix_document_matter_id_is_deleted", "matter_id", "is_deleted"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    file_name = Column(String(128), nullable=False)
    extension = Column(String(5), nullable=False)
    is_checked_out = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    creation_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        """Convert document to dictionary representation"""
        return {
            "id": str(self.id),
            "matter_id": str(self.matter_id),
            "file_name": self.file_name,
            "extension": self.extension,
            "is_checked_out": self.is_checked_out,
            "is_deleted": self.is_deleted,
            "creation_date": self.creation_date.isoformat() if self.creation_date else None,
        }
