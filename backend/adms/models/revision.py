"""Revision SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, ForeignKey, Index, Integer, Uuid

from .base import Base, utcnow


class Revision(Base):
    """One numbered content snapshot of a document.

    Revision numbers start at 1 and grow by one per document.
    """
    __tablename__ = "revision"
    __table_args__ = (
        Index("ix_revision_document_id_revision_number", "document_id", "revision_number"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    revision_number = Column(Integer, nullable=False)
    creation_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    modification_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    is_deleted = Column(Boolean, nullable=False, default=False)

    def to_dict(self):
        """Convert revision to dictionary representation"""
        return {
            "id": str(self.id),
            "document_id": str(self.document_id),
            "revision_number": self.revision_number,
            "creation_date": self.creation_date.isoformat() if self.creation_date else None,
            "modification_date": self.modification_date.isoformat() if self.modification_date else None,
            "is_deleted": self.is_deleted,
        }
