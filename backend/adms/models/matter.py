"""Matter SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Boolean, Column, DateTime, Index, String, Uuid

from .base import Base, utcnow


class Matter(Base):
    """A client/case folder grouping documents.

    Matters are never hard-deleted: deletion and archiving are flags so that
    audit records can always resolve their subject.
    """
    __tablename__ = "matter"
    __table_args__ = (
        Index("ix_matter_is_archived_is_deleted", "is_archived", "is_deleted"),
        Index("ix_matter_creation_date", "creation_date"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    description = Column(String(128), nullable=False, unique=True)
    is_archived = Column(Boolean, nullable=False, default=False)
    is_deleted = Column(Boolean, nullable=False, default=False)
    creation_date = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    def to_dict(self):
        """Convert matter to dictionary representation"""
        return {
            "id": str(self.id),
            "description": self.description,
            "is_archived": self.is_archived,
            "is_deleted": self.is_deleted,
            "creation_date": self.creation_date.isoformat() if self.creation_date else None,
        }
