"""Activity catalog SQLAlchemy models

One table per activity family. Rows are reference data seeded by the initial
migration; their ids are stable across environments.
"""

from uuid import uuid4

from sqlalchemy import Column, String, Uuid

from .base import Base


class _ActivityColumns:
    id = Column(Uuid, primary_key=True, default=uuid4)
    activity = Column(String(50), nullable=False, unique=True)

    def to_dict(self):
        """Convert activity to dictionary representation"""
        return {"id": str(self.id), "activity": self.activity}


class MatterActivity(_ActivityColumns, Base):
    """Actions that can be performed on a matter (CREATED, VIEWED, ...)."""
    __tablename__ = "matter_activity"


class DocumentActivity(_ActivityColumns, Base):
    """Actions that can be performed on a document (CHECKED OUT, SAVED, ...)."""
    __tablename__ = "document_activity"


class RevisionActivity(_ActivityColumns, Base):
    """Actions that can be performed on a revision."""
    __tablename__ = "revision_activity"


class MatterDocumentActivity(_ActivityColumns, Base):
    """Cross-matter transfer actions: MOVED and COPIED."""
    __tablename__ = "matter_document_activity"
