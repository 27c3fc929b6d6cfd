"""Activity-user audit record SQLAlchemy models

Each record says "user U performed activity A on subject S at time T".
Records are append-only: services insert them and never update or delete.
Relationships are loaded explicitly by the history queries.
"""

from uuid import uuid4

from sqlalchemy import Column, DateTime, ForeignKey, Index, Uuid
from sqlalchemy.orm import relationship

from .base import Base, utcnow


class MatterActivityUser(Base):
    """Audit record for an activity on a matter."""
    __tablename__ = "matter_activity_user"
    __table_args__ = (
        Index("ix_matter_activity_user_matter_id_created_at", "matter_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    matter_activity_id = Column(Uuid, ForeignKey("matter_activity.id", ondelete="RESTRICT"), nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    matter = relationship("Matter", lazy="raise")
    activity = relationship("MatterActivity", lazy="raise")
    user = relationship("User", lazy="raise")


class DocumentActivityUser(Base):
    """Audit record for an activity on a document."""
    __tablename__ = "document_activity_user"
    __table_args__ = (
        Index("ix_document_activity_user_document_id_created_at", "document_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    document_activity_id = Column(Uuid, ForeignKey("document_activity.id", ondelete="RESTRICT"), nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    document = relationship("Document", lazy="raise")
    activity = relationship("DocumentActivity", lazy="raise")
    user = relationship("User", lazy="raise")


class RevisionActivityUser(Base):
    """Audit record for an activity on a revision."""
    __tablename__ = "revision_activity_user"
    __table_args__ = (
        Index("ix_revision_activity_user_revision_id_created_at", "revision_id", "created_at"),
    )

    id = Column(Uuid, primary_key=True, default=uuid4)
    revision_id = Column(Uuid, ForeignKey("revision.id", ondelete="RESTRICT"), nullable=False)
    revision_activity_id = Column(Uuid, ForeignKey("revision_activity.id", ondelete="RESTRICT"), nullable=False)
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)

    revision = relationship("Revision", lazy="raise")
    activity = relationship("RevisionActivity", lazy="raise")
    user = relationship("User", lazy="raise")


class _TransferRecordColumns:
    id = Column(Uuid, primary_key=True, default=uuid4)
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)


class MatterDocumentActivityUserFrom(_TransferRecordColumns, Base):
    """Source half of a move/copy: the document as it was in its old matter."""
    __tablename__ = "matter_document_activity_user_from"
    __table_args__ = (
        Index("ix_md_activity_user_from_matter_id", "matter_id"),
        Index("ix_md_activity_user_from_document_id", "document_id"),
    )

    matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    matter_document_activity_id = Column(
        Uuid, ForeignKey("matter_document_activity.id", ondelete="RESTRICT"), nullable=False
    )
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)

    matter = relationship("Matter", lazy="raise")
    document = relationship("Document", lazy="raise")
    activity = relationship("MatterDocumentActivity", lazy="raise")
    user = relationship("User", lazy="raise")


class MatterDocumentActivityUserTo(_TransferRecordColumns, Base):
    """Destination half of a move/copy: the document in its new matter."""
    __tablename__ = "matter_document_activity_user_to"
    __table_args__ = (
        Index("ix_md_activity_user_to_matter_id", "matter_id"),
        Index("ix_md_activity_user_to_document_id", "document_id"),
    )

    matter_id = Column(Uuid, ForeignKey("matter.id", ondelete="RESTRICT"), nullable=False)
    document_id = Column(Uuid, ForeignKey("document.id", ondelete="RESTRICT"), nullable=False)
    matter_document_activity_id = Column(
        Uuid, ForeignKey("matter_document_activity.id", ondelete="RESTRICT"), nullable=False
    )
    user_id = Column(Uuid, ForeignKey("user.id", ondelete="RESTRICT"), nullable=False)

    matter = relationship("Matter", lazy="raise")
    document = relationship("Document", lazy="raise")
    activity = relationship("MatterDocumentActivity", lazy="raise")
    user = relationship("User", lazy="raise")
