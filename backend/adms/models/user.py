"""User SQLAlchemy model"""

from uuid import uuid4

from sqlalchemy import Column, String, Uuid

from .base import Base


class User(Base):
    """An actor recorded on audit entries.

    Identity resolution happens outside this package; callers pass the acting
    user into every lifecycle operation.
    """
    __tablename__ = "user"

    id = Column(Uuid, primary_key=True, default=uuid4)
    name = Column(String(50), nullable=False, unique=True)

    def to_dict(self):
        """Convert user to dictionary representation"""
        return {"id": str(self.id), "name": self.name}
