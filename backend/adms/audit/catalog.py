"""Activity catalog: activity names resolved to persisted rows once at startup.

Services ask the catalog for an enum member (``DocumentActivityName.SAVED``)
and get back the seeded Activity row, detached from any session. The Audit
Recorder attaches it to the current unit of work.
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple, Type

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..domain.activities import ACTIVITY_NAMES, AuditableKind, kind_of
from ..domain.errors import NotFoundError
from ..models import DocumentActivity, MatterActivity, MatterDocumentActivity, RevisionActivity
from .seed_data import SEED_ACTIVITIES

logger = logging.getLogger(__name__)


ACTIVITY_MODELS: Dict[AuditableKind, Type[Any]] = {
    AuditableKind.MATTER: MatterActivity,
    AuditableKind.DOCUMENT: DocumentActivity,
    AuditableKind.REVISION: RevisionActivity,
    AuditableKind.MATTER_DOCUMENT: MatterDocumentActivity,
}


class ActivityCatalog:
    """In-memory index of the four activity tables.

    Build it with ``ActivityCatalog.load(session)``; the instance is immutable
    afterwards and safe to share between concurrent operations.
    """

    def __init__(self, entries: Dict[Tuple[AuditableKind, str], Any]):
        self._entries = dict(entries)

    @classmethod
    async def load(cls, session: AsyncSession) -> "ActivityCatalog":
        """Read every activity row and index it by (family, name).

        Missing names are logged, not raised: an operation that needs one
        soft-fails when it looks it up.
        """
        entries: Dict[Tuple[AuditableKind, str], Any] = {}
        for kind, model in ACTIVITY_MODELS.items():
            result = await session.execute(select(model))
            for row in result.scalars().all():
                entries[(kind, row.activity)] = row

        catalog = cls(entries)
        missing = catalog.missing()
        if missing:
            logger.warning(
                f"Activity catalog is missing {len(missing)} activities",
                extra={"missing_activities": [f"{k.value}:{name}" for k, name in missing]},
            )
        else:
            logger.info(f"Activity catalog loaded with {len(entries)} activities")
        return catalog

    def lookup(self, activity: Enum) -> Optional[Any]:
        """Return the catalog row for an activity enum member, or None."""
        return self._entries.get((kind_of(activity), activity.value))

    def require(self, activity: Enum) -> Any:
        """Like lookup, but raise NotFoundError when the activity is not seeded."""
        row = self.lookup(activity)
        if row is None:
            raise NotFoundError(f"{kind_of(activity).value} activity", activity.value)
        return row

    def missing(self) -> List[Tuple[AuditableKind, str]]:
        """Every enum member with no catalog row."""
        return [
            (kind, member.value)
            for kind, enum_type in ACTIVITY_NAMES.items()
            for member in enum_type
            if (kind, member.value) not in self._entries
        ]

    def __len__(self) -> int:
        return len(self._entries)


async def seed_activity_catalog(session: AsyncSession) -> int:
    """Insert any seeded activity that is not present yet.

    Matches by name so databases seeded with different ids are left alone.
    Does not commit.

    Returns:
        Number of activity rows added
    """
    added = 0
    for kind, rows in SEED_ACTIVITIES.items():
        model = ACTIVITY_MODELS[kind]
        result = await session.execute(select(model.activity))
        existing = set(result.scalars().all())
        for activity_id, name in rows:
            if name not in existing:
                session.add(model(id=activity_id, activity=name))
                added += 1
    await session.flush()
    return added
