"""Reference data for the activity catalog and the demo environment.

Activity ids are fixed so audit records stay comparable across databases.
Prefix digit encodes the family: 1 revision, 2 document, 3 matter,
4 matter-document (transfer). Users use prefix 5 and demo matters prefix 6.
"""

from typing import Dict, List, Tuple
from uuid import UUID

from ..domain.activities import (
    AuditableKind,
    DocumentActivityName,
    MatterActivityName,
    RevisionActivityName,
    TransferOperation,
)


def _seed_id(prefix: int, number: int) -> UUID:
    return UUID(f"{prefix}0000000-0000-0000-0000-{number:012d}")


SEED_ACTIVITIES: Dict[AuditableKind, List[Tuple[UUID, str]]] = {
    AuditableKind.REVISION: [
        (_seed_id(1, 1), RevisionActivityName.CREATED.value),
        (_seed_id(1, 2), RevisionActivityName.DELETED.value),
        (_seed_id(1, 3), RevisionActivityName.RESTORED.value),
        (_seed_id(1, 4), RevisionActivityName.SAVED.value),
    ],
    AuditableKind.DOCUMENT: [
        (_seed_id(2, 1), DocumentActivityName.CHECKED_IN.value),
        (_seed_id(2, 2), DocumentActivityName.CHECKED_OUT.value),
        (_seed_id(2, 3), DocumentActivityName.CREATED.value),
        (_seed_id(2, 4), DocumentActivityName.DELETED.value),
        (_seed_id(2, 5), DocumentActivityName.RESTORED.value),
        (_seed_id(2, 6), DocumentActivityName.SAVED.value),
    ],
    AuditableKind.MATTER: [
        (_seed_id(3, 1), MatterActivityName.ARCHIVED.value),
        (_seed_id(3, 2), MatterActivityName.CREATED.value),
        (_seed_id(3, 3), MatterActivityName.DELETED.value),
        (_seed_id(3, 4), MatterActivityName.RESTORED.value),
        (_seed_id(3, 5), MatterActivityName.UNARCHIVED.value),
        (_seed_id(3, 6), MatterActivityName.VIEWED.value),
        (_seed_id(3, 7), MatterActivityName.SAVED.value),
    ],
    AuditableKind.MATTER_DOCUMENT: [
        (_seed_id(4, 1), TransferOperation.COPY.value),
        (_seed_id(4, 2), TransferOperation.MOVE.value),
    ],
}

SEED_USERS: List[Tuple[UUID, str]] = [
    (_seed_id(5, 1), "Robert Brown"),
    (_seed_id(5, 2), "Jennifer Smith"),
    (_seed_id(5, 3), "Michael Johnson"),
    (_seed_id(5, 4), "Admin User"),
]

SEED_MATTERS: List[Tuple[UUID, str]] = [
    (_seed_id(6, 1), "Corporate Merger - ABC Corp"),
    (_seed_id(6, 2), "Employment Dispute - Smith v. TechCorp"),
    (_seed_id(6, 3), "Real Estate Transaction - Johnson Property"),
    (_seed_id(6, 4), "Contract Review - Vendor Agreement"),
    (_seed_id(6, 5), "Intellectual Property - Patent Filing"),
    (_seed_id(6, 6), "Family Law - Estate Planning"),
]
