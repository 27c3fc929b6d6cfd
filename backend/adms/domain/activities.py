"""Activity vocabulary for the audit trail.

Each activity family is a closed enum whose values are the catalog names seeded
into the database. Services never pass raw strings to the catalog.
"""

from enum import Enum
from typing import Dict, Type


class AuditableKind(str, Enum):
    """Entity families that own an activity-user audit table."""
    MATTER = "MATTER"
    DOCUMENT = "DOCUMENT"
    REVISION = "REVISION"
    MATTER_DOCUMENT = "MATTER_DOCUMENT"  # cross-matter transfers only


class MatterActivityName(str, Enum):
    ARCHIVED = "ARCHIVED"
    CREATED = "CREATED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"
    SAVED = "SAVED"
    UNARCHIVED = "UNARCHIVED"
    VIEWED = "VIEWED"


class DocumentActivityName(str, Enum):
    CHECKED_IN = "CHECKED IN"
    CHECKED_OUT = "CHECKED OUT"
    CREATED = "CREATED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"
    SAVED = "SAVED"


class RevisionActivityName(str, Enum):
    CREATED = "CREATED"
    DELETED = "DELETED"
    RESTORED = "RESTORED"
    SAVED = "SAVED"


class TransferOperation(str, Enum):
    """Cross-matter operations; values double as MatterDocumentActivity names."""
    MOVE = "MOVED"
    COPY = "COPIED"


class TransferDirection(str, Enum):
    """Which half of a transfer audit pair a record is."""
    FROM = "FROM"
    TO = "TO"


ACTIVITY_NAMES: Dict[AuditableKind, Type[Enum]] = {
    AuditableKind.MATTER: MatterActivityName,
    AuditableKind.DOCUMENT: DocumentActivityName,
    AuditableKind.REVISION: RevisionActivityName,
    AuditableKind.MATTER_DOCUMENT: TransferOperation,
}


def kind_of(activity: Enum) -> AuditableKind:
    """Return the family an activity enum member belongs to.

    Raises:
        ValueError: If the member is not part of any activity family
    """
    for kind, enum_type in ACTIVITY_NAMES.items():
        if isinstance(activity, enum_type):
            return kind
    raise ValueError(f"{activity!r} is not a catalog activity")
