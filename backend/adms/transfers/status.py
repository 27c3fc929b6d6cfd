"""FileTransferStatus state machine for the transfer journal

A journal row is staged in the same commit as the database side of a move or
copy. The file step then either completes it or leaves it INCOMPLETE for a
later retry.
"""

from enum import Enum
from typing import Dict, List, Optional


class FileTransferStatus(str, Enum):
    """File transfer journal status enum

    State flow:
    STAGED → COMPLETED or INCOMPLETE
    INCOMPLETE can retry to COMPLETED (or stay INCOMPLETE)
    """
    STAGED = "STAGED"           # Database side committed, file step pending
    COMPLETED = "COMPLETED"     # File moved/copied (terminal success)
    INCOMPLETE = "INCOMPLETE"   # File step failed, awaiting retry


# State transition rules
ALLOWED_TRANSITIONS: Dict[Optional[FileTransferStatus], List[FileTransferStatus]] = {
    None: [FileTransferStatus.STAGED],
    FileTransferStatus.STAGED: [FileTransferStatus.COMPLETED, FileTransferStatus.INCOMPLETE],
    FileTransferStatus.COMPLETED: [],
    FileTransferStatus.INCOMPLETE: [FileTransferStatus.COMPLETED, FileTransferStatus.INCOMPLETE],
}

PENDING_STATUSES = (FileTransferStatus.STAGED, FileTransferStatus.INCOMPLETE)


def can_transition(from_status: Optional[FileTransferStatus], to_status: FileTransferStatus) -> bool:
    """Validate if a journal status transition is allowed

    Example:
        >>> can_transition(FileTransferStatus.STAGED, FileTransferStatus.COMPLETED)
        True
        >>> can_transition(FileTransferStatus.COMPLETED, FileTransferStatus.INCOMPLETE)
        False
    """
    return to_status in ALLOWED_TRANSITIONS.get(from_status, [])


def is_pending(status: FileTransferStatus) -> bool:
    """True while the file step still has to run."""
    return status in PENDING_STATUSES
