"""Unit tests for the FileTransferStatus state machine"""

from adms.transfers.status import (
    ALLOWED_TRANSITIONS,
    FileTransferStatus,
    PENDING_STATUSES,
    can_transition,
    is_pending,
)


class TestFileTransferStatusStateMachine:
    """Test FileTransferStatus transitions"""

    def test_status_values(self):
        assert FileTransferStatus.STAGED.value == "STAGED"
        assert FileTransferStatus.COMPLETED.value == "COMPLETED"
        assert FileTransferStatus.INCOMPLETE.value == "INCOMPLETE"

    def test_initial_state_transition(self):
        """New journal rows start STAGED"""
        assert can_transition(None, FileTransferStatus.STAGED) is True
        assert can_transition(None, FileTransferStatus.COMPLETED) is False
        assert can_transition(None, FileTransferStatus.INCOMPLETE) is False

    def test_staged_transitions(self):
        assert can_transition(FileTransferStatus.STAGED, FileTransferStatus.COMPLETED) is True
        assert can_transition(FileTransferStatus.STAGED, FileTransferStatus.INCOMPLETE) is True
        assert can_transition(FileTransferStatus.STAGED, FileTransferStatus.STAGED) is False

    def test_incomplete_can_be_retried(self):
        assert can_transition(FileTransferStatus.INCOMPLETE, FileTransferStatus.COMPLETED) is True
        assert can_transition(FileTransferStatus.INCOMPLETE, FileTransferStatus.INCOMPLETE) is True
        assert can_transition(FileTransferStatus.INCOMPLETE, FileTransferStatus.STAGED) is False

    def test_completed_is_terminal(self):
        assert ALLOWED_TRANSITIONS[FileTransferStatus.COMPLETED] == []
        for status in FileTransferStatus:
            assert can_transition(FileTransferStatus.COMPLETED, status) is False

    def test_pending_statuses(self):
        assert set(PENDING_STATUSES) == {FileTransferStatus.STAGED, FileTransferStatus.INCOMPLETE}
        assert is_pending(FileTransferStatus.STAGED) is True
        assert is_pending(FileTransferStatus.COMPLETED) is False
