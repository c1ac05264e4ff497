"""Exceptions for assessment operations."""

from parlance.model import SessionID


class AssessmentError(Exception):
    """Error during an assessment operation, caused by the caller's request."""

    pass


class SessionNotFoundError(AssessmentError):
    """Assessment session could not be found."""

    def __init__(self, session_id: SessionID | str) -> None:
        super().__init__(f"session not found: {session_id}")
        self.session_id = session_id


class InvalidSessionStateError(AssessmentError):
    """The session exists but cannot accept the requested operation."""

    def __init__(self, message: str, session_id: SessionID | str) -> None:
        super().__init__(message)
        self.session_id = session_id


class TurnNotFoundError(AssessmentError):
    """No turn exists at the requested position of the session's turn log."""

    def __init__(self, session_id: SessionID | str, position: int) -> None:
        super().__init__(f"session {session_id} has no turn at position {position}")
        self.session_id = session_id
        self.position = position


class InvalidMetadataError(AssessmentError):
    """A metadata update does not validate or changes the chosen task variant; the stored metadata is unchanged."""

    def __init__(self, message: str, session_id: SessionID | str) -> None:
        super().__init__(message)
        self.session_id = session_id


class InvariantViolation(RuntimeError):
    """An internal invariant does not hold; this is a bug or a bad configuration, never a request error."""

    pass


class PhaseTableError(InvariantViolation):
    pass
