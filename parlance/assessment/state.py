"""Creation, timing and phase advancement of assessment sessions."""

from __future__ import annotations

import datetime
import logging

from parlance.core.provider import TimestampProvider
from parlance.model import Phase, Session, SessionID

from .errors import InvalidSessionStateError
from .phases import PhaseTable

logger = logging.getLogger(__name__)

Millisecond = datetime.timedelta(milliseconds=1)


class SessionStateManager(object):
    """Owns every change to `Session.phase`.

    Phase time is measured from `phase_start_time`, which is reset on each
    transition; nothing accumulates across phases.
    """

    def __init__(self, phases: PhaseTable, clock: TimestampProvider) -> None:
        self.phases = phases
        self.clock = clock

    def create(self, session_id: SessionID | None = None) -> Session:
        now = self.clock()
        return Session(
            session_id=session_id or SessionID(),
            create_time=now,
            phase=self.phases.phases[0],
            phase_start_time=now,
        )

    def elapsed(self, session: Session) -> int:
        return max(0, (self.clock() - session.phase_start_time) // Millisecond)

    def time_remaining(self, session: Session) -> int:
        duration = self.phases.duration(session.phase)
        if duration <= 0:
            return 0
        return max(0, duration - self.elapsed(session))

    def has_timed_out(self, session: Session) -> bool:
        duration = self.phases.duration(session.phase)
        return duration > 0 and self.elapsed(session) >= duration

    def advance(self, session: Session) -> Phase:
        """Move to the successor phase, or do nothing if there is none."""
        current = session.phase
        nxt = self.phases.next(current)
        if nxt is None or nxt is current:
            return current

        session.phase = nxt
        session.phase_start_time = self.clock()
        session.turn_index = 0
        logger.info(
            "phase advanced",
            extra={
                "session_id": session.session_id,
                "from_phase": current,
                "to_phase": nxt,
            },
        )
        return nxt

    def advance_to(self, session: Session, target: Phase) -> list[Phase]:
        """Advance one phase at a time until `target`; returns the phases entered."""
        self.phases.duration(target)
        if target.position < session.phase.position:
            raise InvalidSessionStateError(
                f"cannot move back from {session.phase.value} to {target.value}", session.session_id
            )

        entered: list[Phase] = []
        while session.phase is not target:
            before = session.phase
            if self.advance(session) is before:
                break
            entered.append(session.phase)
        return entered
