"""Static phase configuration: order, time budget and successor of each phase."""

from __future__ import annotations

import typing as t

from parlance.model import Phase

from .errors import PhaseTableError


class PhaseEntry(t.NamedTuple):
    duration: int  # milliseconds
    next: Phase | None


class PhaseTable(object):
    """Immutable lookup of phase budgets and successors.

    Built once from configuration and handed to the engine. The successor of
    each phase is the following member of `Phase`; `complete` is terminal with
    a zero budget.
    """

    __slots__ = ("_entries", "_phases")

    def __init__(self, durations: t.Mapping[Phase, int]) -> None:
        phases = tuple(Phase)
        missing = [ph.value for ph in phases if ph not in durations]
        if missing:
            raise PhaseTableError(f"no duration configured for phases: {', '.join(missing)}")
        if durations[Phase.Complete] != 0:
            raise PhaseTableError("terminal phase must have a zero duration")
        for ph in phases:
            if durations[ph] < 0:
                raise PhaseTableError(f"negative duration for phase {ph.value}")

        successors = (*phases[1:], None)
        self._phases = phases
        self._entries: dict[Phase, PhaseEntry] = {
            ph: PhaseEntry(duration=int(durations[ph]), next=nxt) for ph, nxt in zip(phases, successors)
        }

    def _entry(self, phase: Phase) -> PhaseEntry:
        try:
            return self._entries[phase]
        except (KeyError, TypeError) as e:
            raise PhaseTableError(f"unknown phase: {phase!r}") from e

    @property
    def phases(self) -> tuple[Phase, ...]:
        return self._phases

    def duration(self, phase: Phase) -> int:
        return self._entry(phase).duration

    def next(self, phase: Phase) -> Phase | None:
        return self._entry(phase).next

    def remaining_after(self, phase: Phase) -> int:
        """Sum of the budgets of every phase after `phase`."""
        self._entry(phase)
        return sum(self._entries[ph].duration for ph in self._phases[phase.position + 1 :])

    def __iter__(self) -> t.Iterator[tuple[Phase, PhaseEntry]]:
        return iter(self._entries.items())

    def __repr__(self) -> str:
        budgets = ", ".join(f"{ph.value}={e.duration}" for ph, e in self._entries.items())
        return f"<PhaseTable {budgets}>"
