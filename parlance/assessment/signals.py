"""Automated, non-judged metrics derived from the turn log.

Turn `duration` is the time spent producing the response to a turn, not the
candidate's speaking time, and rates here are computed from it as-is.
"""

from __future__ import annotations

import re
import typing as t

import typing_extensions as te

from parlance.core.config.assessment import DefaultFillerWords, DefaultSilenceRatio
from parlance.lib.util import round_half_up
from parlance.model import Phase, Session, SpeechSignals, Turn

MillisecondsPerMinute: t.Final[int] = 60_000


class PhaseBreakdown(te.TypedDict):
    turns: int
    total_duration: int
    average_duration: int


class SpeakingMetrics(te.TypedDict):
    total_words: int
    words_per_minute: int
    average_turn_length: int
    total_speaking_time: int


def word_count(text: str) -> int:
    return len(text.split())


def spoken_turns(turns: t.Iterable[Turn]) -> list[Turn]:
    """Turns which carry a non-empty transcript."""
    return [turn for turn in turns if turn.user_transcript]


def per_minute(count: int, duration_ms: int) -> int:
    if duration_ms <= 0:
        return 0
    return round_half_up(count / duration_ms * MillisecondsPerMinute)


class SignalAggregator(object):
    def __init__(
        self,
        filler_words: t.Sequence[str] = DefaultFillerWords,
        silence_ratio: float = DefaultSilenceRatio,
    ) -> None:
        self.filler_words = tuple(filler_words)
        self.placeholder_silence_ratio = silence_ratio
        self._filler_patterns = [re.compile(rf"\b{re.escape(w.lower())}\b") for w in self.filler_words]

    def count_fillers(self, text: str) -> int:
        lowered = text.lower()
        return sum(len(pattern.findall(lowered)) for pattern in self._filler_patterns)

    def silence_ratio(self, turns: t.Sequence[Turn]) -> float:
        # no audio analysis is available; override to supply a measured ratio
        return self.placeholder_silence_ratio

    def compute(self, session: Session) -> SpeechSignals:
        turns = spoken_turns(session.turns)
        if not turns:
            return SpeechSignals()

        total_words = sum(word_count(turn.user_transcript or "") for turn in turns)
        total_duration = sum(turn.duration for turn in turns)
        fillers = sum(self.count_fillers(turn.user_transcript or "") for turn in turns)

        return SpeechSignals(
            wpm=per_minute(total_words, total_duration),
            silence_ratio=self.silence_ratio(turns),
            fillers_per_min=per_minute(fillers, total_duration),
            total_turns=len(turns),
            total_duration=total_duration,
            average_turn_duration=round_half_up(total_duration / len(turns)),
        )

    def phase_breakdown(self, session: Session) -> dict[Phase, PhaseBreakdown]:
        """Turn count and response time per phase, in phase order, for phases that saw turns."""
        breakdown: dict[Phase, PhaseBreakdown] = {}
        for phase in Phase:
            durations = [turn.duration for turn in session.turns if turn.phase is phase]
            if not durations:
                continue
            total = sum(durations)
            breakdown[phase] = PhaseBreakdown(
                turns=len(durations),
                total_duration=total,
                average_duration=round_half_up(total / len(durations)),
            )
        return breakdown

    def speaking_metrics(self, session: Session) -> SpeakingMetrics:
        turns = spoken_turns(session.turns)
        total_words = sum(word_count(turn.user_transcript or "") for turn in turns)
        total_time = sum(turn.duration for turn in turns)
        return SpeakingMetrics(
            total_words=total_words,
            words_per_minute=per_minute(total_words, total_time),
            average_turn_length=round_half_up(total_words / len(turns)) if turns else 0,
            total_speaking_time=total_time,
        )

    def response_times(self, session: Session) -> list[int]:
        """Milliseconds between a prompt and the candidate's next answer."""
        times: list[int] = []
        for prev, cur in zip(session.turns, session.turns[1:]):
            if prev.ai_response and cur.user_transcript:
                delta = cur.timestamp - prev.timestamp
                times.append(max(0, int(delta.total_seconds() * 1000)))
        return times
