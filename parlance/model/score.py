from __future__ import annotations

import enum
import functools
import typing as t

import annotated_types as ant
import pydantic as p
import typing_extensions as te

from .base import BaseModel

RubricDimensions: t.Final[tuple[str, ...]] = (
    "fluency",
    "pronunciation",
    "grammar",
    "vocabulary",
    "comprehension",
    "task_completion",
)

DimensionScore = t.Annotated[int, ant.Ge(0), ant.Le(5)]


@functools.total_ordering
class CEFRLevel(enum.Enum):
    A1 = "A1"
    A2 = "A2"
    B1 = "B1"
    B2 = "B2"
    C1 = "C1"
    C2 = "C2"

    def __lt__(self, other: object) -> bool:
        if not isinstance(other, CEFRLevel):
            return NotImplemented
        members = list(CEFRLevel)
        return members.index(self) < members.index(other)


class SpeechSignals(te.TypedDict, total=False):
    """Automated metrics derived from the turn log; empty when no turn has a transcript."""

    wpm: int
    silence_ratio: float
    fillers_per_min: int
    total_turns: int
    total_duration: int
    average_turn_duration: int


class DimensionScores(BaseModel):
    fluency: DimensionScore
    pronunciation: DimensionScore
    grammar: DimensionScore
    vocabulary: DimensionScore
    comprehension: DimensionScore
    task_completion: DimensionScore

    automated_signals: SpeechSignals = p.Field(default_factory=lambda: SpeechSignals())

    @property
    def total(self) -> int:
        return sum(getattr(self, d) for d in RubricDimensions)


class FinalScore(BaseModel):
    level: CEFRLevel
    scores: DimensionScores
    confidence: t.Annotated[float, ant.Ge(0.0), ant.Le(1.0)]
    rationale: str
    total_score: int
    signals: SpeechSignals
