"""Final scoring: automated signals plus delegated rubric judgment, mapped to a CEFR band."""

from __future__ import annotations

import logging
import re
import typing as t

import annotated_types as ant
import pydantic as p

from parlance.core.config.assessment import DefaultCEFRThresholds
from parlance.llm import RubricScoringService, ScoringError, with_timeout
from parlance.model import BaseModel, CEFRLevel, DimensionScores, FinalScore, Session, SpeechSignals
from parlance.model.score import DimensionScore

from .signals import SignalAggregator

logger = logging.getLogger(__name__)

AssessmentRubric: t.Final[dict[str, str]] = {
    "fluency": "continuity, pace, pauses, fillers",
    "pronunciation": "intelligibility, phoneme accuracy, stress",
    "grammar": "verb tenses, agreement, sentence variety",
    "vocabulary": "range, appropriacy, collocations",
    "comprehension": "relevance, accuracy, listening skills",
    "task_completion": "coverage of required elements",
}

FencedJSON = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)


class RubricScores(BaseModel):
    fluency: DimensionScore
    pronunciation: DimensionScore
    grammar: DimensionScore
    vocabulary: DimensionScore
    comprehension: DimensionScore
    task_completion: DimensionScore


class RubricResponse(BaseModel):
    """Expected shape of the scoring collaborator's answer; unknown fields are ignored."""

    scores: RubricScores
    rationale: str
    confidence: t.Annotated[float, ant.Ge(0.0), ant.Le(1.0)]


def map_to_cefr(total_score: int, thresholds: t.Mapping[CEFRLevel, int] = DefaultCEFRThresholds) -> CEFRLevel:
    """The highest level whose threshold `total_score` reaches; A1 below every threshold."""
    level = CEFRLevel.A1
    for candidate, threshold in sorted(thresholds.items()):
        if total_score >= threshold:
            level = candidate
    return level


def parse_rubric_response(text: str) -> RubricResponse:
    """Accept a bare JSON object, or one wrapped in a single ```json fence."""
    body = text.strip()
    if m := FencedJSON.match(body):
        body = m.group(1)
    try:
        return RubricResponse.model_validate_json(body)
    except p.ValidationError as e:
        raise ScoringError(f"malformed scoring response: {e.error_count()} error(s)", code="malformed_response") from e


def scoring_context(session: Session, signals: SpeechSignals) -> dict[str, t.Any]:
    return {
        "session": {
            "session_id": session.session_id,
            "phase": session.phase,
            "status": session.status,
            "turns": len(session.turns),
            "metadata": session.metadata.model_dump(mode="json"),
        },
        "signals": signals,
    }


class Scorer(object):
    def __init__(
        self,
        signals: SignalAggregator,
        scoring: RubricScoringService | None,
        cefr_thresholds: t.Mapping[CEFRLevel, int] = DefaultCEFRThresholds,
        scoring_timeout: float | None = None,
    ) -> None:
        self.signals = signals
        self.scoring = scoring
        self.cefr_thresholds = dict(cefr_thresholds)
        self.scoring_timeout = scoring_timeout

    async def finalize(self, session: Session) -> FinalScore:
        """Compute and cache the final score; a cached score is returned untouched."""
        if session.scores is not None:
            return session.scores

        if self.scoring is None:
            raise ScoringError("no scoring service is configured", code="unavailable")

        transcript = " ".join(turn.user_transcript for turn in session.turns if turn.user_transcript)
        signals = self.signals.compute(session)

        text = await with_timeout(
            self.scoring.score(transcript, scoring_context(session, signals), AssessmentRubric),
            self.scoring_timeout,
            ScoringError,
            "rubric scoring",
        )
        rubric = parse_rubric_response(text)

        scores = DimensionScores(**rubric.scores.model_dump(), automated_signals=signals)
        total = scores.total
        final = FinalScore(
            level=map_to_cefr(total, self.cefr_thresholds),
            scores=scores,
            confidence=rubric.confidence,
            rationale=rubric.rationale,
            total_score=total,
            signals=signals,
        )
        session.scores = final
        logger.info(
            "session finalized",
            extra={
                "session_id": session.session_id,
                "level": final.level,
                "total_score": total,
            },
        )
        return final
