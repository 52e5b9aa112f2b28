"""
Scoring engine for opportunities.
Converts the eight signal dimensions into a single 0-100 score with an
itemized breakdown.

Base Score = Revenue*0.40 + Timeline*0.25 + SkillMatch*0.20 + Momentum*0.10 + Competition*0.05

Modifiers:
- Improvement margin: +20 if > 70, +10 if > 40
- Distribution leverage: +15 if > 70
- Margin potential: +10 if > 50
- Time to market: +5 if under 7 days
"""

from dataclasses import asdict, dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, Iterable, List, Optional

from .dimensions import Dimensions, resolve_dimensions, clamp


WEIGHTS = {
    "revenue_potential": 0.40,
    "timeline": 0.25,
    "skill_match": 0.20,
    "momentum": 0.10,
    "competition": 0.05,
}

INITIAL_STATUS = "new"


def normalize_timeline(days: float) -> float:
    """
    Normalize timeline (days) to a 0-100 score.
    Faster is better: 1 day = 100, 30 days = 0, linear in between.
    """
    if days <= 1:
        return 100.0
    if days >= 30:
        return 0.0
    return clamp(100 - (days - 1) * (100 / 29))


def round_score(value: float) -> float:
    """Round to two decimals, halves away from zero."""
    return float(Decimal(str(value)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP))


@dataclass
class ScoreResult:
    """Outcome of scoring one set of dimensions."""
    final_score: float
    breakdown: Dict[str, float]
    time_to_market_bonus: int


@dataclass
class ScoredRecord:
    """Candidate record augmented with its score, ready for storage."""
    title: str
    source: str
    source_url: str
    source_id: str
    dimensions: Dimensions
    final_score: float
    score_breakdown: Dict[str, float]
    time_to_market_bonus: int
    description: Optional[str] = None
    raw_data: Dict[str, Any] = field(default_factory=dict)
    status: str = INITIAL_STATUS

    def to_row(self) -> Dict[str, Any]:
        """Flatten into a storage row keyed by column name."""
        row = {
            "title": self.title,
            "description": self.description,
            "source": self.source,
            "source_url": self.source_url,
            "source_id": self.source_id,
            "raw_data": self.raw_data,
            "final_score": self.final_score,
            "score_breakdown": self.score_breakdown,
            "time_to_market_bonus": self.time_to_market_bonus,
            "status": self.status,
        }
        row.update(asdict(self.dimensions))
        return row


class ScoringEngine:
    """Calculates deterministic scores for opportunities."""

    def score(self, dimensions: Dimensions) -> ScoreResult:
        """
        Calculate final score based on dimensions and modifiers.

        Args:
            dimensions: Resolved and clamped dimensions

        Returns:
            ScoreResult with final score, breakdown and time-to-market bonus
        """
        timeline_score = normalize_timeline(dimensions.timeline_days)

        base_score = (
            dimensions.revenue_potential * WEIGHTS["revenue_potential"] +
            timeline_score * WEIGHTS["timeline"] +
            dimensions.skill_match * WEIGHTS["skill_match"] +
            dimensions.momentum * WEIGHTS["momentum"] +
            dimensions.competition * WEIGHTS["competition"]
        )

        if dimensions.improvement_margin > 70:
            improvement_margin_bonus = 20
        elif dimensions.improvement_margin > 40:
            improvement_margin_bonus = 10
        else:
            improvement_margin_bonus = 0
        distribution_leverage_bonus = 15 if dimensions.distribution_leverage > 70 else 0
        margin_potential_bonus = 10 if dimensions.margin_potential > 50 else 0
        time_to_market_bonus = 5 if dimensions.timeline_days < 7 else 0

        total_modifiers = (
            improvement_margin_bonus +
            distribution_leverage_bonus +
            margin_potential_bonus +
            time_to_market_bonus
        )

        final_score = clamp(base_score + total_modifiers)

        return ScoreResult(
            final_score=round_score(final_score),
            breakdown={
                "revenue_potential": dimensions.revenue_potential,
                "timeline_days": dimensions.timeline_days,
                "timeline": timeline_score,
                "skill_match": dimensions.skill_match,
                "momentum": dimensions.momentum,
                "competition": dimensions.competition,
                "improvement_margin": dimensions.improvement_margin,
                "distribution_leverage": dimensions.distribution_leverage,
                "margin_potential": dimensions.margin_potential,
                "base_score": round_score(base_score),
                "improvement_margin_bonus": improvement_margin_bonus,
                "distribution_leverage_bonus": distribution_leverage_bonus,
                "margin_potential_bonus": margin_potential_bonus,
                "time_to_market_bonus": time_to_market_bonus,
                "total_modifiers": total_modifiers,
            },
            time_to_market_bonus=time_to_market_bonus,
        )

    def score_candidate(self, candidate) -> ScoredRecord:
        """
        Score one candidate record.

        Args:
            candidate: CandidateRecord from a source adapter

        Returns:
            ScoredRecord with status set to the initial value
        """
        dimensions = resolve_dimensions(candidate)
        result = self.score(dimensions)
        source = getattr(candidate.source, "value", candidate.source)
        return ScoredRecord(
            title=candidate.title,
            description=candidate.description,
            source=source,
            source_url=candidate.source_url,
            source_id=candidate.source_id,
            raw_data=candidate.raw_data or {},
            dimensions=dimensions,
            final_score=result.final_score,
            score_breakdown=result.breakdown,
            time_to_market_bonus=result.time_to_market_bonus,
        )

    def score_batch(self, candidates: Iterable) -> List[ScoredRecord]:
        return [self.score_candidate(candidate) for candidate in candidates]
