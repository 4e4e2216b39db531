"""
Result models produced by the impact scoring pipeline.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Tuple

TIER_EMERGING = 'Emerging'
TIER_SOLID = 'Solid'
TIER_HIGH = 'High'
TIER_ELITE = 'Elite'

TIERS = (TIER_EMERGING, TIER_SOLID, TIER_HIGH, TIER_ELITE)


@dataclass(frozen=True)
class ConfidencePenalty:
    """A single deduction applied by one confidence rule."""
    flag: str
    penalty: int
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return {'flag': self.flag, 'penalty': self.penalty, 'reason': self.reason}


@dataclass(frozen=True)
class ScoreBreakdown:
    """Normalized (0..1) value of each weighted signal, before weighting."""
    commits: float = 0.0
    pr_weight: float = 0.0
    reviews: float = 0.0
    issues: float = 0.0
    streak: float = 0.0
    collaboration: float = 0.0

    def as_components(self) -> Dict[str, float]:
        """Components keyed by signal name, as used by the weights mapping."""
        return {
            'commits': self.commits,
            'prWeight': self.pr_weight,
            'reviews': self.reviews,
            'issues': self.issues,
            'streak': self.streak,
            'collaboration': self.collaboration,
        }

    def to_dict(self) -> Dict[str, float]:
        return self.as_components()


@dataclass(frozen=True)
class ImpactResult:
    """
    Full scoring result for one developer.

    base_score and adjusted_score are integers in 0..100 with
    adjusted_score <= base_score; confidence is in 50..100.
    """
    handle: str
    base_score: int
    confidence: int
    adjusted_score: int
    tier: str
    breakdown: ScoreBreakdown
    computed_at: str
    confidence_penalties: Tuple[ConfidencePenalty, ...] = field(default_factory=tuple)

    @property
    def flags(self) -> Tuple[str, ...]:
        return tuple(p.flag for p in self.confidence_penalties)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form (camelCase keys) consumed by badge, signing and dashboard collaborators."""
        return {
            'handle': self.handle,
            'baseScore': self.base_score,
            'confidence': self.confidence,
            'confidencePenalties': [p.to_dict() for p in self.confidence_penalties],
            'adjustedScore': self.adjusted_score,
            'tier': self.tier,
            'breakdown': self.breakdown.to_dict(),
            'computedAt': self.computed_at,
        }

    def __str__(self):
        flags = ', '.join(self.flags) or 'none'
        return (
            f"Handle: {self.handle}\n"
            f"Base Score: {self.base_score}\n"
            f"Confidence: {self.confidence}\n"
            f"Adjusted Score: {self.adjusted_score}\n"
            f"Tier: {self.tier}\n"
            f"Flags: {flags}"
        )
