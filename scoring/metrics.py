"""
Impact scoring pipeline.
Composes the base score, confidence, adjusted score and tier for one Stats90d record.
"""
from datetime import datetime, timezone
from typing import Any, Mapping, Optional, Tuple, Union
import logging

from normalize.models import Stats90d
from scoring.confidence import compute_confidence
from scoring.models import (
    ImpactResult,
    ScoreBreakdown,
    TIER_ELITE,
    TIER_EMERGING,
    TIER_HIGH,
    TIER_SOLID,
)
from .utils import (
    CAPS,
    DEFAULT_WEIGHTS,
    clamp,
    compute_weighted_score,
    linear_ratio,
    normalize,
    round_half_up,
    validate_weights,
)

logger = logging.getLogger(__name__)

# lower bound (inclusive) -> tier, checked from the top
TIER_THRESHOLDS = (
    (85, TIER_ELITE),
    (70, TIER_HIGH),
    (40, TIER_SOLID),
)

# at the confidence floor (50) the adjusted score keeps 92.5% of the base score
CONFIDENCE_BASELINE_FACTOR = 0.85
CONFIDENCE_SCALED_FACTOR = 0.15


def compute_breakdown(stats: Stats90d) -> ScoreBreakdown:
    """Normalize the six weighted signals to 0..1.

    Count-type signals are log-normalized; streak and collaboration are linear so that
    they reward proportional progress toward their ceiling.
    """
    return ScoreBreakdown(
        commits=normalize(stats.commits_total, CAPS['commits']),
        pr_weight=normalize(stats.prs_merged_weight, CAPS['prWeight']),
        reviews=normalize(stats.reviews_submitted_count, CAPS['reviews']),
        issues=normalize(stats.issues_closed_count, CAPS['issues']),
        streak=linear_ratio(stats.active_days, CAPS['activeDays']),
        collaboration=linear_ratio(stats.repos_contributed, CAPS['repos']),
    )


def compute_base_score(stats: Stats90d, weights: Optional[Mapping[str, float]] = None) -> Tuple[int, ScoreBreakdown]:
    """Return (base_score, breakdown); base_score = round(100 * Σ weight * component).

    Caller-supplied weights are validated first, so a mapping that does not name the six
    signals or does not sum to 1.00 raises ValueError instead of leaving 0..100.
    """
    if weights is None:
        weights = DEFAULT_WEIGHTS
    else:
        validate_weights(weights)
    breakdown = compute_breakdown(stats)
    raw = 100 * compute_weighted_score(breakdown.as_components(), weights)
    return round_half_up(raw), breakdown


def compute_adjusted_score(base: float, confidence: float) -> int:
    """Fold confidence into the base score as a mild damper (never a hard gate)."""
    adjusted = base * (CONFIDENCE_BASELINE_FACTOR + CONFIDENCE_SCALED_FACTOR * (confidence / 100))
    return round_half_up(clamp(adjusted))


def get_tier(adjusted_score: float) -> str:
    for lower_bound, tier in TIER_THRESHOLDS:
        if adjusted_score >= lower_bound:
            return tier
    return TIER_EMERGING


def compute_impact(stats: Union[Stats90d, Mapping[str, Any]], weights: Optional[Mapping[str, float]] = None) -> ImpactResult:
    """
    Score one developer.

    Accepts a Stats90d or a plain mapping in wire (camelCase) or snake_case form. The base
    score and confidence are computed independently, then combined; computed_at is the
    current UTC time, which is the only field that differs between identical calls.
    """
    if not isinstance(stats, Stats90d):
        stats = Stats90d.from_dict(dict(stats))

    base_score, breakdown = compute_base_score(stats, weights)
    confidence, penalties = compute_confidence(stats)
    adjusted_score = compute_adjusted_score(base_score, confidence)
    tier = get_tier(adjusted_score)

    logger.debug(
        "impact for %s: base=%d confidence=%d adjusted=%d tier=%s",
        stats.handle, base_score, confidence, adjusted_score, tier,
    )

    return ImpactResult(
        handle=stats.handle,
        base_score=base_score,
        confidence=confidence,
        adjusted_score=adjusted_score,
        tier=tier,
        breakdown=breakdown,
        computed_at=datetime.now(timezone.utc).isoformat(),
        confidence_penalties=tuple(penalties),
    )
