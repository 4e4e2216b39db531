"""
Confidence evaluation.

Each rule reads the raw Stats90d (never normalized values) and, when its predicate holds,
contributes an additive penalty. Rules are independent: all matching rules fire, penalties
stack, and the total is floored at CONFIDENCE_FLOOR.
"""
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple
import logging

from normalize.models import Stats90d
from scoring.models import ConfidencePenalty

logger = logging.getLogger(__name__)

CONFIDENCE_MAX = 100
CONFIDENCE_FLOOR = 50

BURST_FLAG = 'burst_activity'
MICRO_COMMIT_FLAG = 'micro_commit_pattern'
GENERATED_CHANGE_FLAG = 'generated_change_pattern'
LOW_COLLABORATION_FLAG = 'low_collaboration_signal'
SINGLE_REPO_FLAG = 'single_repo_concentration'
SUPPLEMENTAL_FLAG = 'supplemental_unverified'

# reason strings are shown to the developer; keep them descriptive, never accusatory
CONFIDENCE_REASONS = {
    BURST_FLAG: "Some activity appears in short bursts, which reduces timing confidence.",
    MICRO_COMMIT_FLAG: "Many very small changes in this period reduce signal clarity.",
    GENERATED_CHANGE_FLAG: "Large change volume with limited review signals reduces confidence.",
    LOW_COLLABORATION_FLAG: "Limited review and collaboration signals detected in this period.",
    SINGLE_REPO_FLAG: "Most activity is concentrated in one repo (not bad, just less cross-repo signal).",
    SUPPLEMENTAL_FLAG: "Includes activity from a linked account that cannot be independently verified.",
}


@dataclass(frozen=True)
class ConfidenceRule:
    flag: str
    predicate: Callable[[Stats90d], bool]
    penalty: int
    reason: str

    def evaluate(self, stats: Stats90d) -> Optional[ConfidencePenalty]:
        if self.predicate(stats):
            return ConfidencePenalty(flag=self.flag, penalty=self.penalty, reason=self.reason)
        return None


def _is_burst(stats: Stats90d) -> bool:
    return stats.max_commits_in_10_min >= 20


def _is_micro_commit(stats: Stats90d) -> bool:
    # only evaluated when the ratio was computed upstream
    return stats.micro_commit_ratio is not None and stats.micro_commit_ratio >= 0.6


def _is_generated_change(stats: Stats90d) -> bool:
    total_lines = stats.lines_added + stats.lines_deleted
    return total_lines >= 20000 and stats.reviews_submitted_count <= 2


def _is_low_collaboration(stats: Stats90d) -> bool:
    return stats.prs_merged_count >= 10 and stats.reviews_submitted_count <= 1


def _is_single_repo(stats: Stats90d) -> bool:
    return stats.top_repo_share >= 0.95 and stats.repos_contributed <= 1


def _has_supplemental(stats: Stats90d) -> bool:
    return bool(stats.has_supplemental_data)


CONFIDENCE_RULES: Tuple[ConfidenceRule, ...] = (
    ConfidenceRule(BURST_FLAG, _is_burst, 15, CONFIDENCE_REASONS[BURST_FLAG]),
    ConfidenceRule(MICRO_COMMIT_FLAG, _is_micro_commit, 10, CONFIDENCE_REASONS[MICRO_COMMIT_FLAG]),
    ConfidenceRule(GENERATED_CHANGE_FLAG, _is_generated_change, 15, CONFIDENCE_REASONS[GENERATED_CHANGE_FLAG]),
    ConfidenceRule(LOW_COLLABORATION_FLAG, _is_low_collaboration, 10, CONFIDENCE_REASONS[LOW_COLLABORATION_FLAG]),
    ConfidenceRule(SINGLE_REPO_FLAG, _is_single_repo, 5, CONFIDENCE_REASONS[SINGLE_REPO_FLAG]),
    ConfidenceRule(SUPPLEMENTAL_FLAG, _has_supplemental, 5, CONFIDENCE_REASONS[SUPPLEMENTAL_FLAG]),
)


def collect_penalties(stats: Stats90d, rules: Optional[Sequence[ConfidenceRule]] = None) -> List[ConfidencePenalty]:
    """Evaluate every rule against stats and return the penalties that fired, in rule order."""
    penalties: List[ConfidencePenalty] = []
    for rule in (CONFIDENCE_RULES if rules is None else rules):
        penalty = rule.evaluate(stats)
        if penalty is not None:
            penalties.append(penalty)
    return penalties


def compute_confidence(stats: Stats90d, rules: Optional[Sequence[ConfidenceRule]] = None) -> Tuple[int, List[ConfidencePenalty]]:
    """
    Return (confidence, penalties) for the given stats.

    confidence = max(CONFIDENCE_FLOOR, 100 - sum of penalties). Overlapping rules
    (e.g. generated_change_pattern and low_collaboration_signal) are not deduplicated.
    """
    penalties = collect_penalties(stats, rules)
    total = sum(p.penalty for p in penalties)
    confidence = max(CONFIDENCE_FLOOR, CONFIDENCE_MAX - total)
    if penalties:
        logger.debug(
            "confidence for %s: %d (flags=%s, raw deduction=%d)",
            stats.handle, confidence, [p.flag for p in penalties], total,
        )
    return confidence, penalties
