"""
Scoring package: expose the impact pipeline entry point and its components.
"""

from .metrics import compute_impact, compute_base_score, compute_adjusted_score, get_tier
from .confidence import compute_confidence, CONFIDENCE_RULES

__all__ = [
    "compute_impact",
    "compute_base_score",
    "compute_adjusted_score",
    "get_tier",
    "compute_confidence",
    "CONFIDENCE_RULES",
]
