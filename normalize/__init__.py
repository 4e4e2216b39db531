"""
Normalize package: input records for scoring and helpers that assemble them from raw payloads.
"""

from .models import HeatmapDay, Stats90d
from .util import build_stats_from_raw, compute_pr_weight, merge_stats

__all__ = ["HeatmapDay", "Stats90d", "build_stats_from_raw", "compute_pr_weight", "merge_stats"]
