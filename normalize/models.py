"""
Normalized input entities for impact scoring.

Stats90d is the record handed to the scoring engine: a 90-day aggregate of a
developer's GitHub activity. Records are frozen; build a new one (see
dataclasses.replace) instead of mutating.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Optional, Tuple


@dataclass(frozen=True)
class HeatmapDay:
    """Daily activity count (ISO date, YYYY-MM-DD)."""
    date: str
    count: int = 0


# wire (camelCase) name -> attribute name
_WIRE_FIELDS = {
    'handle': 'handle',
    'displayName': 'display_name',
    'avatarUrl': 'avatar_url',
    'commitsTotal': 'commits_total',
    'activeDays': 'active_days',
    'prsMergedCount': 'prs_merged_count',
    'prsMergedWeight': 'prs_merged_weight',
    'reviewsSubmittedCount': 'reviews_submitted_count',
    'issuesClosedCount': 'issues_closed_count',
    'linesAdded': 'lines_added',
    'linesDeleted': 'lines_deleted',
    'reposContributed': 'repos_contributed',
    'topRepoShare': 'top_repo_share',
    'maxCommitsIn10Min': 'max_commits_in_10_min',
    'microCommitRatio': 'micro_commit_ratio',
    'hasSupplementalData': 'has_supplemental_data',
    'heatmapData': 'heatmap_data',
    'fetchedAt': 'fetched_at',
}


@dataclass(frozen=True)
class Stats90d:
    """
    Aggregated GitHub stats for one developer over the scoring window.

    Values are assumed to be validated upstream (non-negative, finite).
    micro_commit_ratio and has_supplemental_data are None when the enrichment
    step that produces them did not run.
    """
    handle: str
    commits_total: float = 0
    active_days: float = 0
    prs_merged_count: float = 0
    prs_merged_weight: float = 0
    reviews_submitted_count: float = 0
    issues_closed_count: float = 0
    lines_added: float = 0
    lines_deleted: float = 0
    repos_contributed: float = 0
    top_repo_share: float = 0.0
    max_commits_in_10_min: float = 0
    micro_commit_ratio: Optional[float] = None
    has_supplemental_data: Optional[bool] = None
    display_name: Optional[str] = None
    avatar_url: Optional[str] = None
    heatmap_data: Tuple[HeatmapDay, ...] = field(default_factory=tuple)
    fetched_at: Optional[str] = None

    @classmethod
    def from_dict(cls, raw: Dict[str, Any]) -> 'Stats90d':
        """Build a Stats90d from a camelCase (wire) or snake_case mapping.

        Unknown keys are ignored. No value validation is done here.
        """
        known = set(_WIRE_FIELDS.values())
        kwargs: Dict[str, Any] = {}
        for key, value in (raw or {}).items():
            attr = _WIRE_FIELDS.get(key, key)
            if attr in known:
                kwargs[attr] = value
        heatmap = kwargs.get('heatmap_data') or ()
        kwargs['heatmap_data'] = tuple(_heatmap_day(d) for d in heatmap)
        kwargs.setdefault('handle', '')
        return cls(**kwargs)

    def to_dict(self) -> Dict[str, Any]:
        """Wire form with camelCase keys; unset optional fields are omitted."""
        out: Dict[str, Any] = {}
        for wire, attr in _WIRE_FIELDS.items():
            value = getattr(self, attr)
            if attr == 'heatmap_data':
                value = [{'date': d.date, 'count': d.count} for d in value]
            elif value is None:
                continue
            out[wire] = value
        return out


def _heatmap_day(value: Any) -> HeatmapDay:
    if isinstance(value, HeatmapDay):
        return value
    return HeatmapDay(date=value.get('date', ''), count=value.get('count', 0) or 0)
