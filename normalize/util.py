"""
Normalization utility helpers.
Turn already-fetched raw contribution payloads into Stats90d records, and merge a primary
record with supplemental (linked account) stats.
"""
from dataclasses import replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional
import logging
import math

from normalize.models import HeatmapDay, Stats90d

logger = logging.getLogger(__name__)

# per-PR weight ceiling and the cap on the summed weight across all merged PRs
PR_WEIGHT_CAP = 3.0
PR_WEIGHT_AGG_CAP = 120.0
# PRs touching fewer than this many files+lines get proportionally less weight
PR_FULL_SIZE_CHANGES = 10
# daily counts below this are not treated as a burst
BURST_DAILY_THRESHOLD = 30


def compute_pr_weight(additions: int, deletions: int, changed_files: int) -> float:
    """
    Size-aware weight of one merged PR, in 0..3.

    w = (0.5 + 0.25*ln(1+files) + 0.25*ln(1+additions+deletions)) * min(1, total_changes/10)
    where total_changes = files + additions + deletions.
    """
    total_changes = changed_files + additions + deletions
    size_multiplier = min(1.0, total_changes / PR_FULL_SIZE_CHANGES)
    raw_weight = 0.5 + 0.25 * math.log(1 + changed_files) + 0.25 * math.log(1 + additions + deletions)
    return min(raw_weight * size_multiplier, PR_WEIGHT_CAP)


def _section(raw: Dict[str, Any], key: str) -> Dict[str, Any]:
    value = raw.get(key) if isinstance(raw, dict) else None
    return value if isinstance(value, dict) else {}


def _flatten_heatmap(calendar: Dict[str, Any]) -> List[HeatmapDay]:
    days: List[HeatmapDay] = []
    for week in calendar.get('weeks') or []:
        for day in (week or {}).get('contributionDays') or []:
            days.append(HeatmapDay(date=day.get('date', ''), count=int(day.get('contributionCount') or 0)))
    return days


def _repo_commit_count(repo: Dict[str, Any]) -> int:
    ref = repo.get('defaultBranchRef') or {}
    history = (ref.get('target') or {}).get('history') or {}
    return int(history.get('totalCount') or 0)


def _count_active_days(heatmap: Iterable[HeatmapDay]) -> int:
    return sum(1 for d in heatmap if d.count > 0)


def build_stats_from_raw(raw: Dict[str, Any]) -> Stats90d:
    """
    Build a Stats90d from a raw GraphQL contribution payload.

    Only merged PRs count toward PR totals and line counts. max_commits_in_10_min is
    approximated from daily spikes: the busiest day's count when it reaches
    BURST_DAILY_THRESHOLD, else 0. fetched_at is stamped with the current time.
    Missing sections are treated as empty.
    """
    calendar = _section(raw, 'contributionCalendar')
    heatmap = _flatten_heatmap(calendar)

    merged_prs = [pr for pr in (_section(raw, 'pullRequests').get('nodes') or []) if pr and pr.get('merged')]
    pr_weight = sum(
        compute_pr_weight(pr.get('additions', 0) or 0, pr.get('deletions', 0) or 0, pr.get('changedFiles', 0) or 0)
        for pr in merged_prs
    )

    repo_commits = [c for c in (_repo_commit_count(r) for r in (_section(raw, 'repositories').get('nodes') or []) if r) if c > 0]
    total_repo_commits = sum(repo_commits)
    top_repo_share = max(repo_commits) / total_repo_commits if total_repo_commits > 0 else 0.0

    max_daily = max((d.count for d in heatmap), default=0)

    stats = Stats90d(
        handle=raw.get('login') or '',
        display_name=raw.get('name') or None,
        avatar_url=raw.get('avatarUrl'),
        commits_total=int(calendar.get('totalContributions') or 0),
        active_days=_count_active_days(heatmap),
        prs_merged_count=len(merged_prs),
        prs_merged_weight=min(pr_weight, PR_WEIGHT_AGG_CAP),
        reviews_submitted_count=int(_section(raw, 'reviews').get('totalCount') or 0),
        issues_closed_count=int(_section(raw, 'issues').get('totalCount') or 0),
        lines_added=sum(pr.get('additions', 0) or 0 for pr in merged_prs),
        lines_deleted=sum(pr.get('deletions', 0) or 0 for pr in merged_prs),
        repos_contributed=len(repo_commits),
        top_repo_share=top_repo_share,
        max_commits_in_10_min=max_daily if max_daily >= BURST_DAILY_THRESHOLD else 0,
        heatmap_data=tuple(heatmap),
        fetched_at=datetime.now(timezone.utc).isoformat(),
    )
    logger.debug("built stats for %s: %d merged PRs, %d active days", stats.handle, stats.prs_merged_count, stats.active_days)
    return stats


def _merge_heatmap(a: Iterable[HeatmapDay], b: Iterable[HeatmapDay]) -> List[HeatmapDay]:
    totals: Dict[str, int] = {}
    for day in list(a) + list(b):
        totals[day.date] = totals.get(day.date, 0) + day.count
    return [HeatmapDay(date=date, count=totals[date]) for date in sorted(totals)]


def _max_optional(a: Optional[float], b: Optional[float]) -> Optional[float]:
    if a is None:
        return b
    if b is None:
        return a
    return max(a, b)


def merge_stats(primary: Stats90d, supplemental: Stats90d) -> Stats90d:
    """
    Merge primary stats with supplemental stats from a linked account (e.g. an EMU).

    Counts are summed (PR weight capped at PR_WEIGHT_AGG_CAP), heatmaps merged by date with
    active_days recomputed, top_repo_share approximated from each side's commit-weighted
    share, burst and micro-commit signals take the max. Identity fields come from primary.
    The result is always marked has_supplemental_data=True.
    """
    heatmap = _merge_heatmap(primary.heatmap_data, supplemental.heatmap_data)
    # a side without daily data contributes no active days once the other side has some
    if heatmap:
        active_days = _count_active_days(heatmap)
    else:
        # no daily data to union; days may overlap so the sum would over-count
        active_days = max(primary.active_days, supplemental.active_days)
    total_commits = primary.commits_total + supplemental.commits_total
    if total_commits > 0:
        top_repo_share = max(
            primary.commits_total * primary.top_repo_share,
            supplemental.commits_total * supplemental.top_repo_share,
        ) / total_commits
    else:
        top_repo_share = 0.0

    return replace(
        primary,
        commits_total=total_commits,
        active_days=active_days,
        prs_merged_count=primary.prs_merged_count + supplemental.prs_merged_count,
        prs_merged_weight=min(primary.prs_merged_weight + supplemental.prs_merged_weight, PR_WEIGHT_AGG_CAP),
        reviews_submitted_count=primary.reviews_submitted_count + supplemental.reviews_submitted_count,
        issues_closed_count=primary.issues_closed_count + supplemental.issues_closed_count,
        lines_added=primary.lines_added + supplemental.lines_added,
        lines_deleted=primary.lines_deleted + supplemental.lines_deleted,
        repos_contributed=primary.repos_contributed + supplemental.repos_contributed,
        top_repo_share=top_repo_share,
        max_commits_in_10_min=max(primary.max_commits_in_10_min, supplemental.max_commits_in_10_min),
        micro_commit_ratio=_max_optional(primary.micro_commit_ratio, supplemental.micro_commit_ratio),
        heatmap_data=tuple(heatmap),
        has_supplemental_data=True,
    )
