"""
Report renderer: generate text/Markdown/CSV/JSON/HTML summaries from ImpactResult objects.
Markdown and HTML use the Jinja2 templates in report/templates.
"""

from typing import Any, Dict, List, Optional, Sequence
from functools import lru_cache
import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader, StrictUndefined, select_autoescape

from scoring.models import ImpactResult

TEMPLATES_DIR = os.path.join(os.path.dirname(__file__), 'templates')

CSV_HEADER = ['handle', 'base_score', 'confidence', 'adjusted_score', 'tier', 'flags', 'computed_at']

BREAKDOWN_LABELS = (
    ('commits', 'Commits'),
    ('prWeight', 'PR Weight'),
    ('reviews', 'Reviews'),
    ('issues', 'Issues'),
    ('streak', 'Streak'),
    ('collaboration', 'Collaboration'),
)


@lru_cache(maxsize=1)
def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATES_DIR),
        autoescape=select_autoescape(['html', 'xml', 'html.j2']),
        undefined=StrictUndefined,
        trim_blocks=True,
        lstrip_blocks=True,
    )


def _breakdown_rows(result: ImpactResult) -> List[Dict[str, Any]]:
    components = result.breakdown.as_components()
    return [{'label': label, 'value': components[key]} for key, label in BREAKDOWN_LABELS]


def render_text(result: ImpactResult) -> str:
    """Render a simple plain-text summary."""
    return str(result)


def render_markdown(result: ImpactResult) -> str:
    """Render a Markdown section for a single developer's result."""
    tmpl = _environment().get_template('summary.md.j2')
    return tmpl.render(result=result, breakdown=_breakdown_rows(result))


def render_leaderboard_markdown(results: Sequence[ImpactResult]) -> str:
    """Render a Markdown table of several results, highest adjusted score first."""
    ranked = sorted(results, key=lambda r: (-r.adjusted_score, r.handle))
    tmpl = _environment().get_template('leaderboard.md.j2')
    return tmpl.render(results=ranked)


def _csv_row(result: ImpactResult) -> list:
    return [
        result.handle,
        result.base_score,
        result.confidence,
        result.adjusted_score,
        result.tier,
        ';'.join(result.flags),
        result.computed_at,
    ]


def render_csv(results: Sequence[ImpactResult]) -> str:
    """Render a CSV with a header and one row per result."""
    output = io.StringIO()
    writer = csv.writer(output, lineterminator='\n')
    writer.writerow(CSV_HEADER)
    for r in results:
        writer.writerow(_csv_row(r))
    return output.getvalue()


def render_json(result: Optional[ImpactResult] = None, results: Optional[Sequence[ImpactResult]] = None) -> str:
    """Export one result (object) or several (array) in wire form with sorted keys."""
    if results is not None:
        return json.dumps([r.to_dict() for r in results], indent=2, sort_keys=True)
    if result is None:
        return ''
    return json.dumps(result.to_dict(), indent=2, sort_keys=True)


def render_html(
    result: Optional[ImpactResult] = None,
    results: Optional[Sequence[ImpactResult]] = None,
    generated_at: Optional[str] = None,
) -> str:
    """Render the HTML report for a single result or a list of results."""
    tmpl = _environment().get_template('report.html.j2')
    ranked = sorted(results, key=lambda r: (-r.adjusted_score, r.handle)) if results else []
    return tmpl.render(
        result=result,
        breakdown=_breakdown_rows(result) if result else [],
        results=ranked,
        generated_at=generated_at or '',
    )


def render(
    result: Optional[ImpactResult] = None,
    fmt: str = 'text',
    results: Optional[Sequence[ImpactResult]] = None,
    generated_at: Optional[str] = None,
) -> str:
    """Main render function.

    Callers pass either a single ImpactResult as the first arg or a list via results.
    Unknown formats fall back to text.
    """
    fmt_l = (fmt or 'text').lower()
    if fmt_l in ('json', 'js'):
        return render_json(result, results)
    if results is None and result is None:
        return ''
    if fmt_l in ('md', 'markdown'):
        return render_leaderboard_markdown(results) if results is not None else render_markdown(result)
    if fmt_l == 'csv':
        return render_csv(results if results is not None else [result])
    if fmt_l in ('html', 'htm'):
        return render_html(result, results, generated_at)
    if results is not None:
        return '\n\n'.join(render_text(r) for r in results)
    return render_text(result)
