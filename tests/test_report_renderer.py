import json
import unittest

from normalize.models import Stats90d
from report.renderer import render, render_csv, render_html, render_markdown
from scoring import compute_impact


def _result(handle='alice', **overrides):
    fields = dict(
        handle=handle,
        commits_total=50,
        active_days=30,
        prs_merged_weight=10,
        reviews_submitted_count=15,
        issues_closed_count=5,
        repos_contributed=3,
    )
    fields.update(overrides)
    return compute_impact(Stats90d(**fields))


class TestRenderer(unittest.TestCase):
    def test_markdown_and_csv(self):
        r = _result()
        md = render_markdown(r)
        self.assertIn('# Impact Summary: alice', md)
        self.assertIn('Adjusted Score: **58** (Solid)', md)
        self.assertIn('| PR Weight |', md)
        self.assertNotIn('Confidence Notes', md)
        csv = render_csv([r])
        lines = csv.splitlines()
        self.assertEqual(lines[0], 'handle,base_score,confidence,adjusted_score,tier,flags,computed_at')
        self.assertTrue(lines[1].startswith('alice,58,100,58,Solid,,'))

    def test_markdown_lists_penalties(self):
        r = _result(max_commits_in_10_min=20, has_supplemental_data=True)
        md = render_markdown(r)
        self.assertIn('Confidence Notes', md)
        self.assertIn('`burst_activity` (-15)', md)
        self.assertIn('`supplemental_unverified` (-5)', md)

    def test_csv_joins_flags(self):
        r = _result(max_commits_in_10_min=20, has_supplemental_data=True)
        row = render_csv([r]).splitlines()[1]
        self.assertIn('burst_activity;supplemental_unverified', row)

    def test_render_html_single(self):
        html = render_html(_result(), generated_at='2025-01-01T00:00:00+00:00')
        self.assertIn('Impact Summary: alice', html)
        self.assertIn('<td>Streak</td><td>0.33</td>', html)
        self.assertIn('Generated at 2025-01-01T00:00:00+00:00', html)

    def test_render_html_escapes_handle(self):
        html = render_html(_result(handle='<script>x</script>'))
        self.assertNotIn('<script>x</script>', html)
        self.assertIn('&lt;script&gt;', html)

    def test_render_html_empty(self):
        self.assertIn('No results available.', render_html())

    def test_render_helper(self):
        r = _result()
        self.assertIn('Tier: Solid', render(r, fmt='text'))
        self.assertIsInstance(render(r, fmt='md'), str)
        self.assertIsInstance(render(r, fmt='csv'), str)
        self.assertIsInstance(render(r, fmt='html'), str)
        self.assertEqual(render(r, fmt='unknown'), render(r, fmt='text'))

    def test_render_json_single(self):
        r = _result()
        data = json.loads(render(r, fmt='json'))
        self.assertEqual(data['handle'], 'alice')
        self.assertEqual(data['adjustedScore'], 58)
        self.assertEqual(data['breakdown']['streak'], 30 / 90)

    def test_render_nothing(self):
        self.assertEqual(render(None, fmt='md'), '')
        self.assertEqual(render(None, fmt='json'), '')
        self.assertEqual(render(fmt='json', results=[]), '[]')


if __name__ == '__main__':
    unittest.main()
