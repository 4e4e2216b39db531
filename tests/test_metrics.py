import math
import unittest

from normalize.models import Stats90d
from scoring.metrics import (
    compute_adjusted_score,
    compute_base_score,
    compute_breakdown,
    get_tier,
)
from scoring.utils import CAPS, DEFAULT_WEIGHTS


def _half_up(x):
    return math.floor(x + 0.5)


class TestBaseScore(unittest.TestCase):
    def test_all_zero(self):
        score, breakdown = compute_base_score(Stats90d(handle='z'))
        self.assertEqual(score, 0)
        self.assertEqual(breakdown.as_components(), {
            'commits': 0, 'prWeight': 0, 'reviews': 0, 'issues': 0, 'streak': 0, 'collaboration': 0,
        })

    def test_all_at_cap(self):
        stats = Stats90d(
            handle='max',
            commits_total=200,
            prs_merged_weight=40,
            reviews_submitted_count=60,
            issues_closed_count=30,
            active_days=90,
            repos_contributed=10,
        )
        score, breakdown = compute_base_score(stats)
        self.assertEqual(score, 100)
        for value in breakdown.as_components().values():
            self.assertEqual(value, 1.0)

    def test_above_cap_saturates(self):
        stats = Stats90d(
            handle='huge',
            commits_total=5000,
            prs_merged_weight=120,
            reviews_submitted_count=900,
            issues_closed_count=400,
            active_days=120,
            repos_contributed=75,
        )
        self.assertEqual(compute_base_score(stats)[0], 100)

    def test_known_mid_range_input(self):
        stats = Stats90d(
            handle='mid',
            commits_total=50,
            prs_merged_weight=10,
            reviews_submitted_count=15,
            issues_closed_count=5,
            active_days=30,
            repos_contributed=3,
        )
        score, b = compute_base_score(stats)
        self.assertEqual(b.commits, math.log(51) / math.log(201))
        self.assertEqual(b.pr_weight, math.log(11) / math.log(41))
        self.assertEqual(b.reviews, math.log(16) / math.log(61))
        self.assertEqual(b.issues, math.log(6) / math.log(31))
        self.assertEqual(b.streak, 30 / 90)
        self.assertEqual(b.collaboration, 3 / 10)
        expected = _half_up(100 * (
            0.12 * b.commits
            + 0.33 * b.pr_weight
            + 0.22 * b.reviews
            + 0.10 * b.issues
            + 0.13 * b.streak
            + 0.10 * b.collaboration
        ))
        self.assertEqual(score, expected)
        self.assertEqual(score, 58)

    def test_breakdown_components_in_unit_range(self):
        stats = Stats90d(handle='x', commits_total=13, prs_merged_weight=2.5, reviews_submitted_count=70,
                         issues_closed_count=1, active_days=95, repos_contributed=-1)
        for value in compute_breakdown(stats).as_components().values():
            self.assertGreaterEqual(value, 0.0)
            self.assertLessEqual(value, 1.0)

    def test_streak_and_collaboration_are_linear(self):
        b = compute_breakdown(Stats90d(handle='x', active_days=45, repos_contributed=5))
        self.assertEqual(b.streak, 0.5)
        self.assertEqual(b.collaboration, 0.5)

    def test_custom_weights(self):
        weights = {k: 0.0 for k in DEFAULT_WEIGHTS}
        weights['commits'] = 1.0
        score, b = compute_base_score(Stats90d(handle='c', commits_total=200, reviews_submitted_count=60), weights)
        self.assertEqual(score, 100)
        score, _ = compute_base_score(Stats90d(handle='c', reviews_submitted_count=60), weights)
        self.assertEqual(score, 0)

    def test_rejects_weights_that_do_not_sum_to_one(self):
        stats = Stats90d(handle='c', commits_total=200)
        with self.assertRaises(ValueError):
            compute_base_score(stats, {**DEFAULT_WEIGHTS, 'commits': 1.0})

    def test_rejects_empty_weights(self):
        with self.assertRaises(ValueError):
            compute_base_score(Stats90d(handle='c', commits_total=200), {})

    def test_rejects_partial_or_negative_weights(self):
        with self.assertRaises(ValueError):
            compute_base_score(Stats90d(handle='c'), {'commits': 1.0})
        weights = {k: 0.0 for k in DEFAULT_WEIGHTS}
        weights.update(commits=2.0, reviews=-1.0)
        with self.assertRaises(ValueError):
            compute_base_score(Stats90d(handle='c', commits_total=200), weights)

    def test_default_weights_are_read_only(self):
        with self.assertRaises(TypeError):
            DEFAULT_WEIGHTS['commits'] = 0.5
        with self.assertRaises(TypeError):
            CAPS['commits'] = 10
        score, _ = compute_base_score(Stats90d(handle='c', commits_total=200))
        self.assertEqual(score, 12)

    def test_score_is_integer(self):
        score, _ = compute_base_score(Stats90d(handle='r', commits_total=7, active_days=3))
        self.assertIsInstance(score, int)


class TestAdjustedScore(unittest.TestCase):
    def test_full_confidence_keeps_base(self):
        for base in (0, 1, 39, 58, 100):
            self.assertEqual(compute_adjusted_score(base, 100), base)

    def test_low_confidence_reduces(self):
        self.assertEqual(compute_adjusted_score(80, 50), 74)
        self.assertLess(compute_adjusted_score(80, 70), 80)

    def test_zero_base(self):
        self.assertEqual(compute_adjusted_score(0, 50), 0)

    def test_rounds_to_integer(self):
        adjusted = compute_adjusted_score(77, 85)
        self.assertIsInstance(adjusted, int)

    def test_never_exceeds_base(self):
        for base in range(0, 101):
            for confidence in range(50, 101):
                adjusted = compute_adjusted_score(base, confidence)
                self.assertLessEqual(adjusted, base)
                self.assertGreaterEqual(adjusted, 0)


class TestTier(unittest.TestCase):
    def test_boundaries(self):
        cases = {
            0: 'Emerging', 39: 'Emerging',
            40: 'Solid', 69: 'Solid',
            70: 'High', 84: 'High',
            85: 'Elite', 100: 'Elite',
        }
        for score, tier in cases.items():
            self.assertEqual(get_tier(score), tier, score)


if __name__ == '__main__':
    unittest.main()
