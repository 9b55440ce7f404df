"""
Scoring Tests
=============

Covers the full formula (category, complexity, importance, tags, energy),
the reduced shuffle formula and category rating normalisation.
"""

from django.test import TestCase

from tasks.scoring import (
    CategoryRating,
    EnergyState,
    StartPreference,
    UserProfile,
    calculate_energy_adjust,
    calculate_shuffle_score,
    calculate_task_score,
    normalize_category_ratings,
    resolve_category_rating,
    score_task,
    scored_task_to_dict,
)

from .helpers import make_task


class FullFormulaTests(TestCase):
    """Tests for calculate_task_score."""

    def setUp(self):
        self.quick_win_high = UserProfile(
            start_preference=StartPreference.QUICK_WIN,
            energy_state=EnergyState.HIGH
        )

    def test_liked_quick_medium_task_totals_seven(self):
        """Liked + quick, medium/medium, Neutral category under quickWin/high energy scores 7."""
        task = make_task('t1', liked=True, quick=True)
        breakdown = calculate_task_score(task, self.quick_win_high)

        self.assertEqual(breakdown.category_score, 0)
        self.assertEqual(breakdown.complexity_score, 1)
        self.assertEqual(breakdown.importance_score, 1)
        self.assertEqual(breakdown.tag_score, 5)
        self.assertEqual(breakdown.energy_adjust, 0)
        self.assertEqual(breakdown.total, 7)

    def test_category_ratings(self):
        """Loved adds 3, Disliked subtracts 2, unrated is Neutral."""
        profile = UserProfile(category_ratings={
            'Work': CategoryRating.LOVED,
            'Chores': CategoryRating.DISLIKED,
        })

        self.assertEqual(calculate_task_score(make_task('a', 'Work'), profile).category_score, 3)
        self.assertEqual(calculate_task_score(make_task('b', 'Chores'), profile).category_score, -2)
        self.assertEqual(calculate_task_score(make_task('c', 'Garden'), profile).category_score, 0)

    def test_level_scores(self):
        """Low is -1, medium +1, high +2 for both complexity and importance."""
        low = calculate_task_score(make_task('a', complexity='low', importance='low'), self.quick_win_high)
        high = calculate_task_score(make_task('b', complexity='high', importance='high'), self.quick_win_high)

        self.assertEqual((low.complexity_score, low.importance_score), (-1, -1))
        self.assertEqual((high.complexity_score, high.importance_score), (2, 2))

    def test_eat_the_frog_tag_weights(self):
        """eatTheFrog weights urgent highest."""
        profile = UserProfile(start_preference=StartPreference.EAT_THE_FROG)
        task = make_task('a', liked=True, quick=True, urgent=True, disliked=True)

        self.assertEqual(calculate_task_score(task, profile).tag_score, 2 + 1 + 3 - 2)

    def test_liked_and_disliked_both_count(self):
        """Both tags may be set; their weights simply add up."""
        task = make_task('a', liked=True, disliked=True)

        self.assertEqual(calculate_task_score(task, self.quick_win_high).tag_score, 0)

    def test_low_energy_adjustments(self):
        """Low energy rewards quick and liked and penalises high complexity by strategy."""
        task = make_task('a', complexity='high', liked=True, quick=True)
        quick_win = UserProfile(start_preference=StartPreference.QUICK_WIN, energy_state=EnergyState.LOW)
        frog = UserProfile(start_preference=StartPreference.EAT_THE_FROG, energy_state=EnergyState.LOW)

        self.assertEqual(calculate_energy_adjust(task, quick_win), 1 + 1 - 2)
        self.assertEqual(calculate_energy_adjust(task, frog), 1 + 1 - 1)

    def test_high_energy_adjustments(self):
        """High energy rewards urgent and complex work."""
        task = make_task('a', complexity='high', urgent=True, quick=True)

        self.assertEqual(calculate_energy_adjust(task, self.quick_win_high), 2)

    def test_full_breakdown_low_energy_frog(self):
        """Loved urgent high-complexity task, low importance, eatTheFrog at low energy."""
        profile = UserProfile(
            start_preference=StartPreference.EAT_THE_FROG,
            energy_state=EnergyState.LOW,
            category_ratings={'Work': CategoryRating.LOVED}
        )
        task = make_task('a', 'Work', complexity='high', importance='low', urgent=True)

        self.assertEqual(calculate_task_score(task, profile).total, 3 + 2 - 1 + 3 - 1)

    def test_score_is_independent_of_other_tasks(self):
        """Scoring the same task twice gives the same breakdown."""
        task = make_task('a', urgent=True)
        first = score_task(task, self.quick_win_high)
        second = score_task(task, self.quick_win_high)

        self.assertEqual(first.score_breakdown, second.score_breakdown)
        self.assertEqual(first.total_score, second.total_score)

    def test_scored_task_to_dict(self):
        """Serialised tasks use camelCase keys."""
        result = scored_task_to_dict(score_task(make_task('a', liked=True), self.quick_win_high))

        self.assertEqual(result['id'], 'a')
        self.assertEqual(result['totalScore'], 5)
        self.assertEqual(result['scoreBreakdown']['tagScore'], 3)
        self.assertEqual(result['inferred']['complexity'], 'medium')
        self.assertIn('rulePlacement', result)


class CategoryRatingTests(TestCase):
    """Tests for rating resolution and normalisation."""

    def test_labels_are_case_insensitive(self):
        self.assertEqual(resolve_category_rating('Loved'), CategoryRating.LOVED)
        self.assertEqual(resolve_category_rating('disliked'), CategoryRating.DISLIKED)
        self.assertEqual(resolve_category_rating(' NEUTRAL '), CategoryRating.NEUTRAL)

    def test_numeric_thresholds(self):
        """>= 0.8 Loved, >= 0.5 Neutral, below that Disliked."""
        self.assertEqual(resolve_category_rating(0.8), CategoryRating.LOVED)
        self.assertEqual(resolve_category_rating(1), CategoryRating.LOVED)
        self.assertEqual(resolve_category_rating(0.7), CategoryRating.NEUTRAL)
        self.assertEqual(resolve_category_rating(0.5), CategoryRating.NEUTRAL)
        self.assertEqual(resolve_category_rating(0.2), CategoryRating.DISLIKED)

    def test_malformed_values_are_unrecognised(self):
        for value in ('meh', 1.5, -0.1, True, None, ['Loved']):
            self.assertIsNone(resolve_category_rating(value), value)

    def test_normalize_logs_and_falls_back_to_neutral(self):
        """Malformed ratings are treated as Neutral with a warning."""
        with self.assertLogs('tasks.scoring', level='WARNING') as logs:
            ratings = normalize_category_ratings({'Work': 'Loved', 'Home': 'sometimes', 'Gym': 0.1})

        self.assertEqual(ratings, {
            'Work': CategoryRating.LOVED,
            'Home': CategoryRating.NEUTRAL,
            'Gym': CategoryRating.DISLIKED,
        })
        self.assertEqual(len(logs.output), 1)
        self.assertIn('Home', logs.output[0])

    def test_normalize_empty(self):
        self.assertEqual(normalize_category_ratings(None), {})
        self.assertEqual(normalize_category_ratings({}), {})


class ShuffleScoreTests(TestCase):
    """Tests for the reduced formula."""

    def test_loved_with_all_tags(self):
        preferences = {'Work': CategoryRating.LOVED}

        self.assertEqual(calculate_shuffle_score('Work', True, True, True, preferences), 3 + 3 + 2 + 1)

    def test_unknown_or_missing_category_is_neutral(self):
        self.assertEqual(calculate_shuffle_score('Garden', False, True, False, {}), 2)
        self.assertEqual(calculate_shuffle_score(None, False, False, True, {}), 1)

    def test_disliked_category(self):
        preferences = {'Chores': CategoryRating.DISLIKED}

        self.assertEqual(calculate_shuffle_score('Chores', False, False, False, preferences), -2)
