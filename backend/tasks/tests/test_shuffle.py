"""
Shuffle Tests
=============

Rule placement over persisted scores, the good-ending set-aside and the
Django-backed store.
"""

from unittest.mock import patch

from django.db import DatabaseError
from django.test import TestCase

from tasks.models import Profile, Task
from tasks.scoring import CategoryRating
from tasks.shuffle import (
    NO_TASKS_MESSAGE,
    DjangoTaskStore,
    ShuffleTask,
    TaskShuffler,
    TaskStoreError,
    apply_rule_placement,
    rescore_tasks,
    set_aside_good_ending,
)


def shuffle_task(task_id, category=None, minutes=None, **flags):
    return ShuffleTask(id=task_id, title=f"Task {task_id}", category=category, estimated_minutes=minutes, **flags)


class FakeStore:
    """In-memory store recording saved scores."""

    def __init__(self, tasks, preferences=None):
        self.tasks = tasks
        self.preferences = preferences or {}
        self.saved = None

    def active_tasks(self, user_id):
        return list(self.tasks)

    def category_preferences(self, user_id):
        return self.preferences

    def save_scores(self, scores):
        self.saved = dict(scores)


class RulePlacementTests(TestCase):
    """Tests for apply_rule_placement."""

    def test_quick_liked_urgent_plain(self):
        """A (quick), B (liked), C (urgent), D (plain) keep the rule order."""
        tasks = rescore_tasks([
            shuffle_task('D'),
            shuffle_task('C', is_urgent=True),
            shuffle_task('B', is_liked=True),
            shuffle_task('A', is_quick=True),
        ], {})
        ordered = apply_rule_placement(tasks)

        self.assertEqual([t.id for t in ordered], ['A', 'B', 'C', 'D'])
        self.assertEqual([t.position for t in ordered], [1, 2, 3, 4])
        self.assertEqual([t.score for t in ordered], [2, 3, 1, 0])

    def test_good_ending_is_set_aside(self):
        """One quick/liked/short task from the remainder goes last."""
        preferences = {'Work': CategoryRating.LOVED}
        tasks = rescore_tasks([
            shuffle_task('Q', is_quick=True),
            shuffle_task('L', 'Work', is_liked=True),
            shuffle_task('U', is_urgent=True),
            shuffle_task('X', 'Work'),
            shuffle_task('S', is_liked=True),
            shuffle_task('Z'),
        ], preferences)
        ordered = apply_rule_placement(tasks)

        self.assertEqual([t.id for t in ordered], ['Q', 'L', 'U', 'X', 'Z', 'S'])

    def test_short_estimate_counts_as_quick(self):
        """Twenty minutes or less qualifies for the opening slot."""
        tasks = rescore_tasks([
            shuffle_task('long', minutes=90, is_urgent=True),
            shuffle_task('short', minutes=20),
        ], {})
        ordered = apply_rule_placement(tasks)

        self.assertEqual(ordered[0].id, 'short')

    def test_zero_minutes_is_not_short(self):
        self.assertFalse(shuffle_task('a', minutes=0).is_short)
        self.assertFalse(shuffle_task('b', minutes=21).is_short)
        self.assertTrue(shuffle_task('c', minutes=5).is_short)

    def test_third_slot_falls_back_to_best_task(self):
        tasks = rescore_tasks([
            shuffle_task('low'),
            shuffle_task('loved', 'Work'),
            shuffle_task('quick', is_quick=True),
        ], {'Work': CategoryRating.LOVED})
        ordered = apply_rule_placement(tasks)

        self.assertEqual([t.id for t in ordered], ['quick', 'loved', 'low'])

    def test_set_aside_needs_two_tasks(self):
        single = [shuffle_task('a', is_liked=True)]

        self.assertEqual(set_aside_good_ending(single), (single, None))

    def test_set_aside_without_candidate(self):
        remaining = [shuffle_task('a'), shuffle_task('b')]
        body, ending = set_aside_good_ending(remaining)

        self.assertEqual([t.id for t in body], ['a', 'b'])
        self.assertIsNone(ending)

    def test_empty(self):
        self.assertEqual(apply_rule_placement([]), [])


class TaskShufflerTests(TestCase):
    """Tests for TaskShuffler with an in-memory store."""

    def test_no_active_tasks(self):
        store = FakeStore([])
        result = TaskShuffler(store).shuffle('user-1')

        self.assertEqual(result.message, NO_TASKS_MESSAGE)
        self.assertEqual(result.tasks, [])
        self.assertIsNone(store.saved)

    def test_scores_are_persisted_before_ordering(self):
        store = FakeStore(
            [shuffle_task('1', 'Work', is_liked=True), shuffle_task('2', is_quick=True)],
            {'Work': CategoryRating.DISLIKED}
        )
        result = TaskShuffler(store).shuffle('user-1')

        self.assertEqual(store.saved, {'1': 1, '2': 2})
        self.assertEqual([t.id for t in result.tasks], ['2', '1'])
        self.assertEqual(result.message, 'Successfully shuffled 2 tasks')

    def test_store_errors_propagate(self):
        class BrokenStore(FakeStore):
            def save_scores(self, scores):
                raise TaskStoreError('write failed')

        with self.assertLogs('tasks.shuffle', level='ERROR'):
            with self.assertRaises(TaskStoreError):
                TaskShuffler(BrokenStore([shuffle_task('1')])).shuffle('user-1')


class DjangoTaskStoreTests(TestCase):
    """Tests for the ORM-backed store."""

    def setUp(self):
        self.store = DjangoTaskStore()
        Profile.objects.create(
            user_id='user-1',
            task_preferences={'analytical_tasks': 'liked', 'routine_tasks': 'disliked'}
        )
        self.report = Task.objects.create(user_id='user-1', title='Write report', category='Analytical', is_quick=True)
        self.dishes = Task.objects.create(user_id='user-1', title='Dishes', category='Routine', is_liked=True)
        Task.objects.create(user_id='user-1', title='Someday', list_location='later')
        Task.objects.create(user_id='user-2', title='Not mine')

    def test_active_tasks_only(self):
        tasks = self.store.active_tasks('user-1')

        self.assertEqual({t.title for t in tasks}, {'Write report', 'Dishes'})
        self.assertEqual({t.id for t in tasks}, {str(self.report.pk), str(self.dishes.pk)})

    def test_onboarding_preferences_are_converted(self):
        preferences = self.store.category_preferences('user-1')

        self.assertEqual(preferences['Analytical'], CategoryRating.LOVED)
        self.assertEqual(preferences['Routine'], CategoryRating.DISLIKED)
        self.assertEqual(preferences['Creative'], CategoryRating.NEUTRAL)

    def test_missing_profile_warns(self):
        with self.assertLogs('tasks.shuffle', level='WARNING'):
            self.assertEqual(self.store.category_preferences('nobody'), {})

    def test_shuffle_saves_scores(self):
        result = TaskShuffler(self.store).shuffle('user-1')

        self.report.refresh_from_db()
        self.dishes.refresh_from_db()
        self.assertEqual(self.report.score, 3 + 2)
        self.assertEqual(self.dishes.score, -2 + 3)
        self.assertEqual([t.title for t in result.tasks], ['Write report', 'Dishes'])

    def test_database_errors_become_store_errors(self):
        with patch.object(Task.objects, 'filter', side_effect=DatabaseError('db down')):
            with self.assertRaises(TaskStoreError):
                self.store.active_tasks('user-1')

    def test_profile_data_for_stored_user(self):
        data = self.store.profile_data('user-1')

        self.assertEqual(data['startPreference'], 'quickWin')
        self.assertEqual(data['taskPreferences']['analytical_tasks'], 'liked')

    def test_profile_data_missing_user(self):
        with self.assertLogs('tasks.shuffle', level='WARNING'):
            self.assertIsNone(self.store.profile_data('nobody'))

    def test_profile_lookup_errors_become_store_errors(self):
        with patch.object(Profile.objects, 'filter', side_effect=DatabaseError('db down')):
            with self.assertRaises(TaskStoreError):
                self.store.profile_data('user-1')
