"""
Lightweight rule-placement engine.

Re-scores a user's active tasks with the reduced formula, persists the new
scores and returns a single-pass ordering:

1. Position 1: best task that is quick or estimated at 20 minutes or less
2. Position 2: best liked task
3. Position 3: best urgent task, otherwise the best remaining task
4. The rest by score, with one good-ending task (quick, liked or short)
   held back and placed last when more than one task remains.
"""

import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, List, Mapping, Optional, Sequence, Tuple

from django.db import DatabaseError, transaction

from .models import Profile, Task
from .profiles import ratings_from_preferences
from .scoring import CategoryRating, calculate_shuffle_score

logger = logging.getLogger(__name__)


QUICK_TASK_MAX_MINUTES = 20

NO_TASKS_MESSAGE = "No active tasks to shuffle"


class TaskStoreError(Exception):
    """Reading or writing tasks failed."""


@dataclass
class ShuffleTask:
    id: str
    title: str
    is_liked: bool = False
    is_urgent: bool = False
    is_quick: bool = False
    estimated_minutes: Optional[int] = None
    category: Optional[str] = None
    score: int = 0
    position: int = 0

    @property
    def is_short(self) -> bool:
        # A zero or missing estimate is not a duration
        return bool(self.estimated_minutes) and self.estimated_minutes <= QUICK_TASK_MAX_MINUTES

    @property
    def is_good_ending(self) -> bool:
        return self.is_quick or self.is_liked or self.is_short

    def to_dict(self) -> Dict:
        return {
            'id': self.id,
            'title': self.title,
            'position': self.position,
            'score': self.score
        }


@dataclass
class ShuffleResult:
    message: str
    tasks: List[ShuffleTask] = field(default_factory=list)


def rescore_tasks(tasks: Sequence[ShuffleTask], preferences: Mapping[str, CategoryRating]) -> List[ShuffleTask]:
    """Recompute every task's score with the reduced formula."""
    for task in tasks:
        task.score = calculate_shuffle_score(
            task.category,
            liked=task.is_liked,
            quick=task.is_quick,
            urgent=task.is_urgent,
            preferences=preferences
        )
    return list(tasks)


def by_score(tasks: Sequence[ShuffleTask]) -> List[ShuffleTask]:
    return sorted(tasks, key=lambda t: t.score, reverse=True)


def take_best(
    available: List[ShuffleTask],
    predicate: Callable[[ShuffleTask], bool]
) -> Optional[ShuffleTask]:
    """Remove and return the highest-scoring task matching the predicate."""
    candidates = by_score([t for t in available if predicate(t)])
    if not candidates:
        return None
    available.remove(candidates[0])
    return candidates[0]


def set_aside_good_ending(remaining: List[ShuffleTask]) -> Tuple[List[ShuffleTask], Optional[ShuffleTask]]:
    """
    Split the score-ordered remainder into (body, ending).

    The ending is the best quick/liked/short task, held back only when more
    than one task remains.
    """
    if len(remaining) < 2:
        return remaining, None

    ending = next((t for t in remaining if t.is_good_ending), None)
    if ending is None:
        return remaining, None
    return [t for t in remaining if t is not ending], ending


def apply_rule_placement(tasks: Sequence[ShuffleTask]) -> List[ShuffleTask]:
    """Order scored tasks and assign positions 1..N."""
    available = list(tasks)
    result: List[ShuffleTask] = []

    for predicate in (
        lambda t: t.is_quick or t.is_short,
        lambda t: t.is_liked,
    ):
        task = take_best(available, predicate)
        if task is not None:
            result.append(task)

    third = take_best(available, lambda t: t.is_urgent)
    if third is None:
        third = take_best(available, lambda t: True)
    if third is not None:
        result.append(third)

    body, ending = set_aside_good_ending(by_score(available))
    result.extend(body)
    if ending is not None:
        result.append(ending)

    for position, task in enumerate(result, start=1):
        task.position = position
    return result


class DjangoTaskStore:
    """Task and preference access backed by the Django ORM."""

    def active_tasks(self, user_id: str) -> List[ShuffleTask]:
        try:
            rows = list(Task.objects.filter(user_id=user_id, list_location=Task.ACTIVE))
        except DatabaseError as exc:
            raise TaskStoreError(f"Could not load tasks for user {user_id}: {exc}") from exc

        return [
            ShuffleTask(
                id=str(row.pk),
                title=row.title,
                is_liked=row.is_liked,
                is_urgent=row.is_urgent,
                is_quick=row.is_quick,
                estimated_minutes=row.estimated_minutes,
                category=row.category or None,
                score=row.score
            )
            for row in rows
        ]

    def stored_profile(self, user_id: str) -> Optional[Profile]:
        try:
            return Profile.objects.filter(user_id=user_id).first()
        except DatabaseError as exc:
            raise TaskStoreError(f"Could not load preferences for user {user_id}: {exc}") from exc

    def category_preferences(self, user_id: str) -> Dict[str, CategoryRating]:
        profile = self.stored_profile(user_id)
        if profile is None:
            logger.warning(f"No stored preferences for user {user_id}; using defaults")
            return {}
        return ratings_from_preferences(profile.task_preferences)

    def profile_data(self, user_id: str) -> Optional[Dict]:
        """Stored profile as prioritize request data, or None when absent."""
        profile = self.stored_profile(user_id)
        if profile is None:
            logger.warning(f"No stored profile for user {user_id}; using defaults")
            return None
        return profile.to_profile_data()

    def save_scores(self, scores: Mapping[str, int]) -> None:
        try:
            with transaction.atomic():
                rows = list(Task.objects.filter(pk__in=list(scores)))
                for row in rows:
                    row.score = scores[str(row.pk)]
                Task.objects.bulk_update(rows, ['score'])
        except DatabaseError as exc:
            raise TaskStoreError(f"Could not save scores: {exc}") from exc


class TaskShuffler:
    """
    Fetch, re-score, persist and reorder a user's active tasks.

    The store is any object with active_tasks, category_preferences and
    save_scores; DjangoTaskStore by default.
    """

    def __init__(self, store=None):
        self.store = store or DjangoTaskStore()

    def shuffle(self, user_id: str) -> ShuffleResult:
        try:
            preferences = self.store.category_preferences(user_id)
            tasks = self.store.active_tasks(user_id)
            logger.info(f"Fetched {len(tasks)} active tasks for user {user_id}")

            if not tasks:
                return ShuffleResult(message=NO_TASKS_MESSAGE)

            rescore_tasks(tasks, preferences)
            self.store.save_scores({task.id: task.score for task in tasks})
            logger.info(f"Persisted scores for {len(tasks)} tasks")
        except TaskStoreError:
            logger.exception(f"Shuffle failed for user {user_id}")
            raise

        ordered = apply_rule_placement(tasks)
        logger.info(
            f"Shuffled {len(ordered)} tasks for user {user_id}: "
            + ", ".join(f"{t.position}. {t.title} ({t.score})" for t in ordered)
        )
        return ShuffleResult(
            message=f"Successfully shuffled {len(ordered)} tasks",
            tasks=ordered
        )
