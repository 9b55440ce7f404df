"""
Task Sequencing Engine.

Takes scored tasks and produces one recommended order. Two strategies are
available and picked from the profile's start preference:

- QuickWin: four placement phases that build momentum with easy wins first,
  then alternate liked and non-liked work.
- EatTheFrog: bundles tasks by category and works through the categories in
  blocks of 3-4, hardest/most urgent first inside each category.

Both strategies finish with the same end rule: a session should not end on a
high-complexity task when an easier one is available to swap in.

Randomness:
-----------
The bundling draw (QuickWin) and the block size (EatTheFrog) are the only
non-deterministic choices. They go through an injected random source, any
object exposing ``random()`` and ``randint(a, b)`` such as ``random.Random``.
Pass a seeded instance to replay an order exactly.
"""

import logging
import random
from collections import OrderedDict, deque
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Sequence

from .scoring import (
    CategoryRating,
    Level,
    ScoredTask,
    StartPreference,
    TaskInput,
    UserProfile,
    score_task,
)

logger = logging.getLogger(__name__)


# QuickWin phase sizes
MOMENTUM_SLOTS = 2
EARLY_PHASE_SLOTS = 2
MAX_CONSECUTIVE_NON_LIKED = 2
BUNDLE_PROBABILITY = 0.3

# EatTheFrog block size range (inclusive)
CATEGORY_BLOCK_SIZES = (3, 4)

LEVEL_WEIGHT = {
    Level.LOW: 0,
    Level.MEDIUM: 1,
    Level.HIGH: 2,
}


@dataclass
class OrderingResult:
    ordered_tasks: List[ScoredTask]
    strategy_used: StartPreference
    profile: UserProfile


def rank_by_score(
    tasks: Sequence[ScoredTask],
    key: Optional[Callable[[ScoredTask], int]] = None
) -> List[ScoredTask]:
    """Highest score first. Equal scores keep their input order."""
    if key is None:
        key = lambda t: t.total_score
    return sorted(tasks, key=key, reverse=True)


def best_match(
    pool: Sequence[ScoredTask],
    predicate: Callable[[ScoredTask], bool]
) -> Optional[ScoredTask]:
    """Highest-scoring task in the pool satisfying the predicate."""
    matches = [t for t in pool if predicate(t)]
    if not matches:
        return None
    return rank_by_score(matches)[0]


class QuickWinSequencer:
    """
    Momentum-oriented ordering.

    Phases, in order:
    1. MomentumBuffer: up to two quick, low-complexity tasks; short slots are
       filled with liked tasks of low or medium complexity.
    2. Booster: the best liked task, else the best quick or Neutral-category task.
    3. EarlyPhase: up to two tasks preferring quick/liked, with disliked
       high-complexity tasks nudged down by one point.
    4. AlternationPhase: never more than two non-liked tasks in a row, with an
       occasional same-category bundle.
    """

    strategy = StartPreference.QUICK_WIN

    def __init__(self, rng):
        self.rng = rng

    def sequence(self, scored: Sequence[ScoredTask], profile: UserProfile) -> List[ScoredTask]:
        ordered: List[ScoredTask] = []
        pool = list(scored)

        self._momentum_buffer(ordered, pool)
        self._booster(ordered, pool, profile)
        self._early_phase(ordered, pool)
        self._alternation_phase(ordered, pool)

        return ordered

    def _place(self, ordered: List[ScoredTask], pool: List[ScoredTask], task: ScoredTask, label: str) -> None:
        task.position = len(ordered) + 1
        task.rule_placement = label
        ordered.append(task)
        pool.remove(task)
        logger.debug(f"Placed {task.id} at {task.position} via {label}")

    def _momentum_buffer(self, ordered, pool) -> None:
        quick_easy = rank_by_score([
            t for t in pool
            if t.tags.quick and t.complexity == Level.LOW
        ])
        for task in quick_easy[:MOMENTUM_SLOTS]:
            self._place(ordered, pool, task, f"MomentumBuffer ({len(ordered) + 1})")

        open_slots = MOMENTUM_SLOTS - len(ordered)
        if open_slots <= 0:
            return

        liked_manageable = rank_by_score([
            t for t in pool
            if t.tags.liked and t.complexity in (Level.LOW, Level.MEDIUM)
        ])
        for task in liked_manageable[:open_slots]:
            self._place(ordered, pool, task, f"MomentumBuffer Fill ({len(ordered) + 1})")

    def _booster(self, ordered, pool, profile: UserProfile) -> None:
        booster = best_match(pool, lambda t: t.tags.liked)
        if booster is None:
            booster = best_match(
                pool,
                lambda t: t.tags.quick or profile.rating_for(t.category) == CategoryRating.NEUTRAL
            )
        if booster is not None:
            self._place(ordered, pool, booster, "Booster")

    def _early_phase(self, ordered, pool) -> None:
        def adjusted(task: ScoredTask) -> int:
            if task.tags.disliked and task.complexity == Level.HIGH:
                return task.total_score - 1
            return task.total_score

        candidates = sorted(
            pool,
            key=lambda t: (t.tags.quick or t.tags.liked, adjusted(t)),
            reverse=True
        )
        for task in candidates[:EARLY_PHASE_SLOTS]:
            self._place(ordered, pool, task, f"EarlyPhase ({len(ordered) + 1})")

    def _alternation_phase(self, ordered, pool) -> None:
        consecutive_non_liked = 0
        last_category = None

        while pool:
            next_task = None

            if consecutive_non_liked >= MAX_CONSECUTIVE_NON_LIKED:
                next_task = best_match(pool, lambda t: t.tags.liked)

            if next_task is None:
                same_category = [t for t in pool if t.category == last_category]
                if same_category and self.rng.random() < BUNDLE_PROBABILITY:
                    next_task = rank_by_score(same_category)[0]
                else:
                    next_task = rank_by_score(pool)[0]

            self._place(ordered, pool, next_task, f"AlternationPhase ({len(ordered) + 1})")

            if next_task.tags.liked:
                consecutive_non_liked = 0
            else:
                consecutive_non_liked += 1
            last_category = next_task.category


class EatTheFrogSequencer:
    """
    Category-bundling ordering.

    Categories are visited round-robin, best average score first. Each visit
    takes a block of 3 or 4 tasks from that category's list, which is sorted
    by a local weight: urgent (3) plus importance (0-2) plus complexity (0-2).
    """

    strategy = StartPreference.EAT_THE_FROG

    def __init__(self, rng):
        self.rng = rng

    @staticmethod
    def urgency_weight(task: ScoredTask) -> int:
        return (
            (3 if task.tags.urgent else 0) +
            LEVEL_WEIGHT[task.importance] +
            LEVEL_WEIGHT[task.complexity]
        )

    def group_by_category(self, scored: Sequence[ScoredTask]) -> "OrderedDict[str, List[ScoredTask]]":
        groups: "OrderedDict[str, List[ScoredTask]]" = OrderedDict()
        for task in scored:
            groups.setdefault(task.category, []).append(task)

        for category, members in groups.items():
            groups[category] = sorted(
                members,
                key=lambda t: (self.urgency_weight(t), t.total_score),
                reverse=True
            )
        return groups

    def category_order(self, groups: Dict[str, List[ScoredTask]]) -> List[str]:
        def average(category: str) -> float:
            members = groups[category]
            return sum(t.total_score for t in members) / len(members)

        return sorted(groups, key=average, reverse=True)

    def sequence(self, scored: Sequence[ScoredTask], profile: UserProfile) -> List[ScoredTask]:
        groups = self.group_by_category(scored)
        rotation = self.category_order(groups)
        queues = {category: deque(groups[category]) for category in rotation}

        ordered: List[ScoredTask] = []
        index = 0

        while rotation:
            category = rotation[index]
            queue = queues[category]
            block_size = self.rng.randint(*CATEGORY_BLOCK_SIZES)

            for _ in range(block_size):
                if not queue:
                    break
                task = queue.popleft()
                task.position = len(ordered) + 1
                task.rule_placement = f"EatTheFrog-{category} ({task.position})"
                ordered.append(task)

            logger.debug(f"EatTheFrog block for '{category}' (size {block_size}), {len(queue)} left")

            if queue:
                index = (index + 1) % len(rotation)
            else:
                rotation.pop(index)
                if rotation:
                    index %= len(rotation)

        return ordered


def is_easy_ending(task: ScoredTask, profile: UserProfile) -> bool:
    if task.complexity == Level.LOW:
        return True
    return (
        task.complexity == Level.MEDIUM and
        profile.rating_for(task.category) == CategoryRating.NEUTRAL
    )


def enforce_end_rule(ordered: List[ScoredTask], profile: UserProfile) -> List[ScoredTask]:
    """
    Keep a session from ending on a high-complexity task.

    The last task is swapped with the first easy task (low complexity, or
    medium complexity in a Neutral category). The scan starts at position 2
    so the quick, easy opener chosen for momentum stays first; the opener is
    only taken when no other easy task exists. Only positions change.
    """
    if not ordered or ordered[-1].complexity != Level.HIGH:
        return ordered

    last = len(ordered) - 1
    candidates = [i for i in range(1, last) if is_easy_ending(ordered[i], profile)]
    if not candidates and last > 0 and is_easy_ending(ordered[0], profile):
        candidates = [0]

    if candidates:
        index = candidates[0]
        ordered[index], ordered[last] = ordered[last], ordered[index]
        logger.debug(f"End rule swapped {ordered[last].id} to the end")

    for position, task in enumerate(ordered, start=1):
        task.position = position
    return ordered


SEQUENCERS = {
    StartPreference.QUICK_WIN: QuickWinSequencer,
    StartPreference.EAT_THE_FROG: EatTheFrogSequencer,
}


def select_sequencer(profile: UserProfile, rng):
    """Build the sequencer matching the profile's start preference."""
    return SEQUENCERS[profile.start_preference](rng)


def order_tasks(
    tasks: Sequence[TaskInput],
    profile: UserProfile,
    rng=None
) -> OrderingResult:
    """
    Score, sequence and finish a list of tasks for one profile.

    Args:
        tasks: Tasks with unique ids.
        profile: Fully defaulted user profile.
        rng: Random source for the two non-deterministic choices. A fresh
             ``random.Random()`` is used when omitted.

    Returns:
        OrderingResult whose tasks carry positions 1..N.
    """
    if rng is None:
        rng = random.Random()

    if not tasks:
        return OrderingResult(ordered_tasks=[], strategy_used=profile.start_preference, profile=profile)

    scored = [score_task(task, profile) for task in tasks]
    sequencer = select_sequencer(profile, rng)
    ordered = enforce_end_rule(sequencer.sequence(scored, profile), profile)

    logger.info(
        f"Ordered {len(ordered)} tasks with {sequencer.strategy.value} "
        f"(energy={profile.energy_state.value})"
    )

    return OrderingResult(
        ordered_tasks=ordered,
        strategy_used=sequencer.strategy,
        profile=profile
    )
