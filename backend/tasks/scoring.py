"""
Task Scoring for the Task Sequencer.

This module turns a task and a user profile into an integer score plus a
breakdown of where every point came from. Two formulas share the same
building blocks:

Full Formula (profile-driven ordering):
--------------------------------------
total_score = category_score +
              complexity_score +
              importance_score +
              tag_score +
              energy_adjust

Reduced Formula (persisted-score shuffle):
-----------------------------------------
score = category_score + tag_score      (liked +3, quick +2, urgent +1)

Category ratings may arrive as labels ("Loved", "Neutral", "Disliked") or as
numbers in [0, 1]. Anything unrecognised is treated as Neutral.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from numbers import Real
from typing import Any, Dict, Mapping, Optional

logger = logging.getLogger(__name__)


# ==================== Enumerations ====================

class ErrorCode(Enum):
    """Error codes for API responses."""
    SUCCESS = "SUCCESS"
    ERR_INVALID_PAYLOAD = "ERR_INVALID_PAYLOAD"
    ERR_MISSING_USER = "ERR_MISSING_USER"
    ERR_STORE_FAILURE = "ERR_STORE_FAILURE"


class Level(Enum):
    """Three-step scale used for inferred complexity and importance."""
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class StartPreference(Enum):
    """How the user likes to start a session."""
    QUICK_WIN = "quickWin"
    EAT_THE_FROG = "eatTheFrog"


class EnergyState(Enum):
    LOW = "low"
    HIGH = "high"


class CategoryRating(Enum):
    """Per-category user preference."""
    LOVED = "Loved"
    NEUTRAL = "Neutral"
    DISLIKED = "Disliked"


# ==================== Constants ====================

DEFAULT_CATEGORY = "Uncategorized"

LOVED_THRESHOLD = 0.8
NEUTRAL_THRESHOLD = 0.5

CATEGORY_POINTS = {
    CategoryRating.LOVED: 3,
    CategoryRating.NEUTRAL: 0,
    CategoryRating.DISLIKED: -2,
}

LEVEL_POINTS = {
    Level.LOW: -1,
    Level.MEDIUM: 1,
    Level.HIGH: 2,
}


# ==================== Task & Profile ====================

@dataclass(frozen=True)
class TaskTags:
    """User-set boolean tags. Liked and disliked may both be set."""
    liked: bool = False
    urgent: bool = False
    quick: bool = False
    disliked: bool = False

    def to_dict(self) -> Dict:
        return {
            'liked': self.liked,
            'urgent': self.urgent,
            'quick': self.quick,
            'disliked': self.disliked
        }


@dataclass(frozen=True)
class InferredAttributes:
    """Classifications supplied by an external categoriser."""
    complexity: Level = Level.MEDIUM
    importance: Level = Level.MEDIUM
    category: str = DEFAULT_CATEGORY

    def to_dict(self) -> Dict:
        return {
            'complexity': self.complexity.value,
            'importance': self.importance.value,
            'category': self.category
        }


@dataclass(frozen=True)
class TaskInput:
    """A task as handed to the ordering engine."""
    id: str
    text: str
    tags: TaskTags = field(default_factory=TaskTags)
    inferred: InferredAttributes = field(default_factory=InferredAttributes)


@dataclass(frozen=True)
class UserProfile:
    """
    Preferences that steer scoring and strategy selection.

    Built once per request and never mutated by the engine.
    """
    start_preference: StartPreference = StartPreference.QUICK_WIN
    energy_state: EnergyState = EnergyState.HIGH
    category_ratings: Mapping[str, CategoryRating] = field(default_factory=dict)

    def rating_for(self, category: Optional[str]) -> CategoryRating:
        """Rating for a category, Neutral when the user never rated it."""
        if category is None:
            return CategoryRating.NEUTRAL
        return self.category_ratings.get(category, CategoryRating.NEUTRAL)

    def to_dict(self) -> Dict:
        return {
            'startPreference': self.start_preference.value,
            'energyState': self.energy_state.value,
            'categoryRatings': {
                category: rating.value
                for category, rating in self.category_ratings.items()
            }
        }


# ==================== Score Output ====================

@dataclass
class ScoreBreakdown:
    """The five additive components behind a task's total score."""
    category_score: int = 0
    complexity_score: int = 0
    importance_score: int = 0
    tag_score: int = 0
    energy_adjust: int = 0

    @property
    def total(self) -> int:
        return (
            self.category_score +
            self.complexity_score +
            self.importance_score +
            self.tag_score +
            self.energy_adjust
        )

    def to_dict(self) -> Dict:
        return {
            'categoryScore': self.category_score,
            'complexityScore': self.complexity_score,
            'importanceScore': self.importance_score,
            'tagScore': self.tag_score,
            'energyAdjust': self.energy_adjust
        }


@dataclass
class ScoredTask:
    """A task with its score, the rule that placed it and its final rank."""
    task: TaskInput
    total_score: int
    score_breakdown: ScoreBreakdown
    rule_placement: str = ""
    position: int = 0

    @property
    def id(self) -> str:
        return self.task.id

    @property
    def tags(self) -> TaskTags:
        return self.task.tags

    @property
    def category(self) -> str:
        return self.task.inferred.category

    @property
    def complexity(self) -> Level:
        return self.task.inferred.complexity

    @property
    def importance(self) -> Level:
        return self.task.inferred.importance


# ==================== Shared Primitives ====================

@dataclass(frozen=True)
class TagWeights:
    """Points awarded per tag. Every set tag contributes independently."""
    liked: int = 0
    quick: int = 0
    urgent: int = 0
    disliked: int = 0

    def score(
        self,
        liked: bool = False,
        quick: bool = False,
        urgent: bool = False,
        disliked: bool = False
    ) -> int:
        total = 0
        if liked:
            total += self.liked
        if quick:
            total += self.quick
        if urgent:
            total += self.urgent
        if disliked:
            total += self.disliked
        return total


# Strategy presets
TAG_WEIGHTS = {
    StartPreference.QUICK_WIN: TagWeights(liked=3, quick=2, urgent=1, disliked=-3),
    StartPreference.EAT_THE_FROG: TagWeights(liked=2, quick=1, urgent=3, disliked=-2),
}

# The shuffle formula ignores the disliked tag
SHUFFLE_TAG_WEIGHTS = TagWeights(liked=3, quick=2, urgent=1)


def resolve_category_rating(value: Any) -> Optional[CategoryRating]:
    """
    Interpret a raw rating value.

    Accepts a rating label (case-insensitive) or a number in [0, 1].
    Returns None when the value is not recognised so the caller can log it.
    """
    if isinstance(value, CategoryRating):
        return value

    if isinstance(value, str):
        for rating in CategoryRating:
            if value.strip().lower() == rating.value.lower():
                return rating
        return None

    # bool is an int subclass but never a meaningful rating
    if isinstance(value, Real) and not isinstance(value, bool):
        number = float(value)
        if not 0.0 <= number <= 1.0:
            return None
        if number >= LOVED_THRESHOLD:
            return CategoryRating.LOVED
        if number >= NEUTRAL_THRESHOLD:
            return CategoryRating.NEUTRAL
        return CategoryRating.DISLIKED

    return None


def normalize_category_ratings(raw: Optional[Mapping[str, Any]]) -> Dict[str, CategoryRating]:
    """
    Convert a raw category -> rating mapping into CategoryRating values.

    Malformed entries fall back to Neutral and are logged as a recoverable
    anomaly.
    """
    ratings: Dict[str, CategoryRating] = {}
    if not raw:
        return ratings

    for category, value in raw.items():
        rating = resolve_category_rating(value)
        if rating is None:
            logger.warning(
                f"Unrecognised rating {value!r} for category '{category}'; treating as Neutral"
            )
            rating = CategoryRating.NEUTRAL
        ratings[str(category)] = rating
    return ratings


def category_score(rating: CategoryRating) -> int:
    return CATEGORY_POINTS[rating]


def level_score(level: Level) -> int:
    return LEVEL_POINTS[level]


# ==================== Full Formula ====================

def calculate_energy_adjust(task: TaskInput, profile: UserProfile) -> int:
    """
    Energy-state correction.

    Low energy favours quick and liked work and penalises high complexity
    (harder under quickWin). High energy favours urgent and complex work.
    """
    tags = task.tags
    is_complex = task.inferred.complexity == Level.HIGH
    adjust = 0

    if profile.energy_state == EnergyState.LOW:
        if tags.quick:
            adjust += 1
        if tags.liked:
            adjust += 1
        if is_complex:
            adjust -= 2 if profile.start_preference == StartPreference.QUICK_WIN else 1
    else:
        if tags.urgent:
            adjust += 1
        if is_complex:
            adjust += 1

    return adjust


def calculate_task_score(task: TaskInput, profile: UserProfile) -> ScoreBreakdown:
    """
    Score one task against one profile.

    Pure function: the same (task, profile) pair always produces the same
    breakdown, regardless of which other tasks are being ordered.
    """
    tags = task.tags
    weights = TAG_WEIGHTS[profile.start_preference]

    return ScoreBreakdown(
        category_score=category_score(profile.rating_for(task.inferred.category)),
        complexity_score=level_score(task.inferred.complexity),
        importance_score=level_score(task.inferred.importance),
        tag_score=weights.score(
            liked=tags.liked,
            quick=tags.quick,
            urgent=tags.urgent,
            disliked=tags.disliked
        ),
        energy_adjust=calculate_energy_adjust(task, profile)
    )


def score_task(task: TaskInput, profile: UserProfile) -> ScoredTask:
    """Wrap a task with its full-formula score, unplaced."""
    breakdown = calculate_task_score(task, profile)
    return ScoredTask(
        task=task,
        total_score=breakdown.total,
        score_breakdown=breakdown
    )


# ==================== Reduced Formula ====================

def calculate_shuffle_score(
    category: Optional[str],
    liked: bool,
    quick: bool,
    urgent: bool,
    preferences: Mapping[str, CategoryRating]
) -> int:
    """
    Reduced score used by the shuffle engine.

    Only the category rating and the liked/quick/urgent tags count; there are
    no complexity, importance or energy terms.
    """
    rating = preferences.get(category, CategoryRating.NEUTRAL) if category else CategoryRating.NEUTRAL
    return category_score(rating) + SHUFFLE_TAG_WEIGHTS.score(
        liked=liked,
        quick=quick,
        urgent=urgent
    )


def scored_task_to_dict(task: ScoredTask) -> Dict:
    """Convert a ScoredTask to a dictionary for JSON serialization."""
    return {
        'id': task.task.id,
        'text': task.task.text,
        'tags': task.task.tags.to_dict(),
        'inferred': task.task.inferred.to_dict(),
        'totalScore': task.total_score,
        'scoreBreakdown': task.score_breakdown.to_dict(),
        'rulePlacement': task.rule_placement,
        'position': task.position
    }
