"""
Profile derivation helpers.

Builds the engine's UserProfile from the loosely-typed data the client and
the profiles table carry: onboarding card answers, peak/lowest energy hours
and raw category ratings.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from .scoring import (
    CategoryRating,
    EnergyState,
    StartPreference,
    UserProfile,
    normalize_category_ratings,
)

logger = logging.getLogger(__name__)


# Onboarding card id -> task category
ONBOARDING_CATEGORY_MAP = {
    'creative_tasks': 'Creative',
    'analytical_tasks': 'Analytical',
    'social_tasks': 'Social',
    'physical_tasks': 'Physical',
    'routine_tasks': 'Routine',
    'learning_tasks': 'Learning',
    'planning_tasks': 'Planning',
}

ONBOARDING_ANSWERS = {
    'liked': CategoryRating.LOVED,
    'neutral': CategoryRating.NEUTRAL,
    'disliked': CategoryRating.DISLIKED,
}

HOURS_PER_DAY = 24


def convert_onboarding_preferences(task_preferences: Optional[Mapping[str, Any]]) -> Dict[str, CategoryRating]:
    """
    Map onboarding answers to category ratings.

    Every known category gets a rating; unanswered or unrecognised answers
    are Neutral. Unknown card ids are ignored.
    """
    task_preferences = task_preferences or {}
    ratings = {}

    for card_id, category in ONBOARDING_CATEGORY_MAP.items():
        answer = task_preferences.get(card_id)
        rating = ONBOARDING_ANSWERS.get(str(answer).lower()) if answer is not None else None
        ratings[category] = rating or CategoryRating.NEUTRAL

    return ratings


def is_onboarding_preferences(raw: Optional[Mapping[str, Any]]) -> bool:
    return bool(raw) and any(key in ONBOARDING_CATEGORY_MAP for key in raw)


def ratings_from_preferences(raw: Optional[Mapping[str, Any]]) -> Dict[str, CategoryRating]:
    """
    Category ratings from whatever the profile stores.

    Accepts either onboarding answers keyed by card id or a plain
    category -> rating mapping.
    """
    if is_onboarding_preferences(raw):
        return convert_onboarding_preferences(raw)
    return normalize_category_ratings(raw)


def parse_hour(value: Any) -> Optional[int]:
    """Hour of day from 'HH:MM', 'HH' or an int. None when unusable."""
    if value is None or isinstance(value, bool):
        return None

    if isinstance(value, int):
        hour = value
    else:
        text = str(value).strip()
        if not text:
            return None
        try:
            hour = int(text.split(':')[0])
        except ValueError:
            return None

    if 0 <= hour < HOURS_PER_DAY:
        return hour
    return None


def circular_hour_distance(a: int, b: int) -> int:
    difference = abs(a - b) % HOURS_PER_DAY
    return min(difference, HOURS_PER_DAY - difference)


def current_energy_state(
    peak_energy_time: Any,
    lowest_energy_time: Any,
    now: Optional[datetime] = None
) -> EnergyState:
    """
    Energy state for the current hour.

    High when the hour is at least as close to the peak hour as to the
    lowest hour, measured around the clock. Missing or invalid times mean
    high energy.
    """
    peak = parse_hour(peak_energy_time)
    lowest = parse_hour(lowest_energy_time)

    if peak is None or lowest is None:
        return EnergyState.HIGH

    hour = (now or datetime.now()).hour
    if circular_hour_distance(hour, peak) <= circular_hour_distance(hour, lowest):
        return EnergyState.HIGH
    return EnergyState.LOW


def parse_start_preference(value: Any) -> StartPreference:
    for preference in StartPreference:
        if value == preference.value:
            return preference
    return StartPreference.QUICK_WIN


def build_user_profile(raw: Optional[Mapping[str, Any]], now: Optional[datetime] = None) -> UserProfile:
    """
    Build a fully defaulted UserProfile from request or stored data.

    Recognised keys: startPreference, energyState, categoryRatings,
    taskPreferences, peakEnergyTime, lowestEnergyTime.
    """
    raw = raw or {}

    energy_value = raw.get('energyState')
    if energy_value in (EnergyState.LOW.value, EnergyState.HIGH.value):
        energy_state = EnergyState(energy_value)
    elif raw.get('peakEnergyTime') is not None and raw.get('lowestEnergyTime') is not None:
        energy_state = current_energy_state(raw['peakEnergyTime'], raw['lowestEnergyTime'], now)
    else:
        energy_state = EnergyState.HIGH

    if raw.get('categoryRatings'):
        ratings = normalize_category_ratings(raw['categoryRatings'])
    else:
        ratings = ratings_from_preferences(raw.get('taskPreferences'))

    profile = UserProfile(
        start_preference=parse_start_preference(raw.get('startPreference')),
        energy_state=energy_state,
        category_ratings=ratings
    )
    logger.debug(f"Built profile {profile.to_dict()}")
    return profile
