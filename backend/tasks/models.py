"""
Models for the Task Sequencer.

Profile holds the per-user preferences the ordering engine reads; Task holds
the user's tasks together with the tags and inferred attributes the engine
scores, plus the persisted shuffle score.
"""

from django.db import models

from .scoring import DEFAULT_CATEGORY, EnergyState, Level, StartPreference


LEVEL_CHOICES = [(level.value, level.value.title()) for level in Level]


class Profile(models.Model):
    """
    Stored user preferences.

    Attributes:
        user_id: Opaque identifier supplied by the caller
        start_preference: quickWin or eatTheFrog
        energy_state: Explicit low/high state (blank to derive from energy times)
        task_preferences: Onboarding answers or category -> rating mapping
        peak_energy_time: Hour of peak energy ("HH:MM")
        lowest_energy_time: Hour of lowest energy ("HH:MM")
    """

    user_id = models.CharField(max_length=64, unique=True)
    start_preference = models.CharField(
        max_length=16,
        choices=[(p.value, p.name.replace('_', ' ').title()) for p in StartPreference],
        default=StartPreference.QUICK_WIN.value
    )
    energy_state = models.CharField(
        max_length=8,
        choices=[(e.value, e.value.title()) for e in EnergyState],
        blank=True,
        default=''
    )
    task_preferences = models.JSONField(default=dict, blank=True)
    peak_energy_time = models.CharField(max_length=8, blank=True, default='')
    lowest_energy_time = models.CharField(max_length=8, blank=True, default='')
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'profiles'

    def __str__(self):
        return f"Profile {self.user_id} ({self.start_preference})"

    def to_profile_data(self) -> dict:
        """Raw profile data in the shape build_user_profile expects."""
        data = {
            'startPreference': self.start_preference,
            'taskPreferences': self.task_preferences or {},
        }
        if self.energy_state:
            data['energyState'] = self.energy_state
        if self.peak_energy_time and self.lowest_energy_time:
            data['peakEnergyTime'] = self.peak_energy_time
            data['lowestEnergyTime'] = self.lowest_energy_time
        return data


class Task(models.Model):
    """
    A user's task with sequencing tags.

    Only tasks whose list_location is 'active' are shuffled.
    """

    ACTIVE = 'active'
    LIST_LOCATIONS = [
        ('active', 'Active'),
        ('later', 'Later'),
        ('collection', 'Collection'),
    ]

    user_id = models.CharField(max_length=64, db_index=True)
    title = models.CharField(max_length=255)
    is_liked = models.BooleanField(default=False)
    is_urgent = models.BooleanField(default=False)
    is_quick = models.BooleanField(default=False)
    is_disliked = models.BooleanField(default=False)
    estimated_minutes = models.PositiveIntegerField(null=True, blank=True)
    category = models.CharField(max_length=64, blank=True, default=DEFAULT_CATEGORY)
    complexity = models.CharField(max_length=8, choices=LEVEL_CHOICES, default=Level.MEDIUM.value)
    importance = models.CharField(max_length=8, choices=LEVEL_CHOICES, default=Level.MEDIUM.value)
    list_location = models.CharField(max_length=16, choices=LIST_LOCATIONS, default=ACTIVE)
    score = models.IntegerField(default=0)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'tasks'
        ordering = ['created_at']

    def __str__(self):
        return f"{self.title} (Score: {self.score})"
