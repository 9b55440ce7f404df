"""
Serializers for the Task Sequencer API.

Validates the prioritize and shuffle payloads and converts validated task
data into engine types.
"""

from rest_framework import serializers

from .scoring import (
    DEFAULT_CATEGORY,
    EnergyState,
    InferredAttributes,
    Level,
    StartPreference,
    TaskInput,
    TaskTags,
)


LEVEL_CHOICES = [level.value for level in Level]


class TaskTagsSerializer(serializers.Serializer):
    liked = serializers.BooleanField(required=False, default=False)
    urgent = serializers.BooleanField(required=False, default=False)
    quick = serializers.BooleanField(required=False, default=False)
    disliked = serializers.BooleanField(required=False, default=False)


class InferredAttributesSerializer(serializers.Serializer):
    complexity = serializers.ChoiceField(
        choices=LEVEL_CHOICES, required=False, allow_null=True, default=Level.MEDIUM.value
    )
    importance = serializers.ChoiceField(
        choices=LEVEL_CHOICES, required=False, allow_null=True, default=Level.MEDIUM.value
    )
    category = serializers.CharField(
        max_length=64, required=False, allow_null=True, allow_blank=True, default=DEFAULT_CATEGORY
    )

    def validate_category(self, value):
        """Null or blank categories fall back to the default category."""
        if value is None:
            return DEFAULT_CATEGORY
        return value.strip() or DEFAULT_CATEGORY


class TaskInputSerializer(serializers.Serializer):
    """
    A task submitted for ordering.

    Ids are optional; tasks without one get ``task-<index>``, suffixed when
    another task already uses that id. Null tags or attributes mean defaults.
    """

    id = serializers.CharField(max_length=64, required=False, allow_null=True, allow_blank=True)
    text = serializers.CharField(max_length=500, required=False, allow_null=True, allow_blank=True, default='')
    tags = TaskTagsSerializer(required=False, allow_null=True)
    inferred = InferredAttributesSerializer(required=False, allow_null=True)


class UserProfileSerializer(serializers.Serializer):
    """
    Profile data supplied with a prioritize request.

    Ratings are left raw: normalising them (and logging bad values) is the
    scorer's job.
    """

    startPreference = serializers.ChoiceField(
        choices=[p.value for p in StartPreference],
        required=False,
        default=StartPreference.QUICK_WIN.value
    )
    energyState = serializers.ChoiceField(
        choices=[e.value for e in EnergyState],
        required=False
    )
    categoryRatings = serializers.DictField(required=False, default=dict)
    taskPreferences = serializers.DictField(required=False, default=dict)
    peakEnergyTime = serializers.CharField(required=False, allow_null=True, allow_blank=True)
    lowestEnergyTime = serializers.CharField(required=False, allow_null=True, allow_blank=True)


class PrioritizeInputSerializer(serializers.Serializer):
    tasks = serializers.ListField(child=TaskInputSerializer(), allow_empty=True)
    profile = UserProfileSerializer(required=False)
    userId = serializers.CharField(max_length=64, required=False)
    seed = serializers.IntegerField(required=False, allow_null=True)


class ShuffleInputSerializer(serializers.Serializer):
    userId = serializers.CharField(
        max_length=64,
        error_messages={
            'required': 'userId is required',
            'blank': 'userId is required'
        }
    )


def unique_task_id(index: int, taken: set) -> str:
    """``task-<index>``, bumped with a suffix until it is not already taken."""
    candidate = f"task-{index}"
    suffix = 1
    while candidate in taken:
        candidate = f"task-{index}-{suffix}"
        suffix += 1
    return candidate


def build_task_inputs(tasks_data) -> list:
    """Convert validated task data to TaskInput objects, filling missing ids."""
    taken = {data['id'] for data in tasks_data if data.get('id')}
    tasks = []
    for index, data in enumerate(tasks_data):
        tags = data.get('tags') or {}
        inferred = data.get('inferred') or {}

        task_id = data.get('id')
        if not task_id:
            task_id = unique_task_id(index, taken)
            taken.add(task_id)

        tasks.append(TaskInput(
            id=task_id,
            text=data.get('text') or '',
            tags=TaskTags(
                liked=bool(tags.get('liked')),
                urgent=bool(tags.get('urgent')),
                quick=bool(tags.get('quick')),
                disliked=bool(tags.get('disliked'))
            ),
            inferred=InferredAttributes(
                complexity=Level(inferred.get('complexity') or Level.MEDIUM.value),
                importance=Level(inferred.get('importance') or Level.MEDIUM.value),
                category=inferred.get('category') or DEFAULT_CATEGORY
            )
        ))
    return tasks
