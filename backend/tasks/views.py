"""
API Views for the Task Sequencer.

This module provides the REST API endpoints for profile-driven ordering and
the persisted-score shuffle, with rate limiting and explicit error payloads.
"""

import logging
import random

from django.conf import settings
from rest_framework import status
from rest_framework.decorators import api_view, throttle_classes
from rest_framework.request import Request
from rest_framework.response import Response
from rest_framework.throttling import AnonRateThrottle
from drf_spectacular.utils import extend_schema
from drf_spectacular.types import OpenApiTypes

from .profiles import build_user_profile
from .scoring import ErrorCode, StartPreference, TAG_WEIGHTS, scored_task_to_dict
from .sequencing import order_tasks
from .serializers import (
    PrioritizeInputSerializer,
    ShuffleInputSerializer,
    build_task_inputs,
)
from .shuffle import DjangoTaskStore, TaskShuffler, TaskStoreError

logger = logging.getLogger(__name__)


# ============================================
# RATE LIMITING CLASSES
# ============================================

class PrioritizeRateThrottle(AnonRateThrottle):
    """Rate limit for prioritize endpoint - 30 requests per minute."""
    rate = '30/min'


class ShuffleRateThrottle(AnonRateThrottle):
    """Rate limit for shuffle endpoint - 30 requests per minute."""
    rate = '30/min'


STRATEGY_DESCRIPTIONS = {
    StartPreference.QUICK_WIN: {
        'name': 'Quick Win',
        'description': 'Opens with quick, easy tasks to build momentum, then alternates liked and other work',
        'best_for': 'Slow starts, low-energy days',
    },
    StartPreference.EAT_THE_FROG: {
        'name': 'Eat The Frog',
        'description': 'Works through categories in blocks of 3-4, hardest and most urgent first',
        'best_for': 'Deep work, urgent backlogs',
    },
}


def invalid_payload(errors, message: str) -> Response:
    return Response(
        {
            'success': False,
            'error_code': ErrorCode.ERR_INVALID_PAYLOAD.value,
            'errors': errors,
            'message': message
        },
        status=status.HTTP_400_BAD_REQUEST
    )


def make_rng(seed):
    """Seeded random source; falls back to the configured seed, if any."""
    if seed is None:
        seed = getattr(settings, 'TASK_SEQUENCER_RANDOM_SEED', None)
    return random.Random(seed)


# ============================================
# API ENDPOINTS
# ============================================

@extend_schema(
    summary="Order tasks for a user profile",
    description="""
    Score every task against the profile and return a single recommended
    sequence using the profile's start preference (quickWin or eatTheFrog).

    Pass a seed to replay an ordering exactly. When no profile is given,
    the profile stored for userId is used.
    """,
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'tasks': {'type': 'array', 'items': {'type': 'object'}},
                'profile': {'type': 'object'},
                'userId': {'type': 'string'},
                'seed': {'type': 'integer'},
            },
            'required': ['tasks']
        }
    },
    responses={200: OpenApiTypes.OBJECT},
    tags=['Ordering']
)
@api_view(['POST'])
@throttle_classes([PrioritizeRateThrottle])
def prioritize_tasks(request: Request) -> Response:
    """
    Order a list of tasks.

    POST /api/tasks/prioritize/

    Request Body:
    {
        "tasks": [{"id": "...", "text": "...", "tags": {...}, "inferred": {...}}],
        "profile": {                          // Optional if userId is stored
            "startPreference": "quickWin",
            "energyState": "high",
            "categoryRatings": {"Work": "Loved"}
        },
        "userId": "user-1",                   // Optional
        "seed": 42                            // Optional
    }
    """
    serializer = PrioritizeInputSerializer(data=request.data)

    if not serializer.is_valid():
        return invalid_payload(serializer.errors, 'Invalid input data. Please check your tasks format.')

    validated_data = serializer.validated_data
    profile_data = validated_data.get('profile')
    user_id = validated_data.get('userId')

    if profile_data is None and user_id:
        try:
            profile_data = DjangoTaskStore().profile_data(user_id)
        except TaskStoreError as exc:
            logger.error(f"Prioritize request failed for user {user_id}: {exc}")
            return Response(
                {
                    'success': False,
                    'error_code': ErrorCode.ERR_STORE_FAILURE.value,
                    'error': str(exc),
                    'details': 'Failed to order tasks'
                },
                status=status.HTTP_500_INTERNAL_SERVER_ERROR
            )

    profile = build_user_profile(profile_data)
    tasks = build_task_inputs(validated_data['tasks'])

    result = order_tasks(tasks, profile, rng=make_rng(validated_data.get('seed')))
    logger.info(f"Prioritized {len(tasks)} tasks using {result.strategy_used.value}")

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'count': len(result.ordered_tasks),
        'strategyUsed': result.strategy_used.value,
        'profileUsed': result.profile.to_dict(),
        'orderedTasks': [scored_task_to_dict(t) for t in result.ordered_tasks]
    })


@extend_schema(
    summary="Shuffle a user's active tasks",
    description="""
    Recompute scores for the user's active tasks from category preferences
    and tags, save them, and return the rule-placement order.
    """,
    request={
        'application/json': {
            'type': 'object',
            'properties': {
                'userId': {'type': 'string'},
            },
            'required': ['userId']
        }
    },
    responses={200: OpenApiTypes.OBJECT},
    tags=['Ordering']
)
@api_view(['POST'])
@throttle_classes([ShuffleRateThrottle])
def shuffle_tasks(request: Request) -> Response:
    """
    Shuffle active tasks.

    POST /api/tasks/shuffle/

    Request Body:
    {
        "userId": "user-1"
    }
    """
    serializer = ShuffleInputSerializer(data=request.data)

    if not serializer.is_valid():
        return Response(
            {
                'success': False,
                'error_code': ErrorCode.ERR_MISSING_USER.value,
                'errors': serializer.errors,
                'message': 'userId is required'
            },
            status=status.HTTP_400_BAD_REQUEST
        )

    user_id = serializer.validated_data['userId']

    try:
        result = TaskShuffler().shuffle(user_id)
    except TaskStoreError as exc:
        logger.error(f"Shuffle request failed for user {user_id}: {exc}")
        return Response(
            {
                'success': False,
                'error_code': ErrorCode.ERR_STORE_FAILURE.value,
                'error': str(exc),
                'details': 'Failed to shuffle tasks'
            },
            status=status.HTTP_500_INTERNAL_SERVER_ERROR
        )

    return Response({
        'success': True,
        'error_code': ErrorCode.SUCCESS.value,
        'message': result.message,
        'shuffledTasks': [t.to_dict() for t in result.tasks]
    })


@extend_schema(
    summary="API information",
    description="Get API information and available endpoints.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def api_info(request: Request) -> Response:
    """
    Return API information and available endpoints.

    GET /api/
    """
    return Response({
        'name': 'Task Sequencer API',
        'version': '1.0.0',
        'documentation': '/api/docs/',
        'endpoints': {
            'POST /api/tasks/prioritize/': 'Order tasks for a user profile',
            'POST /api/tasks/shuffle/': "Re-score and reorder a user's active tasks",
            'GET /api/tasks/strategies/': 'Get available ordering strategies',
            'GET /api/docs/': 'Interactive API documentation',
            'GET /api/schema/': 'OpenAPI schema',
            'GET /api/': 'This info endpoint'
        },
        'strategies': {
            preference.value: info['description']
            for preference, info in STRATEGY_DESCRIPTIONS.items()
        },
        'error_codes': {
            code.value: code.name for code in ErrorCode
        }
    })


@extend_schema(
    summary="Get available strategies",
    description="Return the ordering strategies and their tag weights.",
    responses={200: OpenApiTypes.OBJECT},
    tags=['Info']
)
@api_view(['GET'])
def get_strategies(request: Request) -> Response:
    """
    Return available ordering strategies and their tag weights.

    GET /api/tasks/strategies/
    """
    strategies = {}
    for preference, weights in TAG_WEIGHTS.items():
        strategies[preference.value] = {
            **STRATEGY_DESCRIPTIONS[preference],
            'tag_weights': {
                'liked': weights.liked,
                'quick': weights.quick,
                'urgent': weights.urgent,
                'disliked': weights.disliked
            }
        }

    return Response({
        'success': True,
        'strategies': strategies,
        'default': StartPreference.QUICK_WIN.value
    })
