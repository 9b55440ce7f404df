"""
URL configuration for the tasks app.
"""

from django.urls import path
from . import views

urlpatterns = [
    path('', views.api_info, name='api-info'),
    path('tasks/prioritize/', views.prioritize_tasks, name='prioritize-tasks'),
    path('tasks/shuffle/', views.shuffle_tasks, name='shuffle-tasks'),
    path('tasks/strategies/', views.get_strategies, name='get-strategies'),
]
