from django.contrib import admin

from .models import Profile, Task


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user_id', 'start_preference', 'energy_state', 'peak_energy_time', 'lowest_energy_time')
    search_fields = ('user_id',)


@admin.register(Task)
class TaskAdmin(admin.ModelAdmin):
    list_display = ('title', 'user_id', 'category', 'complexity', 'list_location', 'score')
    list_filter = ('list_location', 'complexity', 'importance')
    search_fields = ('title', 'user_id')
