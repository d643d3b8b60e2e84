"""Habit use cases."""

from app.application.use_cases.habits.habit_operations import HabitService

__all__ = ["HabitService"]
