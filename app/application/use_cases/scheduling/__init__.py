"""Scheduling use cases: availability, slots and events."""

from app.application.use_cases.scheduling.scheduling_operations import (
    SchedulingService,
    busy_intervals,
)

__all__ = ["SchedulingService", "busy_intervals"]
