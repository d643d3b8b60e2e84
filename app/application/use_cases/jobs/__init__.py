"""Scheduled jobs."""

from app.application.use_cases.jobs.program_lifecycle import ProgramLifecycleService

__all__ = ["ProgramLifecycleService"]
