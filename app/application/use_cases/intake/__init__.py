"""Intake call booking use cases."""

from app.application.use_cases.intake.intake_operations import IntakeService

__all__ = ["IntakeService"]
