"""Enrollment use cases."""

from app.application.use_cases.enrollments.enrollment_operations import EnrollmentService

__all__ = ["EnrollmentService"]
