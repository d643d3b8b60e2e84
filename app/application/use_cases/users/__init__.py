"""User use cases: profile and Clerk lifecycle sync."""

from app.application.use_cases.users.user_operations import UserService

__all__ = ["UserService"]
