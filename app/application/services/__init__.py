"""Application services shared by several use cases."""

from app.application.services.notification_service import NotificationService

__all__ = ["NotificationService"]
