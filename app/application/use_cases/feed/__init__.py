"""Org feed use cases."""

from app.application.use_cases.feed.feed_operations import FeedService

__all__ = ["FeedService"]
