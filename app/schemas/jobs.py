"""Scheduled job API schemas."""

from pydantic import BaseModel


class LifecycleRunResponse(BaseModel):
    activated: int
    completed: int
    synced: int
    failed: int
