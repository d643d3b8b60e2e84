"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags. All routes
use dependencies from app.api.v1.dependencies (no manual repo/service construction).
Public routes (booking pages, branding) and webhooks carry no session auth.
"""

from fastapi import APIRouter

from app.api.v1.endpoints import (
    billing,
    enrollments,
    events,
    feed,
    habits,
    health,
    instances,
    intake,
    jobs,
    me,
    organizations,
    programs,
    scheduling,
    squads,
    tasks,
    webhooks,
)

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(me.router, prefix="/me", tags=["me"])
api_router.include_router(organizations.router, prefix="/org", tags=["organization"])
api_router.include_router(programs.router, prefix="/programs", tags=["programs"])
api_router.include_router(enrollments.router, prefix="/enrollments", tags=["enrollments"])
api_router.include_router(instances.router, prefix="/instances", tags=["instances"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(habits.router, prefix="/habits", tags=["habits"])
api_router.include_router(squads.router, prefix="/squads", tags=["squads"])
api_router.include_router(feed.router, prefix="/feed", tags=["feed"])
api_router.include_router(scheduling.router, prefix="/scheduling", tags=["scheduling"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(intake.router, prefix="/intake", tags=["intake"])
api_router.include_router(billing.router, prefix="/billing", tags=["billing"])
api_router.include_router(webhooks.router, prefix="/webhooks", tags=["webhooks"])
api_router.include_router(jobs.router, prefix="/jobs", tags=["jobs"])

api_router.include_router(
    organizations.public_router, prefix="/public/orgs", tags=["public"]
)
api_router.include_router(intake.public_router, prefix="/public/intake", tags=["public"])
