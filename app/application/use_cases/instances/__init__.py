"""Program instance use cases."""

from app.application.use_cases.instances.instance_operations import (
    InstanceService,
    build_instance_weeks,
)

__all__ = ["InstanceService", "build_instance_weeks"]
