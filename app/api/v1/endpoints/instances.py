"""Program instances: the dated copy of a program a cohort or user runs through."""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, Request

from app.api.v1.dependencies import Coach, OrgUser, get_instance_service
from app.application.use_cases.instances import InstanceService
from app.core.limiter import limit_writes
from app.schemas.enrollment import InstanceDayUpdate, InstanceResponse, InstanceWeekUpdate

router = APIRouter()

InstanceServiceDep = Annotated[InstanceService, Depends(get_instance_service)]


@router.get("/{instance_id}", response_model=InstanceResponse)
async def get_instance(instance_id: str, auth: OrgUser, instance_svc: InstanceServiceDep):
    return InstanceResponse.model_validate(
        await instance_svc.get_instance(auth.organization_id, instance_id)
    )


@router.get("/{instance_id}/days/{day_index}")
async def get_instance_day(
    instance_id: str, day_index: int, auth: OrgUser, instance_svc: InstanceServiceDep
) -> dict[str, Any]:
    return await instance_svc.get_day(auth.organization_id, instance_id, day_index)


@router.patch("/{instance_id}/days/{day_index}")
@limit_writes
async def update_instance_day(
    request: Request,
    instance_id: str,
    day_index: int,
    body: InstanceDayUpdate,
    auth: Coach,
    instance_svc: InstanceServiceDep,
) -> dict[str, Any]:
    """Edit one day; its tasks are pushed to every live enrollment on the instance."""
    return await instance_svc.update_day(
        auth.organization_id,
        instance_id,
        day_index,
        body.model_dump(mode="json", exclude_unset=True),
    )


@router.patch("/{instance_id}/weeks/{week_number}")
@limit_writes
async def update_instance_week(
    request: Request,
    instance_id: str,
    week_number: int,
    body: InstanceWeekUpdate,
    auth: Coach,
    instance_svc: InstanceServiceDep,
) -> dict[str, Any]:
    return await instance_svc.update_week(
        auth.organization_id,
        instance_id,
        week_number,
        body.model_dump(mode="json", exclude_unset=True),
    )


@router.post("/{instance_id}/sync-template", response_model=InstanceResponse)
@limit_writes
async def sync_instance_template(
    request: Request, instance_id: str, auth: Coach, instance_svc: InstanceServiceDep
):
    """Rebuild the instance from the current template, keeping locally edited days."""
    return InstanceResponse.model_validate(
        await instance_svc.sync_template(auth.organization_id, instance_id)
    )
