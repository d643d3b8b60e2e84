"""Daily tasks of the signed-in user."""

from typing import Annotated

from fastapi import APIRouter, Depends, Query, Request, Response

from app.api.v1.dependencies import OrgUser, get_task_service
from app.application.use_cases.tasks import TaskService
from app.core.limiter import limit_writes
from app.schemas.task import TaskCreateRequest, TaskResponse, TaskUpdate

router = APIRouter()

TaskServiceDep = Annotated[TaskService, Depends(get_task_service)]


@router.get("", response_model=list[TaskResponse])
async def list_tasks(
    auth: OrgUser,
    task_svc: TaskServiceDep,
    date: Annotated[str, Query(description="YYYY-MM-DD")],
):
    """Tasks for a date; unfinished tasks from earlier days roll into its backlog."""
    tasks = await task_svc.list_for_date(auth.user_id, auth.organization_id, date)
    return [TaskResponse.model_validate(t) for t in tasks]


@router.post("", response_model=TaskResponse, status_code=201)
@limit_writes
async def create_task(
    request: Request, body: TaskCreateRequest, auth: OrgUser, task_svc: TaskServiceDep
):
    task = await task_svc.create_task(
        auth.user_id,
        auth.organization_id,
        body.title,
        body.date,
        is_private=body.is_private,
        list_type=body.list_type,
    )
    return TaskResponse.model_validate(task)


@router.patch("/{task_id}", response_model=TaskResponse)
@limit_writes
async def update_task(
    request: Request,
    task_id: str,
    body: TaskUpdate,
    auth: OrgUser,
    task_svc: TaskServiceDep,
):
    task = await task_svc.update_task(
        auth.user_id,
        auth.organization_id,
        task_id,
        body.model_dump(mode="json", exclude_unset=True),
    )
    return TaskResponse.model_validate(task)


@router.delete("/{task_id}", status_code=204)
@limit_writes
async def delete_task(request: Request, task_id: str, auth: OrgUser, task_svc: TaskServiceDep):
    await task_svc.delete_task(auth.user_id, auth.organization_id, task_id)
    return Response(status_code=204)
