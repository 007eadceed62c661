"""Task API endpoints.

Every handler goes through ``TaskService``, which applies the row-scoping
rules; invisible tasks read as 404.
"""
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.api.deps import get_current_principal
from tenancy.core.database import get_db
from tenancy.schemas.errors import ErrorResponse
from tenancy.schemas.task import TaskCreateRequest, TaskResponse, TaskUpdateRequest
from tenancy.services.task_service import TaskService

router = APIRouter()

NON_NULLABLE_FIELDS = ("title", "is_complete")


@router.get("", response_model=list[TaskResponse], summary="List visible tasks")
async def list_tasks(
    organization_id: UUID | None = Query(None, description="Only tasks of this organization"),
    personal: bool = Query(False, description="Only my personal tasks"),
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> list[TaskResponse]:
    service = TaskService(db, principal_id)
    tasks = await service.list_tasks(organization_id=organization_id, personal=personal)
    return [TaskResponse.model_validate(task) for task in tasks]


@router.post(
    "",
    response_model=TaskResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create task",
    responses={403: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_task(
    request: TaskCreateRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> TaskResponse:
    service = TaskService(db, principal_id)
    task = await service.create_task(request.title, request.organization_id)
    return TaskResponse.model_validate(task)


@router.get(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Get task",
    responses={404: {"model": ErrorResponse}},
)
async def get_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> TaskResponse:
    service = TaskService(db, principal_id)
    return TaskResponse.model_validate(await service.get_task(task_id))


@router.patch(
    "/{task_id}",
    response_model=TaskResponse,
    summary="Update task",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def update_task(
    task_id: UUID,
    request: TaskUpdateRequest,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> TaskResponse:
    changes = request.model_dump(exclude_unset=True)
    for field in NON_NULLABLE_FIELDS:
        if changes.get(field, ...) is None:
            del changes[field]

    service = TaskService(db, principal_id)
    task = await service.update_task(task_id, changes)
    return TaskResponse.model_validate(task)


@router.delete(
    "/{task_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete task",
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_task(
    task_id: UUID,
    db: AsyncSession = Depends(get_db),
    principal_id: UUID = Depends(get_current_principal),
) -> Response:
    service = TaskService(db, principal_id)
    await service.delete_task(task_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
