"""Task service: CRUD on the demo tenant-scoped resource."""
from typing import Any
from uuid import UUID

from sqlalchemy.ext.asyncio import AsyncSession

from tenancy.core.exceptions import NotFound
from tenancy.core.validation import validate_task_title
from tenancy.models.enums import AuditAction
from tenancy.models.task import Task
from tenancy.services.audit_service import AuditService
from tenancy.services.authorization import OrganizationAccess
from tenancy.services.row_scoping import RowScopingPolicy

UPDATABLE_FIELDS = ("title", "is_complete", "organization_id")


class TaskService:
    """Service for tasks, always accessed through the row-scoping policy."""

    def __init__(self, db: AsyncSession, principal_id: UUID):
        """Initialize task service.

        Args:
            db: Database session
            principal_id: Verified principal making the request
        """
        self.db = db
        self.principal_id = principal_id
        self.policy = RowScopingPolicy(Task, OrganizationAccess(db, principal_id))
        self.audit_service = AuditService(db)

    async def list_tasks(
        self,
        organization_id: UUID | None = None,
        personal: bool = False,
    ) -> list[Task]:
        """List visible tasks, newest first.

        Args:
            organization_id: Only tasks of this organization
            personal: Only the caller's personal tasks
        """
        query = self.policy.select()
        if personal:
            query = query.where(Task.organization_id.is_(None))
        elif organization_id is not None:
            query = query.where(Task.organization_id == organization_id)

        result = await self.db.execute(query.order_by(Task.created_at.desc(), Task.id.desc()))
        return list(result.scalars().all())

    async def get_task(self, task_id: UUID) -> Task:
        """Get a visible task.

        Raises:
            NotFound: if the task does not exist or is not visible
        """
        result = await self.db.execute(self.policy.select().where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if task is None:
            raise NotFound("Task not found")
        return task

    async def create_task(self, title: str, organization_id: UUID | None = None) -> Task:
        """Create a task owned by the caller.

        Raises:
            ValidationError: if the title is too short
            NotAuthorized: if the caller is not a member of the organization
        """
        title = validate_task_title(title)
        await self.policy.check_create(organization_id, self.principal_id)

        task = Task(
            title=title,
            organization_id=organization_id,
            creator_id=self.principal_id,
        )
        self.db.add(task)
        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def update_task(self, task_id: UUID, changes: dict[str, Any]) -> Task:
        """Update a task.

        ``changes`` holds only the fields the caller sent, so an explicit
        ``organization_id`` of None moves the task back to personal.

        Raises:
            NotFound: if the task is not visible
            NotAuthorized: if the caller may not edit it or move it
        """
        task = await self.get_task(task_id)
        changes = {field: value for field, value in changes.items() if field in UPDATABLE_FIELDS}
        if "title" in changes:
            changes["title"] = validate_task_title(changes["title"])

        await self.policy.check_update(task, changes)

        source = task.organization_id
        for field, value in changes.items():
            setattr(task, field, value)

        if "organization_id" in changes and changes["organization_id"] != source:
            await self.audit_service.log(
                org_id=changes["organization_id"] or source,
                principal_id=self.principal_id,
                action=AuditAction.TASK_MOVE,
                entity_type="task",
                entity_id=task.id,
                diff_json={
                    "before": str(source) if source else None,
                    "after": str(changes["organization_id"]) if changes["organization_id"] else None,
                },
            )

        await self.db.commit()
        await self.db.refresh(task)
        return task

    async def delete_task(self, task_id: UUID) -> None:
        """Delete a task.

        Raises:
            NotFound: if the task is not visible
            NotAuthorized: if the caller is neither its creator nor an org admin
        """
        task = await self.get_task(task_id)
        await self.policy.check_delete(task)
        await self.db.delete(task)
        await self.db.commit()
