"""
SERVIÇO DE TAREFAS
===================

Tarefas atribuídas a colaboradores. Tarefas PENDING/EXPIRED impedem a
exclusão do responsável.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.application.helpers.date_parsing import to_utc
from odontocrm.application.services.lead_service import get_company_lead
from odontocrm.domain.entities import Task, User
from odontocrm.domain.entities.enums import TaskStatus
from odontocrm.domain.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


class TaskService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self, company_id: int):
        return (
            select(Task)
            .where(Task.company_id == company_id)
            .options(selectinload(Task.assigned), selectinload(Task.lead))
        )

    async def _ensure_assignee(self, user_id: int, company_id: int, message: str) -> None:
        result = await self.db.execute(
            select(User.id).where(User.id == user_id, User.company_id == company_id)
        )
        if not result.scalar_one_or_none():
            raise NotFoundError(message)

    async def get_task(self, task_id: int, company_id: int) -> Task:
        result = await self.db.execute(
            self._query(company_id)
            .where(Task.id == task_id)
            .execution_options(populate_existing=True)
        )
        task = result.scalar_one_or_none()
        if not task:
            raise NotFoundError("Tarefa não encontrada")
        return task

    async def list_tasks(
        self,
        company_id: int,
        status: Optional[TaskStatus] = None,
        assigned_id: Optional[int] = None,
    ) -> list[Task]:
        query = self._query(company_id)
        if status is not None:
            query = query.where(Task.status == status.value)
        if assigned_id is not None:
            query = query.where(Task.assigned_id == assigned_id)

        # Pendentes primeiro, depois por vencimento
        result = await self.db.execute(
            query.order_by(Task.status.desc(), Task.due_date.asc(), Task.id.asc())
        )
        return list(result.scalars().all())

    async def create_task(self, company_id: int, data: dict) -> Task:
        await self._ensure_assignee(data["assigned_id"], company_id, "Usuário responsável não encontrado")
        if data.get("lead_id") is not None:
            await get_company_lead(self.db, data["lead_id"], company_id)

        task = Task(
            company_id=company_id,
            title=data["title"],
            description=data.get("description"),
            assigned_id=data["assigned_id"],
            lead_id=data.get("lead_id"),
            due_date=to_utc(data.get("due_date")),
            status=TaskStatus.PENDING.value,
        )
        self.db.add(task)
        await self.db.commit()

        logger.info(f"📌 Tarefa {task.id} criada para usuário {task.assigned_id}")
        return await self.get_task(task.id, company_id)

    async def update_task(self, task_id: int, company_id: int, changes: dict) -> Task:
        task = await self.get_task(task_id, company_id)

        assigned_id = changes.get("assigned_id")
        if assigned_id and assigned_id != task.assigned_id:
            await self._ensure_assignee(assigned_id, company_id, "Novo responsável não encontrado")

        if "due_date" in changes:
            changes["due_date"] = to_utc(changes["due_date"])

        status = changes.pop("status", None)
        if status is not None:
            task.status = status.value
            task.completed_at = (
                datetime.now(timezone.utc) if status == TaskStatus.COMPLETED else None
            )

        for field, value in changes.items():
            if value is None and field == "title":
                continue
            setattr(task, field, value)

        await self.db.commit()
        return await self.get_task(task.id, company_id)

    async def delete_task(self, task_id: int, company_id: int) -> None:
        task = await self.get_task(task_id, company_id)

        if task.status == TaskStatus.COMPLETED.value:
            raise ValidationError("Não é possível deletar uma tarefa já concluída")

        await self.db.delete(task)
        await self.db.commit()
        logger.info(f"🗑️ Tarefa {task_id} removida")
