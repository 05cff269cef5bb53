"""Rotas de tarefas."""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.task_service import TaskService
from odontocrm.domain.entities import TaskStatus, User
from odontocrm.api.schemas import TaskCreate, TaskUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import task_to_dict

router = APIRouter(prefix="/tasks", tags=["Tarefas"])


@router.post("", status_code=201)
async def create_task(
    payload: TaskCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    task = await TaskService(db).create_task(user.company_id, payload.model_dump())
    return task_to_dict(task)


@router.get("")
async def list_tasks(
    status: Optional[TaskStatus] = Query(None),
    assigned_id: Optional[int] = Query(None),
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    tasks = await TaskService(db).list_tasks(user.company_id, status, assigned_id)
    return [task_to_dict(task) for task in tasks]


@router.get("/mine")
async def my_tasks(
    status: Optional[TaskStatus] = Query(None),
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    tasks = await TaskService(db).list_tasks(user.company_id, status, user.id)
    return [task_to_dict(task) for task in tasks]


@router.patch("/{task_id}")
async def update_task(
    task_id: int,
    payload: TaskUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    task = await TaskService(db).update_task(
        task_id, user.company_id, payload.model_dump(exclude_unset=True)
    )
    return task_to_dict(task)


@router.delete("/{task_id}")
async def delete_task(
    task_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await TaskService(db).delete_task(task_id, user.company_id)
    return {"message": "Tarefa removida com sucesso"}
