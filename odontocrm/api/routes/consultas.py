"""
ROTAS: CONSULTAS
=================

Prontuário dos atendimentos. O dentista da consulta é sempre o usuário
autenticado.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.consulta_service import ConsultaService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import ConsultaCreate, ConsultaUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import consulta_to_dict

router = APIRouter(prefix="/consultas", tags=["Consultas"])


@router.post("", status_code=201)
async def create_consulta(
    payload: ConsultaCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """
    Registra consulta. Com `proxima_consulta`, a agenda do lead é
    atualizada na mesma transação.
    """
    consulta = await ConsultaService(db).create_consulta(user, payload.model_dump())
    return consulta_to_dict(consulta)


@router.get("/lead/{lead_id}")
async def list_consultas_by_lead(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    consultas = await ConsultaService(db).list_by_lead(lead_id, user.company_id)
    return [consulta_to_dict(consulta) for consulta in consultas]


@router.get("/{consulta_id}")
async def get_consulta(
    consulta_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    consulta = await ConsultaService(db).get_consulta(consulta_id, user.company_id)
    return consulta_to_dict(consulta)


@router.put("/{consulta_id}")
async def update_consulta(
    consulta_id: int,
    payload: ConsultaUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    # exclude_unset: `proxima_consulta` ausente != `proxima_consulta: null`
    consulta = await ConsultaService(db).update_consulta(
        consulta_id, user.company_id, payload.model_dump(exclude_unset=True)
    )
    return consulta_to_dict(consulta)


@router.delete("/{consulta_id}")
async def delete_consulta(
    consulta_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await ConsultaService(db).delete_consulta(consulta_id, user.company_id)
    return {"message": "Consulta removida com sucesso"}
