"""Rotas de prescrições."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.prescricao_service import PrescricaoService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import PrescricaoCreate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import prescricao_to_dict

router = APIRouter(prefix="/prescricoes", tags=["Prescrições"])


@router.post("", status_code=201)
async def create_prescricao(
    payload: PrescricaoCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    prescricao = await PrescricaoService(db).create_prescricao(user, payload.model_dump())
    return prescricao_to_dict(prescricao)


@router.get("/consulta/{consulta_id}")
async def list_by_consulta(
    consulta_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    prescricoes = await PrescricaoService(db).list_by_consulta(consulta_id, user.company_id)
    return [prescricao_to_dict(p) for p in prescricoes]


@router.get("/lead/{lead_id}")
async def list_by_lead(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    prescricoes = await PrescricaoService(db).list_by_lead(lead_id, user.company_id)
    return [prescricao_to_dict(p) for p in prescricoes]
