"""Rotas do odontograma (um por paciente)."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.odontograma_service import OdontogramaService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import OdontogramaPayload
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import odontograma_to_dict

router = APIRouter(prefix="/odontograma", tags=["Odontograma"])


@router.get("/lead/{lead_id}")
async def get_odontograma(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Retorna o odontograma, criando um vazio no primeiro acesso."""
    odontograma = await OdontogramaService(db).get_or_create(lead_id, user.company_id)
    return odontograma_to_dict(odontograma)


@router.post("/lead/{lead_id}")
async def upsert_odontograma(
    lead_id: int,
    payload: OdontogramaPayload,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    odontograma = await OdontogramaService(db).upsert(lead_id, user.company_id, payload.dentes)
    return odontograma_to_dict(odontograma)


@router.put("/lead/{lead_id}")
async def update_odontograma(
    lead_id: int,
    payload: OdontogramaPayload,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    odontograma = await OdontogramaService(db).update(lead_id, user.company_id, payload.dentes)
    return odontograma_to_dict(odontograma)
