"""
ROTAS: FUNIS E ETAPAS
======================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.funnel_service import FunnelService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import FunnelCreate, FunnelStepCreate, FunnelUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import funnel_to_dict

router = APIRouter(prefix="/funnels", tags=["Funis"])


@router.get("")
async def list_funnels(
    unit_id: Optional[int] = Query(None),
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Lista funis com etapas ordenadas (garante o funil padrão)."""
    funnels = await FunnelService(db).list_funnels(user.company_id, unit_id)
    return [funnel_to_dict(funnel) for funnel in funnels]


@router.post("", status_code=201)
async def create_funnel(
    payload: FunnelCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    funnel = await FunnelService(db).create_funnel(user.company_id, payload.model_dump())
    return funnel_to_dict(funnel)


@router.delete("/steps/{step_id}")
async def delete_step(
    step_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await FunnelService(db).delete_step(step_id, user.company_id)
    return {"message": "Etapa removida com sucesso"}


@router.get("/{funnel_id}")
async def get_funnel(
    funnel_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    funnel = await FunnelService(db).get_funnel(funnel_id, user.company_id)
    return funnel_to_dict(funnel)


@router.patch("/{funnel_id}")
async def update_funnel(
    funnel_id: int,
    payload: FunnelUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    funnel = await FunnelService(db).update_funnel(
        funnel_id, user.company_id, payload.model_dump(exclude_unset=True)
    )
    return funnel_to_dict(funnel)


@router.delete("/{funnel_id}")
async def delete_funnel(
    funnel_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await FunnelService(db).delete_funnel(funnel_id, user.company_id)
    return {"message": "Funil removido com sucesso"}


@router.post("/{funnel_id}/steps", status_code=201)
async def create_step(
    funnel_id: int,
    payload: FunnelStepCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Cria etapa e retorna o funil atualizado."""
    funnel = await FunnelService(db).create_step(funnel_id, user.company_id, payload.model_dump())
    return funnel_to_dict(funnel)
