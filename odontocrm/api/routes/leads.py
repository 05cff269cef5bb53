"""
ROTAS: LEADS
=============

Pacientes / leads do CRM.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.lead_service import LeadService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import LeadCreate, LeadMoveRequest, LeadUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import lead_to_dict

router = APIRouter(prefix="/leads", tags=["Leads"])


@router.post("", status_code=201)
async def create_lead(
    payload: LeadCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).create_lead(user.company_id, payload.model_dump())
    return lead_to_dict(lead)


@router.get("")
async def list_leads(
    funnel_id: Optional[int] = Query(None),
    step_id: Optional[int] = Query(None),
    unit_id: Optional[int] = Query(None),
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Lista leads com filtros opcionais."""
    leads = await LeadService(db).list_leads(user.company_id, funnel_id, step_id, unit_id)
    return [lead_to_dict(lead) for lead in leads]


@router.get("/my-patients")
async def my_patients(
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Pacientes do dentista logado."""
    leads = await LeadService(db).list_dentist_patients(user.id, user.company_id)
    return [lead_to_dict(lead) for lead in leads]


@router.get("/{lead_id}")
async def get_lead(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).get_lead(lead_id, user.company_id)
    return lead_to_dict(lead)


@router.put("/{lead_id}")
async def update_lead(
    lead_id: int,
    payload: LeadUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).update_lead(
        lead_id, user.company_id, payload.model_dump(exclude_unset=True)
    )
    return lead_to_dict(lead)


@router.delete("/{lead_id}")
async def delete_lead(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await LeadService(db).delete_lead(lead_id, user.company_id)
    return {"message": "Lead removido com sucesso"}


@router.put("/{lead_id}/move")
async def move_lead(
    lead_id: int,
    payload: LeadMoveRequest,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    lead = await LeadService(db).move_lead(lead_id, user.company_id, payload.step_id)
    return lead_to_dict(lead)
