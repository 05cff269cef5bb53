"""
ROTAS: PAGAMENTOS
==================
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.pagamento_service import PagamentoService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import PagamentoCreate, PagamentoUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import pagamento_to_dict

router = APIRouter(prefix="/pagamentos", tags=["Pagamentos"])


@router.get("")
async def list_pagamentos(
    unit_id: Optional[int] = Query(None),
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Pagamentos da company, com resumo do paciente."""
    pagamentos = await PagamentoService(db).list_pagamentos(user.company_id, unit_id)
    return [pagamento_to_dict(p, include_lead=True) for p in pagamentos]


@router.post("", status_code=201)
async def create_pagamento(
    payload: PagamentoCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    pagamento = await PagamentoService(db).create_pagamento(user.company_id, payload.model_dump())
    return pagamento_to_dict(pagamento)


@router.get("/lead/{lead_id}")
async def list_by_lead(
    lead_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    pagamentos = await PagamentoService(db).list_by_lead(lead_id, user.company_id)
    return [pagamento_to_dict(p) for p in pagamentos]


@router.put("/{pagamento_id}")
async def update_pagamento(
    pagamento_id: int,
    payload: PagamentoUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    pagamento = await PagamentoService(db).update_pagamento(
        pagamento_id, user.company_id, payload.model_dump(exclude_unset=True)
    )
    return pagamento_to_dict(pagamento)


@router.put("/{pagamento_id}/marcar-pago")
async def marcar_pago(
    pagamento_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    pagamento = await PagamentoService(db).marcar_pago(pagamento_id, user.company_id)
    return pagamento_to_dict(pagamento)


@router.delete("/{pagamento_id}")
async def delete_pagamento(
    pagamento_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    await PagamentoService(db).delete_pagamento(pagamento_id, user.company_id)
    return {"message": "Pagamento removido com sucesso"}
