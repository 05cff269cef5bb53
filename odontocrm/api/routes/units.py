"""
ROTAS: UNIDADES
================

Unidades físicas da clínica. A visibilidade depende da role do usuário
(ver `UnitService`).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.unit_service import UnitService
from odontocrm.domain.entities import Unit, User
from odontocrm.api.schemas import UnitCreate, UnitUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import unit_to_dict

router = APIRouter(prefix="/units", tags=["Unidades"])


async def _with_counts(service: UnitService, unit: Unit) -> dict:
    return unit_to_dict(unit, await service.get_counts(unit.id))


@router.post("", status_code=201)
async def create_unit(
    payload: UnitCreate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = UnitService(db)
    unit = await service.create_unit(user, payload.model_dump(exclude_unset=True))
    return await _with_counts(service, unit)


@router.get("")
async def list_units(
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = UnitService(db)
    units = await service.list_units(user)
    return [await _with_counts(service, unit) for unit in units]


@router.get("/{unit_id}")
async def get_unit(
    unit_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = UnitService(db)
    unit = await service.get_unit(user, unit_id)
    return await _with_counts(service, unit)


@router.patch("/{unit_id}")
async def update_unit(
    unit_id: int,
    payload: UnitUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    service = UnitService(db)
    unit = await service.update_unit(user, unit_id, payload.model_dump(exclude_unset=True))
    return await _with_counts(service, unit)


@router.delete("/{unit_id}")
async def delete_unit(
    unit_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Desativa a unidade (soft delete)."""
    service = UnitService(db)
    unit = await service.delete_unit(user, unit_id)
    return await _with_counts(service, unit)
