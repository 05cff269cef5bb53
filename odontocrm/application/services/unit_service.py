"""
SERVIÇO DE UNIDADES
====================

Unidades físicas de uma company, com visibilidade por role:

- ADMIN / WORKER: todas as unidades ativas da company
- MANAGER: apenas as unidades que gerencia
- DENTIST: apenas a unidade à qual está vinculado
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.domain.entities import Funnel, Lead, Unit, User
from odontocrm.domain.entities.enums import UserRole
from odontocrm.domain.exceptions import ForbiddenError, NotFoundError, ValidationError
from odontocrm.services.permissions import permission_service

logger = logging.getLogger(__name__)

SEDE_CODE = "SEDE"


class UnitService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==========================================
    # CONSULTAS AUXILIARES
    # ==========================================

    def _base_query(self):
        return select(Unit).options(selectinload(Unit.company), selectinload(Unit.manager))

    async def get_counts(self, unit_id: int) -> dict:
        """Quantidade de funis, leads e usuários vinculados à unidade."""
        funnels = await self.db.scalar(select(func.count(Funnel.id)).where(Funnel.unit_id == unit_id))
        leads = await self.db.scalar(select(func.count(Lead.id)).where(Lead.unit_id == unit_id))
        users = await self.db.scalar(select(func.count(User.id)).where(User.unit_id == unit_id))
        return {"funnels": funnels or 0, "leads": leads or 0, "users": users or 0}

    async def _load(self, unit_id: int, company_id: int) -> Optional[Unit]:
        result = await self.db.execute(
            self._base_query()
            .where(Unit.id == unit_id, Unit.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        return result.scalar_one_or_none()

    async def _ensure_code_available(self, company_id: int, code: str) -> None:
        existing = await self.db.execute(
            select(Unit.id).where(Unit.company_id == company_id, Unit.code == code)
        )
        if existing.scalar_one_or_none():
            raise ValidationError(f"Já existe uma unidade com o código '{code}'")

    async def _ensure_manager(self, manager_id: int, company_id: int) -> None:
        result = await self.db.execute(
            select(User.id).where(User.id == manager_id, User.company_id == company_id)
        )
        if not result.scalar_one_or_none():
            raise NotFoundError("Gerente não encontrado")

    # ==========================================
    # OPERAÇÕES
    # ==========================================

    async def create_unit(self, current_user: User, data: dict) -> Unit:
        permission_service.require(
            current_user, "create_unit", "Apenas administradores podem criar unidades"
        )

        if data.get("code"):
            await self._ensure_code_available(current_user.company_id, data["code"])
        if data.get("manager_id") is not None:
            await self._ensure_manager(data["manager_id"], current_user.company_id)

        unit = Unit(company_id=current_user.company_id, active=True, **data)
        self.db.add(unit)
        await self.db.commit()

        logger.info(f"🏢 Unidade {unit.id} criada na empresa {current_user.company_id}")
        return await self._load(unit.id, current_user.company_id)

    async def list_units(self, current_user: User) -> list[Unit]:
        """Unidades ativas visíveis para o usuário, por ordem de criação."""
        query = self._base_query().where(
            Unit.company_id == current_user.company_id,
            Unit.active == True,  # noqa: E712
        )

        if current_user.role == UserRole.MANAGER.value:
            query = query.where(Unit.manager_id == current_user.id)
        elif current_user.role == UserRole.DENTIST.value:
            if not current_user.unit_id:
                return []
            query = query.where(Unit.id == current_user.unit_id)

        result = await self.db.execute(query.order_by(Unit.created_at.asc(), Unit.id.asc()))
        return list(result.scalars().all())

    async def get_unit(self, current_user: User, unit_id: int) -> Unit:
        unit = await self._load(unit_id, current_user.company_id)
        if not unit:
            raise NotFoundError("Unidade não encontrada")

        if current_user.role == UserRole.MANAGER.value and unit.manager_id != current_user.id:
            raise ForbiddenError("Você não tem permissão para acessar esta unidade")
        if current_user.role == UserRole.DENTIST.value and current_user.unit_id != unit.id:
            raise ForbiddenError("Você não tem permissão para acessar esta unidade")

        return unit

    async def update_unit(self, current_user: User, unit_id: int, changes: dict) -> Unit:
        unit = await self.get_unit(current_user, unit_id)

        permission_service.require(
            current_user, "update_unit", "Você não tem permissão para editar unidades"
        )

        new_code = changes.get("code")
        if new_code and new_code != unit.code:
            await self._ensure_code_available(current_user.company_id, new_code)
        if changes.get("manager_id") is not None:
            await self._ensure_manager(changes["manager_id"], current_user.company_id)

        for field, value in changes.items():
            if value is None and field in ("name", "active"):
                continue
            setattr(unit, field, value)

        await self.db.commit()
        logger.info(f"✏️ Unidade {unit.id} atualizada por {current_user.id}")
        return await self._load(unit.id, current_user.company_id)

    async def delete_unit(self, current_user: User, unit_id: int) -> Unit:
        """
        Soft delete (active = False).

        A unidade SEDE nunca é removida, nem unidades com funis ou leads.
        """
        permission_service.require(
            current_user, "delete_unit", "Apenas administradores podem deletar unidades"
        )

        unit = await self._load(unit_id, current_user.company_id)
        if not unit:
            raise NotFoundError("Unidade não encontrada")

        if unit.code == SEDE_CODE:
            raise ValidationError("Não é possível deletar a unidade Sede")

        counts = await self.get_counts(unit.id)
        if counts["funnels"] > 0 or counts["leads"] > 0:
            raise ValidationError(
                f"Não é possível deletar esta unidade pois ela possui {counts['funnels']} funil(is) "
                f"e {counts['leads']} lead(s). Mova os dados para outra unidade primeiro."
            )

        unit.active = False
        await self.db.commit()

        logger.info(f"🗑️ Unidade {unit.id} desativada por {current_user.id}")
        return unit
