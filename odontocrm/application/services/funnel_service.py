"""
SERVIÇO DE FUNIS
=================

Funis de venda e suas etapas. Toda company tem o "Funil Padrão" com a etapa
inicial "Novo Lead" (ordem 1), criado na primeira listagem e protegido contra
renomeação e exclusão.
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.domain.entities import (
    DEFAULT_FUNNEL_NAME,
    DEFAULT_STEP_NAME,
    Funnel,
    FunnelStep,
    Lead,
    Unit,
)
from odontocrm.domain.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _is_default_name(name: Optional[str]) -> bool:
    return bool(name) and name.strip().lower() == DEFAULT_FUNNEL_NAME.lower()


class FunnelService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def ensure_default_funnel(self, company_id: int) -> Funnel:
        """Cria o funil padrão (e a etapa inicial) se ainda não existirem."""
        result = await self.db.execute(
            select(Funnel)
            .where(Funnel.company_id == company_id, Funnel.name == DEFAULT_FUNNEL_NAME)
            .options(selectinload(Funnel.steps))
        )
        funnel = result.scalars().first()

        if funnel is None:
            funnel = Funnel(company_id=company_id, name=DEFAULT_FUNNEL_NAME)
            self.db.add(funnel)
            await self.db.flush()
            self.db.add(FunnelStep(funnel_id=funnel.id, name=DEFAULT_STEP_NAME, order=1))
            await self.db.commit()
            logger.info(f"🧭 Funil padrão criado para empresa {company_id}")
        elif not any(step.order == 1 for step in funnel.steps):
            self.db.add(FunnelStep(funnel_id=funnel.id, name=DEFAULT_STEP_NAME, order=1))
            await self.db.commit()

        return funnel

    async def list_funnels(self, company_id: int, unit_id: Optional[int] = None) -> list[Funnel]:
        await self.ensure_default_funnel(company_id)

        query = (
            select(Funnel)
            .where(Funnel.company_id == company_id)
            .options(selectinload(Funnel.steps))
            .order_by(Funnel.created_at.asc(), Funnel.id.asc())
            .execution_options(populate_existing=True)
        )
        if unit_id is not None:
            query = query.where((Funnel.unit_id == unit_id) | (Funnel.unit_id.is_(None)))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_funnel(self, funnel_id: int, company_id: int) -> Funnel:
        result = await self.db.execute(
            select(Funnel)
            .where(Funnel.id == funnel_id, Funnel.company_id == company_id)
            .options(selectinload(Funnel.steps))
            .execution_options(populate_existing=True)
        )
        funnel = result.scalar_one_or_none()
        if not funnel:
            raise NotFoundError("Funil não encontrado")
        return funnel

    async def _ensure_unit(self, unit_id: int, company_id: int) -> None:
        result = await self.db.execute(
            select(Unit.id).where(Unit.id == unit_id, Unit.company_id == company_id)
        )
        if not result.scalar_one_or_none():
            raise NotFoundError("Unidade não encontrada")

    async def create_funnel(self, company_id: int, data: dict) -> Funnel:
        if _is_default_name(data.get("name")):
            raise ValidationError("O funil padrão já existe automaticamente.")
        if data.get("unit_id") is not None:
            await self._ensure_unit(data["unit_id"], company_id)

        funnel = Funnel(company_id=company_id, **data)
        self.db.add(funnel)
        await self.db.commit()

        logger.info(f"🧭 Funil {funnel.id} criado na empresa {company_id}")
        return await self.get_funnel(funnel.id, company_id)

    async def update_funnel(self, funnel_id: int, company_id: int, changes: dict) -> Funnel:
        funnel = await self.get_funnel(funnel_id, company_id)

        new_name = changes.get("name")
        if funnel.is_default and new_name and new_name.strip() != funnel.name:
            raise ValidationError("Não é permitido renomear o funil padrão.")
        if not funnel.is_default and _is_default_name(new_name):
            raise ValidationError("O funil padrão já existe automaticamente.")
        if changes.get("unit_id") is not None:
            await self._ensure_unit(changes["unit_id"], company_id)

        for field, value in changes.items():
            if value is None and field == "name":
                continue
            setattr(funnel, field, value)

        await self.db.commit()
        return await self.get_funnel(funnel.id, company_id)

    async def delete_funnel(self, funnel_id: int, company_id: int) -> None:
        funnel = await self.get_funnel(funnel_id, company_id)

        if funnel.is_default:
            raise ValidationError("Não é possível deletar o funil padrão.")

        lead_count = await self.db.scalar(select(func.count(Lead.id)).where(Lead.funnel_id == funnel.id))
        if lead_count:
            raise ValidationError("Não é possível deletar um funil que possui leads")

        await self.db.delete(funnel)
        await self.db.commit()
        logger.info(f"🗑️ Funil {funnel_id} removido")

    # ==========================================
    # ETAPAS
    # ==========================================

    async def create_step(self, funnel_id: int, company_id: int, data: dict) -> Funnel:
        """Cria etapa e devolve o funil completo atualizado."""
        funnel = await self.get_funnel(funnel_id, company_id)

        if funnel.is_default and data["order"] == 1:
            raise ValidationError("A etapa inicial do funil padrão já existe.")

        existing = await self.db.execute(
            select(FunnelStep.id).where(
                FunnelStep.funnel_id == funnel.id, FunnelStep.order == data["order"]
            )
        )
        if existing.scalar_one_or_none():
            raise ValidationError("Já existe uma etapa com esta ordem")

        step = FunnelStep(funnel_id=funnel.id, **{k: v for k, v in data.items() if v is not None})
        self.db.add(step)
        await self.db.commit()

        return await self.get_funnel(funnel.id, company_id)

    async def get_company_step(self, step_id: int, company_id: int) -> FunnelStep:
        result = await self.db.execute(
            select(FunnelStep)
            .join(Funnel, FunnelStep.funnel_id == Funnel.id)
            .where(FunnelStep.id == step_id, Funnel.company_id == company_id)
            .options(selectinload(FunnelStep.funnel))
        )
        step = result.scalar_one_or_none()
        if not step:
            raise NotFoundError("Etapa não encontrada")
        return step

    async def delete_step(self, step_id: int, company_id: int) -> None:
        step = await self.get_company_step(step_id, company_id)

        if step.funnel.is_default and step.order == 1:
            raise ValidationError("Não é possível deletar a etapa inicial do funil padrão.")

        lead_count = await self.db.scalar(select(func.count(Lead.id)).where(Lead.step_id == step.id))
        if lead_count:
            raise ValidationError(
                f"Não é possível deletar esta etapa pois ela possui {lead_count} lead(s)"
            )

        await self.db.delete(step)
        await self.db.commit()
        logger.info(f"🗑️ Etapa {step_id} removida")
