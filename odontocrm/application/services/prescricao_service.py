"""Serviço de prescrições (receitas emitidas em consultas)."""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.application.services.consulta_service import PACIENTE_NAO_ENCONTRADO
from odontocrm.application.services.lead_service import get_company_lead
from odontocrm.domain.entities import Consulta, Lead, Prescricao, User
from odontocrm.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)


class PrescricaoService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_company_consulta(self, consulta_id: int, company_id: int) -> Consulta:
        result = await self.db.execute(
            select(Consulta)
            .join(Lead, Consulta.lead_id == Lead.id)
            .where(Consulta.id == consulta_id, Lead.company_id == company_id)
        )
        consulta = result.scalar_one_or_none()
        if not consulta:
            raise NotFoundError("Consulta não encontrada")
        return consulta

    async def _list(self, *criteria) -> list[Prescricao]:
        result = await self.db.execute(
            select(Prescricao)
            .where(*criteria)
            .options(selectinload(Prescricao.dentista))
            .order_by(Prescricao.created_at.desc(), Prescricao.id.desc())
        )
        return list(result.scalars().all())

    async def create_prescricao(self, current_user: User, data: dict) -> Prescricao:
        consulta = await self._get_company_consulta(data["consulta_id"], current_user.company_id)

        prescricao = Prescricao(
            consulta_id=consulta.id,
            lead_id=consulta.lead_id,
            dentista_id=current_user.id,
            medicamentos=data["medicamentos"],
            observacoes=data.get("observacoes"),
        )
        self.db.add(prescricao)
        await self.db.commit()

        logger.info(f"💊 Prescrição {prescricao.id} emitida na consulta {consulta.id}")

        result = await self.db.execute(
            select(Prescricao)
            .where(Prescricao.id == prescricao.id)
            .options(selectinload(Prescricao.dentista))
        )
        return result.scalar_one()

    async def list_by_consulta(self, consulta_id: int, company_id: int) -> list[Prescricao]:
        await self._get_company_consulta(consulta_id, company_id)
        return await self._list(Prescricao.consulta_id == consulta_id)

    async def list_by_lead(self, lead_id: int, company_id: int) -> list[Prescricao]:
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)
        return await self._list(Prescricao.lead_id == lead_id)
