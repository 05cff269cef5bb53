"""
SERVIÇO DE LEADS
=================

CRUD de leads/pacientes, movimentação entre etapas e checagem de conflito
de agenda do dentista.
"""

import logging
from datetime import datetime, timedelta
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.application.helpers.date_parsing import to_utc
from odontocrm.domain.entities import Funnel, FunnelStep, Lead, Unit, User
from odontocrm.domain.entities.consulta import DEFAULT_DURACAO_MINUTOS
from odontocrm.domain.entities.enums import UserRole
from odontocrm.domain.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


LEAD_LOAD_OPTIONS = (
    selectinload(Lead.step),
    selectinload(Lead.responsible),
    selectinload(Lead.dentista),
)


async def get_company_lead(
    db: AsyncSession,
    lead_id: int,
    company_id: int,
    message: str = "Lead não encontrado",
) -> Lead:
    """Busca lead garantindo que pertence à company (404 caso contrário)."""
    result = await db.execute(
        select(Lead).where(Lead.id == lead_id, Lead.company_id == company_id)
    )
    lead = result.scalar_one_or_none()
    if not lead:
        raise NotFoundError(message)
    return lead


class LeadService:

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==========================================
    # VALIDAÇÕES
    # ==========================================

    async def _ensure_funnel(self, funnel_id: int, company_id: int) -> Funnel:
        result = await self.db.execute(
            select(Funnel).where(Funnel.id == funnel_id, Funnel.company_id == company_id)
        )
        funnel = result.scalar_one_or_none()
        if not funnel:
            raise NotFoundError("Funil não encontrado")
        return funnel

    async def _ensure_step(
        self, step_id: int, company_id: int, funnel_id: Optional[int] = None
    ) -> FunnelStep:
        query = (
            select(FunnelStep)
            .join(Funnel, FunnelStep.funnel_id == Funnel.id)
            .where(FunnelStep.id == step_id, Funnel.company_id == company_id)
        )
        if funnel_id is not None:
            query = query.where(FunnelStep.funnel_id == funnel_id)

        step = (await self.db.execute(query)).scalar_one_or_none()
        if not step:
            raise NotFoundError("Etapa não encontrada ou não pertence ao funil especificado")
        return step

    async def _ensure_user(self, user_id: int, company_id: int, message: str, role: Optional[UserRole] = None) -> User:
        query = select(User).where(User.id == user_id, User.company_id == company_id)
        if role is not None:
            query = query.where(User.role == role.value)
        user = (await self.db.execute(query)).scalar_one_or_none()
        if not user:
            raise NotFoundError(message)
        return user

    async def _ensure_unit(self, unit_id: int, company_id: int) -> None:
        result = await self.db.execute(
            select(Unit.id).where(Unit.id == unit_id, Unit.company_id == company_id)
        )
        if not result.scalar_one_or_none():
            raise NotFoundError("Unidade não encontrada")

    async def check_schedule_conflict(
        self,
        company_id: int,
        dentista_id: int,
        inicio: datetime,
        duracao: Optional[int],
        exclude_lead_id: Optional[int] = None,
    ) -> None:
        """
        Garante que o intervalo [inicio, inicio + duracao) não se sobrepõe a
        outra consulta do mesmo dentista.

        Raises:
            ValidationError: há conflito de horário.
        """
        inicio = to_utc(inicio)
        fim = inicio + timedelta(minutes=duracao or DEFAULT_DURACAO_MINUTOS)

        query = select(Lead).where(
            Lead.company_id == company_id,
            Lead.dentista_id == dentista_id,
            Lead.data_consulta.is_not(None),
        )
        if exclude_lead_id is not None:
            query = query.where(Lead.id != exclude_lead_id)

        result = await self.db.execute(query)
        for outro in result.scalars().all():
            outro_inicio = to_utc(outro.data_consulta)
            outro_fim = outro_inicio + timedelta(
                minutes=outro.duracao_consulta or DEFAULT_DURACAO_MINUTOS
            )
            if inicio < outro_fim and fim > outro_inicio:
                raise ValidationError(
                    f"Conflito de horário: O dentista já possui uma consulta agendada com "
                    f"{outro.name or 'outro paciente'} às {outro_inicio.strftime('%d/%m/%Y %H:%M')}"
                )

    # ==========================================
    # CONSULTAS
    # ==========================================

    async def get_lead(self, lead_id: int, company_id: int) -> Lead:
        result = await self.db.execute(
            select(Lead)
            .where(Lead.id == lead_id, Lead.company_id == company_id)
            .options(*LEAD_LOAD_OPTIONS)
            .execution_options(populate_existing=True)
        )
        lead = result.scalar_one_or_none()
        if not lead:
            raise NotFoundError("Lead não encontrado")
        return lead

    async def list_leads(
        self,
        company_id: int,
        funnel_id: Optional[int] = None,
        step_id: Optional[int] = None,
        unit_id: Optional[int] = None,
    ) -> list[Lead]:
        query = select(Lead).where(Lead.company_id == company_id).options(*LEAD_LOAD_OPTIONS)

        if funnel_id is not None:
            query = query.where(Lead.funnel_id == funnel_id)
        if step_id is not None:
            query = query.where(Lead.step_id == step_id)
        if unit_id is not None:
            query = query.where(Lead.unit_id == unit_id)

        result = await self.db.execute(query.order_by(Lead.created_at.desc(), Lead.id.desc()))
        return list(result.scalars().all())

    async def list_dentist_patients(self, dentista_id: int, company_id: int) -> list[Lead]:
        """Pacientes atribuídos ao dentista (rota /leads/my-patients)."""
        result = await self.db.execute(
            select(Lead)
            .where(Lead.company_id == company_id, Lead.dentista_id == dentista_id)
            .options(*LEAD_LOAD_OPTIONS)
            .order_by(Lead.created_at.desc(), Lead.id.desc())
        )
        return list(result.scalars().all())

    # ==========================================
    # ESCRITA
    # ==========================================

    async def create_lead(self, company_id: int, data: dict) -> Lead:
        await self._ensure_funnel(data["funnel_id"], company_id)
        await self._ensure_step(data["step_id"], company_id, funnel_id=data["funnel_id"])

        if data.get("responsible_id"):
            await self._ensure_user(data["responsible_id"], company_id, "Responsável não encontrado")
        if data.get("dentista_id"):
            await self._ensure_user(
                data["dentista_id"], company_id, "Dentista não encontrado", role=UserRole.DENTIST
            )
        if data.get("unit_id"):
            await self._ensure_unit(data["unit_id"], company_id)

        if data.get("data_consulta"):
            data["data_consulta"] = to_utc(data["data_consulta"])
            if data.get("dentista_id"):
                await self.check_schedule_conflict(
                    company_id,
                    data["dentista_id"],
                    data["data_consulta"],
                    data.get("duracao_consulta"),
                )

        if data.get("status_venda") is not None:
            data["status_venda"] = data["status_venda"].value

        lead = Lead(company_id=company_id, **{k: v for k, v in data.items() if v is not None})
        self.db.add(lead)
        await self.db.commit()

        logger.info("Lead criado", extra={"lead_id": lead.id, "company_id": company_id})
        return await self.get_lead(lead.id, company_id)

    async def update_lead(self, lead_id: int, company_id: int, changes: dict) -> Lead:
        """
        Atualiza somente os campos enviados.

        Quando `data_consulta` e `dentista_id` chegam juntos, valida conflito
        de agenda do dentista.
        Uma etapa nova leva o lead para o funil dela; trocar de funil exige
        informar uma etapa desse funil.
        """
        lead = await get_company_lead(self.db, lead_id, company_id)

        if changes.get("funnel_id"):
            await self._ensure_funnel(changes["funnel_id"], company_id)
            if changes["funnel_id"] != lead.funnel_id and not changes.get("step_id"):
                raise ValidationError("Ao trocar de funil, informe uma etapa do novo funil")
        if changes.get("step_id"):
            step = await self._ensure_step(
                changes["step_id"], company_id, funnel_id=changes.get("funnel_id")
            )
            # Lead sempre fica no funil da etapa
            changes["funnel_id"] = step.funnel_id
        if changes.get("responsible_id"):
            await self._ensure_user(changes["responsible_id"], company_id, "Responsável não encontrado")
        if changes.get("dentista_id"):
            await self._ensure_user(
                changes["dentista_id"], company_id, "Dentista não encontrado", role=UserRole.DENTIST
            )
        if changes.get("unit_id"):
            await self._ensure_unit(changes["unit_id"], company_id)

        if changes.get("data_consulta"):
            changes["data_consulta"] = to_utc(changes["data_consulta"])
            if changes.get("dentista_id"):
                await self.check_schedule_conflict(
                    company_id,
                    changes["dentista_id"],
                    changes["data_consulta"],
                    changes.get("duracao_consulta"),
                    exclude_lead_id=lead.id,
                )

        if changes.get("status_venda") is not None:
            changes["status_venda"] = changes["status_venda"].value

        if "tags" in changes and changes["tags"] is None:
            changes["tags"] = []

        for field, value in changes.items():
            if value is None and field in ("phone", "funnel_id", "step_id", "status_venda"):
                continue
            setattr(lead, field, value)

        await self.db.commit()
        logger.info(f"✏️ Lead {lead.id} atualizado")
        return await self.get_lead(lead.id, company_id)

    async def delete_lead(self, lead_id: int, company_id: int) -> None:
        lead = await get_company_lead(self.db, lead_id, company_id)
        await self.db.delete(lead)
        await self.db.commit()
        logger.info(f"🗑️ Lead {lead_id} removido")

    async def move_lead(self, lead_id: int, company_id: int, step_id: int) -> Lead:
        """Move o lead para outra etapa (e para o funil dessa etapa)."""
        lead = await get_company_lead(self.db, lead_id, company_id)
        step = await self._ensure_step(step_id, company_id)

        lead.step_id = step.id
        lead.funnel_id = step.funnel_id
        await self.db.commit()

        logger.info(f"➡️ Lead {lead.id} movido para etapa {step.id}")
        return await self.get_lead(lead.id, company_id)
