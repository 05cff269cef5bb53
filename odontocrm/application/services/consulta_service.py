"""
SERVIÇO DE CONSULTAS
=====================

Registro clínico dos atendimentos. A `proxima_consulta` de uma consulta é
espelhada no lead (`data_consulta` / `duracao_consulta`) no mesmo commit da
consulta: ou as duas escritas entram, ou nenhuma.
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.application.helpers.date_parsing import parse_optional_datetime, to_utc
from odontocrm.application.services.lead_service import get_company_lead
from odontocrm.domain.entities import Consulta, Lead, Prescricao, User
from odontocrm.domain.entities.consulta import DEFAULT_DURACAO_MINUTOS
from odontocrm.domain.exceptions import NotFoundError

logger = logging.getLogger(__name__)

PACIENTE_NAO_ENCONTRADO = "Paciente não encontrado"

# Campos que não aceitam null; `None` no payload é ignorado
NON_NULLABLE_FIELDS = {"data_consulta", "duracao", "procedimentos", "dentes_atendidos", "compareceu"}


class ConsultaService:

    def __init__(self, db: AsyncSession):
        self.db = db

    def _query(self):
        return select(Consulta).options(
            selectinload(Consulta.lead),
            selectinload(Consulta.dentista),
            selectinload(Consulta.prescricoes).selectinload(Prescricao.dentista),
        )

    async def get_consulta(self, consulta_id: int, company_id: int) -> Consulta:
        """Consulta pertencente à company (via lead)."""
        result = await self.db.execute(
            self._query()
            .join(Lead, Consulta.lead_id == Lead.id)
            .where(Consulta.id == consulta_id, Lead.company_id == company_id)
            .execution_options(populate_existing=True)
        )
        consulta = result.scalar_one_or_none()
        if not consulta:
            raise NotFoundError("Consulta não encontrada")
        return consulta

    async def list_by_lead(self, lead_id: int, company_id: int) -> list[Consulta]:
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)

        result = await self.db.execute(
            self._query()
            .where(Consulta.lead_id == lead_id)
            .order_by(Consulta.data_consulta.desc(), Consulta.id.desc())
        )
        return list(result.scalars().all())

    async def create_consulta(self, current_user: User, data: dict) -> Consulta:
        """
        Registra a consulta feita pelo dentista autenticado.

        Se `proxima_consulta` vier preenchida, o lead passa a ter
        `data_consulta = proxima_consulta` e `duracao_consulta = duracao or 60`.

        Raises:
            NotFoundError: lead não pertence à company.
            ValidationError: `proxima_consulta` não é uma data válida.
        """
        lead = await get_company_lead(
            self.db, data["lead_id"], current_user.company_id, PACIENTE_NAO_ENCONTRADO
        )

        # Validação antes de qualquer escrita
        proxima = parse_optional_datetime(data.get("proxima_consulta"), "próxima consulta")
        duracao = data.get("duracao") or DEFAULT_DURACAO_MINUTOS

        consulta = Consulta(
            lead_id=lead.id,
            dentista_id=current_user.id,
            data_consulta=to_utc(data["data_consulta"]),
            duracao=duracao,
            procedimentos=data.get("procedimentos") or [],
            dentes_atendidos=data.get("dentes_atendidos") or [],
            anestesia_usada=data.get("anestesia_usada"),
            materiais_usados=data.get("materiais_usados"),
            observacoes=data.get("observacoes"),
            compareceu=data.get("compareceu", True),
            valor_cobrado=data.get("valor_cobrado"),
            proxima_consulta=proxima,
        )
        self.db.add(consulta)

        if proxima is not None:
            lead.data_consulta = proxima
            lead.duracao_consulta = duracao

        await self.db.commit()

        logger.info(
            "Consulta registrada",
            extra={
                "consulta_id": consulta.id,
                "lead_id": lead.id,
                "lead_sincronizado": proxima is not None,
            },
        )
        return await self.get_consulta(consulta.id, current_user.company_id)

    async def update_consulta(self, consulta_id: int, company_id: int, changes: dict) -> Consulta:
        """
        Atualiza a consulta. `proxima_consulta` tem três estados:

        - ausente: consulta e lead não mudam
        - null: limpa a consulta e `Lead.data_consulta`
        - data: grava nos dois

        Na sincronização, `Lead.duracao_consulta = duracao do payload or consulta.duracao`.
        """
        consulta = await self.get_consulta(consulta_id, company_id)

        sync_lead = "proxima_consulta" in changes
        proxima = None
        if sync_lead:
            proxima = parse_optional_datetime(changes.pop("proxima_consulta"), "próxima consulta")

        if changes.get("data_consulta") is not None:
            changes["data_consulta"] = to_utc(changes["data_consulta"])

        for field, value in changes.items():
            if value is None and field in NON_NULLABLE_FIELDS:
                continue
            setattr(consulta, field, value)

        if sync_lead:
            consulta.proxima_consulta = proxima
            lead = await self.db.get(Lead, consulta.lead_id)
            lead.data_consulta = proxima
            lead.duracao_consulta = changes.get("duracao") or consulta.duracao

        await self.db.commit()

        logger.info(f"✏️ Consulta {consulta.id} atualizada (lead sincronizado: {sync_lead})")
        return await self.get_consulta(consulta.id, company_id)

    async def delete_consulta(self, consulta_id: int, company_id: int) -> None:
        consulta = await self.get_consulta(consulta_id, company_id)
        await self.db.delete(consulta)
        await self.db.commit()
        logger.info(f"🗑️ Consulta {consulta_id} removida")
