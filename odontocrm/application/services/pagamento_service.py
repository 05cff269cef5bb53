"""
SERVIÇO DE PAGAMENTOS
======================

Parcelas financeiras dos pacientes. O acesso é sempre filtrado pela company
do lead.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.application.helpers.date_parsing import (
    parse_optional_datetime,
    parse_required_datetime,
)
from odontocrm.application.services.consulta_service import PACIENTE_NAO_ENCONTRADO
from odontocrm.application.services.lead_service import get_company_lead
from odontocrm.domain.entities import Lead, Pagamento
from odontocrm.domain.entities.enums import FormaPagamento, PagamentoStatus
from odontocrm.domain.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)


def _validate_forma(forma: Optional[str]) -> Optional[str]:
    if forma is None:
        return None
    try:
        return FormaPagamento(forma).value
    except ValueError:
        raise ValidationError(f"Forma de pagamento inválida: {forma}")


class PagamentoService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _get_company_pagamento(self, pagamento_id: int, company_id: int) -> Pagamento:
        result = await self.db.execute(
            select(Pagamento)
            .join(Lead, Pagamento.lead_id == Lead.id)
            .where(Pagamento.id == pagamento_id, Lead.company_id == company_id)
            .options(selectinload(Pagamento.lead))
        )
        pagamento = result.scalar_one_or_none()
        if not pagamento:
            raise NotFoundError("Pagamento não encontrado")
        return pagamento

    async def list_pagamentos(self, company_id: int, unit_id: Optional[int] = None) -> list[Pagamento]:
        """Pagamentos da company (opcionalmente de uma unidade), vencimento desc."""
        query = (
            select(Pagamento)
            .join(Lead, Pagamento.lead_id == Lead.id)
            .where(Lead.company_id == company_id)
            .options(selectinload(Pagamento.lead))
        )
        if unit_id is not None:
            query = query.where(Lead.unit_id == unit_id)

        result = await self.db.execute(
            query.order_by(Pagamento.data_vencimento.desc(), Pagamento.id.desc())
        )
        return list(result.scalars().all())

    async def list_by_lead(self, lead_id: int, company_id: int) -> list[Pagamento]:
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)

        result = await self.db.execute(
            select(Pagamento)
            .where(Pagamento.lead_id == lead_id)
            .order_by(
                Pagamento.numero_parcela.asc().nulls_last(),
                Pagamento.data_vencimento.asc(),
            )
        )
        return list(result.scalars().all())

    async def create_pagamento(self, company_id: int, data: dict) -> Pagamento:
        lead = await get_company_lead(self.db, data["lead_id"], company_id, PACIENTE_NAO_ENCONTRADO)

        status = data.get("status") or PagamentoStatus.PENDENTE
        pagamento = Pagamento(
            lead_id=lead.id,
            valor=data["valor"],
            forma_pagamento=_validate_forma(data.get("forma_pagamento")),
            data_vencimento=parse_required_datetime(data.get("data_vencimento"), "vencimento"),
            data_pagamento=parse_optional_datetime(data.get("data_pagamento"), "pagamento"),
            status=status.value,
            numero_parcela=data.get("numero_parcela"),
            total_parcelas=data.get("total_parcelas"),
            observacoes=data.get("observacoes"),
        )
        self.db.add(pagamento)
        await self.db.commit()

        logger.info(
            "Pagamento criado",
            extra={"pagamento_id": pagamento.id, "lead_id": lead.id, "valor": pagamento.valor},
        )
        return pagamento

    async def update_pagamento(self, pagamento_id: int, company_id: int, changes: dict) -> Pagamento:
        pagamento = await self._get_company_pagamento(pagamento_id, company_id)

        if "data_vencimento" in changes:
            if changes["data_vencimento"] is not None:
                pagamento.data_vencimento = parse_required_datetime(
                    changes["data_vencimento"], "vencimento"
                )
            changes.pop("data_vencimento")
        if "data_pagamento" in changes:
            pagamento.data_pagamento = parse_optional_datetime(changes.pop("data_pagamento"), "pagamento")
        if "forma_pagamento" in changes:
            pagamento.forma_pagamento = _validate_forma(changes.pop("forma_pagamento"))

        status = changes.pop("status", None)
        if status is not None:
            pagamento.status = status.value

        for field, value in changes.items():
            if field == "valor" and value is None:
                continue
            setattr(pagamento, field, value)

        await self.db.commit()
        return pagamento

    async def marcar_pago(self, pagamento_id: int, company_id: int) -> Pagamento:
        pagamento = await self._get_company_pagamento(pagamento_id, company_id)
        pagamento.status = PagamentoStatus.PAGO.value
        pagamento.data_pagamento = datetime.now(timezone.utc)
        await self.db.commit()

        logger.info(f"💰 Pagamento {pagamento.id} marcado como pago")
        return pagamento

    async def delete_pagamento(self, pagamento_id: int, company_id: int) -> None:
        pagamento = await self._get_company_pagamento(pagamento_id, company_id)
        await self.db.delete(pagamento)
        await self.db.commit()
        logger.info(f"🗑️ Pagamento {pagamento_id} removido")
