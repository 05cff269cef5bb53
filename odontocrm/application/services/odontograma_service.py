"""
SERVIÇO DE ODONTOGRAMA
=======================

Um odontograma por paciente. Na primeira leitura é criado vazio (32 dentes
hígidos).
"""

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.application.services.consulta_service import PACIENTE_NAO_ENCONTRADO
from odontocrm.application.services.lead_service import get_company_lead
from odontocrm.domain.entities import Odontograma
from odontocrm.domain.entities.enums import ToothStatus
from odontocrm.domain.entities.odontograma import empty_dentes
from odontocrm.domain.exceptions import NotFoundError, ValidationError

logger = logging.getLogger(__name__)

VALID_STATUSES = {status.value for status in ToothStatus}


def validate_dentes(dentes: dict) -> dict:
    """Confere o status de cada dente informado."""
    for numero, dente in dentes.items():
        status = (dente or {}).get("status")
        if status is not None and status not in VALID_STATUSES:
            raise ValidationError(f"Status inválido para o dente {numero}: {status}")
    return dentes


class OdontogramaService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def _find(self, lead_id: int) -> Optional[Odontograma]:
        result = await self.db.execute(select(Odontograma).where(Odontograma.lead_id == lead_id))
        return result.scalar_one_or_none()

    async def get_or_create(self, lead_id: int, company_id: int) -> Odontograma:
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)

        odontograma = await self._find(lead_id)
        if odontograma is None:
            odontograma = Odontograma(lead_id=lead_id, dentes=empty_dentes())
            self.db.add(odontograma)
            await self.db.commit()
            logger.info(f"🦷 Odontograma vazio criado para lead {lead_id}")

        return odontograma

    async def upsert(self, lead_id: int, company_id: int, dentes: Optional[dict]) -> Odontograma:
        """Cria (com os dentes enviados ou vazio) ou atualiza o existente."""
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)

        odontograma = await self._find(lead_id)
        if odontograma is not None:
            return await self.update(lead_id, company_id, dentes)

        odontograma = Odontograma(
            lead_id=lead_id,
            dentes=validate_dentes(dentes) if dentes else empty_dentes(),
        )
        self.db.add(odontograma)
        await self.db.commit()
        return odontograma

    async def update(self, lead_id: int, company_id: int, dentes: Optional[dict]) -> Odontograma:
        await get_company_lead(self.db, lead_id, company_id, PACIENTE_NAO_ENCONTRADO)

        odontograma = await self._find(lead_id)
        if odontograma is None:
            raise NotFoundError("Odontograma não encontrado")

        if dentes is not None:
            odontograma.dentes = validate_dentes(dentes)
            await self.db.commit()

        logger.info(f"🦷 Odontograma do lead {lead_id} atualizado")
        return odontograma
