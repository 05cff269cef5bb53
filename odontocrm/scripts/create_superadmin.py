"""
Script para criar a empresa da plataforma e o SUPERADMIN em produção.
Pode ser executado quantas vezes precisar: ele não duplica registros.

Uso:
    SUPERADMIN_EMAIL=... SUPERADMIN_PASSWORD=... python -m odontocrm.scripts.create_superadmin
"""

import asyncio
import logging

from odontocrm.config import get_settings
from odontocrm.infrastructure.database import async_session
from odontocrm.infrastructure.logging_config import setup_logging
from odontocrm.application.services.company_service import CompanyService

settings = get_settings()
logger = logging.getLogger(__name__)


async def main():
    setup_logging(settings.log_level)

    if not settings.superadmin_configured:
        logger.error("❌ Defina SUPERADMIN_EMAIL e SUPERADMIN_PASSWORD")
        raise SystemExit(1)

    async with async_session() as session:
        user = await CompanyService(session).ensure_superadmin(
            email=settings.superadmin_email,
            password=settings.superadmin_password,
            company_name=settings.superadmin_company_name,
            company_cnpj=settings.superadmin_company_cnpj,
        )

    logger.info("💾 Commit concluído!", extra={"user_id": user.id})


if __name__ == "__main__":
    asyncio.run(main())
