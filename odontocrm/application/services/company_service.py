"""
SERVIÇO DE EMPRESAS (TENANTS)
==============================

Administração das clínicas clientes. Usado apenas pelo SUPER_ADMIN e pelo
bootstrap do superadmin na inicialização.
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.domain.entities import Company, Funnel, Lead, Task, Unit, User
from odontocrm.domain.entities.enums import UserRole, UserSpecialty
from odontocrm.domain.exceptions import ConflictError, ForbiddenError, NotFoundError
from odontocrm.infrastructure.services.auth_service import hash_password
from odontocrm.services.permissions import is_super_admin

logger = logging.getLogger(__name__)

SEDE_UNIT_NAME = "Sede"
SEDE_UNIT_CODE = "SEDE"


def require_super_admin(user: User) -> None:
    if not is_super_admin(user):
        raise ForbiddenError("Acesso restrito ao super administrador")


class CompanyService:

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_company(self, data: dict) -> tuple[Company, User]:
        """
        Cria company + usuário ADMIN + unidade SEDE numa única transação.

        Raises:
            ConflictError: CNPJ ou email do admin já cadastrados.
        """
        existing_company = await self.db.execute(
            select(Company.id).where(Company.cnpj == data["cnpj"])
        )
        if existing_company.scalar_one_or_none():
            raise ConflictError("CNPJ já cadastrado")

        existing_user = await self.db.execute(
            select(User.id).where(User.email == data["admin_email"])
        )
        if existing_user.scalar_one_or_none():
            raise ConflictError("Email do administrador já cadastrado")

        company = Company(
            name=data["name"],
            cnpj=data["cnpj"],
            logo_url=data.get("logo_url"),
            primary_color=data.get("primary_color"),
            active=True,
        )
        self.db.add(company)
        await self.db.flush()  # Gera ID

        sede = Unit(company_id=company.id, name=SEDE_UNIT_NAME, code=SEDE_UNIT_CODE, active=True)
        self.db.add(sede)
        await self.db.flush()

        admin = User(
            company_id=company.id,
            unit_id=sede.id,
            name=data["admin_name"],
            email=data["admin_email"],
            password_hash=hash_password(data["admin_password"]),
            role=UserRole.ADMIN.value,
            specialty=UserSpecialty.GENERAL.value,
            active=True,
        )
        self.db.add(admin)
        await self.db.commit()

        logger.info(
            "Empresa criada",
            extra={"company_id": company.id, "admin_id": admin.id, "cnpj": company.cnpj},
        )
        return company, admin

    async def get_counts(self, company_id: int) -> dict:
        users = await self.db.scalar(select(func.count(User.id)).where(User.company_id == company_id))
        leads = await self.db.scalar(select(func.count(Lead.id)).where(Lead.company_id == company_id))
        funnels = await self.db.scalar(
            select(func.count(Funnel.id)).where(Funnel.company_id == company_id)
        )
        tasks = await self.db.scalar(select(func.count(Task.id)).where(Task.company_id == company_id))
        return {
            "users": users or 0,
            "leads": leads or 0,
            "funnels": funnels or 0,
            "tasks": tasks or 0,
        }

    async def list_companies(self) -> list[tuple[Company, dict]]:
        result = await self.db.execute(
            select(Company).order_by(Company.created_at.desc(), Company.id.desc())
        )
        companies = result.scalars().all()
        return [(company, await self.get_counts(company.id)) for company in companies]

    async def get_stats(self) -> dict:
        return {
            "total_companies": await self.db.scalar(select(func.count(Company.id))) or 0,
            "total_users": await self.db.scalar(select(func.count(User.id))) or 0,
            "total_leads": await self.db.scalar(select(func.count(Lead.id))) or 0,
        }

    async def get_company(self, company_id: int) -> Company:
        company = await self.db.get(Company, company_id)
        if not company:
            raise NotFoundError("Empresa não encontrada")
        return company

    async def update_company(self, company_id: int, changes: dict) -> Company:
        company = await self.get_company(company_id)
        for field, value in changes.items():
            if value is None and field == "name":
                continue
            setattr(company, field, value)
        await self.db.commit()
        logger.info(f"✏️ Empresa {company.id} atualizada")
        return company

    async def toggle_active(self, company_id: int) -> Company:
        company = await self.get_company(company_id)
        company.active = not company.active
        await self.db.commit()
        logger.info(f"🔁 Empresa {company.id} active={company.active}")
        return company

    async def ensure_superadmin(
        self,
        email: str,
        password: str,
        company_name: str,
        company_cnpj: str,
    ) -> Optional[User]:
        """
        Garante a company da plataforma e o usuário SUPER_ADMIN.
        Pode ser executado quantas vezes precisar: não duplica registros.
        """
        result = await self.db.execute(select(Company).where(Company.cnpj == company_cnpj))
        company = result.scalar_one_or_none()

        if not company:
            company = Company(name=company_name, cnpj=company_cnpj, active=True)
            self.db.add(company)
            await self.db.flush()
            logger.info(f"✅ Empresa da plataforma criada: {company.name}")

        result = await self.db.execute(select(User).where(User.email == email))
        user = result.scalar_one_or_none()

        if not user:
            user = User(
                name="Superadmin",
                email=email,
                password_hash=hash_password(password),
                role=UserRole.SUPER_ADMIN.value,
                specialty=UserSpecialty.GENERAL.value,
                company_id=company.id,
                active=True,
            )
            self.db.add(user)
            logger.info(f"✅ Superadmin criado: {email}")
        else:
            user.role = UserRole.SUPER_ADMIN.value
            user.active = True
            logger.info(f"ℹ️ Superadmin já existia, dados atualizados: {email}")

        await self.db.commit()
        return user
