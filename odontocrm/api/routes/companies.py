"""
ROTAS: EMPRESAS (SUPER ADMIN)
==============================

Gestão das clínicas clientes da plataforma.
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.application.services.company_service import CompanyService, require_super_admin
from odontocrm.domain.entities import User
from odontocrm.api.schemas import CompanyCreate, CompanyUpdate
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import company_to_dict, user_to_dict

router = APIRouter(prefix="/companies", tags=["Empresas"])


async def get_super_admin(user: User = Depends(get_active_user)) -> User:
    require_super_admin(user)
    return user


@router.post("", status_code=201)
async def create_company(
    payload: CompanyCreate,
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    """Cria company + ADMIN + unidade SEDE."""
    company, admin = await CompanyService(db).create_company(payload.model_dump())
    return {"company": company_to_dict(company), "admin": user_to_dict(admin)}


@router.get("")
async def list_companies(
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    companies = await CompanyService(db).list_companies()
    return [company_to_dict(company, counts) for company, counts in companies]


@router.get("/stats")
async def company_stats(
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    return await CompanyService(db).get_stats()


@router.get("/{company_id}")
async def get_company(
    company_id: int,
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    service = CompanyService(db)
    company = await service.get_company(company_id)
    return company_to_dict(company, await service.get_counts(company.id))


@router.patch("/{company_id}")
async def update_company(
    company_id: int,
    payload: CompanyUpdate,
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await CompanyService(db).update_company(
        company_id, payload.model_dump(exclude_unset=True)
    )
    return company_to_dict(company)


@router.patch("/{company_id}/toggle-active")
async def toggle_company_active(
    company_id: int,
    user: User = Depends(get_super_admin),
    db: AsyncSession = Depends(get_db),
):
    company = await CompanyService(db).toggle_active(company_id)
    return company_to_dict(company)
