"""Helpers compartilhados pelos testes."""

from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.domain.entities import User
from odontocrm.domain.entities.enums import UserRole, UserSpecialty
from odontocrm.infrastructure.services.auth_service import (
    build_token_claims,
    create_access_token,
    hash_password,
)

DEFAULT_PASSWORD = "senha123"


def auth_headers(user: User) -> dict:
    """Header Authorization com um access token válido para o usuário."""
    token = create_access_token(build_token_claims(user))
    return {"Authorization": f"Bearer {token}"}


async def make_user(
    db: AsyncSession,
    company_id: int,
    email: str,
    role: UserRole = UserRole.WORKER,
    name: str = "Colaborador",
    unit_id: int = None,
    password: str = DEFAULT_PASSWORD,
) -> User:
    user = User(
        company_id=company_id,
        unit_id=unit_id,
        name=name,
        email=email,
        password_hash=hash_password(password),
        role=role.value,
        specialty=UserSpecialty.GENERAL.value,
        active=True,
    )
    db.add(user)
    await db.commit()
    return user
