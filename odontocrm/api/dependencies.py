"""
DEPENDENCIES (Dependências)
============================

Funções que são injetadas nas rotas para validação.
"""

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.infrastructure.database import get_db
from odontocrm.infrastructure.services.auth_service import decode_access_token
from odontocrm.domain.entities import Company, User

# Esquema de autenticação Bearer
security = HTTPBearer(auto_error=False)


async def get_current_user(
    credentials: HTTPAuthorizationCredentials = Depends(security),
    db: AsyncSession = Depends(get_db),
) -> User:
    """
    Valida o token e retorna o usuário autenticado (com a company carregada).

    Uso nas rotas:
        @router.get("/rota-protegida")
        async def rota(user: User = Depends(get_current_user)):
            # user está disponível aqui
    """
    if credentials is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token não informado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    payload = decode_access_token(credentials.credentials)

    if not payload:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido ou expirado",
            headers={"WWW-Authenticate": "Bearer"},
        )

    user_id = payload.get("sub")
    if not user_id:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token inválido",
        )

    # Busca usuário no banco
    result = await db.execute(
        select(User)
        .where(User.id == int(user_id))
        .where(User.active == True)  # noqa: E712
        .options(selectinload(User.company))
    )
    user = result.scalar_one_or_none()

    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Usuário não encontrado",
        )

    return user


async def get_current_company(
    user: User = Depends(get_current_user),
) -> Company:
    """
    Retorna a company do usuário autenticado (403 se inativa).
    """
    company = user.company

    if not company or not company.active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Empresa não encontrada ou inativa",
        )

    return company


async def get_active_user(
    user: User = Depends(get_current_user),
    company: Company = Depends(get_current_company),
) -> User:
    """Usuário autenticado cuja company está ativa (padrão das rotas do tenant)."""
    return user
