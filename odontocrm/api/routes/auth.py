"""
ROTAS: AUTENTICAÇÃO
====================

Login, registro, refresh de token e gestão de usuários da company.
"""

import logging
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.infrastructure.middleware.rate_limiter import limiter, login_rate_limit
from odontocrm.infrastructure.services.auth_service import issue_token_pair
from odontocrm.application.services.user_service import UserService
from odontocrm.domain.entities import User
from odontocrm.api.schemas import (
    LoginRequest,
    RefreshRequest,
    RegisterRequest,
    TokenResponse,
    UserUpdate,
)
from odontocrm.api.dependencies import get_active_user
from odontocrm.api.serializers import user_to_dict

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/auth", tags=["Autenticação"])


def _token_response(user: User) -> dict:
    return {**issue_token_pair(user), "user": user_to_dict(user, include_company=True)}


# ============================================
# ROTAS PÚBLICAS
# ============================================

@router.post("/login", response_model=TokenResponse)
@limiter.limit(login_rate_limit)
async def login(
    request: Request,
    payload: LoginRequest,
    db: AsyncSession = Depends(get_db),
):
    """Faz login e retorna access + refresh token."""
    user = await UserService(db).authenticate(payload.email, payload.password)
    return _token_response(user)


@router.post("/register", response_model=TokenResponse, status_code=201)
async def register(
    payload: RegisterRequest,
    db: AsyncSession = Depends(get_db),
):
    """Cadastra colaborador em uma company existente."""
    user = await UserService(db).register(
        email=payload.email,
        password=payload.password,
        name=payload.name,
        company_id=payload.company_id,
        role=payload.role,
        specialty=payload.specialty,
        unit_id=payload.unit_id,
    )
    return _token_response(user)


@router.post("/refresh", response_model=TokenResponse)
async def refresh(
    payload: RefreshRequest,
    db: AsyncSession = Depends(get_db),
):
    user = await UserService(db).refresh(payload.refresh_token)
    return _token_response(user)


# ============================================
# ROTAS AUTENTICADAS
# ============================================

@router.get("/me")
async def me(user: User = Depends(get_active_user)):
    """Retorna dados do usuário logado."""
    return user_to_dict(user, include_company=True)


@router.get("/users")
async def list_users(
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    users = await UserService(db).get_company_users(user.company_id)
    return [user_to_dict(u) for u in users]


@router.put("/users/{user_id}")
async def update_user(
    user_id: int,
    payload: UserUpdate,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await UserService(db).update_user(
        user, user_id, payload.model_dump(exclude_unset=True)
    )
    return user_to_dict(updated)


@router.delete("/users/{user_id}")
async def delete_user(
    user_id: int,
    user: User = Depends(get_active_user),
    db: AsyncSession = Depends(get_db),
):
    """Exclui colaborador (somente ADMIN; bloqueado se houver leads ou tarefas em aberto)."""
    deleted = await UserService(db).delete_user(user, user_id)
    return {
        "message": "Usuário excluído com sucesso",
        "deleted_user": {"id": deleted.id, "name": deleted.name, "email": deleted.email},
    }
