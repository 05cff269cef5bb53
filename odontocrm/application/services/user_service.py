"""
SERVIÇO DE USUÁRIOS / AUTENTICAÇÃO
===================================

Login, cadastro, refresh de token e gestão dos colaboradores de uma company.
"""

import logging
from typing import Optional

from sqlalchemy import select, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from odontocrm.domain.entities import Company, Lead, Task, Unit, User
from odontocrm.domain.entities.enums import OPEN_TASK_STATUSES, UserRole, UserSpecialty
from odontocrm.domain.exceptions import (
    ConflictError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)
from odontocrm.infrastructure.services.auth_service import (
    decode_refresh_token,
    hash_password,
    verify_password,
)
from odontocrm.services.permissions import is_super_admin, permission_service

logger = logging.getLogger(__name__)


class UserService:
    """Regras de negócio de autenticação e colaboradores."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ==========================================
    # AUTENTICAÇÃO
    # ==========================================

    async def get_user_with_company(self, user_id: int) -> Optional[User]:
        result = await self.db.execute(
            select(User).where(User.id == user_id).options(selectinload(User.company))
        )
        return result.scalar_one_or_none()

    async def authenticate(self, email: str, password: str) -> User:
        """Valida credenciais (bcrypt). Levanta 401 ou 403."""
        result = await self.db.execute(
            select(User).where(User.email == email).options(selectinload(User.company))
        )
        user = result.scalar_one_or_none()

        if not user or not verify_password(password, user.password_hash):
            logger.warning("Tentativa de login inválida", extra={"email": email})
            raise UnauthorizedError("Credenciais inválidas")

        if not user.active:
            raise ForbiddenError("Usuário inativo. Entre em contato com o suporte.")

        if user.company and not user.company.active:
            raise ForbiddenError("Empresa inativa. Entre em contato com o suporte.")

        logger.info("Login realizado", extra={"user_id": user.id, "company_id": user.company_id})
        return user

    async def register(
        self,
        email: str,
        password: str,
        name: str,
        company_id: int,
        role: Optional[UserRole] = None,
        specialty: Optional[UserSpecialty] = None,
        unit_id: Optional[int] = None,
    ) -> User:
        """Cadastra colaborador em uma company existente."""
        if role == UserRole.SUPER_ADMIN:
            raise ForbiddenError("Não é permitido cadastrar SUPER_ADMIN")

        existing = await self.db.execute(select(User.id).where(User.email == email))
        if existing.scalar_one_or_none():
            raise ConflictError("Usuário já existe")

        company = await self.db.get(Company, company_id)
        if not company:
            raise NotFoundError("Empresa não encontrada")

        if unit_id is not None:
            await self._get_company_unit(unit_id, company_id)

        user = User(
            email=email,
            password_hash=hash_password(password),
            name=name,
            role=(role or UserRole.WORKER).value,
            specialty=(specialty or UserSpecialty.GENERAL).value,
            company_id=company_id,
            unit_id=unit_id,
            active=True,
        )
        self.db.add(user)
        await self.db.commit()

        logger.info(f"✅ Usuário {user.id} cadastrado na empresa {company_id}")
        return await self.get_user_with_company(user.id)

    async def refresh(self, refresh_token: str) -> User:
        """Valida o refresh token e devolve o usuário dono dele."""
        payload = decode_refresh_token(refresh_token)
        if not payload or not payload.get("sub"):
            raise UnauthorizedError("Refresh token inválido")

        user = await self.get_user_with_company(int(payload["sub"]))
        if not user or not user.active:
            raise UnauthorizedError("Refresh token inválido")

        return user

    # ==========================================
    # COLABORADORES
    # ==========================================

    async def get_company_users(self, company_id: int) -> list[User]:
        """Colaboradores da company (SUPER_ADMIN fica de fora), por nome."""
        result = await self.db.execute(
            select(User)
            .where(User.company_id == company_id)
            .where(User.role != UserRole.SUPER_ADMIN.value)
            .order_by(User.name.asc())
        )
        return list(result.scalars().all())

    async def update_user(self, current_user: User, user_id: int, changes: dict) -> User:
        """
        Atualiza nome, role, especialidade e unidade.

        `changes` vem de `model_dump(exclude_unset=True)`: `unit_id` ausente
        mantém a unidade, `unit_id = None` remove o vínculo.
        """
        permission_service.require(
            current_user, "manage_users", "Apenas administradores podem atualizar usuários"
        )

        user = await self._get_company_user(user_id, current_user.company_id)

        if changes.get("name"):
            user.name = changes["name"]
        if changes.get("role"):
            role = UserRole(changes["role"])
            if role == UserRole.SUPER_ADMIN and not is_super_admin(current_user):
                raise ForbiddenError("Apenas SUPER_ADMIN pode atribuir o papel SUPER_ADMIN")
            user.role = role.value
        if changes.get("specialty"):
            user.specialty = UserSpecialty(changes["specialty"]).value
        if "unit_id" in changes:
            unit_id = changes["unit_id"]
            if unit_id is not None:
                await self._get_company_unit(unit_id, current_user.company_id)
            user.unit_id = unit_id

        await self.db.commit()
        logger.info(f"✏️ Usuário {user.id} atualizado por {current_user.id}")
        return user

    async def delete_user(self, current_user: User, user_id: int) -> User:
        """
        Exclui colaborador sem leads atribuídos e sem tarefas em aberto.

        Returns:
            O usuário removido (para montar a resposta).
        """
        permission_service.require(
            current_user, "manage_users", "Apenas administradores podem excluir usuários"
        )

        if current_user.id == user_id:
            raise ValidationError("Você não pode excluir sua própria conta")

        user = await self._get_company_user(user_id, current_user.company_id)

        leads_count = await self.db.scalar(
            select(func.count(Lead.id)).where(Lead.responsible_id == user_id)
        )
        if leads_count:
            raise ValidationError(
                f"Não é possível excluir este usuário pois ele possui {leads_count} lead(s) "
                f"atribuído(s). Transfira os leads para outro usuário antes de excluir."
            )

        tasks_count = await self.db.scalar(
            select(func.count(Task.id))
            .where(Task.assigned_id == user_id)
            .where(Task.status.in_(OPEN_TASK_STATUSES))
        )
        if tasks_count:
            raise ValidationError(
                f"Não é possível excluir este usuário pois ele possui {tasks_count} tarefa(s) "
                f"pendente(s). Conclua ou reatribua as tarefas antes de excluir."
            )

        await self.db.delete(user)
        await self.db.commit()

        logger.info(f"🗑️ Usuário {user_id} excluído por {current_user.id}")
        return user

    # ==========================================
    # HELPERS
    # ==========================================

    async def _get_company_user(self, user_id: int, company_id: int) -> User:
        result = await self.db.execute(
            select(User).where(User.id == user_id, User.company_id == company_id)
        )
        user = result.scalar_one_or_none()
        if not user:
            raise NotFoundError("Usuário não encontrado")
        return user

    async def _get_company_unit(self, unit_id: int, company_id: int) -> Unit:
        result = await self.db.execute(
            select(Unit).where(Unit.id == unit_id, Unit.company_id == company_id)
        )
        unit = result.scalar_one_or_none()
        if not unit:
            raise NotFoundError("Unidade não encontrada")
        return unit
