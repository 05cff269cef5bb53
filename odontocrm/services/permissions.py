"""
Permission Service (RBAC)

Define o que cada role pode fazer dentro da company.
"""

from odontocrm.domain.entities.enums import UserRole
from odontocrm.domain.entities.models import User
from odontocrm.domain.exceptions import ForbiddenError


class PermissionService:
    """
    RBAC - Define o que cada role pode acessar.

    Examples:
        service = PermissionService()

        if service.can_perform_action(user, "manage_users"):
            ...

        # Ou, levantando ForbiddenError (403):
        service.require(user, "delete_unit", "Apenas administradores podem deletar unidades")
    """

    # Permissões por role (baseado em actions)
    ROLE_PERMISSIONS = {
        UserRole.SUPER_ADMIN: {
            "actions": ["*"],  # Tudo
        },
        UserRole.ADMIN: {
            "actions": [
                "manage_users",
                "create_unit",
                "update_unit",
                "delete_unit",
            ],
        },
        UserRole.MANAGER: {
            "actions": [
                "update_unit",
            ],
        },
        UserRole.WORKER: {
            "actions": [
                "update_unit",
            ],
        },
        UserRole.DENTIST: {
            "actions": [],
        },
    }

    def _role(self, user: User):
        try:
            return UserRole(user.role)
        except ValueError:
            return None

    def can_perform_action(self, user: User, action: str) -> bool:
        """
        Verifica se usuário pode executar ação.

        Args:
            user: Usuário
            action: Nome da ação (ex: "manage_users", "delete_unit")
        """
        role = self._role(user)
        if role is None:
            # Role inválido
            return False

        allowed_actions = self.ROLE_PERMISSIONS.get(role, {}).get("actions", [])
        return "*" in allowed_actions or action in allowed_actions

    def require(self, user: User, action: str, message: str) -> None:
        """Levanta ForbiddenError se o usuário não puder executar a ação."""
        if not self.can_perform_action(user, action):
            raise ForbiddenError(message)


def is_super_admin(user: User) -> bool:
    return user.role == UserRole.SUPER_ADMIN.value


permission_service = PermissionService()
