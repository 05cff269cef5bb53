"""Serviços transversais."""

from .permissions import PermissionService, permission_service, is_super_admin

__all__ = ["PermissionService", "permission_service", "is_super_admin"]
