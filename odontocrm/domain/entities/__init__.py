"""Entidades do domínio."""
from .base import Base, TimestampMixin
from .enums import (
    UserRole,
    UserSpecialty,
    StatusVenda,
    TaskStatus,
    PagamentoStatus,
    FormaPagamento,
    ToothStatus,
)
from .models import Company, Unit, User
from .lead import Funnel, FunnelStep, Lead, DEFAULT_FUNNEL_NAME, DEFAULT_STEP_NAME
from .task import Task
from .consulta import Consulta, Prescricao
from .odontograma import Odontograma
from .pagamento import Pagamento

__all__ = [
    # Base
    "Base",
    "TimestampMixin",
    # Enums
    "UserRole",
    "UserSpecialty",
    "StatusVenda",
    "TaskStatus",
    "PagamentoStatus",
    "FormaPagamento",
    "ToothStatus",
    # Estrutura
    "Company",
    "Unit",
    "User",
    # CRM
    "Funnel",
    "FunnelStep",
    "Lead",
    "DEFAULT_FUNNEL_NAME",
    "DEFAULT_STEP_NAME",
    "Task",
    # Prontuário
    "Consulta",
    "Prescricao",
    "Odontograma",
    # Financeiro
    "Pagamento",
]
