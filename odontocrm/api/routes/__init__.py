"""Rotas da API."""

from .auth import router as auth_router
from .companies import router as companies_router
from .units import router as units_router
from .funnels import router as funnels_router
from .leads import router as leads_router
from .tasks import router as tasks_router
from .consultas import router as consultas_router
from .prescricoes import router as prescricoes_router
from .odontograma import router as odontograma_router
from .pagamentos import router as pagamentos_router
from .health import router as health_router


__all__ = [
    "auth_router",
    "companies_router",
    "units_router",
    "funnels_router",
    "leads_router",
    "tasks_router",
    "consultas_router",
    "prescricoes_router",
    "odontograma_router",
    "pagamentos_router",
    "health_router",
]
