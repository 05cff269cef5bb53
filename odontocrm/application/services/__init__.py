"""
Services de aplicação.

Cada serviço recebe a sessão do banco e concentra as regras de negócio de
um módulo, levantando os erros de `odontocrm.domain.exceptions`.
"""

from .user_service import UserService
from .company_service import CompanyService
from .unit_service import UnitService
from .funnel_service import FunnelService
from .lead_service import LeadService, get_company_lead
from .task_service import TaskService
from .consulta_service import ConsultaService
from .prescricao_service import PrescricaoService
from .odontograma_service import OdontogramaService
from .pagamento_service import PagamentoService

__all__ = [
    "UserService",
    "CompanyService",
    "UnitService",
    "FunnelService",
    "LeadService",
    "get_company_lead",
    "TaskService",
    "ConsultaService",
    "PrescricaoService",
    "OdontogramaService",
    "PagamentoService",
]
