"""
SCHEMAS DE VALIDAÇÃO
=====================

Define a estrutura de dados de entrada da API.
Pydantic valida automaticamente os dados.

Nos schemas de update, campo ausente significa "não alterar"; use
`model_dump(exclude_unset=True)` para diferenciar de `null` explícito.
"""

from datetime import datetime
from typing import Any, Optional
from pydantic import BaseModel, EmailStr, Field

from odontocrm.domain.entities.enums import (
    PagamentoStatus,
    StatusVenda,
    TaskStatus,
    UserRole,
    UserSpecialty,
)


# ============================================
# AUTH
# ============================================

class LoginRequest(BaseModel):
    """Dados para login."""

    email: EmailStr
    password: str


class RegisterRequest(BaseModel):
    """Cadastro de colaborador em uma company existente."""

    email: EmailStr
    password: str = Field(..., min_length=6)
    name: str = Field(..., min_length=2, max_length=200)
    company_id: int
    role: Optional[UserRole] = None
    specialty: Optional[UserSpecialty] = None
    unit_id: Optional[int] = None


class RefreshRequest(BaseModel):
    refresh_token: str


class TokenResponse(BaseModel):
    """Resposta com tokens."""

    access_token: str
    refresh_token: str
    token_type: str = "bearer"
    expires_in: int
    user: dict


class UserUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    role: Optional[UserRole] = None
    specialty: Optional[UserSpecialty] = None
    unit_id: Optional[int] = None


# ============================================
# COMPANY
# ============================================

class CompanyCreate(BaseModel):
    """Nova clínica + administrador inicial."""

    name: str = Field(..., min_length=2, max_length=200)
    cnpj: str = Field(..., min_length=11, max_length=20)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")

    admin_name: str = Field(..., min_length=2, max_length=200)
    admin_email: EmailStr
    admin_password: str = Field(..., min_length=6)


class CompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    logo_url: Optional[str] = None
    primary_color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


# ============================================
# UNIT
# ============================================

class UnitCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    manager_id: Optional[int] = None


class UnitUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    code: Optional[str] = Field(None, max_length=50)
    address: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    manager_id: Optional[int] = None
    active: Optional[bool] = None


# ============================================
# FUNIL
# ============================================

class FunnelCreate(BaseModel):
    name: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    unit_id: Optional[int] = None


class FunnelUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    unit_id: Optional[int] = None


class FunnelStepCreate(BaseModel):
    name: str = Field(..., min_length=1, max_length=100)
    order: int = Field(..., ge=1)
    color: Optional[str] = Field(None, pattern=r"^#[0-9A-Fa-f]{6}$")


# ============================================
# LEAD
# ============================================

class LeadCreate(BaseModel):
    phone: str = Field(..., min_length=8, max_length=20)
    funnel_id: int
    step_id: int
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    unit_id: Optional[int] = None
    responsible_id: Optional[int] = None
    dentista_id: Optional[int] = None
    status_venda: Optional[StatusVenda] = None
    valor_venda: Optional[float] = Field(None, ge=0)
    valor_orcamento: Optional[float] = Field(None, ge=0)
    data_consulta: Optional[datetime] = None
    duracao_consulta: Optional[int] = Field(None, ge=15, le=480)
    tags: list[str] = Field(default_factory=list)
    tipo_procura: Optional[str] = None
    meio_captacao: Optional[str] = None
    observacoes: Optional[str] = None


class LeadUpdate(BaseModel):
    phone: Optional[str] = Field(None, min_length=8, max_length=20)
    funnel_id: Optional[int] = None
    step_id: Optional[int] = None
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    unit_id: Optional[int] = None
    responsible_id: Optional[int] = None
    dentista_id: Optional[int] = None
    status_venda: Optional[StatusVenda] = None
    valor_venda: Optional[float] = Field(None, ge=0)
    valor_orcamento: Optional[float] = Field(None, ge=0)
    data_consulta: Optional[datetime] = None
    duracao_consulta: Optional[int] = Field(None, ge=15, le=480)
    tags: Optional[list[str]] = None
    tipo_procura: Optional[str] = None
    meio_captacao: Optional[str] = None
    observacoes: Optional[str] = None


class LeadMoveRequest(BaseModel):
    step_id: int


# ============================================
# TASK
# ============================================

class TaskCreate(BaseModel):
    title: str = Field(..., min_length=2, max_length=200)
    description: Optional[str] = None
    assigned_id: int
    lead_id: Optional[int] = None
    due_date: Optional[datetime] = None


class TaskUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=2, max_length=200)
    description: Optional[str] = None
    assigned_id: Optional[int] = None
    due_date: Optional[datetime] = None
    status: Optional[TaskStatus] = None


# ============================================
# CONSULTA
# ============================================

class ConsultaCreate(BaseModel):
    """
    Registro de atendimento.

    `proxima_consulta` chega como texto e é validada pelo helper de datas
    (data inválida -> 400).
    """

    lead_id: int
    data_consulta: datetime
    duracao: Optional[int] = Field(None, ge=5, le=480)
    procedimentos: list[str] = Field(default_factory=list)
    dentes_atendidos: list[int] = Field(default_factory=list)
    anestesia_usada: Optional[str] = None
    materiais_usados: Optional[str] = None
    observacoes: Optional[str] = None
    compareceu: bool = True
    valor_cobrado: Optional[float] = Field(None, ge=0)
    proxima_consulta: Optional[str] = None


class ConsultaUpdate(BaseModel):
    data_consulta: Optional[datetime] = None
    duracao: Optional[int] = Field(None, ge=5, le=480)
    procedimentos: Optional[list[str]] = None
    dentes_atendidos: Optional[list[int]] = None
    anestesia_usada: Optional[str] = None
    materiais_usados: Optional[str] = None
    observacoes: Optional[str] = None
    compareceu: Optional[bool] = None
    valor_cobrado: Optional[float] = Field(None, ge=0)
    proxima_consulta: Optional[str] = None


class PrescricaoCreate(BaseModel):
    consulta_id: int
    medicamentos: list[dict[str, Any]] = Field(..., min_length=1)
    observacoes: Optional[str] = None


# ============================================
# ODONTOGRAMA
# ============================================

class OdontogramaPayload(BaseModel):
    """Mapa número do dente -> {status, observacoes}."""

    dentes: Optional[dict[str, dict[str, Any]]] = None


# ============================================
# PAGAMENTO
# ============================================

class PagamentoCreate(BaseModel):
    lead_id: int
    valor: float = Field(..., gt=0)
    forma_pagamento: Optional[str] = None
    data_vencimento: str
    data_pagamento: Optional[str] = None
    status: Optional[PagamentoStatus] = None
    numero_parcela: Optional[int] = Field(None, ge=1)
    total_parcelas: Optional[int] = Field(None, ge=1)
    observacoes: Optional[str] = None


class PagamentoUpdate(BaseModel):
    valor: Optional[float] = Field(None, gt=0)
    forma_pagamento: Optional[str] = None
    data_vencimento: Optional[str] = None
    data_pagamento: Optional[str] = None
    status: Optional[PagamentoStatus] = None
    numero_parcela: Optional[int] = Field(None, ge=1)
    total_parcelas: Optional[int] = Field(None, ge=1)
    observacoes: Optional[str] = None
