"""
MODELO: FUNIL, ETAPAS E LEADS
==============================

O lead (paciente em potencial ou atual) percorre as etapas ordenadas de um
funil de vendas. A data da próxima consulta fica desnormalizada no próprio
lead (`data_consulta`) para alimentar a agenda.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, ForeignKey, Text, Integer, DateTime, Numeric, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, JSONType
from .enums import StatusVenda

if TYPE_CHECKING:
    from .models import Company, Unit, User
    from .consulta import Consulta
    from .pagamento import Pagamento
    from .odontograma import Odontograma


DEFAULT_FUNNEL_NAME = "Funil Padrão"
DEFAULT_STEP_NAME = "Novo Lead"


class Funnel(Base, TimestampMixin):
    """Funil de vendas da company (opcionalmente restrito a uma unidade)."""

    __tablename__ = "funnels"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    unit_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    description: Mapped[Optional[str]] = mapped_column(Text)

    company: Mapped["Company"] = relationship(back_populates="funnels")
    steps: Mapped[list["FunnelStep"]] = relationship(
        back_populates="funnel",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="FunnelStep.order",
    )

    @property
    def is_default(self) -> bool:
        return self.name == DEFAULT_FUNNEL_NAME


class FunnelStep(Base, TimestampMixin):
    """Etapa de um funil. A ordem é única dentro do funil."""

    __tablename__ = "funnel_steps"
    __table_args__ = (
        UniqueConstraint("funnel_id", "order", name="uq_funnel_steps_funnel_order"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    funnel_id: Mapped[int] = mapped_column(ForeignKey("funnels.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    order: Mapped[int] = mapped_column(Integer, nullable=False)
    color: Mapped[str] = mapped_column(String(7), default="#6B7280")

    funnel: Mapped["Funnel"] = relationship(back_populates="steps")


class Lead(Base, TimestampMixin):
    """Lead / paciente da clínica."""

    __tablename__ = "leads"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    unit_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True
    )
    funnel_id: Mapped[int] = mapped_column(ForeignKey("funnels.id", ondelete="RESTRICT"), index=True)
    step_id: Mapped[int] = mapped_column(ForeignKey("funnel_steps.id", ondelete="RESTRICT"), index=True)

    # ==========================================
    # DADOS DO PACIENTE
    # ==========================================
    phone: Mapped[str] = mapped_column(String(20), nullable=False, index=True)
    name: Mapped[Optional[str]] = mapped_column(String(200))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    tags: Mapped[list] = mapped_column(JSONType, default=list)
    observacoes: Mapped[Optional[str]] = mapped_column(Text)

    # ==========================================
    # COMERCIAL
    # ==========================================
    status_venda: Mapped[str] = mapped_column(
        String(30), default=StatusVenda.QUALIFICANDO.value, index=True
    )
    valor_venda: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False))
    valor_orcamento: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False))
    tipo_procura: Mapped[Optional[str]] = mapped_column(String(30))
    meio_captacao: Mapped[Optional[str]] = mapped_column(String(30))

    # ==========================================
    # AGENDA (espelho da próxima consulta)
    # ==========================================
    data_consulta: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    duracao_consulta: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)

    # ==========================================
    # RESPONSÁVEIS
    # ==========================================
    responsible_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )
    dentista_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    # ==========================================
    # RELACIONAMENTOS
    # ==========================================
    company: Mapped["Company"] = relationship(back_populates="leads")
    unit: Mapped[Optional["Unit"]] = relationship()
    funnel: Mapped["Funnel"] = relationship()
    step: Mapped["FunnelStep"] = relationship()
    responsible: Mapped[Optional["User"]] = relationship(foreign_keys=[responsible_id])
    dentista: Mapped[Optional["User"]] = relationship(foreign_keys=[dentista_id])
    consultas: Mapped[list["Consulta"]] = relationship(
        back_populates="lead", cascade="all, delete-orphan", passive_deletes=True
    )
    pagamentos: Mapped[list["Pagamento"]] = relationship(
        back_populates="lead", cascade="all, delete-orphan", passive_deletes=True
    )
    odontograma: Mapped[Optional["Odontograma"]] = relationship(
        back_populates="lead", cascade="all, delete-orphan", passive_deletes=True, uselist=False
    )
