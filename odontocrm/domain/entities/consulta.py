"""
Model: Consulta e Prescrição
=============================

Consulta é o registro clínico de um atendimento feito por um dentista a um
lead. Quando `proxima_consulta` é informada, a data é espelhada no lead
(`Lead.data_consulta`) dentro da mesma transação.
"""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, Text, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, JSONType

if TYPE_CHECKING:
    from .lead import Lead
    from .models import User


DEFAULT_DURACAO_MINUTOS = 60


class Consulta(Base, TimestampMixin):
    """Atendimento registrado para um lead."""

    __tablename__ = "consultas"

    id: Mapped[int] = mapped_column(primary_key=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), index=True)
    dentista_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True
    )

    data_consulta: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    duracao: Mapped[int] = mapped_column(Integer, default=DEFAULT_DURACAO_MINUTOS)

    # ==========================================
    # PRONTUÁRIO
    # ==========================================
    procedimentos: Mapped[list] = mapped_column(JSONType, default=list)
    dentes_atendidos: Mapped[list] = mapped_column(JSONType, default=list)
    anestesia_usada: Mapped[Optional[str]] = mapped_column(String(200))
    materiais_usados: Mapped[Optional[str]] = mapped_column(Text)
    observacoes: Mapped[Optional[str]] = mapped_column(Text)
    compareceu: Mapped[bool] = mapped_column(Boolean, default=True)
    valor_cobrado: Mapped[Optional[float]] = mapped_column(Numeric(12, 2, asdecimal=False))

    proxima_consulta: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)

    lead: Mapped["Lead"] = relationship(back_populates="consultas")
    dentista: Mapped[Optional["User"]] = relationship()
    prescricoes: Mapped[list["Prescricao"]] = relationship(
        back_populates="consulta",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Prescricao.created_at.desc()",
    )


class Prescricao(Base, TimestampMixin):
    """Receita emitida em uma consulta."""

    __tablename__ = "prescricoes"

    id: Mapped[int] = mapped_column(primary_key=True)
    consulta_id: Mapped[int] = mapped_column(ForeignKey("consultas.id", ondelete="CASCADE"), index=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), index=True)
    dentista_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL"), nullable=True
    )

    # Ex: [{"nome": "Amoxicilina 500mg", "posologia": "8/8h por 7 dias"}]
    medicamentos: Mapped[list] = mapped_column(JSONType, default=list)
    observacoes: Mapped[Optional[str]] = mapped_column(Text)

    consulta: Mapped["Consulta"] = relationship(back_populates="prescricoes")
    dentista: Mapped[Optional["User"]] = relationship()
