"""Model: Pagamento (parcela financeira de um paciente)."""

from datetime import datetime
from typing import Optional, TYPE_CHECKING
from sqlalchemy import String, ForeignKey, Text, Integer, DateTime, Numeric
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import PagamentoStatus

if TYPE_CHECKING:
    from .lead import Lead


class Pagamento(Base, TimestampMixin):
    __tablename__ = "pagamentos"

    id: Mapped[int] = mapped_column(primary_key=True)
    lead_id: Mapped[int] = mapped_column(ForeignKey("leads.id", ondelete="CASCADE"), index=True)

    valor: Mapped[float] = mapped_column(Numeric(12, 2, asdecimal=False), nullable=False)
    forma_pagamento: Mapped[Optional[str]] = mapped_column(String(30))
    data_vencimento: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    data_pagamento: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    status: Mapped[str] = mapped_column(String(20), default=PagamentoStatus.PENDENTE.value, index=True)

    numero_parcela: Mapped[Optional[int]] = mapped_column(Integer)
    total_parcelas: Mapped[Optional[int]] = mapped_column(Integer)
    observacoes: Mapped[Optional[str]] = mapped_column(Text)

    lead: Mapped["Lead"] = relationship(back_populates="pagamentos")
