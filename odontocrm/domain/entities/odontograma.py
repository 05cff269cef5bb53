"""Model: Odontograma (mapa dos 32 dentes de um paciente)."""

from typing import TYPE_CHECKING
from sqlalchemy import ForeignKey
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin, JSONDictType
from .enums import ToothStatus

if TYPE_CHECKING:
    from .lead import Lead


TOTAL_DENTES = 32


def empty_dentes() -> dict:
    """Estrutura vazia: todos os dentes hígidos, sem observações."""
    return {
        str(numero): {"status": ToothStatus.HIGIDO.value, "observacoes": ""}
        for numero in range(1, TOTAL_DENTES + 1)
    }


class Odontograma(Base, TimestampMixin):
    __tablename__ = "odontogramas"

    id: Mapped[int] = mapped_column(primary_key=True)
    lead_id: Mapped[int] = mapped_column(
        ForeignKey("leads.id", ondelete="CASCADE"), unique=True, index=True
    )

    # MutableDict para o SQLAlchemy detectar mudanças internas no JSON
    dentes: Mapped[dict] = mapped_column(JSONDictType, default=empty_dentes)

    lead: Mapped["Lead"] = relationship(back_populates="odontograma")
