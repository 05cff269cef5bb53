"""Base e mixins para todos os modelos do banco."""

from datetime import datetime
from sqlalchemy import DateTime, JSON, func
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.ext.mutable import MutableDict
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


# JSONB no PostgreSQL, JSON genérico nos demais (SQLite dos testes)
JSONType = JSON().with_variant(JSONB(), "postgresql")

# Instância própria: as_mutable() registra o tipo recebido, então não pode
# reaproveitar JSONType (usado por colunas de lista)
JSONDictType = MutableDict.as_mutable(JSON().with_variant(JSONB(), "postgresql"))


class Base(DeclarativeBase):
    """Classe base para todos os modelos."""
    pass


class TimestampMixin:
    """Adiciona created_at e updated_at automáticos."""
    
    # Busca os valores gerados pelo banco logo após INSERT/UPDATE
    __mapper_args__ = {"eager_defaults": True}

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False
    )
