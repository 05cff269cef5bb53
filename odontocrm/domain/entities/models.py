"""
MODELOS DO BANCO DE DADOS - ESTRUTURA DA CLÍNICA
=================================================

Company (tenant) -> Units (unidades físicas) -> Users (colaboradores).
"""
from typing import List, Optional, TYPE_CHECKING
from sqlalchemy import String, Boolean, ForeignKey, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, TimestampMixin
from .enums import UserRole, UserSpecialty

if TYPE_CHECKING:
    from .lead import Funnel, Lead
    from .task import Task


# ============================================
# COMPANY - Clínica cliente da plataforma (tenant)
# ============================================

class Company(Base, TimestampMixin):
    """Empresa (clínica) que contrata a plataforma. Raiz do tenant."""

    __tablename__ = "companies"

    id: Mapped[int] = mapped_column(primary_key=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    cnpj: Mapped[str] = mapped_column(String(20), unique=True, nullable=False, index=True)
    logo_url: Mapped[Optional[str]] = mapped_column(String(500))
    primary_color: Mapped[Optional[str]] = mapped_column(String(7))
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    users: Mapped[list["User"]] = relationship(back_populates="company", cascade="all, delete-orphan")
    units: Mapped[list["Unit"]] = relationship(back_populates="company", cascade="all, delete-orphan")
    funnels: Mapped[list["Funnel"]] = relationship(back_populates="company", cascade="all, delete-orphan")
    leads: Mapped[list["Lead"]] = relationship(back_populates="company", cascade="all, delete-orphan")
    tasks: Mapped[list["Task"]] = relationship(back_populates="company", cascade="all, delete-orphan")


# ============================================
# UNIT - Unidade física da clínica
# ============================================

class Unit(Base, TimestampMixin):
    """
    Unidade (endereço físico) de uma company.

    A unidade de código "SEDE" é criada junto com a company e nunca pode
    ser removida.
    """

    __tablename__ = "units"
    __table_args__ = (
        UniqueConstraint("company_id", "code", name="uq_units_company_code"),
    )

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    code: Mapped[Optional[str]] = mapped_column(String(50))
    address: Mapped[Optional[str]] = mapped_column(String(500))
    phone: Mapped[Optional[str]] = mapped_column(String(20))
    email: Mapped[Optional[str]] = mapped_column(String(255))
    manager_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("users.id", ondelete="SET NULL", use_alter=True, name="fk_units_manager_id_users"),
        nullable=True,
        index=True,
    )
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    company: Mapped["Company"] = relationship(back_populates="units")
    manager: Mapped[Optional["User"]] = relationship(foreign_keys=[manager_id])
    users: Mapped[List["User"]] = relationship(
        back_populates="unit", foreign_keys="User.unit_id"
    )


# ============================================
# USER - Colaboradores da clínica
# ============================================

class User(Base, TimestampMixin):
    """Usuário que acessa o sistema (admin, gestor, atendente, dentista)."""

    __tablename__ = "users"

    id: Mapped[int] = mapped_column(primary_key=True)
    company_id: Mapped[int] = mapped_column(ForeignKey("companies.id", ondelete="CASCADE"), index=True)
    unit_id: Mapped[Optional[int]] = mapped_column(
        ForeignKey("units.id", ondelete="SET NULL"), nullable=True, index=True
    )
    name: Mapped[str] = mapped_column(String(200), nullable=False)
    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    password_hash: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[str] = mapped_column(String(20), default=UserRole.WORKER.value)
    specialty: Mapped[str] = mapped_column(String(30), default=UserSpecialty.GENERAL.value)
    active: Mapped[bool] = mapped_column(Boolean, default=True)

    company: Mapped["Company"] = relationship(back_populates="users")
    unit: Mapped[Optional["Unit"]] = relationship(back_populates="users", foreign_keys=[unit_id])
