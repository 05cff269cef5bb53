"""
Migration: Schema inicial
==========================

Cria as tabelas da clínica (companies, units, users), do CRM (funnels,
funnel_steps, leads, tasks) e do prontuário (consultas, prescricoes,
odontogramas, pagamentos).

Revision ID: 20261019_initial_schema
Revises:
Create Date: 2026-10-19
"""

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import JSONB


# revision identifiers
revision = '20261019_initial_schema'
down_revision = None
branch_labels = None
depends_on = None


JSON_TYPE = sa.JSON().with_variant(JSONB(), "postgresql")


def _timestamps():
    return [
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
        sa.Column("updated_at", sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=False),
    ]


def upgrade():
    """Cria todas as tabelas."""

    # ==========================================================
    # ESTRUTURA DA CLÍNICA
    # ==========================================================
    op.create_table(
        "companies",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("cnpj", sa.String(20), nullable=False),
        sa.Column("logo_url", sa.String(500)),
        sa.Column("primary_color", sa.String(7)),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_companies_cnpj", "companies", ["cnpj"], unique=True)

    # manager_id recebe a FK depois que users existir (ciclo units <-> users)
    op.create_table(
        "units",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("code", sa.String(50)),
        sa.Column("address", sa.String(500)),
        sa.Column("phone", sa.String(20)),
        sa.Column("email", sa.String(255)),
        sa.Column("manager_id", sa.Integer()),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("company_id", "code", name="uq_units_company_code"),
    )
    op.create_index("ix_units_company_id", "units", ["company_id"])
    op.create_index("ix_units_manager_id", "units", ["manager_id"])

    op.create_table(
        "users",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id", ondelete="SET NULL")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("specialty", sa.String(30), nullable=False),
        sa.Column("active", sa.Boolean(), nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)
    op.create_index("ix_users_company_id", "users", ["company_id"])
    op.create_index("ix_users_unit_id", "users", ["unit_id"])

    op.create_foreign_key(
        "fk_units_manager_id_users", "units", "users", ["manager_id"], ["id"], ondelete="SET NULL"
    )

    # ==========================================================
    # CRM
    # ==========================================================
    op.create_table(
        "funnels",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id", ondelete="SET NULL")),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_funnels_company_id", "funnels", ["company_id"])
    op.create_index("ix_funnels_unit_id", "funnels", ["unit_id"])

    op.create_table(
        "funnel_steps",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("funnel_id", sa.Integer(), sa.ForeignKey("funnels.id", ondelete="CASCADE"), nullable=False),
        sa.Column("name", sa.String(100), nullable=False),
        sa.Column("order", sa.Integer(), nullable=False),
        sa.Column("color", sa.String(7), nullable=False),
        *_timestamps(),
        sa.UniqueConstraint("funnel_id", "order", name="uq_funnel_steps_funnel_order"),
    )
    op.create_index("ix_funnel_steps_funnel_id", "funnel_steps", ["funnel_id"])

    op.create_table(
        "leads",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("unit_id", sa.Integer(), sa.ForeignKey("units.id", ondelete="SET NULL")),
        sa.Column("funnel_id", sa.Integer(), sa.ForeignKey("funnels.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("step_id", sa.Integer(), sa.ForeignKey("funnel_steps.id", ondelete="RESTRICT"), nullable=False),
        sa.Column("phone", sa.String(20), nullable=False),
        sa.Column("name", sa.String(200)),
        sa.Column("email", sa.String(255)),
        sa.Column("tags", JSON_TYPE, nullable=False),
        sa.Column("observacoes", sa.Text()),
        sa.Column("status_venda", sa.String(30), nullable=False),
        sa.Column("valor_venda", sa.Numeric(12, 2)),
        sa.Column("valor_orcamento", sa.Numeric(12, 2)),
        sa.Column("tipo_procura", sa.String(30)),
        sa.Column("meio_captacao", sa.String(30)),
        sa.Column("data_consulta", sa.DateTime(timezone=True)),
        sa.Column("duracao_consulta", sa.Integer()),
        sa.Column("responsible_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("dentista_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        *_timestamps(),
    )
    for column in ("company_id", "unit_id", "funnel_id", "step_id", "phone", "status_venda", "responsible_id", "dentista_id"):
        op.create_index(f"ix_leads_{column}", "leads", [column])

    op.create_table(
        "tasks",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("company_id", sa.Integer(), sa.ForeignKey("companies.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE")),
        sa.Column("assigned_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("title", sa.String(200), nullable=False),
        sa.Column("description", sa.Text()),
        sa.Column("due_date", sa.DateTime(timezone=True)),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    for column in ("company_id", "lead_id", "assigned_id", "status"):
        op.create_index(f"ix_tasks_{column}", "tasks", [column])

    # ==========================================================
    # PRONTUÁRIO E FINANCEIRO
    # ==========================================================
    op.create_table(
        "consultas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dentista_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("data_consulta", sa.DateTime(timezone=True), nullable=False),
        sa.Column("duracao", sa.Integer(), nullable=False),
        sa.Column("procedimentos", JSON_TYPE, nullable=False),
        sa.Column("dentes_atendidos", JSON_TYPE, nullable=False),
        sa.Column("anestesia_usada", sa.String(200)),
        sa.Column("materiais_usados", sa.Text()),
        sa.Column("observacoes", sa.Text()),
        sa.Column("compareceu", sa.Boolean(), nullable=False),
        sa.Column("valor_cobrado", sa.Numeric(12, 2)),
        sa.Column("proxima_consulta", sa.DateTime(timezone=True)),
        *_timestamps(),
    )
    op.create_index("ix_consultas_lead_id", "consultas", ["lead_id"])
    op.create_index("ix_consultas_dentista_id", "consultas", ["dentista_id"])

    op.create_table(
        "prescricoes",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("consulta_id", sa.Integer(), sa.ForeignKey("consultas.id", ondelete="CASCADE"), nullable=False),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dentista_id", sa.Integer(), sa.ForeignKey("users.id", ondelete="SET NULL")),
        sa.Column("medicamentos", JSON_TYPE, nullable=False),
        sa.Column("observacoes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_prescricoes_consulta_id", "prescricoes", ["consulta_id"])
    op.create_index("ix_prescricoes_lead_id", "prescricoes", ["lead_id"])

    op.create_table(
        "odontogramas",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("dentes", JSON_TYPE, nullable=False),
        *_timestamps(),
    )
    op.create_index("ix_odontogramas_lead_id", "odontogramas", ["lead_id"], unique=True)

    op.create_table(
        "pagamentos",
        sa.Column("id", sa.Integer(), primary_key=True),
        sa.Column("lead_id", sa.Integer(), sa.ForeignKey("leads.id", ondelete="CASCADE"), nullable=False),
        sa.Column("valor", sa.Numeric(12, 2), nullable=False),
        sa.Column("forma_pagamento", sa.String(30)),
        sa.Column("data_vencimento", sa.DateTime(timezone=True), nullable=False),
        sa.Column("data_pagamento", sa.DateTime(timezone=True)),
        sa.Column("status", sa.String(20), nullable=False),
        sa.Column("numero_parcela", sa.Integer()),
        sa.Column("total_parcelas", sa.Integer()),
        sa.Column("observacoes", sa.Text()),
        *_timestamps(),
    )
    op.create_index("ix_pagamentos_lead_id", "pagamentos", ["lead_id"])
    op.create_index("ix_pagamentos_status", "pagamentos", ["status"])


def downgrade():
    """Remove todas as tabelas (ordem inversa das FKs)."""
    op.drop_table("pagamentos")
    op.drop_table("odontogramas")
    op.drop_table("prescricoes")
    op.drop_table("consultas")
    op.drop_table("tasks")
    op.drop_table("leads")
    op.drop_table("funnel_steps")
    op.drop_table("funnels")
    op.drop_constraint("fk_units_manager_id_users", "units", type_="foreignkey")
    op.drop_table("users")
    op.drop_table("units")
    op.drop_table("companies")
