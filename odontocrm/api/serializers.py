"""
SERIALIZERS
============

Convertem entidades em dicts de resposta. Só acessam relacionamentos que
os serviços já carregaram com `selectinload`.
"""

from typing import Optional

from odontocrm.application.helpers.date_parsing import to_iso
from odontocrm.domain.entities import (
    Company,
    Consulta,
    Funnel,
    FunnelStep,
    Lead,
    Odontograma,
    Pagamento,
    Prescricao,
    Task,
    Unit,
    User,
)


def user_summary(user: Optional[User]) -> Optional[dict]:
    if user is None:
        return None
    return {"id": user.id, "name": user.name}


def company_brief(company: Optional[Company]) -> Optional[dict]:
    if company is None:
        return None
    return {
        "id": company.id,
        "name": company.name,
        "logo_url": company.logo_url,
        "primary_color": company.primary_color,
    }


def user_to_dict(user: User, include_company: bool = False) -> dict:
    data = {
        "id": user.id,
        "email": user.email,
        "name": user.name,
        "role": user.role,
        "specialty": user.specialty,
        "unit_id": user.unit_id,
        "company_id": user.company_id,
        "active": user.active,
        "created_at": to_iso(user.created_at),
    }
    if include_company:
        data["company"] = company_brief(user.company)
    return data


def company_to_dict(company: Company, counts: Optional[dict] = None) -> dict:
    data = {
        "id": company.id,
        "name": company.name,
        "cnpj": company.cnpj,
        "logo_url": company.logo_url,
        "primary_color": company.primary_color,
        "active": company.active,
        "created_at": to_iso(company.created_at),
        "updated_at": to_iso(company.updated_at),
    }
    if counts is not None:
        data["counts"] = counts
    return data


def unit_to_dict(unit: Unit, counts: Optional[dict] = None) -> dict:
    """Unidade com company, gerente e contadores."""
    return {
        "id": unit.id,
        "company_id": unit.company_id,
        "name": unit.name,
        "code": unit.code,
        "address": unit.address,
        "phone": unit.phone,
        "email": unit.email,
        "manager_id": unit.manager_id,
        "active": unit.active,
        "company": {"id": unit.company.id, "name": unit.company.name} if unit.company else None,
        "manager": user_summary(unit.manager),
        "counts": counts or {"funnels": 0, "leads": 0, "users": 0},
        "created_at": to_iso(unit.created_at),
        "updated_at": to_iso(unit.updated_at),
    }


def step_to_dict(step: FunnelStep) -> dict:
    return {
        "id": step.id,
        "funnel_id": step.funnel_id,
        "name": step.name,
        "order": step.order,
        "color": step.color,
    }


def funnel_to_dict(funnel: Funnel) -> dict:
    return {
        "id": funnel.id,
        "company_id": funnel.company_id,
        "unit_id": funnel.unit_id,
        "name": funnel.name,
        "description": funnel.description,
        "is_default": funnel.is_default,
        "steps": [step_to_dict(step) for step in funnel.steps],
        "created_at": to_iso(funnel.created_at),
    }


def lead_brief(lead: Optional[Lead]) -> Optional[dict]:
    if lead is None:
        return None
    return {"id": lead.id, "name": lead.name, "phone": lead.phone}


def lead_to_dict(lead: Lead) -> dict:
    return {
        "id": lead.id,
        "company_id": lead.company_id,
        "unit_id": lead.unit_id,
        "funnel_id": lead.funnel_id,
        "step_id": lead.step_id,
        "phone": lead.phone,
        "name": lead.name,
        "email": lead.email,
        "tags": list(lead.tags or []),
        "observacoes": lead.observacoes,
        "status_venda": lead.status_venda,
        "valor_venda": lead.valor_venda,
        "valor_orcamento": lead.valor_orcamento,
        "tipo_procura": lead.tipo_procura,
        "meio_captacao": lead.meio_captacao,
        "data_consulta": to_iso(lead.data_consulta),
        "duracao_consulta": lead.duracao_consulta,
        "responsible_id": lead.responsible_id,
        "dentista_id": lead.dentista_id,
        "responsible": user_summary(lead.responsible),
        "dentista": user_summary(lead.dentista),
        "step": {"id": lead.step.id, "name": lead.step.name, "color": lead.step.color}
        if lead.step
        else None,
        "created_at": to_iso(lead.created_at),
        "updated_at": to_iso(lead.updated_at),
    }


def task_to_dict(task: Task) -> dict:
    return {
        "id": task.id,
        "company_id": task.company_id,
        "lead_id": task.lead_id,
        "assigned_id": task.assigned_id,
        "title": task.title,
        "description": task.description,
        "due_date": to_iso(task.due_date),
        "status": task.status,
        "completed_at": to_iso(task.completed_at),
        "assigned": user_summary(task.assigned),
        "lead": lead_brief(task.lead),
        "created_at": to_iso(task.created_at),
    }


def prescricao_to_dict(prescricao: Prescricao) -> dict:
    return {
        "id": prescricao.id,
        "consulta_id": prescricao.consulta_id,
        "lead_id": prescricao.lead_id,
        "dentista_id": prescricao.dentista_id,
        "medicamentos": list(prescricao.medicamentos or []),
        "observacoes": prescricao.observacoes,
        "dentista": user_summary(prescricao.dentista),
        "created_at": to_iso(prescricao.created_at),
    }


def consulta_to_dict(consulta: Consulta, include_prescricoes: bool = True) -> dict:
    data = {
        "id": consulta.id,
        "lead_id": consulta.lead_id,
        "dentista_id": consulta.dentista_id,
        "data_consulta": to_iso(consulta.data_consulta),
        "duracao": consulta.duracao,
        "procedimentos": list(consulta.procedimentos or []),
        "dentes_atendidos": list(consulta.dentes_atendidos or []),
        "anestesia_usada": consulta.anestesia_usada,
        "materiais_usados": consulta.materiais_usados,
        "observacoes": consulta.observacoes,
        "compareceu": consulta.compareceu,
        "valor_cobrado": consulta.valor_cobrado,
        "proxima_consulta": to_iso(consulta.proxima_consulta),
        "lead": lead_brief(consulta.lead),
        "dentista": user_summary(consulta.dentista),
        "created_at": to_iso(consulta.created_at),
        "updated_at": to_iso(consulta.updated_at),
    }
    if include_prescricoes:
        data["prescricoes"] = [prescricao_to_dict(p) for p in consulta.prescricoes]
    return data


def odontograma_to_dict(odontograma: Odontograma) -> dict:
    return {
        "id": odontograma.id,
        "lead_id": odontograma.lead_id,
        "dentes": dict(odontograma.dentes or {}),
        "updated_at": to_iso(odontograma.updated_at),
    }


def pagamento_to_dict(pagamento: Pagamento, include_lead: bool = False) -> dict:
    data = {
        "id": pagamento.id,
        "lead_id": pagamento.lead_id,
        "valor": pagamento.valor,
        "forma_pagamento": pagamento.forma_pagamento,
        "data_vencimento": to_iso(pagamento.data_vencimento),
        "data_pagamento": to_iso(pagamento.data_pagamento),
        "status": pagamento.status,
        "numero_parcela": pagamento.numero_parcela,
        "total_parcelas": pagamento.total_parcelas,
        "observacoes": pagamento.observacoes,
        "created_at": to_iso(pagamento.created_at),
    }
    if include_lead:
        data["lead"] = lead_brief(pagamento.lead)
    return data
