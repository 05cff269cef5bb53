"""
TESTES DE CONSULTAS E PRESCRIÇÕES
==================================

A `proxima_consulta` precisa chegar ao lead na mesma transação da consulta,
e uma data inválida não pode deixar nada gravado.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy import func, select

from odontocrm.domain.entities import Consulta, Lead


async def _create_consulta(client: AsyncClient, headers: dict, lead_id: int, **extra) -> dict:
    payload = {
        "lead_id": lead_id,
        "data_consulta": "2026-10-19T13:00:00Z",
        "procedimentos": ["Limpeza"],
        "dentes_atendidos": [11, 12],
    }
    payload.update(extra)
    response = await client.post("/api/v1/consultas", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


async def _get_lead(session_factory, lead_id: int) -> Lead:
    async with session_factory() as session:
        return await session.get(Lead, lead_id)


@pytest.mark.asyncio
async def test_create_consulta_uses_current_dentist(
    async_client: AsyncClient, dentist_headers, dentist, lead
):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"])

    assert consulta["dentista_id"] == dentist.id
    assert consulta["dentista"]["name"] == dentist.name
    assert consulta["lead"] == {"id": lead["id"], "name": lead["name"], "phone": lead["phone"]}
    assert consulta["duracao"] == 60
    assert consulta["proxima_consulta"] is None
    assert consulta["prescricoes"] == []


@pytest.mark.asyncio
async def test_create_consulta_syncs_next_appointment(
    async_client: AsyncClient, session_factory, dentist_headers, lead
):
    consulta = await _create_consulta(
        async_client,
        dentist_headers,
        lead["id"],
        duracao=90,
        proxima_consulta="2026-11-02T10:00:00Z",
    )

    assert consulta["proxima_consulta"] == "2026-11-02T10:00:00+00:00"

    response = await async_client.get(f"/api/v1/leads/{lead['id']}", headers=dentist_headers)
    assert response.json()["data_consulta"] == "2026-11-02T10:00:00+00:00"
    assert response.json()["duracao_consulta"] == 90


@pytest.mark.asyncio
async def test_invalid_next_appointment_writes_nothing(
    async_client: AsyncClient, session_factory, dentist_headers, lead
):
    response = await async_client.post(
        "/api/v1/consultas",
        json={
            "lead_id": lead["id"],
            "data_consulta": "2026-10-19T13:00:00Z",
            "proxima_consulta": "amanhã cedo",
        },
        headers=dentist_headers,
    )

    assert response.status_code == 400
    assert "próxima consulta" in response.json()["detail"]

    async with session_factory() as session:
        total = await session.scalar(select(func.count(Consulta.id)))
        assert total == 0
        lead_row = await session.get(Lead, lead["id"])
        assert lead_row.data_consulta is None


@pytest.mark.asyncio
async def test_create_consulta_for_unknown_patient(async_client: AsyncClient, dentist_headers):
    response = await async_client.post(
        "/api/v1/consultas",
        json={"lead_id": 9999, "data_consulta": "2026-10-19T13:00:00Z"},
        headers=dentist_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Paciente não encontrado"


@pytest.mark.asyncio
async def test_update_without_next_appointment_keeps_lead(
    async_client: AsyncClient, session_factory, dentist_headers, lead
):
    consulta = await _create_consulta(
        async_client, dentist_headers, lead["id"], proxima_consulta="2026-11-02T10:00:00Z"
    )

    response = await async_client.put(
        f"/api/v1/consultas/{consulta['id']}",
        json={"observacoes": "Paciente sensível ao frio"},
        headers=dentist_headers,
    )

    assert response.status_code == 200
    assert response.json()["proxima_consulta"] == "2026-11-02T10:00:00+00:00"
    lead_row = await _get_lead(session_factory, lead["id"])
    assert lead_row.data_consulta is not None


@pytest.mark.asyncio
async def test_update_with_null_clears_lead_schedule(
    async_client: AsyncClient, session_factory, dentist_headers, lead
):
    consulta = await _create_consulta(
        async_client, dentist_headers, lead["id"], proxima_consulta="2026-11-02T10:00:00Z"
    )

    response = await async_client.put(
        f"/api/v1/consultas/{consulta['id']}",
        json={"proxima_consulta": None},
        headers=dentist_headers,
    )

    assert response.status_code == 200
    assert response.json()["proxima_consulta"] is None
    lead_row = await _get_lead(session_factory, lead["id"])
    assert lead_row.data_consulta is None


@pytest.mark.asyncio
async def test_update_with_date_moves_lead_schedule(
    async_client: AsyncClient, session_factory, dentist_headers, lead
):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"], duracao=45)

    response = await async_client.put(
        f"/api/v1/consultas/{consulta['id']}",
        json={"proxima_consulta": "2026-12-01T09:30:00Z"},
        headers=dentist_headers,
    )

    assert response.status_code == 200
    lead_row = await _get_lead(session_factory, lead["id"])
    assert lead_row.data_consulta.strftime("%Y-%m-%d %H:%M") == "2026-12-01 09:30"
    # Sem duracao no payload vale a duração da consulta
    assert lead_row.duracao_consulta == 45


@pytest.mark.asyncio
async def test_list_consultas_by_lead_newest_first(async_client: AsyncClient, dentist_headers, lead):
    await _create_consulta(async_client, dentist_headers, lead["id"], data_consulta="2026-09-01T10:00:00Z")
    await _create_consulta(async_client, dentist_headers, lead["id"], data_consulta="2026-10-01T10:00:00Z")

    response = await async_client.get(f"/api/v1/consultas/lead/{lead['id']}", headers=dentist_headers)

    assert [c["data_consulta"][:10] for c in response.json()] == ["2026-10-01", "2026-09-01"]


@pytest.mark.asyncio
async def test_delete_consulta(async_client: AsyncClient, dentist_headers, lead):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"])

    response = await async_client.delete(f"/api/v1/consultas/{consulta['id']}", headers=dentist_headers)
    assert response.status_code == 200

    response = await async_client.get(f"/api/v1/consultas/{consulta['id']}", headers=dentist_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_consulta_of_other_company_is_not_found(
    async_client: AsyncClient, dentist_headers, other_headers, lead
):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"])

    response = await async_client.get(f"/api/v1/consultas/{consulta['id']}", headers=other_headers)
    assert response.status_code == 404


# =============================================================================
# PRESCRIÇÕES
# =============================================================================

@pytest.mark.asyncio
async def test_prescricao_lifecycle(async_client: AsyncClient, dentist_headers, dentist, lead):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"])

    response = await async_client.post(
        "/api/v1/prescricoes",
        json={
            "consulta_id": consulta["id"],
            "medicamentos": [{"nome": "Amoxicilina 500mg", "posologia": "8/8h por 7 dias"}],
        },
        headers=dentist_headers,
    )

    assert response.status_code == 201
    prescricao = response.json()
    assert prescricao["lead_id"] == lead["id"]
    assert prescricao["dentista"]["id"] == dentist.id

    by_consulta = await async_client.get(
        f"/api/v1/prescricoes/consulta/{consulta['id']}", headers=dentist_headers
    )
    by_lead = await async_client.get(f"/api/v1/prescricoes/lead/{lead['id']}", headers=dentist_headers)
    assert [p["id"] for p in by_consulta.json()] == [prescricao["id"]]
    assert [p["id"] for p in by_lead.json()] == [prescricao["id"]]

    # A consulta passa a trazer a receita
    response = await async_client.get(f"/api/v1/consultas/{consulta['id']}", headers=dentist_headers)
    assert [p["id"] for p in response.json()["prescricoes"]] == [prescricao["id"]]


@pytest.mark.asyncio
async def test_prescricao_requires_medicamentos(async_client: AsyncClient, dentist_headers, lead):
    consulta = await _create_consulta(async_client, dentist_headers, lead["id"])

    response = await async_client.post(
        "/api/v1/prescricoes",
        json={"consulta_id": consulta["id"], "medicamentos": []},
        headers=dentist_headers,
    )
    assert response.status_code == 422
