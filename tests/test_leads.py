"""
TESTES DE LEADS
================

CRUD, movimentação entre etapas, conflito de agenda do dentista e
isolamento entre clínicas.
"""

import pytest
from httpx import AsyncClient
from sqlalchemy.ext.mutable import MutableDict

from odontocrm.domain.entities import Lead, Odontograma


def _lead_payload(funnel, **extra) -> dict:
    payload = {
        "phone": "11955554444",
        "funnel_id": funnel.id,
        "step_id": funnel.steps[0].id,
    }
    payload.update(extra)
    return payload


@pytest.mark.asyncio
async def test_create_lead_defaults(async_client: AsyncClient, admin_headers, default_funnel, worker):
    response = await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(default_funnel, name="Maria", responsible_id=worker.id, tags=["vip"]),
        headers=admin_headers,
    )

    assert response.status_code == 201
    data = response.json()
    assert data["status_venda"] == "QUALIFICANDO"
    assert data["tags"] == ["vip"]
    assert data["responsible"] == {"id": worker.id, "name": worker.name}
    assert data["step"]["name"] == "Novo Lead"


@pytest.mark.asyncio
async def test_create_lead_step_from_other_funnel(async_client: AsyncClient, admin_headers, default_funnel):
    other = (
        await async_client.post("/api/v1/funnels", json={"name": "Estética"}, headers=admin_headers)
    ).json()

    response = await async_client.post(
        "/api/v1/leads",
        json={"phone": "11955554444", "funnel_id": other["id"], "step_id": default_funnel.steps[0].id},
        headers=admin_headers,
    )
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_dentista_must_have_dentist_role(async_client: AsyncClient, admin_headers, default_funnel, worker):
    response = await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(default_funnel, dentista_id=worker.id),
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Dentista não encontrado"


@pytest.mark.asyncio
async def test_schedule_conflict_for_same_dentist(
    async_client: AsyncClient, admin_headers, default_funnel, dentist
):
    first = await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(
            default_funnel,
            name="Paulo",
            dentista_id=dentist.id,
            data_consulta="2026-11-10T14:00:00Z",
            duracao_consulta=60,
        ),
        headers=admin_headers,
    )
    assert first.status_code == 201
    assert first.json()["data_consulta"] == "2026-11-10T14:00:00+00:00"

    response = await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(
            default_funnel, phone="11944443333", dentista_id=dentist.id,
            data_consulta="2026-11-10T14:30:00Z",
        ),
        headers=admin_headers,
    )

    assert response.status_code == 400
    assert response.json()["detail"] == (
        "Conflito de horário: O dentista já possui uma consulta agendada com Paulo às 10/11/2026 14:00"
    )


@pytest.mark.asyncio
async def test_back_to_back_appointments_do_not_conflict(
    async_client: AsyncClient, admin_headers, default_funnel, dentist
):
    await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(
            default_funnel, dentista_id=dentist.id,
            data_consulta="2026-11-10T14:00:00Z", duracao_consulta=60,
        ),
        headers=admin_headers,
    )

    # Fuso -03:00 equivale a 15:00 UTC, logo após a primeira consulta
    response = await async_client.post(
        "/api/v1/leads",
        json=_lead_payload(
            default_funnel, phone="11944443333", dentista_id=dentist.id,
            data_consulta="2026-11-10T12:00:00-03:00",
        ),
        headers=admin_headers,
    )

    assert response.status_code == 201
    assert response.json()["data_consulta"] == "2026-11-10T15:00:00+00:00"


@pytest.mark.asyncio
async def test_update_lead_ignores_own_schedule(
    async_client: AsyncClient, admin_headers, default_funnel, dentist
):
    lead = (
        await async_client.post(
            "/api/v1/leads",
            json=_lead_payload(
                default_funnel, dentista_id=dentist.id, data_consulta="2026-11-10T14:00:00Z"
            ),
            headers=admin_headers,
        )
    ).json()

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"dentista_id": dentist.id, "data_consulta": "2026-11-10T14:15:00Z"},
        headers=admin_headers,
    )

    assert response.status_code == 200
    assert response.json()["data_consulta"] == "2026-11-10T14:15:00+00:00"


@pytest.mark.asyncio
async def test_update_lead_partial_fields(async_client: AsyncClient, admin_headers, lead):
    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}",
        json={"status_venda": "GANHO", "valor_venda": 3500.0, "tags": None},
        headers=admin_headers,
    )

    assert response.status_code == 200
    data = response.json()
    assert data["status_venda"] == "GANHO"
    assert data["valor_venda"] == 3500.0
    assert data["tags"] == []
    assert data["name"] == lead["name"]
    assert data["phone"] == lead["phone"]


@pytest.mark.asyncio
async def test_move_lead_to_step_of_other_funnel(async_client: AsyncClient, admin_headers, lead):
    funnel = (
        await async_client.post("/api/v1/funnels", json={"name": "Lentes"}, headers=admin_headers)
    ).json()
    funnel = (
        await async_client.post(
            f"/api/v1/funnels/{funnel['id']}/steps",
            json={"name": "Orçamento", "order": 1},
            headers=admin_headers,
        )
    ).json()
    step = funnel["steps"][0]

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}/move", json={"step_id": step["id"]}, headers=admin_headers
    )

    assert response.status_code == 200
    data = response.json()
    assert data["step_id"] == step["id"]
    assert data["funnel_id"] == funnel["id"]
    assert data["step"]["name"] == "Orçamento"


async def _funnel_with_step(client: AsyncClient, headers: dict, name: str) -> tuple[dict, dict]:
    funnel = (await client.post("/api/v1/funnels", json={"name": name}, headers=headers)).json()
    funnel = (
        await client.post(
            f"/api/v1/funnels/{funnel['id']}/steps",
            json={"name": "Avaliação", "order": 1},
            headers=headers,
        )
    ).json()
    return funnel, funnel["steps"][0]


@pytest.mark.asyncio
async def test_update_step_follows_its_funnel(async_client: AsyncClient, admin_headers, lead):
    funnel, step = await _funnel_with_step(async_client, admin_headers, "Implantes")

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}", json={"step_id": step["id"]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["step_id"] == step["id"]
    assert response.json()["funnel_id"] == funnel["id"]


@pytest.mark.asyncio
async def test_update_funnel_requires_step_of_new_funnel(
    async_client: AsyncClient, admin_headers, default_funnel, lead
):
    funnel, step = await _funnel_with_step(async_client, admin_headers, "Implantes")
    url = f"/api/v1/leads/{lead['id']}"

    response = await async_client.put(url, json={"funnel_id": funnel["id"]}, headers=admin_headers)
    assert response.status_code == 400

    response = await async_client.put(
        url,
        json={"funnel_id": funnel["id"], "step_id": default_funnel.steps[0].id},
        headers=admin_headers,
    )
    assert response.status_code == 404

    response = await async_client.put(
        url, json={"funnel_id": funnel["id"], "step_id": step["id"]}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["funnel_id"] == funnel["id"]

    # Mesmo funil sem etapa nova continua valendo
    response = await async_client.put(
        url, json={"funnel_id": funnel["id"], "name": "Renata"}, headers=admin_headers
    )
    assert response.status_code == 200
    assert response.json()["step_id"] == step["id"]


@pytest.mark.asyncio
async def test_tags_list_alongside_odontograma(async_client: AsyncClient, admin_headers, lead):
    await async_client.post(
        f"/api/v1/odontograma/lead/{lead['id']}",
        json={"dentes": {"21": {"status": "CARIE", "observacoes": ""}}},
        headers=admin_headers,
    )

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}", json={"tags": ["ortodontia", "retorno"]}, headers=admin_headers
    )

    assert response.status_code == 200
    assert response.json()["tags"] == ["ortodontia", "retorno"]


def test_only_odontograma_dentes_is_mutable_dict():
    lead = Lead(tags=["vip"])
    odontograma = Odontograma(dentes={"1": {"status": "HIGIDO", "observacoes": ""}})

    assert lead.tags == ["vip"]
    assert isinstance(odontograma.dentes, MutableDict)


@pytest.mark.asyncio
async def test_list_leads_filters(async_client: AsyncClient, admin_headers, default_funnel, lead):
    response = await async_client.get(
        "/api/v1/leads", params={"funnel_id": default_funnel.id}, headers=admin_headers
    )
    assert [item["id"] for item in response.json()] == [lead["id"]]

    response = await async_client.get(
        "/api/v1/leads", params={"step_id": 9999}, headers=admin_headers
    )
    assert response.json() == []


@pytest.mark.asyncio
async def test_my_patients(
    async_client: AsyncClient, admin_headers, dentist_headers, default_funnel, dentist
):
    await async_client.post(
        "/api/v1/leads", json=_lead_payload(default_funnel, dentista_id=dentist.id), headers=admin_headers
    )
    await async_client.post(
        "/api/v1/leads", json=_lead_payload(default_funnel, phone="11900001111"), headers=admin_headers
    )

    response = await async_client.get("/api/v1/leads/my-patients", headers=dentist_headers)

    assert response.status_code == 200
    assert [item["dentista_id"] for item in response.json()] == [dentist.id]


@pytest.mark.asyncio
async def test_delete_lead(async_client: AsyncClient, admin_headers, lead):
    response = await async_client.delete(f"/api/v1/leads/{lead['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await async_client.get(f"/api/v1/leads/{lead['id']}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_lead_isolation_between_companies(async_client: AsyncClient, other_headers, lead):
    """CRÍTICO: lead de uma clínica não aparece para outra."""
    response = await async_client.get(f"/api/v1/leads/{lead['id']}", headers=other_headers)
    assert response.status_code == 404

    response = await async_client.get("/api/v1/leads", headers=other_headers)
    assert response.json() == []

    response = await async_client.put(
        f"/api/v1/leads/{lead['id']}", json={"name": "Invasor"}, headers=other_headers
    )
    assert response.status_code == 404
