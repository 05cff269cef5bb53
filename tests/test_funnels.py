"""Testes de funis e etapas (funil padrão protegido)."""

import pytest
from httpx import AsyncClient


@pytest.mark.asyncio
async def test_listing_creates_default_funnel(async_client: AsyncClient, admin_headers):
    response = await async_client.get("/api/v1/funnels", headers=admin_headers)

    assert response.status_code == 200
    funnels = response.json()
    assert len(funnels) == 1
    assert funnels[0]["name"] == "Funil Padrão"
    assert funnels[0]["is_default"] is True
    assert [(s["name"], s["order"]) for s in funnels[0]["steps"]] == [("Novo Lead", 1)]

    # Segunda listagem não duplica
    response = await async_client.get("/api/v1/funnels", headers=admin_headers)
    assert len(response.json()) == 1


@pytest.mark.asyncio
async def test_default_funnel_is_protected(async_client: AsyncClient, admin_headers, default_funnel):
    response = await async_client.post(
        "/api/v1/funnels", json={"name": "funil padrão"}, headers=admin_headers
    )
    assert response.status_code == 400

    response = await async_client.patch(
        f"/api/v1/funnels/{default_funnel.id}", json={"name": "Outro Nome"}, headers=admin_headers
    )
    assert response.status_code == 400

    response = await async_client.delete(
        f"/api/v1/funnels/{default_funnel.id}", headers=admin_headers
    )
    assert response.status_code == 400

    response = await async_client.delete(
        f"/api/v1/funnels/steps/{default_funnel.steps[0].id}", headers=admin_headers
    )
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_steps_are_returned_in_order(async_client: AsyncClient, admin_headers):
    funnel = (
        await async_client.post(
            "/api/v1/funnels", json={"name": "Ortodontia"}, headers=admin_headers
        )
    ).json()

    for name, order in (("Fechamento", 3), ("Contato", 1), ("Avaliação", 2)):
        response = await async_client.post(
            f"/api/v1/funnels/{funnel['id']}/steps",
            json={"name": name, "order": order},
            headers=admin_headers,
        )
        assert response.status_code == 201

    steps = response.json()["steps"]
    assert [s["name"] for s in steps] == ["Contato", "Avaliação", "Fechamento"]
    assert steps[0]["color"] == "#6B7280"


@pytest.mark.asyncio
async def test_duplicate_step_order(async_client: AsyncClient, admin_headers):
    funnel = (
        await async_client.post("/api/v1/funnels", json={"name": "Implantes"}, headers=admin_headers)
    ).json()
    url = f"/api/v1/funnels/{funnel['id']}/steps"

    await async_client.post(url, json={"name": "Contato", "order": 1}, headers=admin_headers)
    response = await async_client.post(url, json={"name": "Outro", "order": 1}, headers=admin_headers)

    assert response.status_code == 400
    assert response.json()["detail"] == "Já existe uma etapa com esta ordem"


@pytest.mark.asyncio
async def test_funnel_with_leads_cannot_be_deleted(async_client: AsyncClient, admin_headers):
    funnel = (
        await async_client.post("/api/v1/funnels", json={"name": "Clareamento"}, headers=admin_headers)
    ).json()
    funnel = (
        await async_client.post(
            f"/api/v1/funnels/{funnel['id']}/steps",
            json={"name": "Contato", "order": 1},
            headers=admin_headers,
        )
    ).json()
    step_id = funnel["steps"][0]["id"]

    await async_client.post(
        "/api/v1/leads",
        json={"phone": "11977776666", "funnel_id": funnel["id"], "step_id": step_id},
        headers=admin_headers,
    )

    response = await async_client.delete(f"/api/v1/funnels/{funnel['id']}", headers=admin_headers)
    assert response.status_code == 400

    response = await async_client.delete(f"/api/v1/funnels/steps/{step_id}", headers=admin_headers)
    assert response.status_code == 400
    assert "1 lead(s)" in response.json()["detail"]


@pytest.mark.asyncio
async def test_delete_empty_funnel(async_client: AsyncClient, admin_headers):
    funnel = (
        await async_client.post("/api/v1/funnels", json={"name": "Próteses"}, headers=admin_headers)
    ).json()

    response = await async_client.delete(f"/api/v1/funnels/{funnel['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await async_client.get(f"/api/v1/funnels/{funnel['id']}", headers=admin_headers)
    assert response.status_code == 404


@pytest.mark.asyncio
async def test_list_funnels_by_unit(async_client: AsyncClient, admin, admin_headers):
    await async_client.post(
        "/api/v1/funnels",
        json={"name": "Funil da Sede", "unit_id": admin.unit_id},
        headers=admin_headers,
    )
    unit = (
        await async_client.post(
            "/api/v1/units", json={"name": "Filial", "code": "FILIAL"}, headers=admin_headers
        )
    ).json()
    await async_client.post(
        "/api/v1/funnels",
        json={"name": "Funil da Filial", "unit_id": unit["id"]},
        headers=admin_headers,
    )

    response = await async_client.get(
        "/api/v1/funnels", params={"unit_id": unit["id"]}, headers=admin_headers
    )

    # Funis sem unidade (como o padrão) valem para todas
    assert {f["name"] for f in response.json()} == {"Funil Padrão", "Funil da Filial"}


@pytest.mark.asyncio
async def test_funnel_of_other_company_is_not_found(
    async_client: AsyncClient, other_headers, default_funnel
):
    response = await async_client.get(f"/api/v1/funnels/{default_funnel.id}", headers=other_headers)
    assert response.status_code == 404
