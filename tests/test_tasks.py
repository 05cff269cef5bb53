"""Testes de tarefas."""

import pytest
from httpx import AsyncClient


async def _create_task(client: AsyncClient, headers: dict, **payload) -> dict:
    response = await client.post("/api/v1/tasks", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


@pytest.mark.asyncio
async def test_create_task_linked_to_lead(async_client: AsyncClient, admin_headers, worker, lead):
    task = await _create_task(
        async_client,
        admin_headers,
        title="Confirmar consulta",
        assigned_id=worker.id,
        lead_id=lead["id"],
        due_date="2026-10-20T12:00:00Z",
    )

    assert task["status"] == "PENDING"
    assert task["assigned"] == {"id": worker.id, "name": worker.name}
    assert task["lead"]["id"] == lead["id"]
    assert task["due_date"] == "2026-10-20T12:00:00+00:00"


@pytest.mark.asyncio
async def test_create_task_unknown_assignee(async_client: AsyncClient, admin_headers, other_clinic):
    # Usuário de outra clínica não pode receber tarefas
    response = await async_client.post(
        "/api/v1/tasks",
        json={"title": "Tarefa", "assigned_id": other_clinic[1].id},
        headers=admin_headers,
    )

    assert response.status_code == 404
    assert response.json()["detail"] == "Usuário responsável não encontrado"


@pytest.mark.asyncio
async def test_complete_and_reopen_task(async_client: AsyncClient, admin_headers, worker):
    task = await _create_task(async_client, admin_headers, title="Enviar orçamento", assigned_id=worker.id)

    response = await async_client.patch(
        f"/api/v1/tasks/{task['id']}", json={"status": "COMPLETED"}, headers=admin_headers
    )
    assert response.json()["status"] == "COMPLETED"
    assert response.json()["completed_at"] is not None

    response = await async_client.patch(
        f"/api/v1/tasks/{task['id']}", json={"status": "PENDING"}, headers=admin_headers
    )
    assert response.json()["completed_at"] is None


@pytest.mark.asyncio
async def test_completed_task_cannot_be_deleted(async_client: AsyncClient, admin_headers, worker):
    task = await _create_task(async_client, admin_headers, title="Ligar", assigned_id=worker.id)
    await async_client.patch(
        f"/api/v1/tasks/{task['id']}", json={"status": "COMPLETED"}, headers=admin_headers
    )

    response = await async_client.delete(f"/api/v1/tasks/{task['id']}", headers=admin_headers)
    assert response.status_code == 400


@pytest.mark.asyncio
async def test_delete_pending_task(async_client: AsyncClient, admin_headers, worker):
    task = await _create_task(async_client, admin_headers, title="Ligar", assigned_id=worker.id)

    response = await async_client.delete(f"/api/v1/tasks/{task['id']}", headers=admin_headers)
    assert response.status_code == 200

    response = await async_client.get("/api/v1/tasks", headers=admin_headers)
    assert response.json() == []


@pytest.mark.asyncio
async def test_list_and_mine_filters(
    async_client: AsyncClient, admin, admin_headers, worker, worker_headers
):
    await _create_task(async_client, admin_headers, title="Do atendente", assigned_id=worker.id)
    await _create_task(async_client, admin_headers, title="Do admin", assigned_id=admin.id)

    response = await async_client.get(
        "/api/v1/tasks", params={"assigned_id": admin.id}, headers=admin_headers
    )
    assert [t["title"] for t in response.json()] == ["Do admin"]

    response = await async_client.get("/api/v1/tasks/mine", headers=worker_headers)
    assert [t["title"] for t in response.json()] == ["Do atendente"]

    response = await async_client.get(
        "/api/v1/tasks", params={"status": "COMPLETED"}, headers=admin_headers
    )
    assert response.json() == []
