import os

# Precisa vir antes de qualquer import do pacote (settings são lidas no import)
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")
os.environ.setdefault("SECRET_KEY", "chave-de-teste")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("LOGIN_RATE_LIMIT", "5/minute")

from typing import AsyncGenerator

import pytest
from httpx import ASGITransport, AsyncClient
from sqlalchemy import event
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from odontocrm.api.main import app
from odontocrm.application.services.company_service import CompanyService
from odontocrm.application.services.funnel_service import FunnelService
from odontocrm.domain.entities import Base
from odontocrm.domain.entities.enums import UserRole
from odontocrm.infrastructure.database import get_db
from odontocrm.infrastructure.middleware.rate_limiter import limiter
from tests.utils import auth_headers, make_user


@pytest.fixture
async def engine():
    """Banco SQLite em memória, novo a cada teste."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(test_engine.sync_engine, "connect")
    def _enable_foreign_keys(dbapi_connection, connection_record):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


@pytest.fixture
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """
    Sessão usada para montar os cenários. Para conferir o que a API gravou,
    abra uma sessão nova com `session_factory`.
    """
    async with session_factory() as session:
        yield session


@pytest.fixture
async def async_client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    async def override_get_db() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client
    app.dependency_overrides.clear()


@pytest.fixture(autouse=True)
def reset_rate_limits():
    limiter.reset()
    yield
    limiter.reset()


# =============================================================================
# CENÁRIO PADRÃO: clínica com SEDE, admin, atendente, dentista e gestor
# =============================================================================

@pytest.fixture
async def clinic(db_session):
    company, admin = await CompanyService(db_session).create_company(
        {
            "name": "Clínica Sorriso",
            "cnpj": "11222333000181",
            "admin_name": "Ana Admin",
            "admin_email": "admin@sorriso.com",
            "admin_password": "senha123",
        }
    )
    return company, admin


@pytest.fixture
def company(clinic):
    return clinic[0]


@pytest.fixture
def admin(clinic):
    return clinic[1]


@pytest.fixture
async def worker(db_session, company):
    return await make_user(
        db_session, company.id, "worker@sorriso.com", UserRole.WORKER, name="Walter Atendente"
    )


@pytest.fixture
async def dentist(db_session, company, admin):
    return await make_user(
        db_session,
        company.id,
        "dentista@sorriso.com",
        UserRole.DENTIST,
        name="Dra. Denise",
        unit_id=admin.unit_id,
    )


@pytest.fixture
async def manager(db_session, company):
    return await make_user(
        db_session, company.id, "gestor@sorriso.com", UserRole.MANAGER, name="Gil Gestor"
    )


@pytest.fixture
def admin_headers(admin):
    return auth_headers(admin)


@pytest.fixture
def worker_headers(worker):
    return auth_headers(worker)


@pytest.fixture
def dentist_headers(dentist):
    return auth_headers(dentist)


@pytest.fixture
def manager_headers(manager):
    return auth_headers(manager)


@pytest.fixture
async def default_funnel(db_session, company):
    """Funil padrão da clínica já com a etapa inicial carregada."""
    funnels = await FunnelService(db_session).list_funnels(company.id)
    return next(f for f in funnels if f.is_default)


@pytest.fixture
async def lead(async_client, admin_headers, default_funnel):
    response = await async_client.post(
        "/api/v1/leads",
        json={
            "phone": "11999990000",
            "name": "Paulo Paciente",
            "funnel_id": default_funnel.id,
            "step_id": default_funnel.steps[0].id,
        },
        headers=admin_headers,
    )
    assert response.status_code == 201
    return response.json()


# Segunda clínica, para os testes de isolamento entre tenants
@pytest.fixture
async def other_clinic(db_session):
    company, admin = await CompanyService(db_session).create_company(
        {
            "name": "Clínica Vizinha",
            "cnpj": "99888777000166",
            "admin_name": "Otto Admin",
            "admin_email": "admin@vizinha.com",
            "admin_password": "senha123",
        }
    )
    return company, admin


@pytest.fixture
def other_headers(other_clinic):
    return auth_headers(other_clinic[1])
