"""
ODONTOCRM API - Ponto de Entrada
"""

import logging
from contextlib import asynccontextmanager
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from slowapi.errors import RateLimitExceeded

from odontocrm.config import get_settings
from odontocrm.domain.exceptions import DomainError
from odontocrm.infrastructure.database import async_session, init_db
from odontocrm.infrastructure.logging_config import setup_logging
from odontocrm.infrastructure.middleware.rate_limiter import limiter, rate_limit_exceeded_handler
from odontocrm.application.services.company_service import CompanyService

# Routers
from odontocrm.api.routes import (
    auth_router,
    companies_router,
    units_router,
    funnels_router,
    leads_router,
    tasks_router,
    consultas_router,
    prescricoes_router,
    odontograma_router,
    pagamentos_router,
    health_router,
)

settings = get_settings()
logger = logging.getLogger(__name__)


# ============================================================
# 🚀 Criar superadmin automaticamente
# ============================================================
async def create_superadmin():
    if not settings.superadmin_configured:
        logger.info("👑 SUPERADMIN_EMAIL/SUPERADMIN_PASSWORD não configurados. Pulando criação.")
        return

    async with async_session() as session:
        await CompanyService(session).ensure_superadmin(
            email=settings.superadmin_email,
            password=settings.superadmin_password,
            company_name=settings.superadmin_company_name,
            company_cnpj=settings.superadmin_company_cnpj,
        )


# ============================================================
# 🔁 LIFESPAN
# ============================================================
@asynccontextmanager
async def lifespan(app: FastAPI):
    setup_logging(settings.log_level)
    logger.info("🚀 Iniciando OdontoCRM API...", extra={"environment": settings.environment})

    if settings.is_development:
        # Em produção o schema vem das migrations (alembic upgrade head)
        await init_db()
        logger.info("✅ Tabelas criadas!")

    await create_superadmin()

    yield

    logger.info("👋 Encerrando OdontoCRM API...")


# ============================================================
# FASTAPI APP
# ============================================================
app = FastAPI(
    title="OdontoCRM API",
    description="CRM multi-tenant para clínicas odontológicas",
    version="0.1.0",
    lifespan=lifespan,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, rate_limit_exceeded_handler)


@app.exception_handler(DomainError)
async def domain_error_handler(request: Request, exc: DomainError):
    """Converte erros de domínio no status HTTP correspondente."""
    if exc.status_code >= 500:
        logger.error(exc.message, extra={"path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


# ============================================================
# ⭐ CORS
# ============================================================
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# ============================================================
# ROTAS
# ============================================================
app.include_router(auth_router, prefix="/api/v1")
app.include_router(companies_router, prefix="/api/v1")
app.include_router(units_router, prefix="/api/v1")
app.include_router(funnels_router, prefix="/api/v1")
app.include_router(leads_router, prefix="/api/v1")
app.include_router(tasks_router, prefix="/api/v1")
app.include_router(consultas_router, prefix="/api/v1")
app.include_router(prescricoes_router, prefix="/api/v1")
app.include_router(odontograma_router, prefix="/api/v1")
app.include_router(pagamentos_router, prefix="/api/v1")
app.include_router(health_router, prefix="/api/v1")
app.include_router(health_router)


@app.get("/")
async def root():
    return {"name": "OdontoCRM API", "status": "running"}
