"""
HEALTH CHECK ENDPOINTS
======================
Monitora saúde do sistema.

Usado por:
- Monitoramento externo (UptimeRobot, Railway)
- Debugging
"""

import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from odontocrm.infrastructure.database import get_db
from odontocrm.config import get_settings

settings = get_settings()
logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["Health"])


@router.get("")
async def health_check(db: AsyncSession = Depends(get_db)):
    """
    Health check simples e rápido.

    Retorna 200 se o banco responde, 503 caso contrário.
    """
    checks = {}
    status = "healthy"

    try:
        await db.execute(text("SELECT 1"))
        checks["database"] = "ok"
    except Exception as e:
        logger.error(f"Health check failed: {e}", exc_info=True)
        checks["database"] = f"error: {str(e)}"
        status = "unhealthy"

    checks["timestamp"] = datetime.now(timezone.utc).isoformat()
    checks["environment"] = settings.environment

    if status == "unhealthy":
        raise HTTPException(status_code=503, detail={"status": status, "checks": checks})

    return {"status": status, "checks": checks}
