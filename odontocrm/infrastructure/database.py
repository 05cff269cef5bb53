"""Gerencia conexão com PostgreSQL."""
from typing import AsyncGenerator
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from odontocrm.config import get_settings
from odontocrm.domain.entities.base import Base

settings = get_settings()

database_url = settings.async_database_url

engine_options = {"echo": settings.debug, "pool_pre_ping": True}
if database_url.startswith("postgresql+asyncpg://"):
    engine_options.update(pool_size=10, max_overflow=20)

engine = create_async_engine(database_url, **engine_options)

async_session = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """Dependency do FastAPI para injetar sessão do banco."""
    async with async_session() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


async def init_db() -> None:
    """Cria tabelas do banco (usar só em dev)."""
    import odontocrm.domain.entities  # noqa: F401  registra os modelos no metadata

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)


__all__ = ["Base", "engine", "async_session", "get_db", "init_db"]
