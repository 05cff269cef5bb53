"""Configurações da aplicação - carrega variáveis do .env"""

from functools import lru_cache
from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",  # carrega local
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # ===========================================
    # CORE
    # ===========================================
    environment: str = "development"
    database_url: str
    debug: bool = False
    log_level: str = "INFO"
    host: str = "0.0.0.0"
    port: int = 8000
    cors_origins: list[str] = ["http://localhost:3000"]

    # ===========================================
    # JWT
    # ===========================================
    secret_key: str
    refresh_secret_key: Optional[str] = None
    access_token_expire_minutes: int = 60 * 24 * 7
    refresh_token_expire_days: int = 30

    # ===========================================
    # SEGURANÇA
    # ===========================================
    login_rate_limit: str = "10/minute"

    # ===========================================
    # SUPER ADMIN (bootstrap)
    # ===========================================
    superadmin_email: Optional[str] = None
    superadmin_password: Optional[str] = None
    superadmin_company_name: str = "OdontoCRM"
    superadmin_company_cnpj: str = "00000000000000"

    # ===========================================
    # PROPRIEDADES
    # ===========================================
    @property
    def is_production(self) -> bool:
        return self.environment == "production"

    @property
    def is_development(self) -> bool:
        return self.environment == "development"

    @property
    def async_database_url(self) -> str:
        """
        Railway/Heroku fornecem postgresql:// mas asyncpg precisa de
        postgresql+asyncpg://
        """
        url = self.database_url
        if url.startswith("postgresql://"):
            return url.replace("postgresql://", "postgresql+asyncpg://", 1)
        if url.startswith("postgres://"):
            return url.replace("postgres://", "postgresql+asyncpg://", 1)
        return url

    @property
    def jwt_refresh_secret(self) -> str:
        """Segredo dos refresh tokens (nunca igual ao do access token)."""
        return self.refresh_secret_key or f"{self.secret_key}:refresh"

    @property
    def superadmin_configured(self) -> bool:
        return bool(self.superadmin_email and self.superadmin_password)


@lru_cache
def get_settings() -> Settings:
    return Settings()
