"""
Middleware de Rate Limiting
Protege o login contra força bruta
"""
import time

from slowapi import Limiter
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from fastapi import Request, Response
from fastapi.responses import JSONResponse

from odontocrm.config import get_settings

settings = get_settings()

# Criar limiter
limiter = Limiter(key_func=get_remote_address)


def login_rate_limit() -> str:
    return settings.login_rate_limit


def _retry_after(request: Request) -> int:
    """Segundos até a janela do limite estourado reabrir."""
    current = getattr(request.state, "view_rate_limit", None)
    if not current:
        return 60
    item, args = current
    reset_at, _remaining = limiter.limiter.get_window_stats(item, *args)
    return max(int(reset_at - time.time()) + 1, 1)


def rate_limit_exceeded_handler(request: Request, exc: RateLimitExceeded) -> Response:
    """
    Handler customizado para erro de rate limit.
    """
    retry_after = _retry_after(request)
    return JSONResponse(
        status_code=429,
        content={
            "detail": "Muitas requisições. Por favor, aguarde um momento e tente novamente.",
            "limit": exc.detail,
            "retry_after": retry_after,
        },
        headers={"Retry-After": str(retry_after)},
    )
