"""
Helper único de datas usado por consultas, leads e pagamentos.

Aceita None, string vazia, string ISO-8601 ou datetime. Datas sem fuso são
tratadas como UTC e tudo é normalizado para UTC antes de ir ao banco.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from odontocrm.domain.exceptions import ValidationError


def to_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Normaliza para UTC (SQLite devolve datas sem tzinfo)."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def parse_optional_datetime(value: Any, field: str = "data") -> Optional[datetime]:
    """
    Converte o valor recebido da API em datetime UTC.

    Returns:
        None se o valor for vazio; datetime timezone-aware caso contrário.

    Raises:
        ValidationError: valor não reconhecido como data.
    """
    if value is None or value == "":
        return None

    if isinstance(value, datetime):
        return to_utc(value)

    if isinstance(value, str):
        text = value.strip()
        # fromisoformat só aceita "Z" a partir do Python 3.11
        if text.endswith("Z"):
            text = text[:-1] + "+00:00"
        try:
            return to_utc(datetime.fromisoformat(text))
        except ValueError:
            pass

    raise ValidationError(
        f"Data de {field} inválida: {value}. Use o formato ISO (YYYY-MM-DDTHH:mm)"
    )


def parse_required_datetime(value: Any, field: str = "data") -> datetime:
    parsed = parse_optional_datetime(value, field)
    if parsed is None:
        raise ValidationError(f"Campo {field} é obrigatório")
    return parsed


def to_iso(value: Optional[datetime]) -> Optional[str]:
    """Serializa datas como ISO-8601 (sempre em UTC)."""
    value = to_utc(value)
    return value.isoformat() if value else None
