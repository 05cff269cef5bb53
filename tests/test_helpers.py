"""Testes unitários: datas, tokens e permissões."""

from datetime import datetime, timedelta, timezone
from types import SimpleNamespace

import pytest

from odontocrm.application.helpers.date_parsing import (
    parse_optional_datetime,
    parse_required_datetime,
    to_iso,
    to_utc,
)
from odontocrm.domain.exceptions import ForbiddenError, ValidationError
from odontocrm.infrastructure.services.auth_service import (
    create_access_token,
    create_refresh_token,
    decode_access_token,
    decode_refresh_token,
    hash_password,
    verify_password,
)
from odontocrm.services.permissions import permission_service


# =============================================================================
# DATAS
# =============================================================================

@pytest.mark.parametrize("value", [None, ""])
def test_empty_values_are_none(value):
    assert parse_optional_datetime(value) is None


def test_parse_z_suffix_and_offsets():
    assert parse_optional_datetime("2026-11-02T10:00:00Z") == datetime(2026, 11, 2, 10, tzinfo=timezone.utc)
    assert parse_optional_datetime("2026-11-02T07:00:00-03:00") == datetime(
        2026, 11, 2, 10, tzinfo=timezone.utc
    )


def test_naive_values_are_treated_as_utc():
    parsed = parse_optional_datetime("2026-11-02T10:00")
    assert parsed.tzinfo == timezone.utc
    assert to_utc(datetime(2026, 1, 1)) == datetime(2026, 1, 1, tzinfo=timezone.utc)


def test_invalid_date_raises_validation_error():
    with pytest.raises(ValidationError) as exc:
        parse_optional_datetime("31/02/2026", "próxima consulta")

    assert exc.value.status_code == 400
    assert "próxima consulta" in exc.value.message


def test_required_date():
    with pytest.raises(ValidationError):
        parse_required_datetime(None, "vencimento")


def test_to_iso():
    assert to_iso(None) is None
    assert to_iso(datetime(2026, 5, 1, 8, 30)) == "2026-05-01T08:30:00+00:00"


# =============================================================================
# TOKENS E SENHAS
# =============================================================================

def test_password_hash_roundtrip():
    hashed = hash_password("senha123")
    assert hashed != "senha123"
    assert verify_password("senha123", hashed)
    assert not verify_password("outra", hashed)
    assert not verify_password("senha123", "hash-invalido")


def test_access_and_refresh_tokens_are_not_interchangeable():
    claims = {"sub": "1"}
    access = create_access_token(claims)
    refresh = create_refresh_token(claims)

    assert decode_access_token(access)["sub"] == "1"
    assert decode_refresh_token(refresh)["sub"] == "1"
    assert decode_access_token(refresh) is None
    assert decode_refresh_token(access) is None


def test_expired_access_token():
    token = create_access_token({"sub": "1"}, expires_delta=timedelta(seconds=-1))
    assert decode_access_token(token) is None


# =============================================================================
# PERMISSÕES
# =============================================================================

@pytest.mark.parametrize(
    "role,action,allowed",
    [
        ("ADMIN", "manage_users", True),
        ("ADMIN", "delete_unit", True),
        ("SUPER_ADMIN", "delete_unit", True),
        ("MANAGER", "update_unit", True),
        ("MANAGER", "create_unit", False),
        ("WORKER", "manage_users", False),
        ("DENTIST", "update_unit", False),
        ("DESCONHECIDO", "update_unit", False),
    ],
)
def test_role_permissions(role, action, allowed):
    user = SimpleNamespace(role=role)
    assert permission_service.can_perform_action(user, action) is allowed


def test_require_raises_forbidden():
    with pytest.raises(ForbiddenError):
        permission_service.require(SimpleNamespace(role="WORKER"), "delete_unit", "Sem permissão")
