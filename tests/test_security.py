from datetime import datetime, timedelta, timezone

import jwt
import pytest

from funnel_dashboard.api.security import (
    AccessGate,
    ClientClaims,
    ensure_dashboard_scope,
    hash_password,
    verify_password,
)
from funnel_dashboard.errors import ScopeMismatch, Unauthorized


@pytest.fixture
def gate(settings):
    return AccessGate(settings)


def test_password_hash_round_trip():
    hashed = hash_password("cliente123")
    assert hashed != "cliente123"
    assert verify_password("cliente123", hashed)
    assert not verify_password("cliente124", hashed)


def test_verify_password_without_stored_hash():
    assert not verify_password("anything", None)
    assert not verify_password("anything", "")
    assert not verify_password("anything", "plain-text-value")


def test_admin_token_carries_identity(gate):
    claims = gate.verify_admin_token(gate.issue_admin_token(1, "agencia", "admin"))
    assert (claims.user_id, claims.username, claims.role) == (1, "agencia", "admin")


def test_client_token_is_scoped_to_one_dashboard(gate):
    token = gate.issue_client_token(7)
    assert gate.verify_client_token(token, 7) == ClientClaims(dashboard_id=7)
    with pytest.raises(ScopeMismatch) as excinfo:
        gate.verify_client_token(token, 8)
    assert excinfo.value.status_code == 403


def test_tokens_do_not_cross_scopes(gate):
    with pytest.raises(Unauthorized):
        gate.verify_client_token(gate.issue_admin_token(1, "agencia", "admin"), 7)
    with pytest.raises(Unauthorized):
        gate.verify_admin_token(gate.issue_client_token(7))


def test_client_token_signed_with_client_secret_needs_client_type(gate, settings):
    now = datetime.now(timezone.utc)
    forged = jwt.encode(
        {"dashboardId": 7, "type": "admin", "iat": now, "exp": now + timedelta(minutes=5)},
        settings.client_jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized):
        gate.verify_client_token(forged, 7)


def test_expired_token_is_rejected(gate, settings):
    past = datetime.now(timezone.utc) - timedelta(days=31)
    expired = jwt.encode(
        {"dashboardId": 7, "type": "client", "iat": past, "exp": past + timedelta(days=30)},
        settings.client_jwt_secret,
        algorithm="HS256",
    )
    with pytest.raises(Unauthorized) as excinfo:
        gate.verify_client_token(expired, 7)
    assert excinfo.value.message == "Token expired"


def test_token_without_expiry_is_rejected(gate, settings):
    token = jwt.encode({"dashboardId": 7, "type": "client"}, settings.client_jwt_secret, algorithm="HS256")
    with pytest.raises(Unauthorized):
        gate.verify_client_token(token, 7)


def test_tampered_token_is_rejected(gate):
    token = gate.issue_client_token(7)
    header, payload, signature = token.split(".")
    tampered = ".".join([header, payload, signature[::-1]])
    with pytest.raises(Unauthorized) as excinfo:
        gate.verify_client_token(tampered, 7)
    assert excinfo.value.message == "Invalid token"


@pytest.mark.parametrize("token", [None, ""])
def test_missing_token(gate, token):
    with pytest.raises(Unauthorized) as excinfo:
        gate.verify_admin_token(token)
    assert excinfo.value.message == "Missing bearer token"


def test_ensure_dashboard_scope():
    ensure_dashboard_scope(ClientClaims(dashboard_id=3), 3)
    with pytest.raises(ScopeMismatch):
        ensure_dashboard_scope(ClientClaims(dashboard_id=3), 4)
