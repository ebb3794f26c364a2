from datetime import timedelta

import pytest
from flask_jwt_extended import create_access_token, decode_token

from stockfolio.Models.UserModel import User
from stockfolio.Services.AuthenticationService import verify_token
from stockfolio.Utils.Errors import AuthError
from conftest import bearer, login, register


def test_register_creates_user(client, app):
    resp = register(client, "alice")
    assert resp.status_code == 201
    assert resp.get_json() == {"success": True}
    assert "token" not in resp.get_json()

    with app.app_context():
        user = User.query.filter_by(username="alice").one()
        assert user.password_hash != b"secret123"
        assert user.check_password("secret123")
        assert not user.check_password("wrong")


def test_register_duplicate_username_conflicts(client):
    register(client, "alice")
    resp = register(client, "alice", "another")
    assert resp.status_code == 409
    assert resp.get_json()["error"] == "Username already exists"


@pytest.mark.parametrize("body", [
    {},
    {"username": "alice"},
    {"password": "secret123"},
    {"username": "   ", "password": "secret123"},
    {"username": "alice", "password": ""},
])
def test_register_requires_both_fields(client, body):
    resp = client.post("/api/register", json=body)
    assert resp.status_code == 400
    assert "required" in resp.get_json()["error"]


def test_login_returns_token_for_user(client, app):
    register(client, "alice")
    resp = login(client, "alice")
    assert resp.status_code == 200
    data = resp.get_json()
    assert data["username"] == "alice"

    with app.app_context():
        claims = decode_token(data["token"])
    assert claims["sub"] == "alice"
    assert claims["exp"] - claims["iat"] == int(timedelta(days=7).total_seconds())


def test_login_wrong_password(client):
    register(client, "alice")
    resp = login(client, "alice", "nope")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid credentials"}


def test_login_unknown_user(client):
    resp = login(client, "ghost")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid credentials"}


def test_login_missing_fields(client):
    resp = client.post("/api/login", json={"username": "alice"})
    assert resp.status_code == 400


def test_verify_token_returns_username(client, app):
    register(client, "alice")
    token = login(client, "alice").get_json()["token"]
    with app.app_context():
        assert verify_token(token) == "alice"


def test_verify_token_rejects_tampered_token(client, app):
    register(client, "alice")
    register(client, "bob")
    alice_token = login(client, "alice").get_json()["token"]
    bob_token = login(client, "bob").get_json()["token"]

    header, _, signature = alice_token.split(".")
    forged = ".".join([header, bob_token.split(".")[1], signature])

    with app.app_context():
        with pytest.raises(AuthError):
            verify_token(forged)
        with pytest.raises(AuthError):
            verify_token("not-a-token")
        with pytest.raises(AuthError):
            verify_token("")


def test_verify_token_rejects_expired_token(app):
    with app.app_context():
        token = create_access_token(identity="alice", expires_delta=timedelta(seconds=-1))
        with pytest.raises(AuthError):
            verify_token(token)


def test_protected_route_without_token(client):
    resp = client.get("/api/stocks")
    assert resp.status_code == 401
    assert "error" in resp.get_json()


def test_protected_route_with_garbage_token(client):
    resp = client.get("/api/stocks", headers=bearer("garbage"))
    assert resp.status_code == 401
    assert "error" in resp.get_json()


def test_protected_route_with_expired_token(client, app):
    with app.app_context():
        token = create_access_token(identity="alice", expires_delta=timedelta(seconds=-1))
    resp = client.get("/api/stocks", headers=bearer(token))
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Token has expired"}


@pytest.mark.parametrize("path", ["/api/register", "/api/login"])
@pytest.mark.parametrize("body", [["alice", "secret123"], "alice", 42])
def test_credentials_must_be_an_object(client, path, body):
    resp = client.post(path, json=body)
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "Username and password required"}
