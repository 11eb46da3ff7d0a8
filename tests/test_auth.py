from datetime import timedelta
from uuid import UUID

from conftest import auth, register_direct_lawyer, register_shared_lawyer, register_user

from legal_eagle.api.utils import create_access_token
from legal_eagle.database.config.connection_engine import SessionFactory
from legal_eagle.database.entities.auth_session import AuthSession
from legal_eagle.database.helpers.time_utils import utc_now


def test_register_issues_a_working_token(client):
    account = register_user(client, name="Alice")
    assert account["role"] == "user"
    assert account["user"]["walletBalance"] == 0
    assert "password" not in account["user"]

    me = client.get("/auth/me", headers=auth(account["token"]))
    assert me.status_code == 200
    assert me.json()["userId"] == account["userId"]
    assert me.json()["isDirectLawyer"] is False


def test_duplicate_email_is_rejected(client):
    account = register_user(client, name="Alice")
    response = client.post(
        "/auth/register",
        json={"name": "Other", "email": account["email"].upper(), "password": "x"},
    )
    assert response.status_code == 400
    assert response.json()["code"] == "DUPLICATE"


def test_login_is_case_insensitive_on_email(client):
    account = register_user(client, name="Alice")
    response = client.post("/auth/login", json={"email": account["email"].upper(), "password": "secret"})
    assert response.status_code == 200
    assert response.json()["userId"] == account["userId"]


def test_wrong_password_is_unauthorized(client):
    account = register_user(client, name="Alice")
    response = client.post("/auth/login", json={"email": account["email"], "password": "nope"})
    assert response.status_code == 401
    assert "error" in response.json()


def test_missing_or_garbage_token_is_unauthorized(client):
    assert client.get("/auth/me").status_code == 401
    response = client.get("/auth/me", headers=auth("not-a-jwt"))
    assert response.status_code == 401
    assert response.json() == {"error": "Authentication required"}


def test_concurrent_sessions_and_logout_of_one(client):
    account = register_user(client, name="Alice")
    second = client.post("/auth/login", json={"email": account["email"], "password": "secret"}).json()
    assert second["token"] != account["token"]

    assert client.get("/auth/me", headers=auth(account["token"])).status_code == 200
    assert client.get("/auth/me", headers=auth(second["token"])).status_code == 200

    assert client.post("/auth/logout", headers=auth(account["token"])).status_code == 200
    assert client.get("/auth/me", headers=auth(account["token"])).status_code == 401
    assert client.get("/auth/me", headers=auth(second["token"])).status_code == 200


def test_signed_token_without_session_row_is_rejected(client):
    account = register_user(client, name="Alice")
    forged = create_access_token(
        {"sub": account["userId"], "kind": "user"}, expires_at=utc_now() + timedelta(hours=1)
    )
    assert client.get("/auth/me", headers=auth(forged)).status_code == 401


def test_expired_session_row_is_rejected(client):
    account = register_user(client, name="Alice")
    token = create_access_token({"sub": account["userId"], "kind": "user"}, expires_at=utc_now() + timedelta(hours=1))
    session = SessionFactory()
    try:
        session.add(
            AuthSession(
                token=token,
                expires_at=utc_now() - timedelta(minutes=1),
                user_id=UUID(account["userId"]),
            )
        )
        session.commit()
    finally:
        session.close()
    assert client.get("/auth/me", headers=auth(token)).status_code == 401


def test_admin_registration_requires_key(client):
    refused = client.post(
        "/auth/register",
        json={"name": "Root", "email": "root@example.com", "password": "x", "role": "admin"},
    )
    assert refused.status_code == 403

    wrong = client.post(
        "/auth/register",
        json={"name": "Root", "email": "root@example.com", "password": "x", "role": "admin", "adminKey": "guess"},
    )
    assert wrong.status_code == 403

    admin = register_user(client, name="Root", role="admin", adminKey="let-me-in")
    assert admin["role"] == "admin"


def test_direct_lawyer_session_resolves_to_direct_principal(client):
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    me = client.get("/auth/me", headers=auth(lawyer["token"])).json()
    assert me["isDirectLawyer"] is True
    assert me["role"] == "lawyer"
    assert me["lawyerId"] == lawyer["lawyerId"]
    assert "password" not in lawyer["lawyer"]


def test_direct_and_shared_login_paths_are_separate(client):
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    assert client.post("/auth/login", json={"email": lawyer["email"], "password": "secret"}).status_code == 401
    relogin = client.post("/lawyer/login", json={"email": lawyer["email"], "password": "secret"})
    assert relogin.status_code == 200
    assert relogin.json()["lawyerId"] == lawyer["lawyerId"]

    shared = register_shared_lawyer(client, name="Carol Counsel")
    assert client.post("/lawyer/login", json={"email": shared["email"], "password": "secret"}).status_code == 401


def test_shared_lawyer_principal_carries_profile_id(client):
    shared = register_shared_lawyer(client, name="Carol Counsel")
    me = client.get("/auth/me", headers=auth(shared["token"])).json()
    assert me["isDirectLawyer"] is False
    assert me["role"] == "lawyer"
    assert me["lawyerId"] == shared["lawyer"]["id"]
    assert shared["lawyerId"] == shared["lawyer"]["id"]
