import os
import tempfile

_DB_DIR = tempfile.mkdtemp(prefix="legal_eagle_tests_")

os.environ["DB_DRIVER_NAME"] = "sqlite"
os.environ["DB_DATABASE_NAME"] = os.path.join(_DB_DIR, "test.db")
os.environ["SECRET_KEY"] = "test-secret-key"
os.environ["ALGORITHM"] = "HS256"
os.environ["ADMIN_REGISTRATION_KEY"] = "let-me-in"
os.environ["APPOINTMENT_TIMEZONE"] = "UTC"
os.environ["DEFAULT_APPOINTMENT_DURATION"] = "60"
os.environ["TRANSACTIONS_PAGE_SIZE"] = "10"

import itertools  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402

from legal_eagle.database.config.connection_engine import connection_engine, metadata  # noqa: E402
from legal_eagle.main import app  # noqa: E402

ACTIVE_DATE = "2999-01-01"
EXPIRED_DATE = "2020-01-01"

_counter = itertools.count()


@pytest.fixture(autouse=True)
def reset_database():
    metadata.drop_all(bind=connection_engine)
    metadata.create_all(bind=connection_engine)
    yield


@pytest.fixture
def client():
    with TestClient(app) as test_client:
        yield test_client


def auth(token):
    return {"Authorization": f"Bearer {token}"}


def register_user(client, name="Client", role="user", password="secret", **extra):
    email = f"{name.lower().replace(' ', '.')}.{next(_counter)}@example.com"
    response = client.post(
        "/auth/register",
        json={"name": name, "email": email, "password": password, "role": role, **extra},
    )
    assert response.status_code == 201, response.text
    body = response.json()
    body["email"] = email
    return body


def register_direct_lawyer(client, name="Direct Lawyer", price=80, specialization="Family law"):
    email = f"{name.lower().replace(' ', '.')}.{next(_counter)}@example.com"
    response = client.post(
        "/lawyer/register",
        json={
            "name": name,
            "email": email,
            "password": "secret",
            "specialization": specialization,
            "experience": 5,
            "pricePerSession": price,
        },
    )
    assert response.status_code == 201, response.text
    body = response.json()
    body["email"] = email
    return body


def register_shared_lawyer(client, name="Shared Lawyer", price=50):
    """A `lawyer`-role user with a linked profile; returns a fresh token that resolves the profile."""
    account = register_user(client, name=name, role="lawyer")
    response = client.post(
        "/lawyer",
        json={"specialization": "Tax law", "experience": 3, "pricePerSession": price},
        headers=auth(account["token"]),
    )
    assert response.status_code == 201, response.text
    login = client.post("/auth/login", json={"email": account["email"], "password": "secret"})
    assert login.status_code == 200, login.text
    return {**login.json(), "email": account["email"], "lawyer": response.json()}


def deposit(client, token, amount):
    response = client.post("/wallet/add", json={"amount": amount}, headers=auth(token))
    assert response.status_code == 200, response.text
    return response.json()


def book(client, token, lawyer_id, date=ACTIVE_DATE, time="10:00", **extra):
    return client.post(
        "/appointments",
        json={"lawyerId": lawyer_id, "date": date, "time": time, **extra},
        headers=auth(token),
    )


def open_chat(client, token, lawyer_id, **extra):
    return client.post("/chat", json={"lawyerId": lawyer_id, **extra}, headers=auth(token))


@pytest.fixture
def booked_pair(client):
    """A client with an active, paid appointment and a direct lawyer."""
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel", price=40)
    deposit(client, user["token"], 100)
    response = book(client, user["token"], lawyer["lawyerId"])
    assert response.status_code == 201, response.text
    return user, lawyer


@pytest.fixture
def open_room(client, booked_pair):
    """An accepted, unlocked room for `booked_pair`."""
    user, lawyer = booked_pair
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    response = client.post(
        f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"])
    )
    assert response.status_code == 200, response.text
    return user, lawyer, response.json()
