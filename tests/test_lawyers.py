from conftest import auth, register_direct_lawyer, register_shared_lawyer, register_user


def test_directory_filters_by_specialization(client):
    register_direct_lawyer(client, name="Bob Counsel", specialization="Family Law")
    register_direct_lawyer(client, name="Dan Counsel", specialization="Criminal law")

    everyone = client.get("/lawyer").json()
    assert [lawyer["name"] for lawyer in everyone] == ["Bob Counsel", "Dan Counsel"]

    family = client.get("/lawyer", params={"specialization": "family"}).json()
    assert [lawyer["name"] for lawyer in family] == ["Bob Counsel"]
    assert all("password" not in lawyer for lawyer in everyone)


def test_profile_lookup_by_id_and_user(client):
    shared = register_shared_lawyer(client, name="Carol Counsel")
    profile = shared["lawyer"]
    assert profile["isDirect"] is False
    assert profile["userId"] == shared["userId"]

    assert client.get(f"/lawyer/{profile['id']}").json()["name"] == "Carol Counsel"
    assert client.get(f"/lawyer/user/{shared['userId']}").json()["id"] == profile["id"]
    assert client.get("/lawyer/00000000-0000-0000-0000-000000000000").status_code == 404


def test_only_lawyer_accounts_create_a_single_profile(client):
    user = register_user(client, name="Alice")
    refused = client.post("/lawyer", json={"specialization": "Tax"}, headers=auth(user["token"]))
    assert refused.status_code == 403

    shared = register_shared_lawyer(client, name="Carol Counsel")
    again = client.post("/lawyer", json={"specialization": "Tax"}, headers=auth(shared["token"]))
    assert again.status_code == 400
    assert again.json()["code"] == "DUPLICATE"


def test_owner_edits_profile_and_availability(client):
    lawyer = register_direct_lawyer(client, name="Bob Counsel", price=80)
    response = client.patch(
        f"/lawyer/{lawyer['lawyerId']}",
        json={"pricePerSession": 95, "bio": "Twenty years at the bar"},
        headers=auth(lawyer["token"]),
    )
    assert response.status_code == 200
    assert response.json()["pricePerSession"] == 95
    assert response.json()["bio"] == "Twenty years at the bar"
    assert response.json()["specialization"] == "Family law"

    slots = [
        {"day": "Monday", "startTime": "09:00", "endTime": "12:00"},
        {"day": "Thursday", "startTime": "14:00", "endTime": "18:00"},
    ]
    response = client.patch(
        f"/lawyer/{lawyer['lawyerId']}/availability", json={"availability": slots}, headers=auth(lawyer["token"])
    )
    assert response.status_code == 200
    assert response.json()["availability"] == slots


def test_others_cannot_edit_a_profile(client):
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    other = register_direct_lawyer(client, name="Dan Counsel")
    user = register_user(client, name="Alice")
    admin = register_user(client, name="Root", role="admin", adminKey="let-me-in")

    for token in (other["token"], user["token"]):
        response = client.patch(f"/lawyer/{lawyer['lawyerId']}", json={"bio": "hacked"}, headers=auth(token))
        assert response.status_code == 403

    by_admin = client.patch(f"/lawyer/{lawyer['lawyerId']}", json={"bio": "Reviewed"}, headers=auth(admin["token"]))
    assert by_admin.status_code == 200
    assert by_admin.json()["bio"] == "Reviewed"
