import threading

from conftest import (
    EXPIRED_DATE,
    auth,
    book,
    deposit,
    open_chat,
    register_direct_lawyer,
    register_shared_lawyer,
    register_user,
)


def _send(client, token, chat_id, text):
    return client.post(f"/chat/{chat_id}/message", json={"text": text}, headers=auth(token))


def _history(client, token, chat_id):
    return client.get(f"/chat/{chat_id}", headers=auth(token))


def test_chat_requires_a_paid_appointment(client):
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    response = open_chat(client, user["token"], lawyer["lawyerId"])
    assert response.status_code == 403
    assert response.json()["code"] == "NO_APPOINTMENT"
    assert "error" in response.json()


def test_new_room_is_pending_and_locked(client, booked_pair):
    user, lawyer = booked_pair
    response = open_chat(client, user["token"], lawyer["lawyerId"])
    assert response.status_code == 201
    room = response.json()
    assert room["status"] == "pending"
    assert room["isChatUnlocked"] is False
    assert room["paymentStatus"] == "paid"
    assert room["appointmentId"] is not None
    assert [m["sender"] for m in room["messages"]] == ["system"]
    assert room["messages"][0]["text"] == "Chat request created"

    again = open_chat(client, user["token"], lawyer["lawyerId"])
    assert again.status_code == 200
    assert again.json()["id"] == room["id"]


def test_client_cannot_send_before_lawyer_accepts(client, booked_pair):
    user, lawyer = booked_pair
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    response = _send(client, user["token"], room["id"], "Hello?")
    assert response.status_code == 403
    assert response.json()["code"] == "CHAT_LOCKED"


def test_only_the_rooms_lawyer_decides(client, booked_pair):
    user, lawyer = booked_pair
    other_lawyer = register_direct_lawyer(client, name="Dan Counsel")
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()

    for token in (user["token"], other_lawyer["token"]):
        response = client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(token))
        assert response.status_code == 403


def test_accepted_room_carries_a_conversation_in_order(client, open_room):
    user, lawyer, room = open_room
    assert room["status"] == "accepted"
    assert room["isChatUnlocked"] is True

    assert _send(client, user["token"], room["id"], "Hello").status_code == 201
    assert _send(client, lawyer["token"], room["id"], "Hi, how can I help?").status_code == 201
    assert _send(client, user["token"], room["id"], "About my lease").status_code == 201

    history = _history(client, user["token"], room["id"])
    assert history.status_code == 200
    messages = history.json()["messages"]
    assert [m["position"] for m in messages] == list(range(len(messages)))
    assert [(m["sender"], m["text"]) for m in messages] == [
        ("system", "Chat request created"),
        ("system", "Chat request accepted"),
        ("user", "Hello"),
        ("lawyer", "Hi, how can I help?"),
        ("user", "About my lease"),
    ]
    timestamps = [m["timestamp"] for m in messages]
    assert timestamps == sorted(timestamps)


def test_empty_message_is_rejected(client, open_room):
    user, _, room = open_room
    response = _send(client, user["token"], room["id"], "   ")
    assert response.status_code == 400


def test_ended_appointment_makes_chat_view_only(client):
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel", price=10)
    deposit(client, user["token"], 100)
    assert book(client, user["token"], lawyer["lawyerId"], date=EXPIRED_DATE).status_code == 201

    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"]))

    blocked = _send(client, user["token"], room["id"], "Still there?")
    assert blocked.status_code == 403
    body = blocked.json()
    assert body["code"] == "APPOINTMENT_ENDED"
    assert body["appointmentEnded"] is True
    assert "view this chat" in body["error"]

    history = _history(client, user["token"], room["id"])
    assert history.status_code == 200
    assert history.json()["canSend"] is False

    assert _send(client, lawyer["token"], room["id"], "Follow-up notes").status_code == 201


def test_new_active_appointment_reopens_sending(client):
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel", price=10)
    deposit(client, user["token"], 100)
    book(client, user["token"], lawyer["lawyerId"], date=EXPIRED_DATE)
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"]))
    assert _send(client, user["token"], room["id"], "Hi").status_code == 403

    book(client, user["token"], lawyer["lawyerId"])
    assert _send(client, user["token"], room["id"], "Hi again").status_code == 201


def test_decline_locks_room_and_logs_decision(client, booked_pair):
    user, lawyer = booked_pair
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    response = client.post(
        f"/chat/{room['id']}/request", json={"action": "decline"}, headers=auth(lawyer["token"])
    )
    assert response.status_code == 200
    assert response.json()["status"] == "declined"
    assert response.json()["isChatUnlocked"] is False

    messages = _history(client, user["token"], room["id"]).json()["messages"]
    assert messages[-1]["sender"] == "system"
    assert messages[-1]["text"] == "Chat request declined"
    assert _send(client, user["token"], room["id"], "Please?").json()["code"] == "CHAT_LOCKED"


def test_unknown_decision_is_a_validation_error(client, booked_pair):
    user, lawyer = booked_pair
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    response = client.post(
        f"/chat/{room['id']}/request", json={"action": "maybe"}, headers=auth(lawyer["token"])
    )
    assert response.status_code == 400


def test_forced_room_without_appointment_stays_gated(client):
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    response = open_chat(client, user["token"], lawyer["lawyerId"], forceCreation=True)
    assert response.status_code == 201
    room = response.json()
    assert room["paymentStatus"] == "unpaid"
    assert room["appointmentId"] is None

    assert _history(client, user["token"], room["id"]).json()["code"] == "NO_APPOINTMENT"
    client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"]))
    assert _send(client, user["token"], room["id"], "Hi").json()["code"] == "NO_APPOINTMENT"
    assert _history(client, lawyer["token"], room["id"]).status_code == 200


def test_outsiders_are_kept_out(client, open_room):
    _, _, room = open_room
    outsider = register_user(client, name="Eve")
    other_lawyer = register_direct_lawyer(client, name="Dan Counsel")
    for token in (outsider["token"], other_lawyer["token"]):
        assert _history(client, token, room["id"]).status_code == 403
        assert _send(client, token, room["id"], "Hi").status_code == 403
        assert client.get(f"/chat/{room['id']}/status", headers=auth(token)).status_code == 403


def test_unknown_room_is_not_found(client, booked_pair):
    user, _ = booked_pair
    assert _history(client, user["token"], "00000000-0000-0000-0000-000000000000").status_code == 404


def test_read_flags_only_flip_for_the_other_side(client, open_room):
    user, lawyer, room = open_room
    _send(client, user["token"], room["id"], "One")
    _send(client, user["token"], room["id"], "Two")
    _send(client, lawyer["token"], room["id"], "Reply")

    read = client.patch(f"/chat/{room['id']}/read", headers=auth(lawyer["token"]))
    assert read.status_code == 200
    assert read.json()["updated"] == 2

    messages = _history(client, user["token"], room["id"]).json()["messages"]
    by_text = {m["text"]: m["read"] for m in messages}
    assert by_text["One"] is True
    assert by_text["Two"] is True
    assert by_text["Reply"] is False

    again = client.patch(f"/chat/{room['id']}/read", headers=auth(lawyer["token"]))
    assert again.json()["updated"] == 0

    client.patch(f"/chat/{room['id']}/read", headers=auth(user["token"]))
    messages = _history(client, user["token"], room["id"]).json()["messages"]
    assert all(m["read"] for m in messages)


def test_status_reports_the_gate(client, open_room):
    user, lawyer, room = open_room
    status = client.get(f"/chat/{room['id']}/status", headers=auth(user["token"])).json()
    assert status == {
        "chatId": room["id"],
        "status": "accepted",
        "isChatUnlocked": True,
        "paymentStatus": "paid",
        "hasQualifyingAppointment": True,
        "appointmentActive": True,
        "canSend": True,
    }


def test_manual_unlock_by_admin(client, booked_pair):
    user, lawyer = booked_pair
    admin = register_user(client, name="Root", role="admin", adminKey="let-me-in")
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()

    assert client.post(f"/chat/{room['id']}/unlock", headers=auth(user["token"])).status_code == 403
    response = client.post(f"/chat/{room['id']}/unlock", headers=auth(admin["token"]))
    assert response.status_code == 200
    assert response.json()["isChatUnlocked"] is True
    assert response.json()["status"] == "pending"
    assert _send(client, user["token"], room["id"], "Unlocked").status_code == 201

    admin_note = _send(client, admin["token"], room["id"], "Moderator note")
    assert admin_note.status_code == 201
    assert admin_note.json()["sender"] == "system"


def test_room_listings_include_unread_counts(client, open_room):
    user, lawyer, room = open_room
    _send(client, user["token"], room["id"], "One")
    _send(client, user["token"], room["id"], "Two")

    lawyer_rooms = client.get(f"/chat/lawyer/{lawyer['lawyerId']}", headers=auth(lawyer["token"])).json()
    assert [(r["id"], r["unreadCount"]) for r in lawyer_rooms] == [(room["id"], 2)]

    user_rooms = client.get(f"/chat/user/{user['userId']}", headers=auth(user["token"])).json()
    assert [(r["id"], r["unreadCount"]) for r in user_rooms] == [(room["id"], 0)]

    assert client.get(f"/chat/user/{user['userId']}", headers=auth(lawyer["token"])).status_code == 403


def test_shared_role_lawyer_runs_the_room(client):
    user = register_user(client, name="Alice")
    lawyer = register_shared_lawyer(client, name="Carol Counsel", price=25)
    deposit(client, user["token"], 100)
    assert book(client, user["token"], lawyer["lawyerId"]).status_code == 201

    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    accepted = client.post(
        f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"])
    )
    assert accepted.status_code == 200

    reply = _send(client, lawyer["token"], room["id"], "Hello from Carol")
    assert reply.status_code == 201
    assert reply.json()["sender"] == "lawyer"


def test_lawyers_cannot_open_rooms(client):
    lawyer = register_direct_lawyer(client, name="Bob Counsel")
    other = register_direct_lawyer(client, name="Dan Counsel")
    response = open_chat(client, lawyer["token"], other["lawyerId"], forceCreation=True)
    assert response.status_code == 403


def test_concurrent_room_creation_yields_one_room(client, booked_pair):
    user, lawyer = booked_pair
    barrier = threading.Barrier(2)
    responses = []

    def worker():
        barrier.wait()
        responses.append(open_chat(client, user["token"], lawyer["lawyerId"]))

    threads = [threading.Thread(target=worker) for _ in range(2)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert sorted(r.status_code for r in responses) == [200, 201]
    assert len({r.json()["id"] for r in responses}) == 1
    rooms = client.get(f"/chat/user/{user['userId']}", headers=auth(user["token"])).json()
    assert len(rooms) == 1


def test_admin_can_post_into_a_locked_room(client, booked_pair):
    user, lawyer = booked_pair
    admin = register_user(client, name="Root", role="admin", adminKey="let-me-in")
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    assert room["isChatUnlocked"] is False

    response = _send(client, admin["token"], room["id"], "Please accept the request")
    assert response.status_code == 201
    assert response.json()["sender"] == "system"
    assert _send(client, user["token"], room["id"], "Still locked?").status_code == 403
