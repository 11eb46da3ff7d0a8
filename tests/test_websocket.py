from conftest import EXPIRED_DATE, auth, book, deposit, open_chat, register_direct_lawyer, register_user


def _authenticate(ws, token):
    ws.send_json({"event": "authenticate", "data": {"token": token}})
    return ws.receive_json()


def test_bad_token_gets_auth_error(client):
    with client.websocket_connect("/ws") as ws:
        frame = _authenticate(ws, "nonsense")
        assert frame["event"] == "authError"

        ws.send_json({"event": "authenticate", "data": {}})
        assert ws.receive_json() == {"event": "authError", "data": {"message": "Missing token"}}


def test_events_before_authentication_are_errors(client):
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "joinRoom", "data": {"chatId": "00000000-0000-0000-0000-000000000000"}})
        frame = ws.receive_json()
        assert frame["event"] == "error"
        assert frame["data"]["status"] == 401

        ws.send_json({"event": "dance", "data": {}})
        assert ws.receive_json()["data"]["code"] == "UNKNOWN_EVENT"

        ws.send_text("not json")
        assert ws.receive_json()["event"] == "error"


def test_authenticate_auto_joins_rooms(client, open_room):
    user, lawyer, room = open_room
    with client.websocket_connect("/ws") as ws:
        frame = _authenticate(ws, lawyer["token"])
        assert frame["event"] == "authenticated"
        assert frame["data"]["role"] == "lawyer"
        assert frame["data"]["lawyerId"] == lawyer["lawyerId"]
        assert frame["data"]["rooms"] == [room["id"]]


def test_message_fan_out(client, open_room):
    user, lawyer, room = open_room
    with client.websocket_connect("/ws") as lawyer_ws, client.websocket_connect("/ws") as user_ws:
        _authenticate(lawyer_ws, lawyer["token"])
        _authenticate(user_ws, user["token"])

        user_ws.send_json({"event": "sendMessage", "data": {"chatId": room["id"], "text": "Hello over the socket"}})

        echoed = user_ws.receive_json()
        assert echoed["event"] == "receiveMessage"
        assert echoed["data"]["text"] == "Hello over the socket"
        assert echoed["data"]["sender"] == "user"

        received = lawyer_ws.receive_json()
        assert received["event"] == "receiveMessage"
        assert received["data"]["id"] == echoed["data"]["id"]
        notification = lawyer_ws.receive_json()
        assert notification["event"] == "newMessageNotification"
        assert notification["data"]["chatId"] == room["id"]

    history = client.get(f"/chat/{room['id']}", headers=auth(user["token"])).json()
    assert history["messages"][-1]["text"] == "Hello over the socket"


def test_typing_and_read_receipts_reach_the_other_side(client, open_room):
    user, lawyer, room = open_room
    client.post(f"/chat/{room['id']}/message", json={"text": "Ping"}, headers=auth(user["token"]))
    with client.websocket_connect("/ws") as lawyer_ws, client.websocket_connect("/ws") as user_ws:
        _authenticate(lawyer_ws, lawyer["token"])
        _authenticate(user_ws, user["token"])

        user_ws.send_json({"event": "typing", "data": {"chatId": room["id"]}})
        typing = lawyer_ws.receive_json()
        assert typing == {
            "event": "userTyping",
            "data": {"chatId": room["id"], "userId": user["userId"], "role": "user"},
        }

        lawyer_ws.send_json({"event": "markAsRead", "data": {"chatId": room["id"]}})
        read = user_ws.receive_json()
        assert read["event"] == "messagesRead"
        assert read["data"] == {"chatId": room["id"], "reader": "lawyer", "updated": 1}


def test_rest_actions_notify_live_sockets(client, booked_pair):
    user, lawyer = booked_pair
    with client.websocket_connect("/ws") as lawyer_ws, client.websocket_connect("/ws") as user_ws:
        _authenticate(lawyer_ws, lawyer["token"])
        _authenticate(user_ws, user["token"])

        room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
        request = lawyer_ws.receive_json()
        assert request["event"] == "newChatRequest"
        assert request["data"]["id"] == room["id"]

        client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"]))
        update = user_ws.receive_json()
        assert update["event"] == "chatRequestUpdate"
        assert update["data"]["status"] == "accepted"


def test_ended_appointment_is_reported_over_the_socket(client):
    user = register_user(client, name="Alice")
    lawyer = register_direct_lawyer(client, name="Bob Counsel", price=10)
    deposit(client, user["token"], 100)
    book(client, user["token"], lawyer["lawyerId"], date=EXPIRED_DATE)
    room = open_chat(client, user["token"], lawyer["lawyerId"]).json()
    client.post(f"/chat/{room['id']}/request", json={"action": "accept"}, headers=auth(lawyer["token"]))

    with client.websocket_connect("/ws") as ws:
        _authenticate(ws, user["token"])
        ws.send_json({"event": "sendMessage", "data": {"chatId": room["id"], "text": "Anyone?"}})
        frame = ws.receive_json()
        assert frame["event"] == "appointmentEnded"
        assert frame["data"]["appointmentEnded"] is True
        assert frame["data"]["code"] == "APPOINTMENT_ENDED"
        assert frame["data"]["chatId"] == room["id"]


def test_join_room_checks_membership(client, open_room):
    _, _, room = open_room
    outsider = register_user(client, name="Eve")
    with client.websocket_connect("/ws") as ws:
        _authenticate(ws, outsider["token"])
        ws.send_json({"event": "joinRoom", "data": {"chatId": room["id"]}})
        frame = ws.receive_json()
        assert frame["event"] == "error"
        assert frame["data"]["status"] == 403


def test_malformed_payloads_keep_the_socket_open(client, open_room):
    user, _, room = open_room
    with client.websocket_connect("/ws") as ws:
        ws.send_json({"event": "authenticate", "data": {"token": 123}})
        assert ws.receive_json() == {"event": "authError", "data": {"message": "Invalid session"}}

        _authenticate(ws, user["token"])
        ws.send_json({"event": "sendMessage", "data": {"chatId": room["id"], "text": 123}})
        frame = ws.receive_json()
        assert frame["event"] == "error"
        assert frame["data"]["status"] == 400
        assert frame["data"]["event"] == "sendMessage"

        ws.send_json({"event": "sendMessage", "data": {"chatId": room["id"], "text": "Still here"}})
        echoed = ws.receive_json()
        assert echoed["event"] == "receiveMessage"
        assert echoed["data"]["text"] == "Still here"


def test_reauthentication_drops_rooms_of_the_previous_principal(client, open_room):
    user, lawyer, room = open_room
    outsider = register_user(client, name="Eve")
    with client.websocket_connect("/ws") as ws:
        assert _authenticate(ws, user["token"])["data"]["rooms"] == [room["id"]]
        assert _authenticate(ws, outsider["token"])["data"]["rooms"] == []

        sent = client.post(f"/chat/{room['id']}/message", json={"text": "secret"}, headers=auth(lawyer["token"]))
        assert sent.status_code == 201

        ws.send_json({"event": "typing", "data": {"chatId": "not-a-uuid"}})
        frame = ws.receive_json()
        assert frame["event"] == "error"
        assert frame["data"]["event"] == "typing"
