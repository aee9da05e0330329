import pytest
from starlette.websockets import WebSocketDisconnect

from tests.helpers import auth_headers, make_user, ws_url


@pytest.fixture
def alice(db):
    return make_user(db, "alice@example.com")


@pytest.fixture
def bob(db):
    return make_user(db, "bob@example.com")


def receive_event(ws, event):
    """Read frames until `event` arrives, skipping presence broadcasts."""
    while True:
        frame = ws.receive_json()
        if frame["event"] == event:
            return frame["data"]


def test_online_users_broadcast(client, alice, bob):
    with client.websocket_connect(ws_url(alice.id)) as ws_alice:
        assert receive_event(ws_alice, "getOnlineUsers") == [alice.id]

        with client.websocket_connect(ws_url(bob.id)) as ws_bob:
            assert sorted(receive_event(ws_bob, "getOnlineUsers")) == sorted([alice.id, bob.id])
            assert sorted(receive_event(ws_alice, "getOnlineUsers")) == sorted([alice.id, bob.id])

        # Bob's disconnect is announced to those still online
        assert receive_event(ws_alice, "getOnlineUsers") == [alice.id]


def test_online_recipient_receives_message_once(client, hub, alice, bob):
    """A verified user messages an online user; the push and the stored copy agree."""
    with client.websocket_connect(ws_url(bob.id)) as ws_bob:
        receive_event(ws_bob, "getOnlineUsers")

        response = client.post(f"/messages/send/{bob.id}", json={"text": "hi"}, headers=auth_headers(alice))
        assert response.status_code == 201

        pushed = receive_event(ws_bob, "newMessage")
        assert pushed["text"] == "hi"
        assert pushed["senderId"] == alice.id
        assert pushed["id"] == response.json()["id"]

    history = client.get(f"/messages/{alice.id}", headers=auth_headers(bob)).json()
    assert [m["text"] for m in history] == ["hi"]


def test_offline_recipient_still_gets_message_on_fetch(client, hub, alice, bob):
    assert hub.presence.lookup(bob.id) is None

    response = client.post(f"/messages/send/{bob.id}", json={"text": "are you there?"}, headers=auth_headers(alice))
    assert response.status_code == 201

    history = client.get(f"/messages/{alice.id}", headers=auth_headers(bob)).json()
    assert [m["text"] for m in history] == ["are you there?"]


def test_reconnect_keeps_newest_connection(client, hub, alice, bob):
    first = client.websocket_connect(ws_url(bob.id))
    ws_first = first.__enter__()
    receive_event(ws_first, "getOnlineUsers")

    with client.websocket_connect(ws_url(bob.id)) as ws_second:
        receive_event(ws_second, "getOnlineUsers")
        newest = hub.presence.lookup(bob.id)

        # The older tab closes after the newer one registered
        first.__exit__(None, None, None)
        assert receive_event(ws_second, "getOnlineUsers") == [bob.id]
        assert hub.presence.lookup(bob.id) == newest

        client.post(f"/messages/send/{bob.id}", json={"text": "still here"}, headers=auth_headers(alice))
        assert receive_event(ws_second, "newMessage")["text"] == "still here"

    assert hub.presence.lookup(bob.id) is None


def test_join_group_subscribes_active_connection(client, hub, admin, alice):
    group = client.post(
        "/admin/create-group", json={"name": "Circle", "type": "general"}, headers=auth_headers(admin)
    ).json()

    with client.websocket_connect(ws_url(alice.id)) as ws_alice:
        receive_event(ws_alice, "getOnlineUsers")

        client.post(f"/messages/join-group/{group['id']}", headers=auth_headers(alice))
        client.post(
            f"/messages/send-group/{group['id']}", json={"text": "welcome!"}, headers=auth_headers(admin)
        )

        pushed = receive_event(ws_alice, "newGroupMessage")
        assert pushed["text"] == "welcome!"
        assert pushed["groupId"] == group["id"]
        assert pushed["sender"]["id"] == admin.id


def test_existing_members_join_rooms_on_connect(client, hub, admin, alice, bob):
    group = client.post(
        "/admin/create-group", json={"name": "Circle", "type": "general"}, headers=auth_headers(admin)
    ).json()
    client.post(f"/messages/join-group/{group['id']}", headers=auth_headers(alice))

    with client.websocket_connect(ws_url(alice.id)) as ws_alice:
        receive_event(ws_alice, "getOnlineUsers")
        with client.websocket_connect(ws_url(bob.id)) as ws_bob:
            receive_event(ws_bob, "getOnlineUsers")

            client.post(
                f"/messages/send-group/{group['id']}", json={"text": "members only"}, headers=auth_headers(alice)
            )

            # Bob is online but not a member, so only Alice's room connection gets the push
            assert len(hub.presence.room_members(f"group_{group['id']}")) == 1
            assert receive_event(ws_alice, "newGroupMessage")["text"] == "members only"


def test_ping(client, alice):
    with client.websocket_connect(ws_url(alice.id)) as ws:
        receive_event(ws, "getOnlineUsers")
        ws.send_text("ping")
        assert receive_event(ws, "pong") is None


def test_reconnect_detaches_older_connection_from_rooms(client, hub, admin, alice):
    group = client.post(
        "/admin/create-group", json={"name": "Circle", "type": "general"}, headers=auth_headers(admin)
    ).json()
    client.post(f"/messages/join-group/{group['id']}", headers=auth_headers(alice))
    room = f"group_{group['id']}"

    with client.websocket_connect(ws_url(alice.id)) as ws_first:
        receive_event(ws_first, "getOnlineUsers")
        with client.websocket_connect(ws_url(alice.id)) as ws_second:
            receive_event(ws_second, "getOnlineUsers")

            assert hub.presence.room_members(room) == {hub.presence.lookup(alice.id)}

            client.post(f"/messages/send-group/{group['id']}", json={"text": "hello"}, headers=auth_headers(admin))
            assert receive_event(ws_second, "newGroupMessage")["text"] == "hello"


def test_deleted_user_is_dropped_from_rooms_and_presence(client, hub, admin, alice, bob):
    group = client.post(
        "/admin/create-group", json={"name": "Circle", "type": "general"}, headers=auth_headers(admin)
    ).json()
    room = f"group_{group['id']}"
    alice_id = alice.id
    for member in (alice, bob):
        client.post(f"/messages/join-group/{group['id']}", headers=auth_headers(member))

    with client.websocket_connect(ws_url(alice_id)) as ws_alice:
        receive_event(ws_alice, "getOnlineUsers")
        with client.websocket_connect(ws_url(bob.id)) as ws_bob:
            receive_event(ws_bob, "getOnlineUsers")
            assert len(hub.presence.room_members(room)) == 2

            assert client.delete(f"/admin/delete-user/{alice_id}", headers=auth_headers(admin)).status_code == 200

            assert receive_event(ws_bob, "getOnlineUsers") == [bob.id]
            assert hub.presence.lookup(alice_id) is None
            assert hub.presence.room_members(room) == {hub.presence.lookup(bob.id)}

            client.post(f"/messages/send-group/{group['id']}", json={"text": "after"}, headers=auth_headers(bob))
            assert receive_event(ws_bob, "newGroupMessage")["text"] == "after"


def test_session_cookie_opens_socket(client, db):
    user = make_user(db, "bea@example.com", password="secret123")
    client.post("/auth/login", json={"email": "bea@example.com", "password": "secret123"})

    with client.websocket_connect(f"/ws?userId={user.id}") as ws:
        assert receive_event(ws, "getOnlineUsers") == [user.id]


@pytest.mark.parametrize("query", ["", "?userId=abc", "?token=abc"])
def test_malformed_handshake_is_refused(client, query):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/ws{query}"):
            pass


def test_unknown_user_is_refused(client, hub):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(ws_url(999)):
            pass
    assert hub.presence.online_user_ids() == []


def test_socket_without_session_is_refused(client, hub, alice, bob):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/ws?userId={bob.id}"):
            pass
    assert hub.presence.lookup(bob.id) is None

    # Nothing is listening for bob, so the message only lands in storage
    response = client.post(f"/messages/send/{bob.id}", json={"text": "private"}, headers=auth_headers(alice))
    assert response.status_code == 201


@pytest.mark.parametrize("token", ["not-a-jwt", ""])
def test_socket_with_bad_token_is_refused(client, hub, alice, token):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(f"/ws?userId={alice.id}&token={token}"):
            pass
    assert hub.presence.lookup(alice.id) is None


def test_socket_with_another_users_token_is_refused(client, hub, alice, bob):
    with pytest.raises(WebSocketDisconnect):
        with client.websocket_connect(ws_url(bob.id, token_user_id=alice.id)):
            pass
    assert hub.presence.online_user_ids() == []
