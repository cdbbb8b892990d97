import pytest

from critico.entities.message import QR_NOTICE
from critico.sessions.chat_session import CHAT_SLOT
from critico.sessions.user_session import UserSession


@pytest.fixture
def open_session(timers):
    opened = []

    def _open(user_id):
        us = UserSession(user_id=user_id, timer_factory=timers)
        alerts = []
        us.chat.on_alert(alerts.append)
        us.alerts = alerts
        opened.append(us)
        return us

    yield _open
    for us in opened:
        us.close()


def _types(us):
    return [m.message_type for m in us.chat.messages]


def test_round_trip_between_two_open_chats(open_session, users):
    olga = open_session(users["owner"])
    tim = open_session(users["tester"])

    assert olga.chat.open(users["tester"]) == []
    tim.chat.open(users["owner"])
    assert olga.chat.chat_id == tim.chat.chat_id

    sent = olga.chat.send("Hallo Tim")
    assert sent.content == "Hallo Tim"

    [received] = tim.chat.messages
    assert received.id == sent.id
    # Tim has the chat on screen
    assert received.read is True
    [own] = olga.chat.messages
    assert own.read is True

    reply = tim.chat.send("Hi Olga")
    assert [m.id for m in olga.chat.messages] == [sent.id, reply.id]
    assert [m.id for m in tim.chat.messages] == [sent.id, reply.id]


def test_blank_send_changes_nothing(open_session, users):
    olga = open_session(users["owner"])
    olga.chat.open(users["tester"])
    changes = []
    olga.chat.on_change(changes.append)

    assert olga.chat.send("   \n\t") is None
    assert olga.chat.send(None) is None
    assert olga.chat.messages == []
    assert changes == []
    assert olga.alerts == []


def test_send_without_open_chat_alerts(open_session, users):
    olga = open_session(users["owner"])
    assert olga.chat.send("hallo") is None
    assert [a.kind for a in olga.alerts] == ["conflict"]


def test_open_with_unknown_partner_alerts(open_session, users):
    olga = open_session(users["owner"])
    assert olga.chat.open(9999) is None
    assert olga.alerts[0].kind == "not_found"
    assert olga.chat.chat_id is None


def test_history_loaded_on_open_is_marked_read(open_session, users, services):
    chat_id = services(
        lambda s: s.chats.get_or_create_direct_chat(user_id=users["tester"], partner_id=users["owner"])
    ).id
    services(lambda s: s.messages.send_direct(chat_id=chat_id, sender_id=users["tester"], content="vorher"))

    olga = open_session(users["owner"])
    [msg] = olga.chat.open(users["tester"])
    assert msg.content == "vorher"

    assert services(lambda s: s.messages.list_conversations(user_id=users["owner"])).badge == 0


def test_incoming_request_shows_up_live(open_session, users, product, services):
    olga = open_session(users["owner"])
    olga.chat.open(users["tester"])

    req = services(lambda s: s.requests.request_test(product_id=product, tester_id=users["tester"]))

    [live] = olga.chat.messages
    assert live.id == req.id
    assert live.message_type == "request"
    assert olga.chat.product_owner(product) == users["owner"]


def _request_and_open_both(open_session, users, product, services):
    # the request is filed from the product page, before either chat is open
    req = services(lambda s: s.requests.request_test(product_id=product, tester_id=users["tester"]))
    olga = open_session(users["owner"])
    tim = open_session(users["tester"])
    olga.chat.open(users["tester"])
    tim.chat.open(users["owner"])
    return req, olga, tim


def test_own_inserts_are_not_echoed(open_session, users, product, services):
    tim = open_session(users["tester"])
    tim.chat.open(users["owner"])

    services(lambda s: s.requests.request_test(product_id=product, tester_id=users["tester"]))
    assert tim.chat.messages == []


def test_owner_accepts_and_both_sides_update(open_session, users, product, services):
    req, olga, tim = _request_and_open_both(open_session, users, product, services)
    assert _types(olga) == ["request"]
    assert _types(tim) == ["request"]

    accepted = olga.chat.accept_request(req.id)
    assert accepted.message_type == "request_accepted"

    assert _types(olga) == ["request_accepted", "request_accepted"]
    token_for_owner = olga.chat.messages[1]
    assert token_for_owner.token_url and "/activate/" in token_for_owner.token_url

    assert _types(tim) == ["request_accepted", "request_accepted"]
    token_for_tester = tim.chat.messages[1]
    assert token_for_tester.content == QR_NOTICE
    assert token_for_tester.token_url is None


def _view(messages):
    return [(m.id, m.message_type, m.content, m.token_url) for m in messages]


def _fresh_view(open_session, user_id, partner_id):
    fresh = open_session(user_id)
    return _view(fresh.chat.open(partner_id))


def test_qr_ready_then_redeem(open_session, users, product, services):
    req, olga, tim = _request_and_open_both(open_session, users, product, services)
    accepted = olga.chat.accept_request(req.id, await_redemption=True)
    assert accepted.message_type == "request_qr_ready"

    # a request waiting for its scan is not shown in the chat window
    assert req.id not in [m.id for m in olga.chat.messages]
    assert req.id not in [m.id for m in tim.chat.messages]
    [token_for_owner] = olga.chat.messages
    [token_for_tester] = tim.chat.messages
    assert token_for_tester.content == QR_NOTICE
    assert token_for_tester.token_url is None

    token = token_for_owner.token_url.rsplit("/", 1)[1]
    services(lambda s: s.requests.redeem(token=token, user_id=users["tester"]))

    assert [m.id for m in olga.chat.messages] == [req.id, token_for_owner.id]
    assert _types(olga) == ["request_accepted", "request_accepted"]
    assert _types(tim) == ["request_accepted", "request_accepted"]


def test_qr_ready_live_view_matches_a_reload(open_session, users, product, services):
    req, olga, tim = _request_and_open_both(open_session, users, product, services)
    olga.chat.accept_request(req.id, await_redemption=True)

    assert _view(olga.chat.messages) == _fresh_view(open_session, users["owner"], users["tester"])
    assert _view(tim.chat.messages) == _fresh_view(open_session, users["tester"], users["owner"])

    token = olga.chat.messages[0].token_url.rsplit("/", 1)[1]
    services(lambda s: s.requests.redeem(token=token, user_id=users["tester"]))

    assert _view(olga.chat.messages) == _fresh_view(open_session, users["owner"], users["tester"])
    assert _view(tim.chat.messages) == _fresh_view(open_session, users["tester"], users["owner"])


def test_tester_cannot_accept_own_request(open_session, users, product, services):
    req, _, tim = _request_and_open_both(open_session, users, product, services)

    assert tim.chat.accept_request(req.id) is None
    assert tim.alerts[-1].kind == "forbidden"
    assert tim.alerts[-1].message == "Keine Berechtigung."
    assert _types(tim) == ["request"]


def test_decline_reaches_the_tester(open_session, users, product, services):
    req, olga, tim = _request_and_open_both(open_session, users, product, services)

    olga.chat.decline_request(req.id)
    assert _types(olga) == ["request_declined"]
    assert _types(tim) == ["request_declined"]

    assert olga.chat.decline_request(req.id) is None
    assert olga.alerts[-1].kind == "conflict"


def test_switching_partner_moves_the_channel(open_session, users, services):
    olga = open_session(users["owner"])
    olga.chat.open(users["tester"])
    first_chat = olga.chat.chat_id

    olga.chat.open(users["other"])
    assert olga.channels.scope_of(CHAT_SLOT) == olga.chat.chat_id != first_chat

    services(lambda s: s.messages.send_direct(chat_id=first_chat, sender_id=users["tester"], content="alt"))
    assert olga.chat.messages == []


def test_close_stops_live_updates(open_session, users, services):
    olga = open_session(users["owner"])
    olga.chat.open(users["tester"])
    chat_id = olga.chat.chat_id

    olga.chat.close()
    assert not olga.channels.is_open(CHAT_SLOT)

    services(lambda s: s.messages.send_direct(chat_id=chat_id, sender_id=users["tester"], content="weg"))
    assert olga.chat.messages == []
    assert olga.chat.chat_id is None
