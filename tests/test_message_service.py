import pytest

from critico.core.exceptions import ForbiddenError, NotFoundError, ValidationError


def _chat(services, a, b):
    return services(lambda s: s.chats.get_or_create_direct_chat(user_id=a, partner_id=b)).id


def _send(services, chat_id, sender, text):
    return services(lambda s: s.messages.send_direct(chat_id=chat_id, sender_id=sender, content=text))


def test_direct_chat_is_idempotent_and_symmetric(services, users):
    first = _chat(services, users["owner"], users["tester"])
    second = _chat(services, users["tester"], users["owner"])
    assert first == second


def test_no_chat_with_yourself_or_a_ghost(services, users):
    with pytest.raises(ValidationError):
        _chat(services, users["owner"], users["owner"])
    with pytest.raises(NotFoundError):
        _chat(services, users["owner"], 4242)


def test_send_addresses_the_partner(services, users):
    chat_id = _chat(services, users["owner"], users["tester"])
    msg = _send(services, chat_id, users["owner"], "  Hallo Tim  ")

    assert msg.content == "Hallo Tim"
    assert msg.message_type == "direct"
    assert msg.receiver_id == users["tester"]
    assert msg.product_id is None
    assert msg.sender.full_name == "Olga Owner"


def test_send_rejects_blank_text(services, users):
    chat_id = _chat(services, users["owner"], users["tester"])
    with pytest.raises(ValidationError):
        _send(services, chat_id, users["owner"], "   ")


def test_outsiders_cannot_post_or_read(services, users):
    chat_id = _chat(services, users["owner"], users["tester"])
    msg = _send(services, chat_id, users["owner"], "privat")

    with pytest.raises(ForbiddenError):
        _send(services, chat_id, users["other"], "hi")
    with pytest.raises(ForbiddenError):
        services(lambda s: s.messages.list_history(chat_id=chat_id, viewer_id=users["other"]))
    with pytest.raises(NotFoundError):
        services(lambda s: s.messages.get_message(message_id=msg.id, viewer_id=users["other"]))


def test_history_is_ascending_and_hides_qr_ready(services, users, product):
    chat_id = _chat(services, users["owner"], users["tester"])
    m1 = _send(services, chat_id, users["tester"], "eins")
    m2 = _send(services, chat_id, users["owner"], "zwei")
    req = services(lambda s: s.requests.request_test(product_id=product, tester_id=users["tester"]))

    history = services(lambda s: s.messages.list_history(chat_id=chat_id, viewer_id=users["owner"]))
    assert [m.id for m in history] == [m1.id, m2.id, req.id]

    services(lambda s: s.requests.accept(message_id=req.id, actor_id=users["owner"], await_redemption=True))
    history = services(lambda s: s.messages.list_history(chat_id=chat_id, viewer_id=users["owner"]))
    ids = [m.id for m in history]
    assert req.id not in ids
    # the token message is request_accepted and stays visible
    assert len(ids) == 3


def test_mark_read_only_touches_received_messages(services, users):
    chat_id = _chat(services, users["owner"], users["tester"])
    incoming = _send(services, chat_id, users["tester"], "a")
    outgoing = _send(services, chat_id, users["owner"], "b")

    changed = services(lambda s: s.messages.mark_read(chat_id=chat_id, user_id=users["owner"]))
    assert changed == [incoming.id]
    assert services(lambda s: s.messages.mark_read(chat_id=chat_id, user_id=users["owner"])) == []

    got = services(lambda s: s.messages.get_message(message_id=outgoing.id, viewer_id=users["owner"]))
    assert got.read is False


def test_mark_read_with_explicit_empty_list_is_a_noop(services, users):
    chat_id = _chat(services, users["owner"], users["tester"])
    _send(services, chat_id, users["tester"], "a")
    assert services(lambda s: s.messages.mark_read(chat_id=chat_id, user_id=users["owner"], message_ids=[])) == []
