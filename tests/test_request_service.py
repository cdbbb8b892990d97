import pytest

from critico.core.exceptions import ConflictError, ForbiddenError, NotFoundError
from critico.entities.message import QR_NOTICE
from critico.infrastructure.database.models.comment_token_model import CommentTokenModel
from critico.infrastructure.database.models.message_model import MessageModel
from critico.infrastructure.database.session import db_session
from critico.infrastructure.realtime.change_feed import change_feed
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE


def _request(services, product, tester, content=None):
    return services(lambda s: s.requests.request_test(product_id=product, tester_id=tester, content=content))


def _accept(services, message_id, actor, await_redemption=False):
    return services(
        lambda s: s.requests.accept(message_id=message_id, actor_id=actor, await_redemption=await_redemption)
    )


def _row(message_id):
    with db_session() as session:
        msg = session.get(MessageModel, message_id)
        session.expunge(msg)
        return msg


def test_request_creates_request_message_in_direct_chat(services, users, product):
    msg = _request(services, product, users["tester"])

    assert msg.message_type == "request"
    assert msg.sender_id == users["tester"]
    assert msg.receiver_id == users["owner"]
    assert msg.owner_id == users["owner"]
    assert msg.tester_id == users["tester"]
    assert msg.product_id == product
    assert msg.read is False
    assert msg.content == "Ich möchte „Kaffeemaschine“ testen."

    chat = services(lambda s: s.chats.get_or_create_direct_chat(user_id=users["owner"], partner_id=users["tester"]))
    assert chat.id == msg.chat_id


def test_request_keeps_custom_text(services, users, product):
    msg = _request(services, product, users["tester"], content="  Darf ich?  ")
    assert msg.content == "Darf ich?"


def test_cannot_request_own_product(services, users, product):
    with pytest.raises(ForbiddenError):
        _request(services, product, users["owner"])


def test_unknown_product(services, users):
    with pytest.raises(NotFoundError):
        _request(services, 999, users["tester"])


def test_only_one_open_request_per_product(services, users, product):
    first = _request(services, product, users["tester"])
    with pytest.raises(ConflictError):
        _request(services, product, users["tester"])

    services(lambda s: s.requests.decline(message_id=first.id, actor_id=users["owner"]))
    again = _request(services, product, users["tester"])
    assert again.id != first.id


def test_accept_flips_request_and_adds_owner_token_message(services, users, product):
    req = _request(services, product, users["tester"])
    result = _accept(services, req.id, users["owner"])

    assert result.request.message_type == "request_accepted"
    assert result.request.read is True

    token_msg = result.token_message
    assert token_msg.chat_id == req.chat_id
    assert token_msg.sender_id == users["owner"]
    assert token_msg.receiver_id == users["owner"]
    assert token_msg.read is True
    assert token_msg.comment_token_id is not None
    assert token_msg.product_id == product
    assert token_msg.content == f"https://critico.example.com/activate/{result.token}"
    assert token_msg.token_url == token_msg.content

    with db_session() as session:
        token = session.get(CommentTokenModel, token_msg.comment_token_id)
        assert token.owner_user_id == users["owner"]
        assert token.tester_user_id == users["tester"]
        assert token.request_message_id == req.id
        assert token.redeemed_at is None


def test_tester_sees_only_the_notice_for_the_token_message(services, users, product):
    req = _request(services, product, users["tester"])
    result = _accept(services, req.id, users["owner"])

    seen = services(lambda s: s.messages.get_message(message_id=result.token_message.id, viewer_id=users["tester"]))
    assert seen.content == QR_NOTICE
    assert seen.token_url is None


@pytest.mark.parametrize("actor_key", ["tester", "other"])
def test_only_owner_can_accept_or_decline(services, users, product, actor_key):
    req = _request(services, product, users["tester"])

    with pytest.raises(ForbiddenError):
        _accept(services, req.id, users[actor_key])
    with pytest.raises(ForbiddenError):
        services(lambda s: s.requests.decline(message_id=req.id, actor_id=users[actor_key]))

    assert _row(req.id).message_type == "request"


def test_terminal_requests_cannot_be_answered_again(services, users, product):
    req = _request(services, product, users["tester"])
    _accept(services, req.id, users["owner"])

    with pytest.raises(ConflictError):
        _accept(services, req.id, users["owner"])
    with pytest.raises(ConflictError):
        services(lambda s: s.requests.decline(message_id=req.id, actor_id=users["owner"]))

    with db_session() as session:
        assert session.query(CommentTokenModel).count() == 1


def test_token_message_is_not_a_request(services, users, product):
    req = _request(services, product, users["tester"])
    result = _accept(services, req.id, users["owner"])
    with pytest.raises(NotFoundError):
        _accept(services, result.token_message.id, users["owner"])


def test_accept_is_all_or_nothing(services, users, product, monkeypatch):
    req = _request(services, product, users["tester"])
    events = []
    change_feed.subscribe(MESSAGES_TABLE, events.append)

    def boom(token):
        raise RuntimeError("url builder down")

    monkeypatch.setattr("critico.services.request_service.redeem_url", boom)
    with pytest.raises(RuntimeError):
        _accept(services, req.id, users["owner"])

    assert _row(req.id).message_type == "request"
    with db_session() as session:
        assert session.query(CommentTokenModel).count() == 0
    assert events == []


def test_qr_ready_path_masks_request_until_redeemed(services, users, product):
    req = _request(services, product, users["tester"])
    result = _accept(services, req.id, users["owner"], await_redemption=True)
    assert result.request.message_type == "request_qr_ready"

    as_tester = services(lambda s: s.messages.get_message(message_id=req.id, viewer_id=users["tester"]))
    as_owner = services(lambda s: s.messages.get_message(message_id=req.id, viewer_id=users["owner"]))
    assert as_tester.content == QR_NOTICE
    assert as_owner.content == req.content

    # still open, so no second request
    with pytest.raises(ConflictError):
        _request(services, product, users["tester"])

    product_id = services(lambda s: s.requests.redeem(token=result.token, user_id=users["tester"]))
    assert product_id == product
    assert _row(req.id).message_type == "request_accepted"


def test_redeem_grants_permission_once(services, users, product):
    req = _request(services, product, users["tester"])
    result = _accept(services, req.id, users["owner"])

    assert not services(lambda s: s.comments.can_comment(product_id=product, user_id=users["tester"]))

    with pytest.raises(ForbiddenError):
        services(lambda s: s.requests.redeem(token=result.token, user_id=users["other"]))

    services(lambda s: s.requests.redeem(token=result.token, user_id=users["tester"]))
    assert services(lambda s: s.comments.can_comment(product_id=product, user_id=users["tester"]))

    with pytest.raises(ConflictError):
        services(lambda s: s.requests.redeem(token=result.token, user_id=users["tester"]))

    with db_session() as session:
        token = session.get(CommentTokenModel, result.token_message.comment_token_id)
        assert token.redeemed_at is not None


def test_redeem_unknown_token(services, users):
    with pytest.raises(NotFoundError):
        services(lambda s: s.requests.redeem(token="nope", user_id=users["tester"]))


def test_token_url_is_owner_only(services, users, product):
    req = _request(services, product, users["tester"])

    with pytest.raises(NotFoundError):
        services(lambda s: s.requests.get_token_url(message_id=req.id, actor_id=users["owner"]))

    result = _accept(services, req.id, users["owner"])
    url = services(lambda s: s.requests.get_token_url(message_id=req.id, actor_id=users["owner"]))
    assert url.endswith("/" + result.token)

    with pytest.raises(ForbiddenError):
        services(lambda s: s.requests.get_token_url(message_id=req.id, actor_id=users["tester"]))


def test_inbox_and_pending_count(services, users, make_product):
    p1 = make_product(users["owner"], "Mixer")
    p2 = make_product(users["owner"], "Toaster")

    r1 = _request(services, p1, users["tester"])
    _request(services, p2, users["tester"])
    _request(services, p1, users["other"])
    assert services(lambda s: s.requests.pending_count(owner_id=users["owner"])) == 3

    _accept(services, r1.id, users["owner"])
    inbox = services(lambda s: s.requests.inbox(owner_id=users["owner"]))

    assert len(inbox.pending) == 2
    assert [i.message.id for i in inbox.answered] == [r1.id]
    assert inbox.answered[0].product_name == "Mixer"
    assert inbox.answered[0].tester.id == users["tester"]
    assert services(lambda s: s.requests.pending_count(owner_id=users["owner"])) == 2
    assert services(lambda s: s.requests.pending_count(owner_id=users["tester"])) == 0
