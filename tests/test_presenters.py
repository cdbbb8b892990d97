from datetime import datetime, timedelta, timezone

from critico.entities.chat_preview import NO_MESSAGES_YET, ChatPreview
from critico.entities.message import QR_NOTICE, ChatMessage
from critico.entities.user import UserMini
from critico.presenters.chat_list import badge_label, build_item
from critico.presenters.message_bubble import build_bubble, build_bubbles
from critico.presenters.time_format import format_clock, format_list_time

NOW = datetime(2024, 5, 15, 12, 0, tzinfo=timezone.utc)  # a Wednesday

OWNER, TESTER = 1, 2


def _msg(id=1, message_type="direct", sender_id=TESTER, **kw):
    base = dict(
        id=id,
        chat_id=10,
        content="Hallo",
        created_at=NOW,
        sender_id=sender_id,
        receiver_id=OWNER if sender_id == TESTER else TESTER,
        message_type=message_type,
        read=False,
    )
    base.update(kw)
    return ChatMessage(**base)


def _preview(**kw):
    base = dict(
        chat_id=10,
        partner_id=TESTER,
        partner_name="tim",
        partner_surname="tester",
        partner_picture=None,
        partner_trustlevel=0,
        last_message="Hallo",
        last_message_time=NOW - timedelta(minutes=5),
        last_message_type="direct",
        unread_count=0,
        has_unread_request=False,
    )
    base.update(kw)
    return ChatPreview(**base)


def test_list_time_labels():
    assert format_list_time(NOW - timedelta(hours=3), now=NOW) == "09:00"
    assert format_list_time(NOW - timedelta(days=1), now=NOW) == "Gestern"
    assert format_list_time(NOW - timedelta(days=2), now=NOW) == "Mo"
    assert format_list_time(NOW - timedelta(days=30), now=NOW) == "15.04."
    assert format_list_time(None, now=NOW) == ""


def test_clock_respects_timezone():
    cest = timezone(timedelta(hours=2))
    assert format_clock(NOW, tz=cest) == "14:00"


def test_plain_text_bubble():
    bubble = build_bubble(_msg(sender=UserMini(id=TESTER, name="Tim", surname="Tester")), viewer_id=TESTER)
    assert bubble.kind == "text"
    assert bubble.is_own
    assert bubble.sender_name == "Tim Tester"
    assert not bubble.show_actions


def test_request_actions_only_for_owner_while_open():
    req = _msg(message_type="request", product_id=5, owner_id=OWNER, tester_id=TESTER)

    owner_view = build_bubble(req, viewer_id=OWNER)
    tester_view = build_bubble(req, viewer_id=TESTER)
    assert owner_view.kind == "request"
    assert owner_view.show_actions
    assert owner_view.status_label == "Möchte dieses Produkt testen"
    assert not tester_view.show_actions

    done = build_bubble(req.with_state(message_type="request_accepted"), viewer_id=OWNER)
    assert not done.show_actions
    assert done.status_label == "Aktiviert"


def test_owner_resolved_from_product_map():
    req = _msg(message_type="request", product_id=5)
    [bubble] = build_bubbles([req], viewer_id=OWNER, owners={5: OWNER})
    assert bubble.show_actions


def test_token_bubble_is_masked_for_tester():
    token = _msg(
        id=2,
        message_type="request_accepted",
        sender_id=OWNER,
        receiver_id=OWNER,
        product_id=5,
        owner_id=OWNER,
        tester_id=TESTER,
        comment_token_id=9,
        content="https://x/activate/abc",
        token_url="https://x/activate/abc",
    )

    owner_view = build_bubble(token, viewer_id=OWNER)
    assert owner_view.kind == "token"
    assert owner_view.show_token
    assert owner_view.token_url == "https://x/activate/abc"

    tester_view = build_bubble(token, viewer_id=TESTER)
    assert tester_view.content == QR_NOTICE
    assert tester_view.token_url is None
    assert not tester_view.show_token


def test_badge_label_caps():
    assert badge_label(0) is None
    assert badge_label(7) == "7"
    assert badge_label(100) == "99+"


def test_list_item_texts():
    item = build_item(_preview(unread_count=3), now=NOW)
    assert item.title == "tim tester"
    assert item.initials == "TT"
    assert item.preview == "Hallo"
    assert item.unread_label == "3"
    assert item.highlight == "unread"
    assert item.time_label == "11:55"

    req = build_item(_preview(last_message_type="request", last_message="Ich möchte…"), now=NOW)
    assert req.preview == "Möchte Produkt testen"
    assert req.highlight == "request"

    empty = build_item(_preview(last_message=NO_MESSAGES_YET, last_message_type=None), now=NOW)
    assert empty.preview == NO_MESSAGES_YET
    assert empty.highlight is None


def test_preview_search_matches_name_or_text():
    p = _preview(last_message="Kaffee?")
    assert p.matches(None)
    assert p.matches("TIM")
    assert p.matches("tim test")
    assert p.matches("kaff")
    assert not p.matches("otto")
