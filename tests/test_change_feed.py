import pytest

from critico.infrastructure.database.session import db_session
from critico.infrastructure.realtime.change_feed import ChangeEvent, ChangeFeed, ChangeKind, change_feed
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE
from critico.services.service_factory import build_services


def _event(kind=ChangeKind.INSERT, **row):
    return ChangeEvent(table=MESSAGES_TABLE, kind=kind, row=row)


def test_filters_by_table_kind_and_columns():
    feed = ChangeFeed()
    got = []
    feed.subscribe(MESSAGES_TABLE, got.append, kinds=[ChangeKind.UPDATE], filters={"chat_id": 7})

    feed.publish(_event(ChangeKind.INSERT, chat_id=7))
    feed.publish(_event(ChangeKind.UPDATE, chat_id=8))
    feed.publish(ChangeEvent(table="tbOther", kind=ChangeKind.UPDATE, row={"chat_id": 7}))
    feed.publish(_event(ChangeKind.UPDATE, chat_id=7))

    assert [e.row["chat_id"] for e in got] == [7]
    assert got[0].kind is ChangeKind.UPDATE


def test_set_filters_and_predicate():
    feed = ChangeFeed()
    got = []
    feed.subscribe(
        MESSAGES_TABLE,
        got.append,
        filters={"message_type": {"direct", "request"}},
        predicate=lambda row: row.get("receiver_id") == 1,
    )

    feed.publish(_event(message_type="direct", receiver_id=1))
    feed.publish(_event(message_type="product", receiver_id=1))
    feed.publish(_event(message_type="request", receiver_id=2))

    assert len(got) == 1


def test_unsubscribe_is_idempotent():
    feed = ChangeFeed()
    got = []
    sub = feed.subscribe(MESSAGES_TABLE, got.append)
    assert feed.subscriber_count() == 1

    sub.unsubscribe()
    sub.unsubscribe()
    feed.publish(_event(chat_id=1))

    assert got == []
    assert not sub.active
    assert feed.subscriber_count() == 0


def test_failing_subscriber_does_not_starve_others():
    feed = ChangeFeed()
    got = []

    def broken(event):
        raise RuntimeError("listener bug")

    feed.subscribe(MESSAGES_TABLE, broken)
    feed.subscribe(MESSAGES_TABLE, got.append)
    feed.publish(_event(chat_id=1))

    assert len(got) == 1


def test_callbacks_may_unsubscribe_themselves():
    feed = ChangeFeed()
    calls = []
    holder = {}

    def once(event):
        calls.append(event)
        holder["sub"].unsubscribe()

    holder["sub"] = feed.subscribe(MESSAGES_TABLE, once)
    feed.publish(_event(chat_id=1))
    feed.publish(_event(chat_id=1))

    assert len(calls) == 1


def test_message_events_are_published_after_commit(services, users):
    chat_id = services(
        lambda s: s.chats.get_or_create_direct_chat(user_id=users["owner"], partner_id=users["tester"])
    ).id
    got = []
    change_feed.subscribe(MESSAGES_TABLE, got.append, filters={"chat_id": chat_id})

    with db_session() as session:
        msg = build_services(session).messages.send_direct(chat_id=chat_id, sender_id=users["owner"], content="hi")
        assert got == []

    [event] = got
    assert event.kind is ChangeKind.INSERT
    assert event.actor_id == users["owner"]
    assert event.row["id"] == msg.id
    assert event.row["message_type"] == "direct"
    assert event.row["receiver_id"] == users["tester"]
    assert event.row["read"] is False


def test_rolled_back_work_publishes_nothing(services, users):
    chat_id = services(
        lambda s: s.chats.get_or_create_direct_chat(user_id=users["owner"], partner_id=users["tester"])
    ).id
    got = []
    change_feed.subscribe(MESSAGES_TABLE, got.append)

    with pytest.raises(RuntimeError):
        with db_session() as session:
            build_services(session).messages.send_direct(chat_id=chat_id, sender_id=users["owner"], content="hi")
            raise RuntimeError("abort")

    assert got == []
    history = services(lambda s: s.messages.list_history(chat_id=chat_id, viewer_id=users["owner"]))
    assert history == []


def test_mark_read_publishes_one_update_per_row(services, users):
    chat_id = services(
        lambda s: s.chats.get_or_create_direct_chat(user_id=users["owner"], partner_id=users["tester"])
    ).id
    for text in ("a", "b"):
        services(lambda s, t=text: s.messages.send_direct(chat_id=chat_id, sender_id=users["tester"], content=t))

    got = []
    change_feed.subscribe(MESSAGES_TABLE, got.append, kinds=[ChangeKind.UPDATE])
    services(lambda s: s.messages.mark_read(chat_id=chat_id, user_id=users["owner"]))

    assert len(got) == 2
    assert all(e.row["read"] is True and e.actor_id == users["owner"] for e in got)
