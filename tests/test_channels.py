from critico.infrastructure.realtime.change_feed import ChangeEvent, ChangeFeed, ChangeKind
from critico.infrastructure.realtime.feed_message_notifier import MESSAGES_TABLE
from critico.sessions.channels import ChannelRegistry


def _publish(feed, chat_id):
    feed.publish(ChangeEvent(table=MESSAGES_TABLE, kind=ChangeKind.INSERT, row={"chat_id": chat_id}))


def _open(registry, slot, scope, callback):
    return registry.open(slot, scope, table=MESSAGES_TABLE, callback=callback, filters={"chat_id": scope})


def test_same_scope_reuses_subscription():
    feed = ChangeFeed()
    registry = ChannelRegistry(feed)
    got = []

    assert _open(registry, "chat", 1, got.append) is True
    assert _open(registry, "chat", 1, got.append) is False
    assert feed.subscriber_count() == 1

    _publish(feed, 1)
    assert len(got) == 1


def test_new_scope_replaces_subscription():
    feed = ChangeFeed()
    registry = ChannelRegistry(feed)
    got = []

    _open(registry, "chat", 1, got.append)
    assert _open(registry, "chat", 2, got.append) is True
    assert feed.subscriber_count() == 1
    assert registry.scope_of("chat") == 2

    _publish(feed, 1)
    _publish(feed, 2)
    assert [e.row["chat_id"] for e in got] == [2]


def test_slots_are_independent_and_close_releases_all():
    feed = ChangeFeed()
    registry = ChannelRegistry(feed)

    _open(registry, "chat", 1, lambda e: None)
    _open(registry, "conversations", 5, lambda e: None)
    assert registry.slots() == ["chat", "conversations"]
    assert feed.subscriber_count() == 2

    registry.release("chat")
    assert not registry.is_open("chat")
    assert registry.is_open("conversations")

    registry.close()
    assert registry.slots() == []
    assert feed.subscriber_count() == 0


def test_release_of_unknown_slot_is_harmless():
    registry = ChannelRegistry(ChangeFeed())
    registry.release("nothing")
    assert registry.scope_of("nothing") is None
