"""
Tests for the event relay.

These tests verify fan-out to the other subscribers of a room, the no-echo
rule and best-effort delivery.
"""

import pytest
from realtime.events import MemberRemoved, ProductDeleted
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay


class RecordingConnection:
    """Collects delivered events."""

    def __init__(self, name: str):
        self.name = name
        self.received = []

    def __repr__(self) -> str:
        return self.name

    def deliver(self, list_id, event):
        self.received.append((list_id, event))


class BrokenConnection(RecordingConnection):
    def deliver(self, list_id, event):
        raise ConnectionResetError("socket closed")


@pytest.fixture
def event():
    return ProductDeleted(list_id="list-7", product_id="p1")


class TestPublish:

    def test_delivers_to_every_other_subscriber(self, registry: MembershipRegistry, relay: EventRelay, event):
        sender = RecordingConnection("sender")
        others = [RecordingConnection(f"c{i}") for i in range(3)]
        registry.join(sender, "list-7")
        for conn in others:
            registry.join(conn, "list-7")

        delivered = relay.publish("list-7", event, sender=sender)

        assert delivered == 3
        for conn in others:
            assert conn.received == [("list-7", event)]

    def test_never_echoes_to_sender(self, registry: MembershipRegistry, relay: EventRelay, event):
        sender = RecordingConnection("sender")
        other = RecordingConnection("other")
        registry.join(sender, "list-7")
        registry.join(other, "list-7")

        relay.publish("list-7", event, sender=sender)

        assert sender.received == []

    def test_only_targets_the_events_room(self, registry: MembershipRegistry, relay: EventRelay, event):
        sender = RecordingConnection("sender")
        elsewhere = RecordingConnection("elsewhere")
        registry.join(elsewhere, "list-8")

        assert relay.publish("list-7", event, sender=sender) == 0
        assert elsewhere.received == []

    def test_empty_room_is_a_noop(self, relay: EventRelay):
        sender = RecordingConnection("sender")

        delivered = relay.publish("list-7", MemberRemoved(list_id="list-7", user_id="u9"), sender=sender)

        assert delivered == 0

    def test_failed_delivery_does_not_block_others(self, registry: MembershipRegistry, relay: EventRelay, event):
        sender = RecordingConnection("sender")
        broken = BrokenConnection("broken")
        healthy = RecordingConnection("healthy")
        for conn in (sender, broken, healthy):
            registry.join(conn, "list-7")

        delivered = relay.publish("list-7", event, sender=sender)

        assert delivered == 1
        assert healthy.received == [("list-7", event)]

    def test_disconnected_connection_is_not_targeted(self, registry: MembershipRegistry, relay: EventRelay, event):
        sender = RecordingConnection("sender")
        gone = RecordingConnection("gone")
        registry.join(gone, "list-7")
        registry.disconnect(gone)

        relay.publish("list-7", event, sender=sender)

        assert gone.received == []
