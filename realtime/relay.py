"""
Event relay: fans a mutation event out to the other subscribers of a list.

The relay keeps no state of its own. It asks the membership registry for the
room, skips the sender and hands the event to every remaining connection.

Delivery is best-effort:
- No acknowledgement, retry or persistence
- A connection that fails is logged and skipped; the rest still get the event
- An event nobody receives is simply gone; clients recover by re-fetching
"""

import logging

from realtime.events import MutationEvent
from realtime.registry import Connection, MembershipRegistry

logger = logging.getLogger("event_relay")


class EventRelay:
    """
    Broadcasts events to a list's room, never echoing back to the sender.

    Target connections must expose deliver(list_id, event).
    """

    def __init__(self, registry: MembershipRegistry):
        self.registry = registry

    def publish(self, list_id: str, event: MutationEvent, sender: Connection = None) -> int:
        """
        Deliver an event to every connection in the room except the sender.

        Returns:
            Number of connections the event was handed to successfully
        """
        targets = self.registry.broadcast_targets(list_id, exclude=sender)
        if not targets:
            logger.debug(f"No other subscribers for {event.type} in room {list_id}")
            return 0

        delivered = 0
        for target in targets:
            try:
                target.deliver(list_id, event)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropped {event.type} for {target} in room {list_id}: {e}")

        logger.info(f"Relayed {event.type} to {delivered}/{len(targets)} connection(s) in room {list_id}")
        return delivered
