"""
Membership registry: which connections are subscribed to which list's room.

One registry is created per process (per application instance) and handed to
the relay and to every connection session. It lives only in memory.

Design decisions:
- A room is a plain set of connections keyed by list id; no ordering
- Rooms appear on first join and disappear when their last member leaves
- A reverse index (connection -> rooms) makes disconnect cleanup exact
- No locking: all calls happen on the single dispatching event loop
"""

import logging
from collections import defaultdict
from typing import Hashable

logger = logging.getLogger("membership_registry")

# Anything hashable that can receive relayed events, usually a ConnectionSession
Connection = Hashable


class MembershipRegistry:
    """
    Room membership for live connections.

    Example:
        registry = MembershipRegistry()
        registry.join(conn_a, "list-001")
        registry.join(conn_b, "list-001")
        registry.broadcast_targets("list-001", exclude=conn_a)  # {conn_b}
    """

    def __init__(self):
        self._rooms: dict[str, set[Connection]] = {}
        self._memberships: dict[Connection, set[str]] = defaultdict(set)

    def join(self, connection: Connection, list_id: str) -> None:
        """Add a connection to a list's room. Joining twice is a no-op."""
        room = self._rooms.setdefault(list_id, set())
        if connection in room:
            return
        room.add(connection)
        self._memberships[connection].add(list_id)
        logger.debug(f"{connection} joined room {list_id} ({len(room)} subscribed)")

    def leave(self, connection: Connection, list_id: str) -> None:
        """Remove a connection from a room. Leaving a room not joined is a no-op."""
        room = self._rooms.get(list_id)
        if room is None or connection not in room:
            return
        room.discard(connection)
        if not room:
            del self._rooms[list_id]
            logger.debug(f"Room {list_id} is empty, dropped")

        rooms = self._memberships.get(connection)
        if rooms is not None:
            rooms.discard(list_id)
            if not rooms:
                del self._memberships[connection]
        logger.debug(f"{connection} left room {list_id}")

    def disconnect(self, connection: Connection) -> set[str]:
        """
        Remove a connection from every room it joined.

        Returns:
            The list ids the connection was removed from
        """
        rooms = set(self._memberships.get(connection, ()))
        for list_id in rooms:
            self.leave(connection, list_id)
        if rooms:
            logger.info(f"{connection} disconnected, removed from {len(rooms)} room(s)")
        return rooms

    def broadcast_targets(self, list_id: str, exclude: Connection = None) -> set[Connection]:
        """Subscribed connections of a room, without the sender."""
        room = self._rooms.get(list_id, set())
        return {c for c in room if c is not exclude}

    def rooms_for(self, connection: Connection) -> set[str]:
        """List ids the connection is currently subscribed to."""
        return set(self._memberships.get(connection, ()))

    def room_size(self, list_id: str) -> int:
        return len(self._rooms.get(list_id, ()))

    def room_count(self) -> int:
        return len(self._rooms)
