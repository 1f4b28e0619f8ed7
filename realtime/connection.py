"""
Connection session: one per client connection.

Lifecycle:
    DISCONNECTED --connect()--> CONNECTED --join()--> JOINED --leave()...
    any live state --disconnect()--> DISCONNECTED (terminal)

The session joins and leaves rooms through the membership registry,
forwards locally produced events to the relay and passes relayed events
for its rooms to an on_event callback. For an in-process client that
callback is a Reconciler; for a WebSocket it is the socket's send queue.
"""

import logging
from enum import Enum
from typing import Callable, Optional
from uuid import uuid4

from realtime.events import MutationEvent
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from shared.errors import InvalidInput

logger = logging.getLogger("connection_session")

EventCallback = Callable[[MutationEvent], None]


class ConnectionState(str, Enum):
    DISCONNECTED = "disconnected"
    CONNECTED = "connected"
    JOINED = "joined_room"


class ConnectionClosedError(RuntimeError):
    """Raised when a session that is not connected is asked to act."""


class ConnectionSession:
    """
    A client's handle on the real-time layer.

    Example:
        session = ConnectionSession(registry, relay, on_event=reconciler.apply)
        session.connect()
        session.join("list-001")
        session.emit("list-001", ProductAdded(list_id="list-001", product=p))
        session.disconnect()
    """

    def __init__(
        self,
        registry: MembershipRegistry,
        relay: EventRelay,
        on_event: Optional[EventCallback] = None,
        connection_id: Optional[str] = None,
    ):
        self.registry = registry
        self.relay = relay
        self.on_event = on_event
        self.connection_id = connection_id or str(uuid4())
        self._live = False
        self._closed = False

    def __repr__(self) -> str:
        return f"ConnectionSession({self.connection_id[:8]})"

    @property
    def state(self) -> ConnectionState:
        if not self._live:
            return ConnectionState.DISCONNECTED
        if self.registry.rooms_for(self):
            return ConnectionState.JOINED
        return ConnectionState.CONNECTED

    @property
    def rooms(self) -> set[str]:
        return self.registry.rooms_for(self)

    @property
    def is_live(self) -> bool:
        return self._live

    def _require_live(self) -> None:
        if not self._live:
            raise ConnectionClosedError(f"{self} is not connected")

    def connect(self) -> None:
        """Mark the session connected. Connecting twice is a no-op."""
        if self._closed:
            raise ConnectionClosedError(f"{self} was disconnected and cannot reconnect")
        if not self._live:
            self._live = True
            logger.info(f"{self} connected")

    def join(self, list_id: str) -> None:
        """Subscribe to a list's room."""
        self._require_live()
        self.registry.join(self, list_id)

    def leave(self, list_id: str) -> None:
        """Unsubscribe from a list's room."""
        self._require_live()
        self.registry.leave(self, list_id)

    def emit(self, list_id: str, event: MutationEvent) -> int:
        """
        Forward a locally produced event to the other subscribers of a list.

        The caller has already performed the mutation through the store.

        Returns:
            Number of connections the relay delivered to
        """
        self._require_live()
        if event.list_id != list_id:
            raise InvalidInput(f"Event for list {event.list_id} emitted to room {list_id}")
        return self.relay.publish(list_id, event, sender=self)

    def deliver(self, list_id: str, event: MutationEvent) -> None:
        """Receive a relayed event. Events for rooms not joined are dropped."""
        if not self._live or list_id not in self.registry.rooms_for(self):
            logger.debug(f"{self} dropped {event.type} for room {list_id}")
            return
        if self.on_event is not None:
            self.on_event(event)

    def disconnect(self) -> None:
        """Leave every room and close the session for good."""
        if self._closed:
            return
        self.registry.disconnect(self)
        self._live = False
        self._closed = True
        logger.info(f"{self} disconnected")
