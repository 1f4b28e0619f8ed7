"""
Real-time list synchronization.

This package keeps every viewer of a list up to date:
- The membership registry tracks which connections follow which list
- The relay forwards a client's mutation event to the other followers
- Each client's reconciler applies received events to its local view
"""

from realtime.events import (
    EventTypes,
    MutationEvent,
    ProductAdded,
    ProductEdited,
    ProductDeleted,
    MemberAdded,
    MemberRemoved,
    parse_event,
    to_wire,
)
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from realtime.connection import ConnectionSession, ConnectionState, ConnectionClosedError
from realtime.reconciler import ClientListView, Reconciler, display_order
from realtime.list_client import ListClient

__all__ = [
    "EventTypes",
    "MutationEvent",
    "ProductAdded",
    "ProductEdited",
    "ProductDeleted",
    "MemberAdded",
    "MemberRemoved",
    "parse_event",
    "to_wire",
    "MembershipRegistry",
    "EventRelay",
    "ConnectionSession",
    "ConnectionState",
    "ConnectionClosedError",
    "ClientListView",
    "Reconciler",
    "display_order",
    "ListClient",
]
