"""
Client-side reconciliation of relayed events.

Each client keeps its own ClientListView: the products and members of the
list it is looking at. The view is filled once from the store and afterwards
changed only by applying events, never by querying the store again.

Tolerated divergence from the store:
- Adding the same product twice yields two entries (no duplicate check)
- Editing or deleting a product that is already gone is a no-op
- Events are applied in arrival order at this client, not global order
"""

import logging
from dataclasses import dataclass, field
from functools import cmp_to_key
from typing import Any, Callable, Optional

from realtime.events import (
    EVENT_CLASSES,
    MemberAdded,
    MemberRemoved,
    MutationEvent,
    ProductAdded,
    ProductDeleted,
    ProductEdited,
    parse_event,
)
from shared.data_store import DataStore
from shared.errors import NotFound
from shared.models import Member, Product

logger = logging.getLogger("reconciler")


@dataclass
class ClientListView:
    """
    One client's cached copy of a list.

    products keeps insertion order; members is keyed by user id so that
    adding a member twice leaves a single entry.
    """
    list_id: str
    products: list[Product] = field(default_factory=list)
    members: dict[str, Member] = field(default_factory=dict)

    @classmethod
    def from_store(cls, store: DataStore, list_id: str) -> "ClientListView":
        """Initial full fetch of a list."""
        if store.get_list(list_id) is None:
            raise NotFound(f"List not found: {list_id}")
        return cls(
            list_id=list_id,
            products=store.get_products(list_id),
            members={m.user_id: m for m in store.get_members(list_id)},
        )

    def find_product(self, product_id: str) -> Optional[Product]:
        for product in self.products:
            if product.id == product_id:
                return product
        return None

    def display_products(self) -> list[Product]:
        return display_order(self.products)


def _compare_for_display(a: Product, b: Product) -> int:
    if a.checked != b.checked:
        return 1 if a.checked else -1
    if a.created_at is not None and b.created_at is not None:
        if a.created_at < b.created_at:
            return -1
        if a.created_at > b.created_at:
            return 1
    return 0


def display_order(products: list[Product]) -> list[Product]:
    """
    Render order: unchecked before checked, then oldest first.

    Products without a created_at compare equal to their neighbours.
    """
    return sorted(products, key=cmp_to_key(_compare_for_display))


class Reconciler:
    """
    Applies mutation events to a ClientListView.

    Example:
        view = ClientListView.from_store(store, "list-001")
        reconciler = Reconciler(view)
        session = ConnectionSession(registry, relay, on_event=reconciler.apply)
    """

    def __init__(self, view: ClientListView):
        self.view = view
        self._handlers: dict[type, Callable[[Any], None]] = {
            ProductAdded: self._product_added,
            ProductEdited: self._product_edited,
            ProductDeleted: self._product_deleted,
            MemberAdded: self._member_added,
            MemberRemoved: self._member_removed,
        }
        missing = [cls.__name__ for cls in EVENT_CLASSES if cls not in self._handlers]
        if missing:
            raise TypeError(f"No reconciler handler for {missing}")

    def apply(self, event: MutationEvent) -> bool:
        """
        Apply one event to the view.

        Returns:
            True if the event was for this list and of a known kind
        """
        if event.list_id != self.view.list_id:
            logger.debug(f"Ignoring {event.type} for list {event.list_id} (view is {self.view.list_id})")
            return False
        handler = self._handlers.get(type(event))
        if handler is None:
            logger.warning(f"Ignoring unknown event kind: {type(event).__name__}")
            return False
        handler(event)
        return True

    def apply_wire(self, data: Any) -> bool:
        """Decode and apply a wire dict; unrecognised events are ignored."""
        event = parse_event(data)
        if event is None:
            return False
        return self.apply(event)

    def reset(self, view: ClientListView) -> None:
        """Replace the view after a full reload from the store."""
        self.view = view

    # =========================================================================
    # Handlers
    # =========================================================================

    def _product_added(self, event: ProductAdded) -> None:
        self.view.products.append(event.product)

    def _product_edited(self, event: ProductEdited) -> None:
        for i, product in enumerate(self.view.products):
            if product.id == event.product.id:
                self.view.products[i] = event.product
                return
        logger.debug(f"Edit for unknown product {event.product.id} ignored")

    def _product_deleted(self, event: ProductDeleted) -> None:
        self.view.products = [p for p in self.view.products if p.id != event.product_id]

    def _member_added(self, event: MemberAdded) -> None:
        self.view.members[event.member.user_id] = event.member

    def _member_removed(self, event: MemberRemoved) -> None:
        self.view.members.pop(event.user_id, None)
