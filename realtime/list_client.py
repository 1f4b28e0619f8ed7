"""
In-process client for one shopping list.

This is the client-side logic every viewer of a list runs: check the session,
perform the mutation through the store, apply the result to the local view
and emit the matching event so the other viewers can apply it too.

Key points:
- The store is always written first; events only describe what already happened
- The local view is updated right away; the relay never echoes back to us
- Store errors propagate before anything is applied or emitted
"""

import logging
from typing import Optional

from realtime.connection import ConnectionSession
from realtime.events import (
    MemberAdded,
    MemberRemoved,
    MutationEvent,
    ProductAdded,
    ProductDeleted,
    ProductEdited,
)
from realtime.reconciler import ClientListView, Reconciler
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from shared.data_store import DataStore
from shared.errors import NotFound
from shared.models import Member, Product
from shared.session import SessionStore

logger = logging.getLogger("list_client")


class ListClient:
    """
    A signed-in user looking at one list.

    Example:
        client = ListClient("list-001", store, sessions, token, registry, relay)
        client.open()
        client.add_product("Milk")
        client.view.display_products()
        client.close()
    """

    def __init__(
        self,
        list_id: str,
        store: DataStore,
        sessions: SessionStore,
        token: Optional[str],
        registry: MembershipRegistry,
        relay: EventRelay,
    ):
        self.list_id = list_id
        self.store = store
        self.sessions = sessions
        self.token = token
        self.reconciler = Reconciler(ClientListView(list_id=list_id))
        self.connection = ConnectionSession(registry, relay, on_event=self.reconciler.apply)

    @property
    def view(self) -> ClientListView:
        return self.reconciler.view

    def _user_id(self) -> str:
        return self.sessions.current_user_id(self.token)

    def _publish(self, event: MutationEvent) -> None:
        self.reconciler.apply(event)
        self.connection.emit(self.list_id, event)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def open(self) -> ClientListView:
        """Fetch the list, connect and join its room."""
        self._user_id()
        self.refresh()
        self.connection.connect()
        self.connection.join(self.list_id)
        return self.view

    def refresh(self) -> ClientListView:
        """Re-fetch the whole list from the store, discarding local drift."""
        self.reconciler.reset(ClientListView.from_store(self.store, self.list_id))
        return self.view

    def close(self) -> None:
        self.connection.disconnect()

    # =========================================================================
    # Products
    # =========================================================================

    def add_product(self, name: str, quantity: Optional[int] = None) -> Product:
        self._user_id()
        product = self.store.create_product(self.list_id, name, quantity)
        self._publish(ProductAdded(list_id=self.list_id, product=product))
        return product

    def edit_product(
        self,
        product_id: str,
        name: Optional[str] = None,
        quantity: Optional[int] = None,
        checked: Optional[bool] = None,
    ) -> Product:
        self._user_id()
        product = self.store.update_product(product_id, name=name, quantity=quantity, checked=checked)
        self._publish(ProductEdited(list_id=self.list_id, product=product))
        return product

    def toggle_checked(self, product_id: str) -> Product:
        """
        Flip the checked flag based on the store's current value.

        The view is not consulted: a client that missed a product-edited
        still flips the stored value.
        """
        self._user_id()
        current = self.store.get_product(product_id)
        if current is None:
            raise NotFound(f"Product not found: {product_id}")
        return self.edit_product(product_id, checked=not current.checked)

    def delete_product(self, product_id: str) -> None:
        self._user_id()
        self.store.delete_product(product_id)
        self._publish(ProductDeleted(list_id=self.list_id, product_id=product_id))

    # =========================================================================
    # Members
    # =========================================================================

    def add_member(self, email: str) -> Member:
        """Invite a user by email."""
        self._user_id()
        member = self.store.add_member(self.list_id, email)
        self._publish(MemberAdded(list_id=self.list_id, member=member))
        return member

    def remove_member(self, user_id: str) -> None:
        self._user_id()
        self.store.remove_member(self.list_id, user_id)
        self._publish(MemberRemoved(list_id=self.list_id, user_id=user_id))

    def leave_list(self) -> None:
        """Remove the current user from the list and stop following it."""
        user_id = self._user_id()
        self.store.remove_member(self.list_id, user_id)
        self._publish(MemberRemoved(list_id=self.list_id, user_id=user_id))
        self.connection.leave(self.list_id)
        logger.info(f"User {user_id} left list {self.list_id}")
