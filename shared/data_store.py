"""
JSON-backed data store for the shared shopping list.

This is the authoritative holder of lists, products and memberships. The
real-time layer never infers state from events; whenever a client needs the
truth it re-fetches from here.

Design decisions:
- Fixtures are loaded lazily from JSON files on first access
- Write operations update in-memory state only
- Mutations raise the errors from shared.errors; lookups return None
- Records are replaced, not mutated in place, so handed-out models stay stable
"""

import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Optional
from uuid import uuid4

from shared import config
from shared.errors import Conflict, InvalidInput, NotFound
from shared.models import (
    ListDetail,
    Member,
    Membership,
    Product,
    ShoppingList,
    User,
)

logger = logging.getLogger("data_store")

# Fields a client may change through update_product
EDITABLE_PRODUCT_FIELDS = {"name", "quantity", "checked"}


def _now() -> datetime:
    return datetime.now(timezone.utc)


class DataStore:
    """
    Central data store that loads JSON fixtures and applies mutations.

    Example:
        store = DataStore()
        product = store.create_product("list-001", "Milk", quantity=2)
        store.update_product(product.id, checked=True)
    """

    def __init__(self, data_dir: Optional[Path] = None):
        """
        Initialize the data store.

        Args:
            data_dir: Directory containing the JSON fixtures.
                     Defaults to the configured data directory.
        """
        self.data_dir = Path(data_dir) if data_dir is not None else config.DATA_DIR

        # In-memory caches - loaded lazily
        self._users: Optional[dict[str, User]] = None
        self._lists: Optional[dict[str, ShoppingList]] = None
        self._products: Optional[dict[str, Product]] = None
        self._memberships: Optional[list[Membership]] = None

    # =========================================================================
    # Data Loading (lazy)
    # =========================================================================

    def _load_json(self, filename: str) -> list[dict]:
        """Load a JSON fixture file."""
        filepath = self.data_dir / filename
        if not filepath.exists():
            return []
        with open(filepath, "r") as f:
            return json.load(f)

    def _ensure_users_loaded(self):
        if self._users is None:
            data = self._load_json("users.json")
            self._users = {u["id"]: User(**u) for u in data}

    def _ensure_lists_loaded(self):
        if self._lists is None:
            data = self._load_json("lists.json")
            self._lists = {l["id"]: ShoppingList(**l) for l in data}

    def _ensure_products_loaded(self):
        if self._products is None:
            data = self._load_json("products.json")
            self._products = {p["id"]: Product(**p) for p in data}

    def _ensure_memberships_loaded(self):
        if self._memberships is None:
            data = self._load_json("memberships.json")
            self._memberships = [Membership(**m) for m in data]

    def _require_list(self, list_id: str) -> ShoppingList:
        self._ensure_lists_loaded()
        shopping_list = self._lists.get(list_id)
        if shopping_list is None:
            raise NotFound(f"List not found: {list_id}")
        return shopping_list

    # =========================================================================
    # User Operations
    # =========================================================================

    def get_user(self, user_id: str) -> Optional[User]:
        """Get a user by ID."""
        self._ensure_users_loaded()
        return self._users.get(user_id)

    def get_user_by_email(self, email: str) -> Optional[User]:
        """Find a user by email, ignoring case and surrounding spaces."""
        self._ensure_users_loaded()
        wanted = email.strip().lower()
        for user in self._users.values():
            if user.email.lower() == wanted:
                return user
        return None

    # =========================================================================
    # List Operations
    # =========================================================================

    def get_list(self, list_id: str) -> Optional[ShoppingList]:
        """Get a list by ID."""
        self._ensure_lists_loaded()
        return self._lists.get(list_id)

    def get_lists_for_user(self, user_id: str) -> list[ShoppingList]:
        """Get every list the user is a member of."""
        self._ensure_lists_loaded()
        self._ensure_memberships_loaded()
        list_ids = {m.list_id for m in self._memberships if m.user_id == user_id}
        return [l for l in self._lists.values() if l.id in list_ids]

    def create_list(self, owner_id: str, name: Optional[str]) -> ShoppingList:
        """
        Create a list; the owner becomes its first member.

        Raises:
            InvalidInput: if the name is missing or blank
        """
        if not name or not name.strip():
            raise InvalidInput("Name required")
        self._ensure_lists_loaded()
        self._ensure_memberships_loaded()

        shopping_list = ShoppingList(
            id=str(uuid4()),
            name=name.strip(),
            owner_id=owner_id,
            created_at=_now(),
        )
        self._lists[shopping_list.id] = shopping_list
        self._memberships.append(
            Membership(list_id=shopping_list.id, user_id=owner_id, joined_at=_now())
        )
        logger.info(f"List {shopping_list.id} created by {owner_id}")
        return shopping_list

    def rename_list(self, list_id: str, name: Optional[str]) -> ShoppingList:
        """Rename a list."""
        shopping_list = self._require_list(list_id)
        if not name or not name.strip():
            raise InvalidInput("Name required")
        updated = shopping_list.model_copy(update={"name": name.strip()})
        self._lists[list_id] = updated
        return updated

    def delete_list(self, list_id: str) -> None:
        """Delete a list together with its products and memberships."""
        self._require_list(list_id)
        self._ensure_products_loaded()
        self._ensure_memberships_loaded()

        del self._lists[list_id]
        self._products = {
            pid: p for pid, p in self._products.items() if p.list_id != list_id
        }
        self._memberships = [m for m in self._memberships if m.list_id != list_id]
        logger.info(f"List {list_id} deleted")

    def get_list_detail(self, list_id: str) -> Optional[ListDetail]:
        """Get a list with its products and members in one call."""
        shopping_list = self.get_list(list_id)
        if shopping_list is None:
            return None
        return ListDetail(
            **shopping_list.model_dump(),
            products=self.get_products(list_id),
            members=self.get_members(list_id),
        )

    # =========================================================================
    # Product Operations
    # =========================================================================

    def get_product(self, product_id: str) -> Optional[Product]:
        """Get a product by ID."""
        self._ensure_products_loaded()
        return self._products.get(product_id)

    def get_products(self, list_id: str) -> list[Product]:
        """Get all products of a list in insertion order."""
        self._ensure_products_loaded()
        return [p for p in self._products.values() if p.list_id == list_id]

    def create_product(
        self, list_id: str, name: Optional[str], quantity: Optional[int] = None
    ) -> Product:
        """
        Add a product to a list.

        Raises:
            NotFound: if the list does not exist
            InvalidInput: if the name is blank or the quantity is below 1
        """
        self._require_list(list_id)
        if not name or not name.strip():
            raise InvalidInput("Name required")
        quantity = quantity or 1
        if quantity < 1:
            raise InvalidInput("Quantity must be at least 1")
        self._ensure_products_loaded()

        product = Product(
            id=str(uuid4()),
            list_id=list_id,
            name=name.strip(),
            quantity=quantity,
            checked=False,
            created_at=_now(),
        )
        self._products[product.id] = product
        logger.debug(f"Product {product.id} ({product.name}) added to list {list_id}")
        return product

    def update_product(self, product_id: str, **fields: Any) -> Product:
        """
        Change name, quantity and/or checked on a product.

        Fields passed as None are left untouched.

        Raises:
            NotFound: if the product does not exist
            InvalidInput: for unknown fields or invalid values
        """
        if not product_id:
            raise InvalidInput("Product id required")
        unknown = set(fields) - EDITABLE_PRODUCT_FIELDS
        if unknown:
            raise InvalidInput(f"Cannot update fields: {', '.join(sorted(unknown))}")

        self._ensure_products_loaded()
        product = self._products.get(product_id)
        if product is None:
            raise NotFound(f"Product not found: {product_id}")

        changes = {k: v for k, v in fields.items() if v is not None}
        if "name" in changes:
            if not str(changes["name"]).strip():
                raise InvalidInput("Name required")
            changes["name"] = str(changes["name"]).strip()
        if "quantity" in changes and changes["quantity"] < 1:
            raise InvalidInput("Quantity must be at least 1")

        updated = product.model_copy(update=changes)
        self._products[product_id] = updated
        return updated

    def delete_product(self, product_id: str) -> None:
        """
        Remove a product.

        Raises:
            NotFound: if the product does not exist
        """
        if not product_id:
            raise InvalidInput("Product id required")
        self._ensure_products_loaded()
        if self._products.pop(product_id, None) is None:
            raise NotFound(f"Product not found: {product_id}")

    # =========================================================================
    # Membership Operations
    # =========================================================================

    def _to_member(self, membership: Membership) -> Member:
        user = self.get_user(membership.user_id)
        return Member(
            list_id=membership.list_id,
            user_id=membership.user_id,
            name=user.name if user else None,
            email=user.email if user else None,
            joined_at=membership.joined_at,
        )

    def get_members(self, list_id: str) -> list[Member]:
        """Get the members of a list."""
        self._ensure_memberships_loaded()
        return [self._to_member(m) for m in self._memberships if m.list_id == list_id]

    def is_member(self, list_id: str, user_id: str) -> bool:
        """Check whether a user belongs to a list."""
        self._ensure_memberships_loaded()
        return any(
            m.list_id == list_id and m.user_id == user_id for m in self._memberships
        )

    def add_member(self, list_id: str, email: Optional[str]) -> Member:
        """
        Invite a registered user to a list by email.

        Raises:
            InvalidInput: if no email was given
            NotFound: if the list or the user does not exist
            Conflict: if the user is already a member
        """
        if not email or not email.strip():
            raise InvalidInput("Email required")
        self._require_list(list_id)
        user = self.get_user_by_email(email)
        if user is None:
            raise NotFound("User not found")
        if self.is_member(list_id, user.id):
            raise Conflict("User already in list")

        membership = Membership(list_id=list_id, user_id=user.id, joined_at=_now())
        self._memberships.append(membership)
        logger.info(f"User {user.id} added to list {list_id}")
        return self._to_member(membership)

    def remove_member(self, list_id: str, user_id: Optional[str]) -> None:
        """
        Remove a user from a list. Removing a non-member is a no-op.

        Raises:
            InvalidInput: if no user id was given
            NotFound: if the list does not exist
        """
        if not user_id:
            raise InvalidInput("User id required")
        self._require_list(list_id)
        self._ensure_memberships_loaded()
        self._memberships = [
            m for m in self._memberships
            if not (m.list_id == list_id and m.user_id == user_id)
        ]

    # =========================================================================
    # Utility Methods
    # =========================================================================

    def reload(self):
        """Drop in-memory state and reload from the JSON files on next access."""
        self._users = None
        self._lists = None
        self._products = None
        self._memberships = None
