"""
Shared infrastructure for the shopping list service.

This package contains code used by both the real-time layer and the API:
- Domain models (User, ShoppingList, Product, Member)
- Error types reported to callers
- Data store for JSON-backed persistence
- Session store resolving the current user
"""

from shared.models import (
    User,
    ShoppingList,
    Product,
    Member,
    Membership,
    ListDetail,
)
from shared.errors import ListError, Unauthenticated, NotFound, Conflict, InvalidInput
from shared.data_store import DataStore
from shared.session import SessionStore

__all__ = [
    "User",
    "ShoppingList",
    "Product",
    "Member",
    "Membership",
    "ListDetail",
    "ListError",
    "Unauthenticated",
    "NotFound",
    "Conflict",
    "InvalidInput",
    "DataStore",
    "SessionStore",
]
