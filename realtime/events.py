"""
Mutation events relayed between clients viewing the same list.

Each event describes one state change a client already made through the
data store. Events are transient: they exist only while being relayed and
carry no sequence number or timestamp.

Design decisions:
- One frozen model per event kind, each with only the fields it needs
- The "type" tag discriminates the union, both in Python and on the wire
- Decoding never raises; anything unrecognised comes back as None so
  receivers can ignore it

Wire shape:
    {"type": "product-added", "list_id": "list-001", "product": {...}}
    {"type": "product-deleted", "list_id": "list-001", "product_id": "..."}
"""

import logging
from typing import Annotated, Any, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from shared.models import Member, Product

logger = logging.getLogger("events")


# =============================================================================
# Event Type Constants
# =============================================================================

class EventTypes:
    """Wire names of the event kinds."""
    PRODUCT_ADDED = "product-added"
    PRODUCT_EDITED = "product-edited"
    PRODUCT_DELETED = "product-deleted"
    MEMBER_ADDED = "member-added"
    MEMBER_REMOVED = "member-removed"


# =============================================================================
# Event Variants
# =============================================================================

class _ListEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    list_id: str = Field(..., description="List (and room) the change belongs to")


class ProductAdded(_ListEvent):
    """A product was created; carries the full stored record."""
    type: Literal["product-added"] = EventTypes.PRODUCT_ADDED
    product: Product


class ProductEdited(_ListEvent):
    """A product was renamed, re-counted or (un)checked; carries the new record."""
    type: Literal["product-edited"] = EventTypes.PRODUCT_EDITED
    product: Product


class ProductDeleted(_ListEvent):
    type: Literal["product-deleted"] = EventTypes.PRODUCT_DELETED
    product_id: str


class MemberAdded(_ListEvent):
    type: Literal["member-added"] = EventTypes.MEMBER_ADDED
    member: Member


class MemberRemoved(_ListEvent):
    type: Literal["member-removed"] = EventTypes.MEMBER_REMOVED
    user_id: str


MutationEvent = Annotated[
    Union[ProductAdded, ProductEdited, ProductDeleted, MemberAdded, MemberRemoved],
    Field(discriminator="type"),
]

EVENT_CLASSES = (ProductAdded, ProductEdited, ProductDeleted, MemberAdded, MemberRemoved)

_event_adapter = TypeAdapter(MutationEvent)


# =============================================================================
# Wire Encoding
# =============================================================================

def to_wire(event: MutationEvent) -> dict[str, Any]:
    """Encode an event as a JSON-compatible dict."""
    return event.model_dump(mode="json")


def parse_event(data: Any) -> Optional[MutationEvent]:
    """
    Decode a wire dict into an event.

    Returns None for unknown kinds or malformed payloads.
    """
    try:
        return _event_adapter.validate_python(data)
    except ValidationError as e:
        kind = data.get("type") if isinstance(data, dict) else None
        logger.debug(f"Ignoring unrecognised event (type={kind!r}): {e.error_count()} errors")
        return None
