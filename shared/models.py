"""
Domain models for the shared shopping list.

These are the records the data store hands out and the real-time layer
carries inside events. They mirror what the REST API returns.

Design decisions:
- Using Pydantic for validation and serialization
- Products keep their list_id so an event payload is self-describing
- Member is a flattened view of a membership joined with its user
"""

from datetime import datetime, timezone
from typing import Optional
from pydantic import BaseModel, Field, field_validator


class User(BaseModel):
    """A person who can sign in and be invited to lists."""
    id: str = Field(..., description="Unique user identifier")
    name: Optional[str] = Field(default=None, description="Display name")
    email: str = Field(..., description="Email address, used for invitations")


class ShoppingList(BaseModel):
    """A shopping list owned by one user and shared with its members."""
    id: str = Field(..., description="Unique list identifier (also the room id)")
    name: str = Field(..., description="List title")
    owner_id: str = Field(..., description="User who created the list")
    created_at: Optional[datetime] = Field(default=None)


class Product(BaseModel):
    """
    A single entry on a shopping list.

    created_at drives display ordering inside the checked/unchecked groups;
    it may be missing on records that came from older clients.
    """
    id: str = Field(..., description="Unique product identifier")
    list_id: str = Field(..., description="List this product belongs to")
    name: str = Field(..., description="What to buy")
    quantity: int = Field(default=1, ge=1, description="How many")
    checked: bool = Field(default=False, description="Already bought")
    created_at: Optional[datetime] = Field(default=None)

    @field_validator("created_at")
    @classmethod
    def assume_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        """Timestamps without an offset are taken as UTC."""
        if value is not None and value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value


class Membership(BaseModel):
    """Stored link between a list and a user."""
    list_id: str
    user_id: str
    joined_at: Optional[datetime] = Field(default=None)


class Member(BaseModel):
    """
    A list collaborator as shown to clients.

    Combines the membership with the user's display fields so the
    member-added event carries everything a view needs.
    """
    list_id: str = Field(..., description="List the user belongs to")
    user_id: str = Field(..., description="Member's user id")
    name: Optional[str] = Field(default=None)
    email: Optional[str] = Field(default=None)
    joined_at: Optional[datetime] = Field(default=None)


class ListDetail(ShoppingList):
    """A list with its products and members, as fetched on first load."""
    products: list[Product] = Field(default_factory=list)
    members: list[Member] = Field(default_factory=list)
