"""
Request and response bodies for the REST API.

Required fields are declared optional here on purpose: a missing name or
email reaches the store, which answers with InvalidInput (400) the same way
for REST and in-process callers.
"""

from typing import Optional
from pydantic import BaseModel

from shared.models import User


class SignInRequest(BaseModel):
    email: Optional[str] = None


class SessionResponse(BaseModel):
    token: str
    user: User


class ListCreateRequest(BaseModel):
    name: Optional[str] = None


class ListUpdateRequest(BaseModel):
    name: Optional[str] = None


class ProductCreateRequest(BaseModel):
    name: Optional[str] = None
    quantity: Optional[int] = None


class ProductUpdateRequest(BaseModel):
    """Any subset of the editable fields; omitted fields stay unchanged."""
    name: Optional[str] = None
    quantity: Optional[int] = None
    checked: Optional[bool] = None


class MemberInviteRequest(BaseModel):
    email: Optional[str] = None
