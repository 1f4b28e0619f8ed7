"""
FastAPI application for the shared shopping list.

This application provides:
1. Sign-in and session endpoints (/auth/session)
2. CRUD on lists, products and members (/lists/...)
3. The real-time WebSocket endpoint (/ws)

REST handlers only touch the store. Clients announce their own changes over
the WebSocket after a successful request, and the relay forwards them to the
other viewers of the list.

Run with:
    uvicorn api.main:app --reload

Then visit http://localhost:8000/docs for interactive API documentation.
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import APIRouter, Depends, FastAPI, Header, Request, status
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from api.schemas import (
    ListCreateRequest,
    ListUpdateRequest,
    MemberInviteRequest,
    ProductCreateRequest,
    ProductUpdateRequest,
    SessionResponse,
    SignInRequest,
)
from api.websocket import ws_router
from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from shared import config
from shared.data_store import DataStore
from shared.errors import InvalidInput, ListError, NotFound, Unauthenticated
from shared.models import ListDetail, Member, Product, ShoppingList
from shared.session import SessionStore

# Configure logging
logging.basicConfig(
    level=config.LOG_LEVEL,
    format=config.LOG_FORMAT,
    datefmt="%H:%M:%S",
)
logger = logging.getLogger("api")


# =============================================================================
# Dependencies
# =============================================================================

def get_store(request: Request) -> DataStore:
    return request.app.state.store


def get_sessions(request: Request) -> SessionStore:
    return request.app.state.sessions


def get_token(authorization: Optional[str] = Header(default=None)) -> Optional[str]:
    """Extract the bearer token from the Authorization header."""
    if not authorization:
        return None
    scheme, _, token = authorization.partition(" ")
    if scheme.lower() != "bearer" or not token:
        return None
    return token.strip()


def current_user_id(
    token: Optional[str] = Depends(get_token),
    sessions: SessionStore = Depends(get_sessions),
) -> str:
    return sessions.current_user_id(token)


def _require_list(store: DataStore, list_id: str) -> ShoppingList:
    shopping_list = store.get_list(list_id)
    if shopping_list is None:
        raise NotFound("Not found")
    return shopping_list


def _require_product(store: DataStore, list_id: str, product_id: str) -> Product:
    product = store.get_product(product_id)
    if product is None or product.list_id != list_id:
        raise NotFound(f"Product not found: {product_id}")
    return product


async def list_error_handler(request: Request, exc: ListError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.detail})


# =============================================================================
# Health Check
# =============================================================================

health_router = APIRouter(tags=["Health"])


@health_router.get("/health")
def health_check(request: Request):
    """Health check endpoint."""
    return {
        "status": "healthy",
        "service": "shopping-list",
        "rooms": request.app.state.registry.room_count(),
    }


# =============================================================================
# Sessions
# =============================================================================

auth_router = APIRouter(prefix="/auth", tags=["Auth"])


@auth_router.post("/session", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
def sign_in(
    body: SignInRequest,
    store: DataStore = Depends(get_store),
    sessions: SessionStore = Depends(get_sessions),
):
    """
    Development sign-in by email.

    Stands in for the external identity provider: any registered email
    gets a bearer token.
    """
    if not body.email or not body.email.strip():
        raise InvalidInput("Email required")
    user = store.get_user_by_email(body.email)
    if user is None:
        raise Unauthenticated("Unknown user")
    return SessionResponse(token=sessions.issue(user.id), user=user)


@auth_router.delete("/session", status_code=status.HTTP_204_NO_CONTENT)
def sign_out(
    token: Optional[str] = Depends(get_token),
    sessions: SessionStore = Depends(get_sessions),
):
    sessions.current_user_id(token)
    sessions.revoke(token)


# =============================================================================
# Lists
# =============================================================================

lists_router = APIRouter(prefix="/lists", tags=["Lists"])


@lists_router.get("", response_model=list[ShoppingList])
def get_my_lists(
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    """Lists the current user belongs to."""
    return store.get_lists_for_user(user_id)


@lists_router.post("", response_model=ShoppingList, status_code=status.HTTP_201_CREATED)
def create_list(
    body: ListCreateRequest,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    return store.create_list(user_id, body.name)


@lists_router.get("/{list_id}", response_model=ListDetail)
def get_list(
    list_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    """Full list with products and members, used for the initial load and refetches."""
    detail = store.get_list_detail(list_id)
    if detail is None:
        raise NotFound("Not found")
    return detail


@lists_router.patch("/{list_id}", response_model=ShoppingList)
def rename_list(
    list_id: str,
    body: ListUpdateRequest,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    return store.rename_list(list_id, body.name)


@lists_router.delete("/{list_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_list(
    list_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    store.delete_list(list_id)


# =============================================================================
# Products
# =============================================================================

@lists_router.get("/{list_id}/products", response_model=list[Product])
def get_products(
    list_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    _require_list(store, list_id)
    return store.get_products(list_id)


@lists_router.post("/{list_id}/products", response_model=Product, status_code=status.HTTP_201_CREATED)
def create_product(
    list_id: str,
    body: ProductCreateRequest,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    return store.create_product(list_id, body.name, body.quantity)


@lists_router.patch("/{list_id}/products/{product_id}", response_model=Product)
def update_product(
    list_id: str,
    product_id: str,
    body: ProductUpdateRequest,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    """Rename, re-count or (un)check a product."""
    _require_product(store, list_id, product_id)
    return store.update_product(product_id, **body.model_dump(exclude_unset=True))


@lists_router.delete("/{list_id}/products/{product_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_product(
    list_id: str,
    product_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    _require_product(store, list_id, product_id)
    store.delete_product(product_id)


# =============================================================================
# Members
# =============================================================================

@lists_router.get("/{list_id}/users", response_model=list[Member])
def get_members(
    list_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    _require_list(store, list_id)
    return store.get_members(list_id)


@lists_router.post("/{list_id}/users", response_model=Member, status_code=status.HTTP_201_CREATED)
def invite_member(
    list_id: str,
    body: MemberInviteRequest,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    """Add a registered user to the list by email."""
    return store.add_member(list_id, body.email)


@lists_router.delete("/{list_id}/users/{member_id}", status_code=status.HTTP_204_NO_CONTENT)
def remove_member(
    list_id: str,
    member_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    store.remove_member(list_id, member_id)


@lists_router.post("/{list_id}/leave", status_code=status.HTTP_204_NO_CONTENT)
def leave_list(
    list_id: str,
    user_id: str = Depends(current_user_id),
    store: DataStore = Depends(get_store),
):
    """The current user removes themselves from the list."""
    store.remove_member(list_id, user_id)


# =============================================================================
# Application
# =============================================================================

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info("Starting shopping list API")
    yield
    logger.info(f"Shutting down with {app.state.registry.room_count()} open room(s)")


def create_app(
    store: Optional[DataStore] = None,
    sessions: Optional[SessionStore] = None,
    registry: Optional[MembershipRegistry] = None,
) -> FastAPI:
    """
    Build the application with its own registry, relay, store and sessions.

    Tests pass fresh instances so that apps never share room state.
    """
    app = FastAPI(
        title="Shared Shopping List",
        description="Shared shopping lists with live updates for every viewer.",
        version="1.0.0",
        lifespan=lifespan,
    )

    registry = registry or MembershipRegistry()
    app.state.store = store or DataStore()
    app.state.sessions = sessions or SessionStore()
    app.state.registry = registry
    app.state.relay = EventRelay(registry)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(ListError, list_error_handler)

    app.include_router(health_router)
    app.include_router(auth_router)
    app.include_router(lists_router)
    app.include_router(ws_router)
    return app


app = create_app()
