"""
HTTP and WebSocket API for the shared shopping list.

This package provides a single FastAPI application that exposes:
- Session endpoints for signing in
- CRUD endpoints for lists, products and members
- The WebSocket endpoint clients use to follow lists live
"""

from api.main import app, create_app

__all__ = ["app", "create_app"]
