"""HTTP status surface for the membership agent."""

from .app import create_status_app
from .routers import membership_router

__all__ = ["create_status_app", "membership_router"]
