"""Status API routers."""

from .membership_router import membership_router

__all__ = ["membership_router"]
