# (c) Copyright Datacraft, 2026
"""API routers."""
from .bootstrap import router as bootstrap_router
from .credentials import router as credentials_router

__all__ = ["bootstrap_router", "credentials_router"]
