"""
Top-level router for version 1 of the API.

Aggregates the endpoint routers under a unified prefix.  All actions
go through the catch-all ``routing`` endpoints; new endpoint modules
are included here.
"""

from fastapi import APIRouter

from .endpoints import routing

router = APIRouter()

router.include_router(routing.router, tags=["routing"])
