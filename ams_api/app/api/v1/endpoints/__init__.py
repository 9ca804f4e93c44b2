"""
Endpoint modules for version 1 of the API.

Each module exposes an ``APIRouter`` named ``router`` that is included
by ``api/v1/router.py``.
"""
