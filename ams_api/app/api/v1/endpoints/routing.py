"""
Catch-all endpoints that hand every request to the ``Router``.

The target can be given as the URL path (``/api/v1/article/update``)
or, for clients that can only hit one URL, as a ``path`` query
parameter (``/api/v1/?path=article/update``).  Query parameters are the
request parameters; a POST body must be a JSON object.  Credentials
(``authEmail``, ``key``, ``authToken``) are read from the query string
first and then from the body; see ``Credentials`` for the ``email``
fallback.
"""

import json
import logging
from typing import Any, Dict, Optional

from fastapi import APIRouter, HTTPException, Request, status
from fastapi.responses import JSONResponse

from ....core.errors import RoutingError
from ....schemas.request import Credentials, RouterRequest
from ....schemas.response import UNAUTHORIZED
from ...router import Router

logger = logging.getLogger(__name__)

router = APIRouter()


async def _read_body(request: Request) -> Dict[str, Any]:
    if request.method != "POST":
        return {}
    raw = await request.body()
    if not raw:
        return {}
    try:
        payload = json.loads(raw)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body is not valid JSON")
    if not isinstance(payload, dict):
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Request body must be a JSON object")
    return payload


async def _dispatch(request: Request, path: Optional[str]) -> JSONResponse:
    params = dict(request.query_params)
    if path is None:
        path = params.pop("path", None)
    body = await _read_body(request)
    routed = RouterRequest(
        method=request.method,
        path=path,
        params=params,
        body=body,
        credentials=Credentials.from_sources(params, body),
    )
    try:
        result = await Router(routed, request.app.state.ams).route()
    except RoutingError as e:
        logger.info("Unroutable %s request for %r: %s", request.method, path, e)
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
    if result is UNAUTHORIZED:
        return JSONResponse(status_code=status.HTTP_401_UNAUTHORIZED, content=result.to_dict())
    return JSONResponse(content=result.to_dict())


@router.api_route("/", methods=["GET", "POST"])
async def route_by_parameter(request: Request) -> JSONResponse:
    """Route using the ``path`` query parameter."""
    return await _dispatch(request, None)


@router.api_route("/{context}/{action}", methods=["GET", "POST"])
async def route_by_path(context: str, action: str, request: Request) -> JSONResponse:
    """Route using the URL path."""
    return await _dispatch(request, f"{context}/{action}")
