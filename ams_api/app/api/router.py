"""
Two-level request router.

A request path ``<context>/<action>`` is looked up in a static table
``method -> context -> action -> handler``.  Handlers are stored as
deferred ``functools.partial`` calls bound to the request payload and
only the matched one is awaited.  Every context except
``authentication`` sits behind the authentication gate.
"""

import logging
from functools import partial
from typing import Any, Awaitable, Callable, Dict, List, Mapping, Optional

from ..core.errors import RoutingError, StoreError
from ..schemas.request import RouterRequest
from ..schemas.response import UNAUTHORIZED, ErrorKind, ErrorResponse, Response
from ..services.ams_service import AMSService

logger = logging.getLogger(__name__)

Handler = Callable[[], Awaitable[Any]]

AUTH_CONTEXT = "authentication"


class Router:
    """Routes one request to the matching ``AMSService`` action."""

    def __init__(self, request: RouterRequest, ams: AMSService) -> None:
        self.request = request
        self.ams = ams

    @property
    def paths(self) -> List[str]:
        return self.request.paths

    @property
    def context(self) -> Optional[str]:
        """The first level of the two level API."""
        return self.paths[0] if self.paths else None

    @property
    def action(self) -> Optional[str]:
        """The second level of the API."""
        return self.paths[1] if len(self.paths) > 1 else None

    @property
    def allowed_routes(self) -> Dict[str, Dict[str, Mapping[str, Handler]]]:
        ams = self.ams
        auth = ams.auth
        params = self.request.params
        body = self.request.body
        credentials = self.request.credentials
        key_email = body.get("email") or credentials.email
        return {
            "GET": {
                "articles": {"list": partial(ams.get_all_articles, params)},
                "article": {"info": partial(ams.get_article, params)},
                "editors": {"list": partial(ams.get_all_editors, params)},
                "editor": {"info": partial(ams.get_editor_by_email, params)},
                "subjects": {"list": partial(ams.get_all_subjects, params)},
                "search": {"all": partial(ams.search, params)},
                AUTH_CONTEXT: {"authenticate": partial(auth.login, credentials)},
            },
            "POST": {
                "article": {
                    "create": partial(ams.create_article, body),
                    "update": partial(ams.update_article, body),
                    "delete": partial(ams.delete_article, body),
                },
                "editor": {
                    "create": partial(ams.create_editor, body),
                    "update": partial(ams.update_editor, body),
                },
                AUTH_CONTEXT: {
                    "authenticate": partial(auth.login, credentials),
                    "requestKey": partial(auth.request_key, key_email),
                },
            },
        }

    def resolve(self) -> Handler:
        """Find the handler for this request or raise ``RoutingError``."""
        context, action = self.context, self.action
        selected = self.allowed_routes.get(self.request.method, {}).get(context)
        if selected is None:
            raise RoutingError(f"No such context exists: {context}")
        if not isinstance(selected, Mapping):
            raise RoutingError(f"Context {context} exists but has no actions")
        if action not in selected:
            raise RoutingError(f"No such action {action} exists for context {context}")
        return selected[action]

    async def route(self) -> Response | ErrorResponse:
        """Dispatch the request.

        Returns an empty ``Response`` when no path was given and
        ``UNAUTHORIZED`` when the gate rejects the caller.  Raises
        ``RoutingError`` for an unknown context or action.
        """
        if not self.paths:
            return Response()

        handler = self.resolve()
        if self.context == AUTH_CONTEXT:
            return await handler()

        try:
            authenticated = await self.ams.auth.authenticate(self.request.credentials)
        except StoreError as e:
            logger.error("Cannot check credentials: %s", e)
            return ErrorResponse(error=ErrorKind.STORAGE, details=str(e))
        if not authenticated:
            logger.warning("Unauthorised %s %s/%s from %s", self.request.method,
                           self.context, self.action, self.request.credentials.email)
            return UNAUTHORIZED

        logger.debug("Routing %s %s/%s", self.request.method, self.context, self.action)
        return await handler()
