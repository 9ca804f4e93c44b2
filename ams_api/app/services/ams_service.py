"""
Business logic for articles and editors.

``AMSService`` implements every action the router can reach.  Each
action validates its input, reads or writes the sheets through the
injected store, fires notifications through the injected mailer and
returns a ``Response`` or ``ErrorResponse``.  Expected failures (missing
input, unknown records, duplicate emails) and storage failures are
returned, never raised.  Nothing is retried.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from pydantic import BaseModel, ValidationError

from ..core.db import ARTICLE_SHEET, EDITOR_SHEET, SheetStore
from ..core.errors import store_errors_as_response
from ..schemas.article import ArticleUpdate
from ..schemas.editor import EDITOR_COLUMNS, Editor, EditorUpdate
from ..schemas.fields import ENUMS
from ..schemas.response import ErrorKind, ErrorResponse, Response
from .article_creator import ArticleCreator
from .auth_service import AuthService
from .email_service import Notification
from .query_service import filter_records, flatten, parse_query
from .records import find_article, find_editor, load_articles, load_editors

logger = logging.getLogger(__name__)

Result = Response | ErrorResponse


def _parse_partial(model: type[BaseModel], properties: Any) -> BaseModel | ErrorResponse:
    """Validate a partial update, reporting type errors as a ValidationError response."""
    try:
        return model.model_validate(properties)
    except ValidationError as e:
        errors = [
            {"loc": ".".join(str(p) for p in err["loc"]), "msg": err["msg"]}
            for err in e.errors()
        ]
        return ErrorResponse(error=ErrorKind.VALIDATION, details=errors)


class AMSService:
    """Handles all article and editor actions called by the router."""

    def __init__(self, store: SheetStore, mailer, auth: Optional[AuthService] = None) -> None:
        self.store = store
        self.mailer = mailer
        self.auth = auth or AuthService(store, mailer)

    def _notify(self, to: Optional[str], type_: str, data: Dict[str, Any]) -> None:
        self.mailer.send(Notification(to=to, type=type_, data=data))

    # ------------------------------------------------------------------
    # Articles
    # ------------------------------------------------------------------
    @store_errors_as_response
    async def create_article(self, body: Optional[Mapping[str, Any]]) -> Result:
        """Store a new submission.

        The body must hold ``article`` (title, subject, type, optional
        deadline/notes/copyright), ``author`` (name, email, school) and
        the submitted document ``data``.
        """
        body = body or {}
        article, author, data = body.get("article"), body.get("author"), body.get("data")
        if not isinstance(article, Mapping) or not isinstance(author, Mapping) or not data:
            return ErrorResponse(
                error=ErrorKind.MISSING_PROPERTIES,
                details="Submissions need an article, an author and data",
            )
        creator = ArticleCreator(article, author, data)
        problems = creator.verify()
        if problems:
            logger.warning("Rejected submission, missing or invalid: %s", ", ".join(problems))
            return ErrorResponse(error=ErrorKind.MISSING_PROPERTIES, details={"missing": problems})
        created = creator.create(self.store)
        return Response(reason="Article successfully submitted", message=created)

    @store_errors_as_response
    async def update_article(self, body: Optional[Mapping[str, Any]]) -> Result:
        """Apply ``properties`` to the article ``id`` and email its author.

        Enum fields with values outside their enumeration are skipped;
        the rest of the update still applies.
        """
        body = body or {}
        article_id, properties = body.get("id"), body.get("properties")
        if not article_id or not isinstance(properties, Mapping):
            return ErrorResponse(error=ErrorKind.VALIDATION, details="Request body missing: id and properties are required")
        update = _parse_partial(ArticleUpdate, properties)
        if isinstance(update, ErrorResponse):
            return update

        article = find_article(self.store, article_id)
        if article is None:
            return ErrorResponse(error=ErrorKind.NOT_FOUND, details=f"Article {article_id} not found")

        modified = flatten(article.assign_properties(update))
        self.store.update_row(ARTICLE_SHEET, {"ID": article.id}, article.to_row())
        logger.info("Updated article %s: %s", article.id, ", ".join(modified) or "no changes")

        self._notify(article.author.email, "updateArticle", {"article": article, "modified": modified})
        return Response(reason="Successful Update", message=article)

    @store_errors_as_response
    async def delete_article(self, body: Optional[Mapping[str, Any]]) -> Result:
        """Delete an article.  The body is a (possibly partial) article with an ``id``."""
        body = body or {}
        article = body.get("article") if isinstance(body.get("article"), Mapping) else body
        article_id = article.get("id")
        if not article_id:
            return ErrorResponse(error=ErrorKind.VALIDATION, details="Article id is required")
        removed = self.store.delete_row(ARTICLE_SHEET, {"ID": str(article_id)})
        if removed:
            logger.info("Deleted article %s", article_id)
        else:
            logger.warning("Delete requested for unknown article %s", article_id)
        return Response(reason="deleteArticle", message={"id": article_id})

    @store_errors_as_response
    async def get_all_articles(self, params: Optional[Mapping[str, Any]] = None) -> Result:
        """List articles, optionally filtered by the query string ``q``."""
        q = (params or {}).get("q")
        articles = load_articles(self.store)
        return Response(message=filter_records(articles, q if isinstance(q, str) else None))

    @store_errors_as_response
    async def get_article(self, params: Optional[Mapping[str, Any]]) -> Result:
        article_id = (params or {}).get("id")
        if not article_id:
            return ErrorResponse(error=ErrorKind.VALIDATION, details="Article id is required")
        article = find_article(self.store, article_id)
        if article is None:
            return ErrorResponse(error=ErrorKind.NOT_FOUND, details=f"Article {article_id} not found")
        return Response(message=article)

    async def get_all_subjects(self, params: Optional[Mapping[str, Any]] = None) -> Result:
        return Response(message=list(ENUMS["subject"]))

    # ------------------------------------------------------------------
    # Editors
    # ------------------------------------------------------------------
    @store_errors_as_response
    async def create_editor(self, body: Optional[Mapping[str, Any]]) -> Result:
        """Register an editor.  ``email`` and ``name`` are required and the email must be unused."""
        body = body or {}
        email, name = body.get("email"), body.get("name")
        if not email or not name:
            return ErrorResponse(error=ErrorKind.VALIDATION, details="Editors must have an email and a name")
        email = str(email).strip()
        if find_editor(self.store, email) is not None:
            logger.warning("Editor email %s already in use", email)
            return ErrorResponse(error=ErrorKind.DUPLICATE_EMAIL, details=f"Email {email} already in use")

        editor = Editor(email=email, name=str(name))
        editor.assign_properties({k: body[k] for k in EDITOR_COLUMNS if k in body and k not in ("email", "name")})
        self.store.append_row(EDITOR_SHEET, editor.to_row())
        logger.info("Created editor %s", editor.email)

        self._notify(editor.email, "createEditor", {"editor": editor})
        return Response(reason="createEditor", message=editor)

    @store_errors_as_response
    async def update_editor(self, body: Optional[Mapping[str, Any]]) -> Result:
        body = body or {}
        email, properties = body.get("email"), body.get("properties")
        if not email or not isinstance(properties, Mapping):
            return ErrorResponse(
                error=ErrorKind.VALIDATION,
                details="You must specify an editor email and properties to update it with.",
            )
        update = _parse_partial(EditorUpdate, properties)
        if isinstance(update, ErrorResponse):
            return update

        editor = find_editor(self.store, str(email))
        if editor is None:
            return ErrorResponse(error=ErrorKind.NOT_FOUND, details=f"Unable to find editor {email}")

        editor.assign_properties(update)
        self.store.update_row(EDITOR_SHEET, {"email": editor.email}, editor.to_row())
        logger.info("Updated editor %s", editor.email)
        return Response(reason="updatedEditor", message=editor)

    @store_errors_as_response
    async def get_all_editors(self, params: Optional[Mapping[str, Any]] = None) -> Result:
        """List editors, optionally filtered by the query string ``q``."""
        q = (params or {}).get("q")
        editors = load_editors(self.store)
        return Response(message=filter_records(editors, q if isinstance(q, str) else None))

    @store_errors_as_response
    async def get_editor_by_email(self, params: Optional[Mapping[str, Any]]) -> Result:
        """Return the editor with ``email``, compared as ``create_editor`` does."""
        email = str((params or {}).get("email") or "").strip()
        if not email or any(c.isspace() for c in email):
            return ErrorResponse(error=ErrorKind.VALIDATION, details="A single email is required")
        editor = find_editor(self.store, email)
        if editor is None:
            return ErrorResponse(error=ErrorKind.NOT_FOUND, details=f"No editor found matching {email}")
        return Response(message=editor)

    # ------------------------------------------------------------------
    # Search and maintenance
    # ------------------------------------------------------------------
    @store_errors_as_response
    async def search(self, params: Optional[Mapping[str, Any]] = None) -> Result:
        """Search articles and editors with the same query string."""
        q = (params or {}).get("q")
        parsed = parse_query(q if isinstance(q, str) else None)
        return Response(message={
            "articles": filter_records(load_articles(self.store), parsed),
            "editors": filter_records(load_editors(self.store), parsed),
        })

    @store_errors_as_response
    async def do_scheduled_tasks(self) -> Result:
        """Run the periodic maintenance: expire stale login keys and tokens."""
        removed = self.auth.cleanup_expired()
        return Response(reason="scheduledTasks", message={"expired": removed})
