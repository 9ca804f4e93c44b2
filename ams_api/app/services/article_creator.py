"""
Turns a submission into a stored article.

A submission carries the article metadata, the author and the document
``data``.  ``verify`` reports which required properties are missing or
invalid; ``create`` assigns the identity, submission date and initial
review status and appends the article row.
"""

import datetime as dt
import logging
import uuid
from typing import Any, List, Mapping, Optional

from ..core.db import ARTICLE_SHEET, SheetStore
from ..schemas.article import Article, Author
from ..schemas.fields import ENUMS, clean, parse_deadline

logger = logging.getLogger(__name__)

INITIAL_STATUS = ENUMS["status"][0]
REQUIRED_ARTICLE = ("title", "subject", "type")
REQUIRED_AUTHOR = ("name", "email")


class ArticleCreator:
    def __init__(self, article: Optional[Mapping[str, Any]], author: Optional[Mapping[str, Any]], data: Any) -> None:
        self.article = dict(article or {})
        self.author = dict(author or {})
        self.data = data

    def verify(self) -> List[str]:
        """Return the problems with this submission; empty when it is valid."""
        problems = []
        if not self.data:
            problems.append("data")
        for name in REQUIRED_ARTICLE:
            value = clean(self.article.get(name))
            if value is None:
                problems.append(name)
            elif name in ENUMS and value not in ENUMS[name]:
                problems.append(f"{name} (must be one of: {', '.join(ENUMS[name])})")
        for name in REQUIRED_AUTHOR:
            if clean(self.author.get(name)) is None:
                problems.append(f"author.{name}")
        return problems

    def build(self, today: Optional[dt.date] = None) -> Article:
        today = today or dt.date.today()
        return Article(
            id=uuid.uuid4().hex,
            date=today.isoformat(),
            title=clean(self.article.get("title")),
            subject=clean(self.article.get("subject")),
            type=clean(self.article.get("type")),
            status=INITIAL_STATUS,
            deadline=parse_deadline(self.article.get("deadline")),
            notes=clean(self.article.get("notes")),
            copyright=clean(self.article.get("copyright")),
            author=Author(
                email=clean(self.author.get("email")),
                name=clean(self.author.get("name")),
                school=clean(self.author.get("school")),
            ),
        )

    def create(self, store: SheetStore) -> Article:
        """Build the article and append its row.  Call ``verify`` first."""
        article = self.build()
        store.append_row(ARTICLE_SHEET, article.to_row())
        size = len(self.data) if hasattr(self.data, "__len__") else None
        logger.info("Stored submission %s from %s (%s bytes of data)",
                    article.id, article.author.email, size)
        return article
