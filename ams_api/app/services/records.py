"""
Loading articles and editors out of their sheets.
"""

from typing import List, Optional

from ..core.db import ARTICLE_SHEET, EDITOR_SHEET, SheetStore
from ..schemas.article import Article
from ..schemas.editor import Editor
from ..schemas.fields import clean


def load_articles(store: SheetStore) -> List[Article]:
    return [Article.from_row(row) for row in store.get_all_rows(ARTICLE_SHEET)]


def load_editors(store: SheetStore) -> List[Editor]:
    return [Editor.from_row(row) for row in store.get_all_rows(EDITOR_SHEET)]


def find_article(store: SheetStore, article_id: str) -> Optional[Article]:
    wanted = str(article_id)
    for row in store.get_all_rows(ARTICLE_SHEET):
        if clean(row.get("ID")) == wanted:
            return Article.from_row(row)
    return None


def find_editor(store: SheetStore, email: str) -> Optional[Editor]:
    """Find an editor by email, ignoring case and surrounding spaces."""
    wanted = email.strip().lower()
    for row in store.get_all_rows(EDITOR_SHEET):
        stored = clean(row.get("email"))
        if stored is not None and stored.strip().lower() == wanted:
            return Editor.from_row(row)
    return None
