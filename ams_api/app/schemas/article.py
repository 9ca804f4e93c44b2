"""
Pydantic models for article records.

An article row in the ``Database`` sheet is a flat list of sixteen
cells (see ``ARTICLE_COLUMNS``).  ``Article.from_row`` builds the
nested model from a header-keyed row and ``Article.to_row`` flattens it
back into the same positional order.  The ``id`` is fixed when the
article is built and the Google Docs ``link`` is always derived from it.
"""

import datetime as dt
from typing import Any, ClassVar, Dict, FrozenSet, List, Mapping, Optional, Union

from pydantic import BaseModel, Field, computed_field

from .editor import Editor
from .fields import AssignableModel, clean, parse_deadline

LINK_TEMPLATE = "https://docs.google.com/document/d/{id}/edit"

# Header order of the ``Database`` sheet.
ARTICLE_COLUMNS = (
    "date",
    "articleTitle",
    "articleSubject",
    "articleType",
    "authorName",
    "authorSchool",
    "email",
    "status",
    "ID",
    "editor",
    "editorEmail",
    "deadline",
    "additionalNotes",
    "folderID",
    "markingGrid",
    "copyright",
)


class Author(BaseModel):
    """The submitting author, owned by its article."""

    email: Optional[str] = Field(None, example="author@school.edu")
    name: Optional[str] = Field(None, example="Sam Smith")
    school: Optional[str] = Field(None, example="Springfield High")


class Article(AssignableModel):
    """A submitted article and its place in the review pipeline."""

    PROTECTED: ClassVar[FrozenSet[str]] = frozenset({"id", "link", "author", "editor"})

    id: Optional[str] = Field(None, frozen=True)
    date: Optional[str] = None
    title: Optional[str] = None
    subject: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[dt.date] = None
    notes: Optional[str] = None
    folderId: Optional[str] = None
    markingGrid: Optional[str] = None
    copyright: Optional[str] = None
    author: Author = Field(default_factory=Author)
    editor: Editor = Field(default_factory=Editor)

    @computed_field
    @property
    def link(self) -> Optional[str]:
        if not self.id:
            return None
        return LINK_TEMPLATE.format(id=self.id)

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Article":
        """Build an article from a header-keyed sheet row.

        Missing cells default to ``None``; this never raises on
        incomplete rows.
        """
        def cell(column: str) -> Optional[str]:
            return clean(row.get(column))

        return cls(
            id=cell("ID"),
            date=cell("date"),
            title=cell("articleTitle"),
            subject=cell("articleSubject"),
            type=cell("articleType"),
            status=cell("status"),
            deadline=parse_deadline(row.get("deadline")),
            notes=cell("additionalNotes"),
            folderId=cell("folderID"),
            markingGrid=cell("markingGrid"),
            copyright=cell("copyright"),
            author=Author(
                email=cell("email"),
                name=cell("authorName"),
                school=cell("authorSchool"),
            ),
            editor=Editor(name=cell("editor"), email=cell("editorEmail")),
        )

    def to_row(self) -> List[Optional[str]]:
        """Flatten into the positional order of ``ARTICLE_COLUMNS``."""
        return [
            self.date,
            self.title,
            self.subject,
            self.type,
            self.author.name,
            self.author.school,
            self.author.email,
            self.status,
            self.id,
            self.editor.name,
            self.editor.email,
            self.deadline.isoformat() if self.deadline else None,
            self.notes,
            self.folderId,
            self.markingGrid,
            self.copyright,
        ]

    def assign_properties(self, properties: Union[Mapping[str, Any], BaseModel]) -> Dict[str, Any]:
        """Apply allowed properties, including nested author/editor changes.

        Returns the subset that was applied; nested changes appear as
        nested dictionaries.
        """
        if isinstance(properties, BaseModel):
            properties = properties.model_dump(exclude_unset=True)
        applied = super().assign_properties(properties)
        for name in ("author", "editor"):
            nested = properties.get(name)
            if not isinstance(nested, Mapping):
                continue
            target = self.author if name == "author" else self.editor
            changes = _assign_embedded(target, nested)
            if changes:
                applied[name] = changes
        return applied


def _assign_embedded(target: BaseModel, values: Mapping[str, Any]) -> Dict[str, Any]:
    applied: Dict[str, Any] = {}
    for key in ("email", "name", "school"):
        if key in values and key in type(target).model_fields:
            setattr(target, key, values[key])
            applied[key] = values[key]
    return applied


class AuthorUpdate(BaseModel):
    email: Optional[str] = None
    name: Optional[str] = None
    school: Optional[str] = None


class EditorReference(BaseModel):
    name: Optional[str] = None
    email: Optional[str] = None


class ArticleUpdate(BaseModel):
    """Partial article used for updates.

    Enum fields are plain strings here; membership is checked field by
    field when the update is applied so that one bad value does not
    reject the rest.
    """

    date: Optional[str] = None
    title: Optional[str] = None
    subject: Optional[str] = None
    type: Optional[str] = None
    status: Optional[str] = None
    deadline: Optional[Union[dt.date, str]] = None
    notes: Optional[str] = None
    folderId: Optional[str] = None
    markingGrid: Optional[str] = None
    copyright: Optional[str] = None
    author: Optional[AuthorUpdate] = None
    editor: Optional[EditorReference] = None
