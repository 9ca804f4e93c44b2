"""
Pydantic models for editor records.

Editors live in the ``Logins`` sheet, one row per editor, keyed by
email.  The same model is embedded in articles to describe the
assigned editor, where only ``name`` and ``email`` are used.
"""

from typing import Any, ClassVar, FrozenSet, List, Mapping, Optional

from pydantic import BaseModel, Field

from .fields import AssignableModel, clean

# Header order of the ``Logins`` sheet.
EDITOR_COLUMNS = ("email", "name", "subject", "school", "role")


class Editor(AssignableModel):
    """An editor of the magazine."""

    PROTECTED: ClassVar[FrozenSet[str]] = frozenset({"email"})

    email: Optional[str] = Field(None, example="editor@example.com")
    name: Optional[str] = Field(None, example="Jane Doe")
    subject: Optional[str] = Field(None, example="Physics")
    school: Optional[str] = None
    role: Optional[str] = Field(None, example="Editor")

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> "Editor":
        return cls(**{column: clean(row.get(column)) for column in EDITOR_COLUMNS})

    def to_row(self) -> List[Optional[str]]:
        return [getattr(self, column) for column in EDITOR_COLUMNS]


class EditorUpdate(BaseModel):
    """Partial editor used for updates.

    All fields are optional; only fields that were supplied are applied.
    The email is the lookup key and cannot be changed.
    """

    name: Optional[str] = None
    subject: Optional[str] = None
    school: Optional[str] = None
    role: Optional[str] = None
