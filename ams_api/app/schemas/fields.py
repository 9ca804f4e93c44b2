"""
Field rules shared by the record schemas.

``ENUMS`` maps a field name to the ordered values it may take; any
record field with the same name is guarded by it.  ``PREPROCESSING``
maps a field name to a converter applied before a value is assigned.
Both tables are read-only and built once at import time.

``AssignableModel`` implements the partial-assignment rule used by
every record: a key is applied only when the model defines it, it is
not protected, and its value passes the enum guard.
"""

import datetime as dt
import logging
from types import MappingProxyType
from typing import Any, ClassVar, Dict, FrozenSet, Mapping, Optional, Union

from pydantic import BaseModel

logger = logging.getLogger(__name__)


ENUMS: Mapping[str, tuple] = MappingProxyType({
    # Ordered: an article moves down this list through review.
    "status": (
        "In Review",
        "Failed Data Check",
        "Passed Data Check",
        "Technical Review",
        "Revisions Requested",
        "Ready to Publish",
        "Published",
    ),
    "type": (
        "Review Article",
        "Blog",
        "Original Research",
        "Magazine Article",
    ),
    "subject": (
        "Biology",
        "Chemistry",
        "Computer Science",
        "Engineering",
        "Environmental & Earth Science",
        "Materials Science",
        "Mathematics",
        "Medicine",
        "Physics",
        "Policy & Ethics",
    ),
})


def clean(value: Any) -> Optional[str]:
    """Normalize a raw cell: empty cells become ``None``, everything else a string."""
    if value is None or value == "":
        return None
    return str(value)


def parse_deadline(value: Union[str, dt.date, None]) -> Optional[dt.date]:
    """Parse a deadline cell (``YYYY-MM-DD``, optional time part) into a date."""
    if value is None or value == "":
        return None
    if isinstance(value, dt.datetime):
        return value.date()
    if isinstance(value, dt.date):
        return value
    try:
        return dt.date.fromisoformat(str(value).strip()[:10])
    except ValueError:
        logger.warning("Ignoring unparseable deadline %r", value)
        return None


PREPROCESSING: Mapping[str, Any] = MappingProxyType({
    "deadline": parse_deadline,
})


def is_allowed(field: str, value: Any) -> bool:
    """Return True when ``value`` may be assigned to ``field``."""
    allowed = ENUMS.get(field)
    if allowed is None:
        return True
    return value in allowed


class AssignableModel(BaseModel):
    """Base for records that accept partial updates."""

    # Fields that can never be changed through ``assign_properties``.
    PROTECTED: ClassVar[FrozenSet[str]] = frozenset()

    def assign_properties(self, properties: Union[Mapping[str, Any], BaseModel]) -> Dict[str, Any]:
        """Apply the allowed subset of ``properties`` and return it.

        ``properties`` may be a mapping or a partial-update model; for a
        model only the fields that were explicitly set are considered.
        """
        if isinstance(properties, BaseModel):
            properties = properties.model_dump(exclude_unset=True)
        applied: Dict[str, Any] = {}
        for name, value in properties.items():
            if name in self.PROTECTED or name not in type(self).model_fields:
                continue
            if not is_allowed(name, value):
                logger.warning(
                    "Rejected %s=%r for %s: not one of %s",
                    name, value, type(self).__name__, ", ".join(ENUMS[name]),
                )
                continue
            converter = PREPROCESSING.get(name)
            if converter is not None:
                converted = converter(value)
                if converted is None and value not in (None, ""):
                    # Unreadable input keeps the stored value.
                    continue
                value = converted
            setattr(self, name, value)
            applied[name] = value
        return applied
