"""
Search string parsing and in-memory record filtering.

Query strings are whitespace separated ``field:value`` tokens, e.g.
``status:Published subject:Physics``.  When a string holds no such
token it is treated as one free-text term searched across every field.
Values cannot contain whitespace; there is no quoting.

Records are compared in flattened form: nested objects become dotted
keys (``author.email``) and a condition on ``email`` matches any key
that is ``email`` or ends in ``.email``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence

from pydantic import BaseModel


@dataclass(frozen=True)
class Condition:
    field: str
    value: str


@dataclass(frozen=True)
class ParsedQuery:
    """Result of ``parse_query``.

    Exactly one mode applies: ``conditions`` for a structured query,
    ``text`` for a free-text query, or neither for an empty query.
    """

    conditions: Sequence[Condition] = field(default_factory=tuple)
    text: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not self.conditions and not self.text


def parse_query(query: Optional[str]) -> ParsedQuery:
    """Split ``query`` into ``field:value`` conditions, or a free-text term."""
    if query is None or not query.strip():
        return ParsedQuery()
    conditions = []
    for token in query.split():
        name, sep, value = token.partition(":")
        if sep and name and value:
            conditions.append(Condition(field=name, value=value))
    if not conditions:
        return ParsedQuery(text=query.strip())
    return ParsedQuery(conditions=tuple(conditions))


def flatten(value: Any, prefix: str = "") -> Dict[str, Any]:
    """Flatten nested mappings (and pydantic models) into dotted keys."""
    if isinstance(value, BaseModel):
        value = value.model_dump(mode="json")
    if not isinstance(value, dict):
        return {prefix: value} if prefix else {}
    flat: Dict[str, Any] = {}
    for key, item in value.items():
        path = f"{prefix}.{key}" if prefix else str(key)
        if isinstance(item, (dict, BaseModel)):
            flat.update(flatten(item, path))
        else:
            flat[path] = item
    return flat


def _field_values(flat: Dict[str, Any], name: str) -> List[Any]:
    suffix = "." + name
    return [v for k, v in flat.items() if k == name or k.endswith(suffix)]


def _value_matches(actual: Any, expected: str, partial: bool) -> bool:
    if actual is None:
        return False
    if partial:
        return expected.lower() in str(actual).lower()
    return str(actual) == expected


def matches(record: Any, parsed: ParsedQuery, partial: bool = True) -> bool:
    if parsed.is_empty:
        return True
    flat = flatten(record)
    if parsed.text is not None:
        term = parsed.text.lower()
        return any(v is not None and term in str(v).lower() for v in flat.values())
    return all(
        any(_value_matches(v, c.value, partial) for v in _field_values(flat, c.field))
        for c in parsed.conditions
    )


def filter_records(records: Iterable[Any], query: Any = None, partial: bool = True) -> List[Any]:
    """Return the records matching ``query``, keeping their order.

    ``query`` may be a raw string or an already parsed query.  Structured
    conditions compare by equality, or by case-insensitive substring when
    ``partial`` is true.  Free-text terms always match by substring.
    """
    parsed = query if isinstance(query, ParsedQuery) else parse_query(query)
    return [record for record in records if matches(record, parsed, partial)]
