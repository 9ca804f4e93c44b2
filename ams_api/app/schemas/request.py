"""
Pydantic models describing an inbound routed request.

A request names its target as ``context/action`` (for example
``article/update``), carries its parameters (query string for GET,
JSON body for POST) and the caller's credentials.
"""

from typing import Any, ClassVar, Dict, List, Literal, Optional, Tuple

from pydantic import BaseModel, Field


class Credentials(BaseModel):
    """Credentials supplied with a request.

    ``key`` is the one-time login key emailed to an editor; ``authToken``
    is the signed token issued after a successful login.

    On the wire the caller's email is sent as ``authEmail`` so that
    ``email`` stays free for the editor an action is about (``editor/info``,
    ``editor/create``).  A request without ``authEmail`` is taken to come
    from its ``email``, which is how the ``authentication`` actions and
    self lookups are sent.
    """

    email: Optional[str] = None
    key: Optional[str] = None
    authToken: Optional[str] = None

    # Field -> request keys that may carry it, in order of preference.
    WIRE_KEYS: ClassVar[Dict[str, Tuple[str, ...]]] = {
        "email": ("authEmail", "email"),
        "key": ("key",),
        "authToken": ("authToken",),
    }

    @classmethod
    def from_sources(cls, *sources: Dict[str, Any]) -> "Credentials":
        """Take each credential from the first key and source that supply it."""
        values: Dict[str, Any] = {}
        for name, keys in cls.WIRE_KEYS.items():
            found = [
                source[key]
                for key in keys
                for source in sources
                if source and source.get(key) not in (None, "")
            ]
            if found:
                values[name] = str(found[0])
        return cls(**values)


class RouterRequest(BaseModel):
    method: Literal["GET", "POST"] = "GET"
    path: Optional[str] = Field(None, example="article/update")
    params: Dict[str, Any] = Field(default_factory=dict)
    body: Dict[str, Any] = Field(default_factory=dict)
    credentials: Credentials = Field(default_factory=Credentials)

    @property
    def paths(self) -> List[str]:
        """Non-empty path segments, e.g. ``["article", "update"]``."""
        if not self.path:
            return []
        return [segment for segment in self.path.split("/") if segment]
