"""
Editor authentication.

Editors never hold passwords.  An editor asks for a login key
(``request_key``); a short numeric key is emailed to them and its hash
is stored in the ``Keys`` sheet until it expires.  Presenting the email
and key to ``login`` issues a signed auth token, which is also recorded
in the ``AuthTokens`` sheet so it can be expired centrally.

``authenticate`` is the gate used by the router: the caller must be a
registered editor and present either a recorded, unexpired auth token
or an unexpired login key.
"""

import hmac
import logging
import time
from typing import Optional

from ..core.config import Settings, settings as default_settings
from ..core.db import KEY_SHEET, TOKEN_SHEET, SheetStore
from ..core.errors import store_errors_as_response
from ..core.security import create_access_token, decode_access_token, generate_key, hash_key, verify_key
from ..schemas.request import Credentials
from ..schemas.response import ErrorKind, ErrorResponse, Response
from .email_service import Notification
from .records import find_editor

logger = logging.getLogger(__name__)


def _expires(value) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        # Rows without a readable expiry are treated as expired.
        return 0.0


class AuthService:
    """Issues and checks editor credentials."""

    def __init__(self, store: SheetStore, mailer, config: Optional[Settings] = None) -> None:
        self.store = store
        self.mailer = mailer
        self.settings = config or default_settings

    def _token_valid(self, email: str, token: str, now: float) -> bool:
        claims = decode_access_token(token)
        if not claims or str(claims.get("sub", "")).lower() != email.lower():
            return False
        for row in self.store.get_all_rows(TOKEN_SHEET):
            if row.get("email") != email or _expires(row.get("expires")) <= now:
                continue
            if hmac.compare_digest(str(row.get("authToken") or ""), token):
                return True
        return False

    def _key_valid(self, email: str, key: str, now: float) -> bool:
        for row in self.store.get_all_rows(KEY_SHEET):
            if row.get("email") != email or _expires(row.get("expires")) <= now:
                continue
            if verify_key(key, str(row.get("key") or "")):
                return True
        return False

    async def authenticate(self, credentials: Credentials, now: Optional[float] = None) -> bool:
        """Return True when the credentials identify a signed-in editor.

        Raises ``StoreError`` when the store cannot be read.
        """
        if not credentials.email or not (credentials.key or credentials.authToken):
            return False
        editor = find_editor(self.store, credentials.email)
        if editor is None:
            return False
        now = time.time() if now is None else now
        if credentials.authToken and self._token_valid(editor.email, credentials.authToken, now):
            return True
        if credentials.key and self._key_valid(editor.email, credentials.key, now):
            return True
        return False

    @store_errors_as_response
    async def login(self, credentials: Credentials) -> Response | ErrorResponse:
        """Exchange valid credentials for a new auth token."""
        if not await self.authenticate(credentials):
            logger.warning("Failed login for %s", credentials.email)
            return ErrorResponse(error=ErrorKind.UNAUTHORIZED, details="Invalid credentials")
        editor = find_editor(self.store, credentials.email)
        lifetime = self.settings.access_token_expire_minutes * 60
        token = create_access_token({"sub": editor.email}, expires_delta=lifetime)
        expires = int(time.time()) + lifetime
        self.store.append_row(TOKEN_SHEET, [editor.email, token, str(expires)])
        logger.info("Issued auth token for %s", editor.email)
        return Response(
            reason="authenticated",
            message={"email": editor.email, "authToken": token, "expires": expires},
        )

    @store_errors_as_response
    async def request_key(self, email: Optional[str]) -> Response | ErrorResponse:
        """Email a fresh login key to a registered editor."""
        if not email:
            return ErrorResponse(error=ErrorKind.VALIDATION, details="An email is required")
        editor = find_editor(self.store, email)
        if editor is None:
            return ErrorResponse(error=ErrorKind.NOT_FOUND, details=f"No editor found matching {email}")
        key = generate_key()
        minutes = self.settings.key_expire_minutes
        expires = int(time.time()) + minutes * 60
        self.store.append_row(KEY_SHEET, [editor.email, hash_key(key), str(expires)])
        self.mailer.send(Notification(
            to=editor.email,
            type="authKey",
            data={"key": key, "expires_minutes": minutes},
        ))
        logger.info("Issued login key for %s", editor.email)
        return Response(reason="requestKey", message={"email": editor.email, "expires": expires})

    def cleanup_expired(self, now: Optional[float] = None) -> int:
        """Delete expired login keys and auth tokens; return how many were removed."""
        now = time.time() if now is None else now
        removed = 0
        for sheet, secret in ((KEY_SHEET, "key"), (TOKEN_SHEET, "authToken")):
            for row in self.store.get_all_rows(sheet):
                if _expires(row.get("expires")) > now:
                    continue
                removed += self.store.delete_row(
                    sheet, {"email": row.get("email"), secret: row.get(secret)}
                )
        if removed:
            logger.info("Removed %d expired credentials", removed)
        return removed
