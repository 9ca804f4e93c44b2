"""
Security helpers for editor login keys and signed auth tokens.

Editors sign in with a short one-time key that is emailed to them.
Keys are stored hashed with PBKDF2-HMAC-SHA256 so a leaked ``Keys``
sheet does not reveal them.  A successful sign-in yields an auth token:
a compact JWT (HS256, base64url parts) carrying the editor email as
``sub`` and an ``exp`` timestamp, signed with ``settings.secret_key``.
"""

import base64
import hashlib
import hmac
import json
import os
import secrets
import time
from typing import Any, Dict, Optional

from .config import settings

KEY_LENGTH = 6
_ITERATIONS = 100_000
_TOKEN_HEADER = {"alg": "HS256", "typ": "JWT"}


def _segment(claims: Dict[str, Any]) -> str:
    raw = json.dumps(claims, separators=(",", ":")).encode("utf-8")
    return base64.urlsafe_b64encode(raw).rstrip(b"=").decode("ascii")


def _unpad(segment: str) -> bytes:
    return base64.urlsafe_b64decode(segment + "=" * (-len(segment) % 4))


def _signature(signed_part: str) -> bytes:
    return hmac.new(settings.secret_key.encode("utf-8"), signed_part.encode("ascii"), hashlib.sha256).digest()


def create_access_token(data: Dict[str, Any], expires_delta: Optional[int] = None) -> str:
    """Sign ``data`` plus an ``exp`` claim ``expires_delta`` seconds from now.

    Without ``expires_delta`` the token lives for
    ``settings.access_token_expire_minutes``.
    """
    lifetime = expires_delta or settings.access_token_expire_minutes * 60
    claims = {**data, "exp": int(time.time()) + lifetime}
    signed_part = f"{_segment(_TOKEN_HEADER)}.{_segment(claims)}"
    tail = base64.urlsafe_b64encode(_signature(signed_part)).rstrip(b"=").decode("ascii")
    return f"{signed_part}.{tail}"


def decode_access_token(token: str) -> Optional[Dict[str, Any]]:
    """Return the claims of a valid, unexpired token, else ``None``."""
    signed_part, _, tail = (token or "").rpartition(".")
    if signed_part.count(".") != 1:
        return None
    try:
        if not hmac.compare_digest(_signature(signed_part), _unpad(tail)):
            return None
        claims = json.loads(_unpad(signed_part.split(".")[1]))
    except (ValueError, UnicodeError):
        return None
    if not isinstance(claims, dict) or "exp" not in claims:
        return None
    return claims if int(claims["exp"]) >= int(time.time()) else None


def generate_key(length: int = KEY_LENGTH) -> str:
    """Return a random numeric login key."""
    return "".join(secrets.choice("0123456789") for _ in range(length))


def hash_key(key: str) -> str:
    """Hash a login key as ``salthex$hashhex``."""
    salt = os.urandom(16)
    digest = hashlib.pbkdf2_hmac("sha256", key.encode("utf-8"), salt, _ITERATIONS)
    return f"{salt.hex()}${digest.hex()}"


def verify_key(plain_key: str, hashed_key: str) -> bool:
    """Check a plain key against a stored ``salthex$hashhex`` string."""
    salt_hex, sep, digest_hex = (hashed_key or "").partition("$")
    if not plain_key or not sep:
        return False
    try:
        salt, expected = bytes.fromhex(salt_hex), bytes.fromhex(digest_hex)
    except ValueError:
        return False
    digest = hashlib.pbkdf2_hmac("sha256", plain_key.encode("utf-8"), salt, _ITERATIONS)
    return hmac.compare_digest(digest, expected)
