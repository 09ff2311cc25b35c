"""Session token verification for incoming requests."""

from __future__ import annotations

import logging
from typing import Mapping, Optional

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from leadscout.core.errors import AuthError
from leadscout.models import SessionUser

logger = logging.getLogger(__name__)

SESSION_COOKIE = "auth-token"
SESSION_MAX_AGE_SECONDS = 7 * 24 * 3600
SESSION_SALT = "leadscout-session"


class SessionVerifier:
    def __init__(self, signing_key: str, max_age: int = SESSION_MAX_AGE_SECONDS) -> None:
        if not signing_key:
            raise ValueError("A session signing key is required")
        self._serializer = URLSafeTimedSerializer(signing_key, salt=SESSION_SALT)
        self.max_age = max_age

    def verify(self, token: Optional[str]) -> SessionUser:
        if not token:
            raise AuthError()
        try:
            claims = self._serializer.loads(token, max_age=self.max_age)
        except SignatureExpired as exc:
            raise AuthError("Session expired") from exc
        except BadSignature as exc:
            logger.info("Rejected session token: %s", exc.__class__.__name__)
            raise AuthError("Invalid session") from exc

        if not isinstance(claims, dict) or claims.get("userId") is None:
            raise AuthError("Invalid session")
        return SessionUser(user_id=claims["userId"], plan_type=claims.get("plan"), email=claims.get("email"))


def token_from_request(headers: Mapping[str, str], cookies: Mapping[str, str]) -> Optional[str]:
    """Session token from the ``auth-token`` cookie or an ``Authorization: Bearer`` header."""
    token = cookies.get(SESSION_COOKIE)
    if token:
        return token
    authorization = headers.get("Authorization") or ""
    scheme, _, value = authorization.partition(" ")
    if scheme.lower() == "bearer" and value.strip():
        return value.strip()
    return None
