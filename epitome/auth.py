"""
Session and role handling.

Sessions are Fernet tokens carrying the user id. The Fernet key is
derived from the configured session secret with PBKDF2-HMAC-SHA256, so
any process sharing the secret can read the same sessions. Expiry is
enforced through Fernet's TTL check.

Roles: USER < MODERATOR < ADMIN. A user whose Discord id is in the
configured admin list is treated as an admin regardless of stored role.
"""
from __future__ import annotations

import base64
import json
import logging
import secrets
import threading
import time
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional

from cryptography.fernet import Fernet, InvalidToken
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.pbkdf2 import PBKDF2HMAC

logger = logging.getLogger(__name__)

# Static salt; the secret itself provides the entropy
_SESSION_SALT = b"epitome-session-v1"
_KDF_ITERATIONS = 480000


class Role(Enum):
    USER = "USER"
    MODERATOR = "MODERATOR"
    ADMIN = "ADMIN"

    def __str__(self) -> str:
        return self.value

    @classmethod
    def from_string(cls, value: Optional[str]) -> Optional["Role"]:
        if not value:
            return None
        for role in cls:
            if role.value == value.upper().strip():
                return role
        return None


class AuthError(Exception):
    """Raised when a request is not signed in (401) or not allowed (403)."""

    def __init__(self, message: str, status_code: int = 401):
        super().__init__(message)
        self.message = message
        self.status_code = status_code


def is_admin(user: Optional[Mapping[str, Any]], admin_discord_ids: Iterable[str]) -> bool:
    """True if the user has the ADMIN role or an allow-listed Discord id."""
    if not user:
        return False
    if user.get("role") == Role.ADMIN.value:
        return True
    discord_id = user.get("discord_id")
    return bool(discord_id) and str(discord_id) in set(admin_discord_ids)


def is_moderator(user: Optional[Mapping[str, Any]], admin_discord_ids: Iterable[str] = ()) -> bool:
    """True for moderators and admins."""
    if not user:
        return False
    if user.get("role") == Role.MODERATOR.value:
        return True
    return is_admin(user, admin_discord_ids)


class SessionManager:
    """
    Issues and verifies session tokens.

    Usage:
        sessions = SessionManager(secret, ttl_seconds=86400)
        token = sessions.issue(user_id)
        user_id = sessions.verify(token)   # None if invalid or expired
    """

    def __init__(self, secret: str, ttl_seconds: int = 60 * 60 * 24 * 30):
        if not secret:
            secret = secrets.token_urlsafe(32)
            logger.warning(
                "No session secret configured; using a random one. "
                "Sessions will not survive a restart."
            )
        self.ttl_seconds = ttl_seconds
        self._fernet = self._create_fernet(secret)

    @staticmethod
    def _create_fernet(secret: str) -> Fernet:
        kdf = PBKDF2HMAC(
            algorithm=hashes.SHA256(),
            length=32,
            salt=_SESSION_SALT,
            iterations=_KDF_ITERATIONS,
        )
        key = base64.urlsafe_b64encode(kdf.derive(secret.encode("utf-8")))
        return Fernet(key)

    def issue(self, user_id: int) -> str:
        payload = json.dumps({"user_id": user_id, "issued_at": int(time.time())})
        return self._fernet.encrypt(payload.encode("utf-8")).decode("utf-8")

    def verify(self, token: Optional[str]) -> Optional[int]:
        """Return the user id in a valid token, or None."""
        if not token:
            return None
        try:
            raw = self._fernet.decrypt(token.encode("utf-8"), ttl=self.ttl_seconds)
        except InvalidToken:
            logger.debug("Rejected invalid or expired session token")
            return None
        try:
            payload: Dict[str, Any] = json.loads(raw)
            return int(payload["user_id"])
        except (ValueError, KeyError, TypeError):
            logger.warning("Session token payload is malformed")
            return None


class OAuthStateStore:
    """
    Single-use OAuth `state` values for CSRF protection.

    States expire after max_age seconds and are removed when consumed.
    """

    def __init__(self, max_age: int = 600):
        self.max_age = max_age
        self._states: Dict[str, float] = {}
        self._lock = threading.Lock()

    def create(self) -> str:
        state = secrets.token_urlsafe(32)
        with self._lock:
            self._purge()
            self._states[state] = time.monotonic()
        return state

    def consume(self, state: Optional[str]) -> bool:
        """True if the state was issued here, is unexpired, and unused."""
        if not state:
            return False
        with self._lock:
            self._purge()
            return self._states.pop(state, None) is not None

    def _purge(self) -> None:
        cutoff = time.monotonic() - self.max_age
        for key in [k for k, created in self._states.items() if created < cutoff]:
            del self._states[key]
